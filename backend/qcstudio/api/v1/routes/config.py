from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from qcstudio.api.deps import SessionDep, SettingsDep, WsManagerDep
from qcstudio.config import Settings
from qcstudio.schemas.config import BackendConfigRead, BackendConfigUpdate
from qcstudio.services.config_service import ConfigService
from qcstudio.ws.manager import ConnectionManager

router = APIRouter()


@router.get("/backend", response_model=BackendConfigRead)
async def get_backend_config(
    session: AsyncSession = SessionDep,
    settings: Settings = SettingsDep,
):
    url, source = await ConfigService(session).get_backend_url(settings)
    return BackendConfigRead(backend_url=url, source=source)


@router.put("/backend", response_model=BackendConfigRead)
async def update_backend_config(
    payload: BackendConfigUpdate,
    session: AsyncSession = SessionDep,
    settings: Settings = SettingsDep,
    ws: ConnectionManager = WsManagerDep,
):
    service = ConfigService(session)
    await service.set_backend_url(payload.backend_url)
    url, source = await service.get_backend_url(settings)
    await ws.send_event({"type": "config_updated", "data": {"backend_url": url, "source": source}})
    return BackendConfigRead(backend_url=url, source=source)
