from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qcstudio.config import Settings, get_settings
from qcstudio.db.session import get_session
from qcstudio.services.extraction import ExtractionService
from qcstudio.services.generation import GenerationService
from qcstudio.services.media_storage import MediaStorage
from qcstudio.services.review_session import ReviewSession
from qcstudio.ws.manager import ConnectionManager, ws_manager


@lru_cache
def _media_storage() -> MediaStorage:
    return MediaStorage(get_settings().static_path())


@lru_cache
def _review_session() -> ReviewSession:
    settings = get_settings()
    storage = _media_storage()
    return ReviewSession(
        GenerationService(settings, storage),
        storage=storage,
        placeholder_prompt=settings.placeholder_prompt,
    )


async def get_app_settings() -> Settings:
    return get_settings()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


async def get_ws_manager() -> ConnectionManager:
    return ws_manager


async def get_media_storage() -> MediaStorage:
    return _media_storage()


async def get_review_session() -> ReviewSession:
    return _review_session()


async def get_extraction_service() -> ExtractionService:
    return ExtractionService(get_settings())


SettingsDep = Depends(get_app_settings)
SessionDep = Depends(get_db_session)
WsManagerDep = Depends(get_ws_manager)
StorageDep = Depends(get_media_storage)
ReviewSessionDep = Depends(get_review_session)
ExtractionDep = Depends(get_extraction_service)
