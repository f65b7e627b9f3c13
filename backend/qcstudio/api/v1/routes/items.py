from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from qcstudio.api.deps import ReviewSessionDep, SessionDep, SettingsDep, StorageDep, WsManagerDep
from qcstudio.config import Settings
from qcstudio.exceptions import RegenerationConflictError, RegenerationFailedError
from qcstudio.schemas.review import (
    CharacterRead,
    ReviewItemRead,
    ReviewItemUpdate,
    SceneAnalysisRead,
)
from qcstudio.services.config_service import ConfigService
from qcstudio.services.ledger import ImportedImage, ReviewItem
from qcstudio.services.media_storage import MediaStorage
from qcstudio.services.review_session import ReviewSession
from qcstudio.ws.manager import ConnectionManager

router = APIRouter()
logger = logging.getLogger(__name__)


def item_payload(item: ReviewItem) -> dict[str, Any]:
    return ReviewItemRead.model_validate(item).model_dump()


async def _send_item_updated(ws: ConnectionManager, review: ReviewSession, item: ReviewItem) -> None:
    await ws.send_event(
        {
            "type": "item_updated",
            "data": {"item": item_payload(item), "active_index": review.ledger.active_index},
        }
    )


@router.post("/import", response_model=list[ReviewItemRead], status_code=status.HTTP_201_CREATED)
async def import_images(
    files: list[UploadFile] = File(...),
    review: ReviewSession = ReviewSessionDep,
    storage: MediaStorage = StorageDep,
    ws: ConnectionManager = WsManagerDep,
):
    images: list[ImportedImage] = []
    for f in files:
        blob = await f.read()
        file_name = f.filename or "image"
        images.append(ImportedImage(file_name=file_name, source_url=storage.save_upload(file_name, blob)))

    created = review.ledger.import_images(images)
    await ws.send_event(
        {
            "type": "items_imported",
            "data": {"items": [item_payload(i) for i in created], "view": review.ledger.view},
        }
    )
    return [ReviewItemRead.model_validate(i) for i in created]


@router.get("", response_model=list[ReviewItemRead])
async def list_items(review: ReviewSession = ReviewSessionDep):
    return [ReviewItemRead.model_validate(i) for i in review.ledger.items]


@router.get("/current", response_model=ReviewItemRead | None)
async def get_current_item(review: ReviewSession = ReviewSessionDep):
    current = review.ledger.current
    return ReviewItemRead.model_validate(current) if current else None


@router.get("/{item_id}", response_model=ReviewItemRead)
async def get_item(item_id: int, review: ReviewSession = ReviewSessionDep):
    return ReviewItemRead.model_validate(review.ledger.get(item_id))


@router.put("/{item_id}", response_model=ReviewItemRead)
@router.patch("/{item_id}", response_model=ReviewItemRead)
async def update_item(
    item_id: int,
    payload: ReviewItemUpdate,
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    item = review.ledger.edit_prompt(item_id, payload.prompt)
    await _send_item_updated(ws, review, item)
    return ReviewItemRead.model_validate(item)


@router.post("/{item_id}/approve", response_model=ReviewItemRead)
async def approve_item(
    item_id: int,
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    item = review.ledger.approve(item_id)
    await _send_item_updated(ws, review, item)
    return ReviewItemRead.model_validate(item)


@router.post("/{item_id}/reject", response_model=ReviewItemRead)
async def reject_item(
    item_id: int,
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    item = review.ledger.reject(item_id)
    await _send_item_updated(ws, review, item)
    return ReviewItemRead.model_validate(item)


@router.post("/{item_id}/reset-prompt", response_model=ReviewItemRead)
async def reset_item_prompt(
    item_id: int,
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    item = review.ledger.reset_prompt(item_id)
    await _send_item_updated(ws, review, item)
    return ReviewItemRead.model_validate(item)


@router.delete("/{item_id}/previous", response_model=ReviewItemRead)
async def clear_previous_image(
    item_id: int,
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    item = review.ledger.clear_previous(item_id)
    await _send_item_updated(ws, review, item)
    return ReviewItemRead.model_validate(item)


@router.get("/{item_id}/analysis", response_model=SceneAnalysisRead)
async def analyze_item(item_id: int, review: ReviewSession = ReviewSessionDep):
    analysis = review.analyze(item_id)
    return SceneAnalysisRead(
        item_id=analysis.item_id,
        setting=analysis.setting,
        detected=[CharacterRead.model_validate(c) for c in analysis.detected],
        resolved=[CharacterRead.model_validate(c) for c in analysis.resolved],
    )


@router.post("/{item_id}/regenerate", response_model=ReviewItemRead)
async def regenerate_item(
    item_id: int,
    session: AsyncSession = SessionDep,
    settings: Settings = SettingsDep,
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    review.ledger.get(item_id)
    # 同一张图片只允许一个进行中的请求（细粒度锁）
    if review.coordinator.is_in_flight(item_id):
        raise RegenerationConflictError(item_id)

    backend_url, _ = await ConfigService(session).get_backend_url(settings)
    await ws.send_event(
        {"type": "regeneration_started", "data": {"item_id": item_id, "backend_url": backend_url}}
    )

    try:
        item = await review.regenerate(item_id, backend_url)
    except (RegenerationConflictError, RegenerationFailedError) as exc:
        # 并发请求在上面的检查之后抢先占用了该图片时也要结束 started 事件
        await ws.send_event(
            {
                "type": "regeneration_failed",
                "data": {"item_id": item_id, "code": exc.code, "error": exc.message},
            }
        )
        raise

    await ws.send_event(
        {
            "type": "regeneration_completed",
            "data": {"item": item_payload(item), "compare_mode": review.compare_mode},
        }
    )
    return ReviewItemRead.model_validate(item)
