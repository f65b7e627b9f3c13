from __future__ import annotations

from fastapi import APIRouter, status

from qcstudio.api.deps import ReviewSessionDep, WsManagerDep
from qcstudio.schemas.review import CharacterName, OutfitOverridesRead, OutfitOverrideUpdate
from qcstudio.services.review_session import ReviewSession
from qcstudio.ws.manager import ConnectionManager

router = APIRouter()


async def _overrides(review: ReviewSession, ws: ConnectionManager) -> OutfitOverridesRead:
    overrides = review.overrides.as_dict()
    await ws.send_event({"type": "outfits_updated", "data": {"overrides": overrides}})
    return OutfitOverridesRead(overrides=overrides)


@router.get("", response_model=OutfitOverridesRead)
async def list_overrides(review: ReviewSession = ReviewSessionDep):
    return OutfitOverridesRead(overrides=review.overrides.as_dict())


@router.put("/{name}", response_model=OutfitOverridesRead)
async def set_override(
    name: CharacterName,
    payload: OutfitOverrideUpdate,
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    review.overrides.set(name, payload.outfit)
    return await _overrides(review, ws)


@router.delete("/{name}", response_model=OutfitOverridesRead)
async def remove_override(
    name: CharacterName,
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    review.overrides.remove(name)
    return await _overrides(review, ws)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_overrides(review: ReviewSession = ReviewSessionDep, ws: ConnectionManager = WsManagerDep):
    review.overrides.clear()
    await _overrides(review, ws)
    return None
