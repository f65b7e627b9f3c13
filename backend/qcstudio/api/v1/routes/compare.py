from __future__ import annotations

from fastapi import APIRouter

from qcstudio.api.deps import ReviewSessionDep
from qcstudio.schemas.review import ComparisonRead, PointerEvent
from qcstudio.services.review_session import ReviewSession

router = APIRouter()


def _comparison(review: ReviewSession) -> ComparisonRead:
    target = review.comparison_target()
    controller = review.comparison
    before, after = controller.crop_fractions()
    return ComparisonRead(
        enabled=target is not None,
        item_id=target.id if target else None,
        before_url=target.previous_url if target else None,
        after_url=target.source_url if target else None,
        split=controller.split,
        dragging=controller.dragging,
        before_fraction=before,
        after_fraction=after,
    )


@router.get("", response_model=ComparisonRead)
async def get_comparison(review: ReviewSession = ReviewSessionDep):
    return _comparison(review)


@router.post("/toggle", response_model=ComparisonRead)
async def toggle_comparison(review: ReviewSession = ReviewSessionDep):
    review.toggle_compare()
    return _comparison(review)


@router.post("/pointer", response_model=ComparisonRead)
async def pointer_event(payload: PointerEvent, review: ReviewSession = ReviewSessionDep):
    controller = review.comparison
    if payload.event == "down":
        controller.pointer_down()
    elif payload.event == "move":
        controller.pointer_move(payload.x, payload.surface_left, payload.surface_width)
    else:
        controller.pointer_up()
    return _comparison(review)
