from __future__ import annotations

from fastapi import APIRouter

from qcstudio.api.deps import ReviewSessionDep, WsManagerDep
from qcstudio.schemas.review import (
    ReviewItemRead,
    ReviewStateRead,
    ReviewStatsRead,
    SelectRequest,
)
from qcstudio.services.review_session import ReviewSession
from qcstudio.ws.manager import ConnectionManager

router = APIRouter()


def _state(review: ReviewSession) -> ReviewStateRead:
    ledger = review.ledger
    current = ledger.current
    return ReviewStateRead(
        view=ledger.view,
        active_index=ledger.active_index,
        current=ReviewItemRead.model_validate(current) if current else None,
        stats=ReviewStatsRead.model_validate(ledger.stats()),
        compare_mode=review.compare_mode,
        prompt_count=len(ledger.prompt_records),
    )


async def _send_navigation(ws: ConnectionManager, review: ReviewSession) -> None:
    await ws.send_event(
        {
            "type": "navigation",
            "data": {"active_index": review.ledger.active_index, "compare_mode": review.compare_mode},
        }
    )


@router.get("/state", response_model=ReviewStateRead)
async def get_state(review: ReviewSession = ReviewSessionDep):
    return _state(review)


@router.get("/stats", response_model=ReviewStatsRead)
async def get_stats(review: ReviewSession = ReviewSessionDep):
    return ReviewStatsRead.model_validate(review.ledger.stats())


@router.get("/retry-queue", response_model=list[ReviewItemRead])
async def get_retry_queue(review: ReviewSession = ReviewSessionDep):
    return [ReviewItemRead.model_validate(i) for i in review.ledger.rejected_items()]


@router.post("/next", response_model=ReviewStateRead)
async def next_item(review: ReviewSession = ReviewSessionDep, ws: ConnectionManager = WsManagerDep):
    review.ledger.advance()
    await _send_navigation(ws, review)
    return _state(review)


@router.post("/previous", response_model=ReviewStateRead)
async def previous_item(review: ReviewSession = ReviewSessionDep, ws: ConnectionManager = WsManagerDep):
    review.ledger.retreat()
    await _send_navigation(ws, review)
    return _state(review)


@router.post("/select", response_model=ReviewStateRead)
async def select_item(
    payload: SelectRequest,
    review: ReviewSession = ReviewSessionDep,
    ws: ConnectionManager = WsManagerDep,
):
    review.select(payload.index)
    await _send_navigation(ws, review)
    return _state(review)
