from __future__ import annotations

import pytest

from tests.factories import import_files


@pytest.mark.asyncio
async def test_empty_state(async_client):
    res = await async_client.get("/api/v1/review/state")
    data = res.json()
    assert data["view"] == "dashboard"
    assert data["current"] is None
    assert data["stats"] == {"total": 0, "approved": 0, "rejected": 0, "pending": 0}


@pytest.mark.asyncio
async def test_next_previous_clamp(async_client, review_session, ws_manager):
    import_files(review_session.ledger, "chap_1_1.png", "chap_1_2.png")

    res = await async_client.post("/api/v1/review/previous")
    assert res.json()["active_index"] == 0

    res = await async_client.post("/api/v1/review/next")
    assert res.json()["active_index"] == 1
    res = await async_client.post("/api/v1/review/next")
    assert res.json()["active_index"] == 1
    assert res.json()["current"]["file_name"] == "chap_1_2.png"
    assert ws_manager.types() == ["navigation", "navigation", "navigation"]


@pytest.mark.asyncio
async def test_select(async_client, review_session):
    import_files(review_session.ledger, "chap_1_1.png", "chap_1_2.png", "chap_1_3.png")
    review_session.toggle_compare()

    res = await async_client.post("/api/v1/review/select", json={"index": 2})
    assert res.json()["active_index"] == 2
    assert res.json()["compare_mode"] is False

    res = await async_client.post("/api/v1/review/select", json={"index": -1})
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_stats_and_retry_queue(async_client, review_session):
    first, second, third = import_files(review_session.ledger, "chap_1_1.png", "chap_1_2.png", "chap_1_3.png")
    review_session.ledger.approve(first.id)
    review_session.ledger.reject(second.id)

    res = await async_client.get("/api/v1/review/stats")
    assert res.json() == {"total": 3, "approved": 1, "rejected": 1, "pending": 1}

    res = await async_client.get("/api/v1/review/retry-queue")
    assert [i["id"] for i in res.json()] == [second.id]
