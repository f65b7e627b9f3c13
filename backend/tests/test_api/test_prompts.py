from __future__ import annotations

import json

import pytest

from tests.factories import import_files


def _dataset(*labels: str) -> tuple[str, tuple[str, bytes, str]]:
    body = json.dumps([{"outputAi": label} for label in labels]).encode()
    return ("file", ("prompts.json", body, "application/json"))


@pytest.mark.asyncio
async def test_upload_rematches_existing_items(async_client, review_session, ws_manager):
    import_files(review_session.ledger, "chap_1_2.png", "chap_3_3.png")

    res = await async_client.post("/api/v1/prompts", files=[_dataset("A hides || Chap 1_2", "B || Chap 2_1")])
    assert res.status_code == 200
    assert res.json() == {"loaded": 2, "rematched": 1}
    assert review_session.ledger.items[0].prompt == "A hides"
    assert ws_manager.types() == ["prompts_loaded"]

    res = await async_client.get("/api/v1/prompts")
    assert res.json()["count"] == 2
    assert res.json()["records"][0]["outputAi"] == "A hides || Chap 1_2"


@pytest.mark.asyncio
async def test_invalid_json_leaves_dataset_unchanged(async_client, review_session):
    await async_client.post("/api/v1/prompts", files=[_dataset("A hides || Chap 1_2")])

    res = await async_client.post(
        "/api/v1/prompts",
        files=[("file", ("broken.json", b"{oops", "application/json"))],
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "PROMPT_DATASET_INVALID"
    assert error["message"] == "Invalid JSON file."
    assert len(review_session.ledger.prompt_records) == 1


@pytest.mark.asyncio
async def test_extract_loads_returned_prompts(async_client, review_session, extraction):
    import_files(review_session.ledger, "chap_1_2.png")

    res = await async_client.post(
        "/api/v1/prompts/extract",
        files=[("file", ("episode.docx", b"PK docx", "application/octet-stream"))],
    )
    assert res.status_code == 200
    assert res.json() == {"loaded": 1, "rematched": 1}
    assert extraction.calls == [("http://generator.test", "episode.docx", 7)]
    assert review_session.ledger.items[0].prompt == "A hides"
    assert review_session.ledger.view == "extraction"
