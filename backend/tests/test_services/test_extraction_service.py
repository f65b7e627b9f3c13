from __future__ import annotations

import httpx
import pytest

from qcstudio.exceptions import ExtractionFailedError
from qcstudio.services.extraction import ExtractionService


@pytest.mark.asyncio
async def test_extract_returns_image_prompts(test_settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "images": [{"outputAi": "A hides || Chap 1_2"}, {"outputAi": "B runs || Chap 1_3"}],
                "backgrounds": [{"name": "hospital"}],
                "audio": [],
            },
        )

    service = ExtractionService(test_settings, transport=httpx.MockTransport(handler))
    result = await service.extract("http://generator.test", "episode.docx", b"PK fake docx")

    assert [r.output_ai for r in result.images] == ["A hides || Chap 1_2", "B runs || Chap 1_3"]
    assert len(result.backgrounds) == 1
    assert str(seen[0].url) == "http://generator.test/api/extract"
    assert b'name="file"; filename="episode.docx"' in seen[0].content


@pytest.mark.asyncio
async def test_malformed_response_is_wrapped(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"images": "not-a-list"})

    service = ExtractionService(test_settings, transport=httpx.MockTransport(handler))
    with pytest.raises(ExtractionFailedError) as exc_info:
        await service.extract("http://generator.test", "episode.docx", b"x")
    assert exc_info.value.details["file_name"] == "episode.docx"


@pytest.mark.asyncio
async def test_backend_failure_is_wrapped(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    service = ExtractionService(test_settings, max_retries=0, transport=httpx.MockTransport(handler))
    with pytest.raises(ExtractionFailedError) as exc_info:
        await service.extract("http://generator.test", "episode.docx", b"x")
    assert exc_info.value.status_code == 502
