from __future__ import annotations

import asyncio

from qcstudio.schemas.review import PromptRecord
from qcstudio.services.extraction import ExtractionResult
from qcstudio.services.regeneration import RegenerationRequest


class FakeGenerationService:
    def __init__(self, url: str = "http://image.test/regenerated.png", error: Exception | None = None):
        self.url = url
        self.error = error
        self.requests: list[RegenerationRequest] = []

    async def regenerate(self, request: RegenerationRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return f"{self.url}?v={len(self.requests)}"


class BlockingGenerationService(FakeGenerationService):
    """在 release() 之前一直挂起，用来制造"进行中"的重新生成"""

    def __init__(self, url: str = "http://image.test/slow.png"):
        super().__init__(url=url)
        self.started = asyncio.Event()
        self._release = asyncio.Event()

    def release(self) -> None:
        self._release.set()

    async def regenerate(self, request: RegenerationRequest) -> str:
        self.requests.append(request)
        self.started.set()
        await self._release.wait()
        return f"{self.url}?v={len(self.requests)}"


class FakeExtractionService:
    def __init__(self, labels: list[str] | None = None):
        self.labels = labels if labels is not None else ["A hides || Chap 1_2"]
        self.calls: list[tuple[str, str, int]] = []

    async def extract(self, backend_endpoint: str, file_name: str, content: bytes) -> ExtractionResult:
        self.calls.append((backend_endpoint, file_name, len(content)))
        return ExtractionResult(images=[PromptRecord(output_ai=label) for label in self.labels])


class StubWsManager:
    def __init__(self) -> None:
        self.events: list[dict] = []

    async def send_event(self, event: dict) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e["type"] for e in self.events]
