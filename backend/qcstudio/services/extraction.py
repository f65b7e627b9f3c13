"""剧本解析服务客户端

把 DOCX 剧本发给外部解析服务，返回其中的图片 prompt 记录。
backgrounds / audio 部分目前不参与质检流程，只记录数量。
"""
from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ValidationError

from qcstudio.config import Settings
from qcstudio.exceptions import ExtractionFailedError
from qcstudio.schemas.review import PromptRecord
from qcstudio.services.generation import join_url, post_with_retry

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class ExtractionResult(BaseModel):
    images: list[PromptRecord] = []
    backgrounds: list[dict] = []
    audio: list[dict] = []


class ExtractionService:
    def __init__(
        self,
        settings: Settings,
        *,
        max_retries: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.max_retries = max_retries
        self._transport = transport

    async def extract(self, backend_endpoint: str, file_name: str, content: bytes) -> ExtractionResult:
        url = join_url(backend_endpoint, self.settings.extraction_endpoint)
        logger.info(f"Sending {file_name} ({len(content)} bytes) to extraction service {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.request_timeout_s, transport=self._transport
            ) as client:
                res = await post_with_retry(
                    client,
                    url,
                    max_retries=self.max_retries,
                    headers=self.settings.generation_headers(),
                    files={"file": (file_name, content, DOCX_MEDIA_TYPE)},
                )
            result = ExtractionResult.model_validate(res.json())
        except (RuntimeError, ValueError, ValidationError) as exc:
            logger.warning(f"Extraction failed for {file_name}: {exc}")
            raise ExtractionFailedError(
                "Screenplay extraction failed",
                details={"file_name": file_name, "error": str(exc)[:200]},
            ) from exc

        logger.info(
            f"Extraction complete: {len(result.images)} image prompts, "
            f"{len(result.backgrounds)} backgrounds, {len(result.audio)} audio cues"
        )
        return result
