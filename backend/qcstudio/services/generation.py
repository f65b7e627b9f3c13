from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from qcstudio.config import Settings
from qcstudio.services.media_storage import MediaStorage
from qcstudio.services.regeneration import RegenerationRequest

logger = logging.getLogger(__name__)


def join_url(base: str, endpoint: str) -> str:
    base = base.rstrip("/")
    if not endpoint.startswith("/"):
        endpoint = "/" + endpoint
    return f"{base}{endpoint}"


def is_retryable_status(status_code: int) -> bool:
    return status_code in {408, 429, 500, 502, 503, 504}


async def post_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_retries: int,
    **request_kwargs: Any,
) -> httpx.Response:
    """POST with exponential backoff on timeouts, network errors and retryable statuses."""
    delay_s = 0.5
    last_exc: Exception | None = None

    for attempt in range(max_retries + 1):
        try:
            res = await client.post(url, **request_kwargs)
            if is_retryable_status(res.status_code) and attempt < max_retries:
                logger.warning(f"POST {url} returned {res.status_code}, retrying ({attempt + 1}/{max_retries})")
                await asyncio.sleep(delay_s)
                delay_s = min(delay_s * 2, 8.0)
                continue
            res.raise_for_status()
            return res
        except (httpx.TimeoutException, httpx.NetworkError, httpx.HTTPStatusError) as exc:
            last_exc = exc
            if attempt >= max_retries:
                break
            status = getattr(getattr(exc, "response", None), "status_code", None)
            if isinstance(status, int) and not is_retryable_status(status):
                break
            await asyncio.sleep(delay_s)
            delay_s = min(delay_s * 2, 8.0)

    raise RuntimeError(f"Request to {url} failed after retries: {last_exc}") from last_exc


class GenerationService:
    """场景图片重新生成服务（外部 Python 生成后端）"""

    def __init__(
        self,
        settings: Settings,
        storage: MediaStorage,
        *,
        max_retries: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.storage = storage
        self.max_retries = settings.generation_max_retries if max_retries is None else max_retries
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.request_timeout_s, transport=self._transport)

    def _extract_locator(self, data: dict[str, Any]) -> str:
        """兼容两种返回：图片 URL 或 base64 图片数据"""
        for key in ("image_url", "url"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value

        items = data.get("data") or []
        if isinstance(items, list) and items:
            first = items[0] if isinstance(items[0], dict) else {}
            value = first.get("url")
            if isinstance(value, str) and value:
                return value

        encoded = data.get("new_image_base64") or data.get("b64_json")
        if isinstance(encoded, str) and encoded:
            return self.storage.save_base64_image(encoded)

        raise RuntimeError(f"Generation response missing image: {str(data)[:200]}")

    async def regenerate(self, request: RegenerationRequest) -> str:
        url = join_url(request.backend_endpoint, self.settings.generation_endpoint)
        async with self._client() as client:
            res = await post_with_retry(
                client,
                url,
                max_retries=self.max_retries,
                headers=self.settings.generation_headers(),
                json=request.payload(),
            )
        data = res.json()
        if not isinstance(data, dict):
            raise RuntimeError(f"Unexpected generation response: {str(data)[:200]}")
        if data.get("error"):
            raise RuntimeError(f"Generation backend error: {data['error']}")
        return self._extract_locator(data)
