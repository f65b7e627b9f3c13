"""重新生成协调器

读取图片当前 prompt 推断角色，叠加审核员的服装覆盖，调用外部生成服务，
成功后把新图片写回台账。同一张图片同一时间只允许一个重新生成请求。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from qcstudio.exceptions import RegenerationConflictError, RegenerationFailedError
from qcstudio.schemas.review import CharacterName, Outfit
from qcstudio.services.ledger import ReviewItem, ReviewLedger
from qcstudio.services.scene_analyzer import CharacterRef, detect_characters, detect_setting

logger = logging.getLogger(__name__)


class OutfitOverrideMap:
    """会话级的服装覆盖，按角色名（而不是按图片）生效"""

    def __init__(self, overrides: dict[CharacterName, Outfit] | None = None) -> None:
        self._overrides: dict[CharacterName, Outfit] = dict(overrides or {})

    def get(self, name: CharacterName) -> Outfit | None:
        return self._overrides.get(name)

    def set(self, name: CharacterName, outfit: Outfit) -> None:
        self._overrides[name] = outfit

    def remove(self, name: CharacterName) -> bool:
        return self._overrides.pop(name, None) is not None

    def clear(self) -> None:
        self._overrides.clear()

    def as_dict(self) -> dict[CharacterName, Outfit]:
        return dict(self._overrides)

    def resolve(self, characters: list[CharacterRef]) -> list[CharacterRef]:
        """覆盖优先，没有覆盖时沿用从文本检测到的服装"""
        return [CharacterRef(name=c.name, outfit=self._overrides.get(c.name, c.outfit)) for c in characters]


@dataclass
class RegenerationRequest:
    prompt_text: str
    backend_endpoint: str
    characters: list[CharacterRef] = field(default_factory=list)
    setting: str | None = None

    def payload(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt_text,
            "characters": [{"name": c.name, "outfit": c.outfit} for c in self.characters],
            "setting": self.setting,
        }


class GenerationServiceProtocol(Protocol):
    async def regenerate(self, request: RegenerationRequest) -> str: ...


def build_request(item: ReviewItem, overrides: OutfitOverrideMap, backend_endpoint: str) -> RegenerationRequest:
    return RegenerationRequest(
        prompt_text=item.prompt,
        backend_endpoint=backend_endpoint,
        characters=overrides.resolve(detect_characters(item.prompt)),
        setting=detect_setting(item.prompt),
    )


class RegenerationCoordinator:
    def __init__(self, ledger: ReviewLedger, generator: GenerationServiceProtocol) -> None:
        self.ledger = ledger
        self.generator = generator
        self._in_flight: set[int] = set()

    def is_in_flight(self, item_id: int) -> bool:
        return item_id in self._in_flight

    async def regenerate(
        self,
        item_id: int,
        overrides: OutfitOverrideMap,
        backend_endpoint: str,
    ) -> ReviewItem:
        item = self.ledger.get(item_id)
        if item_id in self._in_flight:
            raise RegenerationConflictError(item_id)

        self._in_flight.add(item_id)
        try:
            request = build_request(item, overrides, backend_endpoint)
            logger.info(
                f"Regenerating item {item_id} via {backend_endpoint} "
                f"({len(request.characters)} characters, setting={request.setting})"
            )
            try:
                new_url = await self.generator.regenerate(request)
            except Exception as exc:
                logger.warning(f"Regeneration failed for item {item_id}: {exc}")
                raise RegenerationFailedError(
                    "Regeneration failed (check backend connection)",
                    details={"item_id": item_id, "error": str(exc)[:200]},
                ) from exc

            updated = self.ledger.apply_regeneration(item_id, new_url)
            logger.info(f"Item {item_id} regenerated: {new_url}")
            return updated
        finally:
            self._in_flight.discard(item_id)
