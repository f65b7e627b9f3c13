"""审核会话 - 把台账、服装覆盖、对比滑块和重新生成协调器组合在一起

整个进程一个会话；服装覆盖作为显式参数传给协调器，而不是全局状态。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from qcstudio.services.comparison import ComparisonController
from qcstudio.services.ledger import DEFAULT_PLACEHOLDER, ReviewItem, ReviewLedger
from qcstudio.services.media_storage import MediaStorage
from qcstudio.services.regeneration import (
    GenerationServiceProtocol,
    OutfitOverrideMap,
    RegenerationCoordinator,
)
from qcstudio.services.scene_analyzer import CharacterRef, analyze_scene

logger = logging.getLogger(__name__)


@dataclass
class ItemAnalysis:
    item_id: int
    setting: str
    detected: list[CharacterRef]
    resolved: list[CharacterRef]


class ReviewSession:
    def __init__(
        self,
        generator: GenerationServiceProtocol,
        *,
        storage: MediaStorage | None = None,
        placeholder_prompt: str = DEFAULT_PLACEHOLDER,
    ) -> None:
        self.ledger = ReviewLedger(placeholder_prompt=placeholder_prompt)
        self.overrides = OutfitOverrideMap()
        self.comparison = ComparisonController()
        self.coordinator = RegenerationCoordinator(self.ledger, generator)
        self.storage = storage
        self.compare_mode = False

    def analyze(self, item_id: int) -> ItemAnalysis:
        item = self.ledger.get(item_id)
        analysis = analyze_scene(item.prompt)
        item.setting = analysis.setting
        return ItemAnalysis(
            item_id=item.id,
            setting=analysis.setting,
            detected=analysis.characters,
            resolved=self.overrides.resolve(analysis.characters),
        )

    def select(self, index: int) -> int:
        # 切换图片时退出对比模式
        self.compare_mode = False
        return self.ledger.select(index)

    def toggle_compare(self) -> bool:
        self.compare_mode = not self.compare_mode
        return self.compare_mode

    def comparison_target(self) -> ReviewItem | None:
        """对比模式下且当前图片有旧版本时返回当前图片"""
        current = self.ledger.current
        if not self.compare_mode or current is None or not current.previous_url:
            return None
        return current

    async def regenerate(self, item_id: int, backend_endpoint: str) -> ReviewItem:
        stale_url = self.ledger.get(item_id).previous_url
        item = await self.coordinator.regenerate(item_id, self.overrides, backend_endpoint)
        # 上上个版本已不再被引用，清理本地文件
        if self.storage is not None and stale_url and stale_url not in (item.previous_url, item.source_url):
            self.storage.delete(stale_url)
        self.compare_mode = True
        return item
