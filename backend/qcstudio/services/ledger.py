"""审核台账 - 维护待审图片列表、当前位置和审核状态

状态只允许通过本模块的方法修改；导入与数据集加载触发的 prompt 匹配也在这里完成。
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Iterable

from qcstudio.exceptions import ItemNotFoundError
from qcstudio.schemas.review import PromptRecord, ReviewStatus, ReviewView
from qcstudio.services.matching import match_prompt
from qcstudio.services.scene_analyzer import detect_setting

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER = "Prompt will appear here once JSON is loaded..."


@dataclass
class ReviewItem:
    """一张待审图片"""

    id: int
    file_name: str
    source_url: str
    prompt: str
    original_prompt: str
    status: ReviewStatus = "pending"
    previous_url: str | None = None  # 上一次重新生成前的图片，用于对比
    setting: str | None = None


@dataclass(frozen=True)
class ImportedImage:
    file_name: str
    source_url: str


@dataclass(frozen=True)
class ReviewStats:
    total: int
    approved: int
    rejected: int
    pending: int

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "approved": self.approved,
            "rejected": self.rejected,
            "pending": self.pending,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


class ReviewLedger:
    def __init__(self, placeholder_prompt: str = DEFAULT_PLACEHOLDER) -> None:
        self.placeholder_prompt = placeholder_prompt
        self.items: list[ReviewItem] = []
        self.prompt_records: list[PromptRecord] = []
        self.active_index = 0
        self.view: ReviewView = "dashboard"
        self._last_id = 0

    def __len__(self) -> int:
        return len(self.items)

    # ---- 查询 ----

    @property
    def current(self) -> ReviewItem | None:
        if not self.items:
            return None
        return self.items[self.active_index]

    def get(self, item_id: int) -> ReviewItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise ItemNotFoundError(item_id)

    def index_of(self, item_id: int) -> int:
        for idx, item in enumerate(self.items):
            if item.id == item_id:
                return idx
        raise ItemNotFoundError(item_id)

    def stats(self) -> ReviewStats:
        """每次都从当前列表重新统计，不做增量维护"""
        return ReviewStats(
            total=len(self.items),
            approved=sum(1 for i in self.items if i.status == "approved"),
            rejected=sum(1 for i in self.items if i.status == "rejected"),
            pending=sum(1 for i in self.items if i.status == "pending"),
        )

    def approved_items(self) -> list[ReviewItem]:
        return [i for i in self.items if i.status == "approved"]

    def rejected_items(self) -> list[ReviewItem]:
        """重试队列"""
        return [i for i in self.items if i.status == "rejected"]

    def setting_for(self, item_id: int) -> str:
        item = self.get(item_id)
        item.setting = detect_setting(item.prompt)
        return item.setting

    # ---- 导入与匹配 ----

    def _next_id(self, base: int, offset: int) -> int:
        candidate = max(base + offset, self._last_id + 1)
        self._last_id = candidate
        return candidate

    def import_images(self, images: Iterable[ImportedImage]) -> list[ReviewItem]:
        """批量导入图片，按输入顺序追加，并立即匹配当前数据集"""
        base = _now_ms()
        created: list[ReviewItem] = []
        for idx, image in enumerate(images):
            prompt = match_prompt(image.file_name, self.prompt_records) or self.placeholder_prompt
            item = ReviewItem(
                id=self._next_id(base, idx),
                file_name=image.file_name,
                source_url=image.source_url,
                prompt=prompt,
                original_prompt=prompt,
            )
            created.append(item)

        self.items.extend(created)
        self.view = "qc"
        matched = sum(1 for i in created if i.prompt != self.placeholder_prompt)
        logger.info(f"Imported {len(created)} images ({matched} matched to prompts)")
        return created

    def load_prompt_dataset(self, records: list[PromptRecord]) -> int:
        """替换数据集并对所有已有图片重新匹配，返回被改写的图片数量

        注意：新匹配结果与当前 prompt 不同时，prompt 和 original_prompt 会一并覆盖，
        审核员手动修改过的 prompt 也会丢失。
        """
        self.prompt_records = list(records)
        rematched = 0
        for item in self.items:
            new_prompt = match_prompt(item.file_name, self.prompt_records)
            if not new_prompt or new_prompt == item.prompt:
                continue
            if item.prompt != item.original_prompt:
                logger.info(f"Reviewer edit on item {item.id} overwritten by dataset reload")
            item.prompt = new_prompt
            item.original_prompt = new_prompt
            rematched += 1
        logger.info(f"Loaded {len(self.prompt_records)} prompt records, rematched {rematched} items")
        return rematched

    # ---- 状态流转 ----

    def _set_status(self, item_id: int, status: ReviewStatus) -> ReviewItem:
        idx = self.index_of(item_id)
        item = self.items[idx]
        if item.status == status:
            return item
        item.status = status
        # 快速审核：当前图片做出决定后自动跳到下一张
        if idx == self.active_index and idx < len(self.items) - 1:
            self.active_index = idx + 1
        return item

    def approve(self, item_id: int) -> ReviewItem:
        return self._set_status(item_id, "approved")

    def reject(self, item_id: int) -> ReviewItem:
        return self._set_status(item_id, "rejected")

    def edit_prompt(self, item_id: int, text: str) -> ReviewItem:
        item = self.get(item_id)
        item.prompt = text
        return item

    def reset_prompt(self, item_id: int) -> ReviewItem:
        item = self.get(item_id)
        item.prompt = item.original_prompt
        return item

    def apply_regeneration(self, item_id: int, new_url: str) -> ReviewItem:
        """写入重新生成结果；图片变了，之前的审核结论作废"""
        item = self.get(item_id)
        item.previous_url = item.source_url
        item.source_url = new_url
        item.status = "pending"
        return item

    def clear_previous(self, item_id: int) -> ReviewItem:
        item = self.get(item_id)
        item.previous_url = None
        return item

    # ---- 导航 ----

    def _clamp(self, index: int) -> int:
        if not self.items:
            return 0
        return max(0, min(index, len(self.items) - 1))

    def advance(self) -> int:
        self.active_index = self._clamp(self.active_index + 1)
        return self.active_index

    def retreat(self) -> int:
        self.active_index = self._clamp(self.active_index - 1)
        return self.active_index

    def select(self, index: int) -> int:
        self.active_index = self._clamp(index)
        return self.active_index
