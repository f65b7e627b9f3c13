from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel


WsEventType = Literal[
    "connected",
    "pong",
    "items_imported",          # 批量导入图片
    "item_updated",            # 审核状态 / prompt 变化
    "prompts_loaded",          # prompt 数据集加载（含重新匹配）
    "navigation",              # 当前图片切换
    "regeneration_started",
    "regeneration_completed",
    "regeneration_failed",
    "outfits_updated",         # 服装覆盖变化
    "config_updated",
    "error",
]


class WsEvent(BaseModel):
    type: WsEventType
    data: dict[str, Any] = {}
