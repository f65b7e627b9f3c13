"""应用异常定义

所有可上报给前端的错误都继承 AppException，由 main.py 中的全局处理器
统一渲染为 {"error": {"code", "message", "details"}}。
"""
from __future__ import annotations

from typing import Any


class AppException(Exception):
    """应用异常基类"""

    code: str = "APP_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}


class PromptDatasetParseError(AppException):
    """prompt 数据集格式错误（整体拒绝，不做部分加载）"""

    code = "PROMPT_DATASET_INVALID"
    status_code = 400


class ItemNotFoundError(AppException):
    code = "ITEM_NOT_FOUND"
    status_code = 404

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Review item {item_id} not found", details={"item_id": item_id})
        self.item_id = item_id


class NoApprovedItemsError(AppException):
    code = "NO_APPROVED_ITEMS"
    status_code = 404


class RegenerationConflictError(AppException):
    """同一张图片已有进行中的重新生成任务"""

    code = "REGENERATION_IN_PROGRESS"
    status_code = 409

    def __init__(self, item_id: int) -> None:
        super().__init__(
            "This item is already being regenerated",
            details={"item_id": item_id},
        )
        self.item_id = item_id


class RegenerationFailedError(AppException):
    """生成服务调用失败，图片保持原状，可重试"""

    code = "REGENERATION_FAILED"
    status_code = 502


class ExtractionFailedError(AppException):
    code = "EXTRACTION_FAILED"
    status_code = 502
