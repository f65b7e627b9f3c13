from __future__ import annotations

import json

from pydantic import TypeAdapter, ValidationError

from qcstudio.exceptions import PromptDatasetParseError
from qcstudio.schemas.review import PromptRecord

_RECORDS = TypeAdapter(list[PromptRecord])


def parse_prompt_dataset(raw: str | bytes) -> list[PromptRecord]:
    """解析 prompt 数据集 JSON；任何格式问题都整体拒绝"""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PromptDatasetParseError("Invalid JSON file.", details={"error": str(exc)}) from exc

    if not isinstance(data, list):
        raise PromptDatasetParseError(
            "Prompt dataset must be a JSON array",
            details={"type": type(data).__name__},
        )

    try:
        return _RECORDS.validate_python(data)
    except ValidationError as exc:
        raise PromptDatasetParseError(
            "Prompt dataset contains malformed records",
            details={"errors": exc.errors(include_url=False, include_context=False)[:5]},
        ) from exc
