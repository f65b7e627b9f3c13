from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class BackendConfigRead(BaseModel):
    backend_url: str
    source: Literal["default", "override"]


class BackendConfigUpdate(BaseModel):
    # 传 null 恢复为 Settings 默认值
    backend_url: str | None = Field(default=None)

    @field_validator("backend_url")
    @classmethod
    def _check_scheme(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("backend_url must start with http:// or https://")
        return v.rstrip("/")
