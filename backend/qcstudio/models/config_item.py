from datetime import datetime, UTC
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(UTC)


class ConfigItem(SQLModel, table=True):
    """运维配置项（覆盖 .env / 环境变量中的默认值）"""

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(index=True, unique=True)  # 与 Settings 字段同名的大写 key
    value: Optional[str] = None
    is_sensitive: bool = Field(default=False)  # 敏感值在接口中脱敏显示
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
