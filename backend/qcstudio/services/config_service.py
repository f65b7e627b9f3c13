"""持久化配置服务

目前只有生成后端地址需要在会话之间保留：数据库中有值时覆盖 Settings 默认值。
"""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qcstudio.config import Settings
from qcstudio.models.config_item import ConfigItem, utcnow

logger = logging.getLogger(__name__)

BACKEND_URL_KEY = "GENERATION_BASE_URL"


class ConfigService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_item(self, key: str) -> ConfigItem | None:
        res = await self.session.execute(select(ConfigItem).where(ConfigItem.key == key))
        return res.scalars().first()

    async def get_value(self, key: str) -> str | None:
        item = await self._get_item(key)
        return item.value if item else None

    async def set_value(self, key: str, value: str | None, *, is_sensitive: bool = False) -> ConfigItem:
        item = await self._get_item(key)
        if item is None:
            item = ConfigItem(key=key, value=value, is_sensitive=is_sensitive)
        else:
            item.value = value
            item.updated_at = utcnow()
        self.session.add(item)
        await self.session.commit()
        await self.session.refresh(item)
        return item

    async def get_backend_url(self, settings: Settings) -> tuple[str, str]:
        """返回 (地址, 来源)，来源为 override 或 default"""
        stored = await self.get_value(BACKEND_URL_KEY)
        if stored:
            return stored, "override"
        return settings.generation_base_url, "default"

    async def set_backend_url(self, url: str | None) -> None:
        await self.set_value(BACKEND_URL_KEY, url or None)
        logger.info(f"Generation backend set to {url or '<default>'}")
