"""
Setting repository for database operations.

Provides get/upsert for the plugin_settings table.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from listing_studio.db.models import PluginSetting


class SettingRepository:
    """Repository for PluginSetting model."""

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with a database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_key(self, key: str) -> Optional[PluginSetting]:
        stmt = select(PluginSetting).where(PluginSetting.key == key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_value(self, key: str) -> Optional[str]:
        setting = await self.get_by_key(key)
        return setting.value if setting is not None else None

    async def upsert(self, key: str, value: str) -> PluginSetting:
        """
        Create the setting or overwrite its value.

        Args:
            key: Storage key
            value: Value to store

        Returns:
            The stored PluginSetting
        """
        setting = await self.get_by_key(key)
        if setting is None:
            setting = PluginSetting(key=key, value=value)
            self.session.add(setting)
        else:
            setting.value = value
        await self.session.flush()
        return setting
