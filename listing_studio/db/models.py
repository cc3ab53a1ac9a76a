"""
Database models for Listing Studio.

The service persists nothing but the UI's client storage: a handful of
string values under fixed keys (today only the remove.bg API key).
"""

from datetime import datetime

from sqlalchemy import String, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from listing_studio.db.base import Base


class PluginSetting(Base):
    """One key/value pair of plugin client storage."""
    __tablename__ = "plugin_settings"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<PluginSetting(key={self.key})>"
