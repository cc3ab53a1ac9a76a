"""
Database module for Listing Studio.

Provides the engine, the client-storage table and its repository.
"""

from listing_studio.db.base import Base
from listing_studio.db.models import PluginSetting
from listing_studio.db.repositories import SettingRepository
from listing_studio.db.engine import get_engine, get_session_factory, dispose_engine

__all__ = [
    "Base",
    "PluginSetting",
    "SettingRepository",
    "get_engine",
    "get_session_factory",
    "dispose_engine",
]
