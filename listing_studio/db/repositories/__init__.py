"""
Database repositories for Listing Studio.

Provides repository pattern for database operations.
"""

from listing_studio.db.repositories.setting_repo import SettingRepository

__all__ = [
    "SettingRepository",
]
