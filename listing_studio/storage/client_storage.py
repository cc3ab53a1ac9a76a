"""
Client storage backends.

The UI keeps a few values per user in persistent key/value storage. The
service reaches it through ClientStorage, backed either by a dict (default,
lost on restart) or by the plugin_settings table.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from listing_studio.db.engine import get_session_factory
from listing_studio.db.repositories import SettingRepository


class ClientStorage(ABC):
    """Persistent key/value storage for string values."""

    @abstractmethod
    async def get_async(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set_async(self, key: str, value: str) -> None:
        pass


class InMemoryClientStorage(ClientStorage):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    async def get_async(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set_async(self, key: str, value: str) -> None:
        self._values[key] = value


class DatabaseClientStorage(ClientStorage):
    """ClientStorage on the plugin_settings table."""

    def __init__(self, session_factory=None):
        """
        Initialize the backend.

        Args:
            session_factory: async_sessionmaker (defaults to the shared engine's)
        """
        self._session_factory = session_factory

    def _sessions(self):
        return self._session_factory or get_session_factory()

    async def get_async(self, key: str) -> Optional[str]:
        async with self._sessions()() as session:
            return await SettingRepository(session).get_value(key)

    async def set_async(self, key: str, value: str) -> None:
        async with self._sessions()() as session:
            try:
                await SettingRepository(session).upsert(key, value)
                await session.commit()
            except Exception:
                await session.rollback()
                raise


def create_client_storage(backend: str) -> ClientStorage:
    """
    Build the storage backend named in configuration.

    Args:
        backend: "memory" or "database"

    Returns:
        ClientStorage instance
    """
    if backend == "memory":
        return InMemoryClientStorage()
    elif backend == "database":
        return DatabaseClientStorage()
    else:
        raise ValueError(f"Unsupported storage backend: {backend}")
