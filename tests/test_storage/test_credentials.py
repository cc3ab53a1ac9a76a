"""Tests for API key validation and client storage."""

from __future__ import annotations

import asyncio

import pytest

from listing_studio.errors import ValidationError
from listing_studio.storage import (
    CredentialStore,
    DatabaseClientStorage,
    InMemoryClientStorage,
    create_client_storage,
)
from listing_studio.storage.credentials import validate_credential
from tests.conftest import VALID_KEY


class FailingStorage(InMemoryClientStorage):
    async def set_async(self, key, value):
        raise OSError("storage quota exceeded")


def test_validate_trims_whitespace():
    assert validate_credential("  abcdefgh  ") == "abcdefgh"


@pytest.mark.parametrize("raw", [None, 12345678, "", "   ", "short", "  1234567  "])
def test_validate_rejects_invalid(raw):
    with pytest.raises(ValidationError) as exc_info:
        validate_credential(raw)
    assert exc_info.value.message == "Invalid API key"


def test_save_persists_trimmed_key():
    storage = InMemoryClientStorage()
    store = CredentialStore(storage)

    result = asyncio.run(store.save(f"  {VALID_KEY}\n"))

    assert result.ok is True
    assert asyncio.run(storage.get_async("removeBgApiKey")) == VALID_KEY
    assert asyncio.run(store.load()) == VALID_KEY


def test_save_invalid_key_keeps_previous_value():
    storage = InMemoryClientStorage({"removeBgApiKey": VALID_KEY})
    store = CredentialStore(storage)

    result = asyncio.run(store.save("short"))

    assert result.ok is False
    assert asyncio.run(store.load()) == VALID_KEY


def test_save_overwrites_existing_key():
    store = CredentialStore(InMemoryClientStorage({"removeBgApiKey": VALID_KEY}))

    asyncio.run(store.save("anotherkey42"))

    assert asyncio.run(store.load()) == "anotherkey42"


def test_load_without_saved_key():
    assert asyncio.run(CredentialStore(InMemoryClientStorage()).load()) is None


def test_storage_failure_propagates():
    store = CredentialStore(FailingStorage())
    with pytest.raises(OSError):
        asyncio.run(store.save(VALID_KEY))


def test_create_client_storage_backends():
    assert isinstance(create_client_storage("memory"), InMemoryClientStorage)
    assert isinstance(create_client_storage("database"), DatabaseClientStorage)
    with pytest.raises(ValueError):
        create_client_storage("redis")


class BrokenSession:
    """Async session whose queries fail."""

    def __init__(self):
        self.rolled_back = False
        self.committed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def execute(self, statement):
        raise RuntimeError("connection reset")

    async def commit(self):
        self.committed = True

    async def rollback(self):
        self.rolled_back = True


def test_database_storage_rolls_back_failed_write():
    session = BrokenSession()
    storage = DatabaseClientStorage(session_factory=lambda: session)

    with pytest.raises(RuntimeError, match="connection reset"):
        asyncio.run(storage.set_async("removeBgApiKey", VALID_KEY))

    assert session.rolled_back is True
    assert session.committed is False


class RecordingSession:
    """Async session holding at most one row per key."""

    def __init__(self, rows=None):
        self.rows = dict(rows or {})
        self.added = []
        self.flushed = 0
        self.committed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def execute(self, statement):
        key = statement.whereclause.right.value
        row = self.rows.get(key)

        class Result:
            def scalar_one_or_none(self):
                return row

        return Result()

    def add(self, row):
        self.added.append(row)
        self.rows[row.key] = row

    async def flush(self):
        self.flushed += 1

    async def commit(self):
        self.committed = True

    async def rollback(self):
        pass


def test_database_storage_inserts_then_updates():
    session = RecordingSession()
    storage = DatabaseClientStorage(session_factory=lambda: session)

    asyncio.run(storage.set_async("removeBgApiKey", VALID_KEY))
    asyncio.run(storage.set_async("removeBgApiKey", "anotherkey42"))

    assert len(session.added) == 1
    assert session.committed is True
    assert asyncio.run(storage.get_async("removeBgApiKey")) == "anotherkey42"
    assert asyncio.run(storage.get_async("missing")) is None
