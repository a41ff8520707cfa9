"""Pytest fixtures for testing"""

import asyncio
from typing import Optional

import pytest

from expense_ledger.config import get_settings
from expense_ledger.ledger import LedgerStore
from expense_ledger.services.storage import InMemoryKeyValueStore, PersistenceError


SETTINGS_ENV_VARS = [
    "LEDGER_STORAGE_KEY",
    "LEDGER_STORAGE_PATH",
    "LEDGER_EXTRA_CATEGORIES",
    "LEDGER_DEFAULT_CATEGORY",
    "LEDGER_MAX_NAME_LENGTH",
    "CHART_PALETTE",
    "APP_ENVIRONMENT",
    "DEBUG_MODE",
    "LOG_LEVEL",
]


class FailingWriteStore(InMemoryKeyValueStore):
    """Reads work, every write raises."""

    async def set(self, key: str, value: str) -> bool:
        raise PersistenceError("disk full")


class RejectingWriteStore(InMemoryKeyValueStore):
    """Reads work, every write reports failure without raising."""

    async def set(self, key: str, value: str) -> bool:
        return False


class FailingReadStore(InMemoryKeyValueStore):
    """Every read raises a storage error."""

    async def get(self, key: str) -> Optional[str]:
        raise PersistenceError("storage unavailable")


class BrokenBackendStore(InMemoryKeyValueStore):
    """Every read raises an error type the ledger doesn't know about."""

    async def get(self, key: str) -> Optional[str]:
        raise RuntimeError("backend exploded")


class SlowStore(InMemoryKeyValueStore):
    """Suspends inside get/set so concurrent appends interleave."""

    async def get(self, key: str) -> Optional[str]:
        await asyncio.sleep(0.01)
        return await super().get(key)

    async def set(self, key: str, value: str) -> bool:
        await asyncio.sleep(0.01)
        return await super().set(key, value)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate every test from the caller's environment."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def ledger_store(storage) -> LedgerStore:
    return LedgerStore(storage)


@pytest.fixture
def failing_write_store() -> FailingWriteStore:
    return FailingWriteStore()


@pytest.fixture
def rejecting_write_store() -> RejectingWriteStore:
    return RejectingWriteStore()


@pytest.fixture
def failing_read_store() -> FailingReadStore:
    return FailingReadStore()


@pytest.fixture
def broken_backend_store() -> BrokenBackendStore:
    return BrokenBackendStore()


@pytest.fixture
def slow_store() -> SlowStore:
    return SlowStore()


@pytest.fixture
def sample_records() -> list[dict]:
    """Lunch, Taxi and Coffee over two days, in creation order."""
    return [
        {
            "name": "Lunch",
            "category": "Food",
            "amount": 12.5,
            "creationDate": "2024-01-01T12:00:00Z",
        },
        {
            "name": "Taxi",
            "category": "Travel",
            "amount": 20,
            "creationDate": "2024-01-01T09:00:00Z",
        },
        {
            "name": "Coffee",
            "category": "Food",
            "amount": 4.5,
            "creationDate": "2024-01-02T08:00:00Z",
        },
    ]
