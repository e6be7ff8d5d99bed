"""
Shared fixtures and storage doubles.

No test touches the real data directory: file-backed tests use tmp_path,
everything else uses in-memory storage.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import pytest

from koinku.config import get_settings
from koinku.models.ledger import Transaction
from koinku.services.storage import (
    InMemoryLedgerStorage,
    LedgerStorageInterface,
    StorageUnavailable,
    StorageWriteFailed,
)


class FailingSaveStorage(InMemoryLedgerStorage):
    """Loads normally, but every save fails."""

    def __init__(self, blobs: Optional[dict[str, str]] = None):
        super().__init__(blobs=blobs)
        self.save_attempts = 0

    async def save(self, transactions: Sequence[Transaction]) -> None:
        self.save_attempts += 1
        raise StorageWriteFailed("disk full")


class UnavailableStorage(LedgerStorageInterface):
    """A medium that cannot be read or written."""

    async def load(self) -> list[Transaction]:
        raise StorageUnavailable("medium absent")

    async def save(self, transactions: Sequence[Transaction]) -> None:
        raise StorageWriteFailed("medium absent")


class SlowRecordingStorage(InMemoryLedgerStorage):
    """
    Records every saved snapshot.

    Each save sleeps for the next delay in `delays`, so earlier saves
    can be made slower than later ones.
    """

    def __init__(self, delays: Sequence[float] = ()):
        super().__init__()
        self._delays = list(delays)
        self.saved: list[tuple[Transaction, ...]] = []

    async def save(self, transactions: Sequence[Transaction]) -> None:
        delay = self._delays.pop(0) if self._delays else 0
        await asyncio.sleep(delay)
        self.saved.append(tuple(transactions))
        await super().save(transactions)


class FixedClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 12, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point configuration at a throwaway directory."""
    monkeypatch.setenv("KOINKU_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def memory_storage() -> InMemoryLedgerStorage:
    return InMemoryLedgerStorage()
