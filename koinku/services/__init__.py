"""Services package."""

from koinku.services.storage import (
    CorruptData,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    LedgerStorageInterface,
    StorageError,
    StorageUnavailable,
    StorageWriteFailed,
)

__all__ = [
    "CorruptData",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "LedgerStorageInterface",
    "StorageError",
    "StorageUnavailable",
    "StorageWriteFailed",
]
