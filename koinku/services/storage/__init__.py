"""
Storage Services Package

Provides the abstract ledger storage interface and concrete implementations.
The JSON file store is the default backend; the in-memory store backs tests
and throwaway sessions.
"""

from koinku.services.storage.interface import (
    CorruptData,
    LedgerStorageInterface,
    StorageError,
    StorageUnavailable,
    StorageWriteFailed,
)
from koinku.services.storage.json_file import JsonFileLedgerStorage
from koinku.services.storage.memory import InMemoryLedgerStorage

__all__ = [
    # Interfaces
    "LedgerStorageInterface",
    # Exceptions
    "CorruptData",
    "StorageError",
    "StorageUnavailable",
    "StorageWriteFailed",
    # Implementations
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
]
