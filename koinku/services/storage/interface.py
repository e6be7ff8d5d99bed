"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for ledger persistence.
This allows us to:
1. Swap the JSON file for another medium later
2. Use in-memory storage (or failing doubles) for testing
3. Keep the engine decoupled from how bytes reach disk

The contract is deliberately coarse: the whole log is loaded and saved
as one unit under one well-known key. There is no per-row update.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from koinku.models.ledger import Transaction


class LedgerStorageInterface(ABC):
    """
    Abstract interface for transaction log storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def load(self) -> list[Transaction]:
        """
        Load the persisted transaction log.

        Returns:
            Transactions newest first, or an empty list if nothing
            has ever been saved

        Raises:
            StorageUnavailable: If the medium cannot be read
            CorruptData: If the stored content is malformed
        """
        pass

    @abstractmethod
    async def save(self, transactions: Sequence[Transaction]) -> None:
        """
        Persist the full transaction log, replacing prior content.

        Must be all-or-nothing: after a failure, load() still returns
        either the previous log or the new one, never a partial write.

        Args:
            transactions: The complete log, newest first

        Raises:
            StorageWriteFailed: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailable(StorageError):
    """Storage medium could not be read."""
    pass


class CorruptData(StorageError):
    """Stored content exists but could not be parsed."""
    pass


class StorageWriteFailed(StorageError):
    """The log could not be confirmed written; the latest change may not be durable."""
    pass
