"""
In-Memory Storage Implementation

Holds serialized documents in a dict keyed like the file store.
Blobs go through the same JSON encoding as on disk, so anything that
round-trips here round-trips through JsonFileLedgerStorage too.
"""

from typing import Optional, Sequence

from koinku.models.ledger import LedgerDocument, Transaction
from koinku.services.storage.interface import CorruptData, LedgerStorageInterface


class InMemoryLedgerStorage(LedgerStorageInterface):
    """
    Ephemeral ledger storage.

    Pass the same `blobs` dict to several instances to simulate
    a restart against the same medium.
    """

    def __init__(
        self,
        key: str = "transactions",
        blobs: Optional[dict[str, str]] = None,
    ):
        self._key = key
        self._blobs = blobs if blobs is not None else {}

    @property
    def blobs(self) -> dict[str, str]:
        return self._blobs

    async def load(self) -> list[Transaction]:
        blob = self._blobs.get(self._key)
        if blob is None:
            return []
        try:
            return LedgerDocument.from_json(blob).transactions
        except ValueError as e:
            raise CorruptData(f"Stored ledger under {self._key!r} is malformed: {e}") from e

    async def save(self, transactions: Sequence[Transaction]) -> None:
        document = LedgerDocument(transactions=list(transactions))
        # Single assignment: the old blob stays until the new one is complete
        self._blobs[self._key] = document.to_json()
