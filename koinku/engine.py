"""
Ledger Engine for Koinku

The engine owns the in-memory ledger: the transaction sequence and the
balance derived from it. It is the only component allowed to change either,
and the only writer into storage.

Lifecycle:
1. Uninitialized → initialize() loads the persisted log (Loading)
2. Loading → Ready, whether or not the load succeeded
3. Ready → record() / current_balance() / history()

DESIGN DECISION: The balance is never set directly.
Every change replaces the transaction sequence and re-runs the full fold,
so the balance cannot drift from the log it summarizes.

DESIGN DECISION: A failed save does not undo a record.
The user just saw their entry accepted; rolling it back would lose it.
Instead the caller gets a notice that the change is not yet durable.
"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence

from koinku.audit import AuditLogger, configure_logging
from koinku.config import LedgerSettings, Settings, get_settings
from koinku.models.ledger import (
    LedgerNotice,
    LedgerSnapshot,
    NoticeKind,
    RecordResult,
    Transaction,
    compute_balance,
)
from koinku.services.storage import (
    CorruptData,
    JsonFileLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)
from koinku.validation import TransactionValidationError, TransactionValidator


class EngineState(str, Enum):
    """Per-session engine lifecycle. There is no way back to LOADING."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class LedgerError(Exception):
    """Base exception for engine operations."""
    pass


class EngineNotReadyError(LedgerError):
    """An operation was called outside the state it is valid in."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerEngine:
    """
    Single source of truth for ledger state.

    GUARANTEES:
    - current_balance() always equals the fold of history()
    - Rejected input changes nothing
    - Saves reach storage in the order their records happened

    Not thread-safe: use one engine per event loop.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._storage = storage
        self._validator = validator or TransactionValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock or _utcnow

        self._state = EngineState.UNINITIALIZED
        self._transactions: tuple[Transaction, ...] = ()
        self._balance = 0.0
        self._last_id = 0

        # FIFO: the save for record N is always issued before the one for N+1
        self._save_lock = asyncio.Lock()

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is EngineState.READY

    def _require_ready(self, operation: str) -> None:
        if self._state is not EngineState.READY:
            raise EngineNotReadyError(
                f"{operation}() requires a ready ledger (state: {self._state.value})"
            )

    def _apply(self, transactions: Iterable[Transaction]) -> None:
        """Replace the sequence and re-derive the balance from it."""
        self._transactions = tuple(transactions)
        self._balance = compute_balance(self._transactions)

    async def initialize(self) -> Optional[LedgerNotice]:
        """
        Load the persisted log and become ready.

        Returns:
            None if the log was loaded, otherwise a notice explaining
            why the ledger started empty

        Raises:
            EngineNotReadyError: If called more than once
        """
        if self._state is not EngineState.UNINITIALIZED:
            raise EngineNotReadyError(
                f"initialize() may only run once (state: {self._state.value})"
            )

        self._state = EngineState.LOADING
        notice = None
        loaded: Sequence[Transaction] = []

        try:
            loaded = await self._storage.load()
        except CorruptData as e:
            notice = LedgerNotice(
                kind=NoticeKind.CORRUPT_DATA,
                message="Saved transactions could not be read. Starting with an empty ledger.",
                error_type=type(e).__name__,
            )
            self._audit_logger.log_ledger_load_failed(e)
        except StorageError as e:
            notice = LedgerNotice(
                kind=NoticeKind.STORAGE_UNAVAILABLE,
                message="Storage is unavailable. Starting with an empty ledger.",
                error_type=type(e).__name__,
            )
            self._audit_logger.log_ledger_load_failed(e)
        finally:
            # Ready even if an unexpected error escapes the store
            self._apply(loaded)
            self._last_id = max((t.id for t in self._transactions), default=0)
            self._state = EngineState.READY

        if notice is None:
            self._audit_logger.log_ledger_loaded(
                transaction_count=len(self._transactions),
                balance=self._balance,
            )
        return notice

    async def record(
        self,
        kind: Any,
        amount: Any,
        description: Any,
    ) -> RecordResult:
        """
        Validate input and record a new transaction as the newest entry.

        Args:
            kind: TransactionKind or 'income' / 'expense'
            amount: Raw amount, text or number
            description: Raw description text

        Returns:
            The recorded transaction, plus a notice if it could not be saved

        Raises:
            TransactionValidationError: If input is invalid (nothing changes)
            EngineNotReadyError: If called before initialize() finished
        """
        self._require_ready("record")

        try:
            validated = self._validator.validate(kind, amount, description)
        except TransactionValidationError as e:
            self._audit_logger.log_validation_failed(
                [issue.model_dump() for issue in e.issues]
            )
            raise

        now = self._clock()
        transaction = Transaction(
            id=max(int(now.timestamp() * 1000), self._last_id + 1),
            kind=validated.kind,
            amount=validated.amount,
            description=validated.description,
            timestamp=now,
        )

        # No await between here and the save being queued
        self._last_id = transaction.id
        self._apply((transaction,) + self._transactions)
        snapshot = self._transactions

        self._audit_logger.log_transaction_recorded(
            transaction_id=transaction.id,
            kind=transaction.kind.value,
            amount=transaction.amount,
            balance=self._balance,
        )

        notice = await self._persist(snapshot, transaction.id)
        return RecordResult(transaction=transaction, notice=notice)

    async def _persist(
        self,
        transactions: tuple[Transaction, ...],
        transaction_id: int,
    ) -> Optional[LedgerNotice]:
        """Save one snapshot of the log, in record order."""
        async with self._save_lock:
            try:
                await self._storage.save(transactions)
            except StorageError as e:
                self._audit_logger.log_save_failed(
                    transaction_count=len(transactions),
                    error=e,
                    transaction_id=transaction_id,
                )
                return LedgerNotice(
                    kind=NoticeKind.STORAGE_WRITE_FAILED,
                    message=(
                        "Transaction recorded, but saving it could not be confirmed. "
                        "It may be lost if the app closes."
                    ),
                    error_type=type(e).__name__,
                )

        self._audit_logger.log_ledger_saved(transaction_count=len(transactions))
        return None

    def current_balance(self) -> float:
        """Balance derived from the current history."""
        self._require_ready("current_balance")
        return self._balance

    def history(self) -> tuple[Transaction, ...]:
        """Transactions, newest first."""
        self._require_ready("history")
        return self._transactions

    def snapshot(self) -> LedgerSnapshot:
        """Balance, history and totals at this instant."""
        self._require_ready("snapshot")
        return LedgerSnapshot.from_transactions(self._transactions)

    def display(self, settings: Optional[LedgerSettings] = None) -> dict:
        """Snapshot rendered with the configured display formats."""
        settings = settings or get_settings().ledger
        return self.snapshot().to_display_dict(
            timestamp_format=settings.timestamp_format,
            currency_label=settings.currency_label,
        )

    def verify_balance(self) -> bool:
        """
        Re-run the full fold and compare it with the derived balance.

        A False here means something changed the sequence without going
        through record(); that is a bug.
        """
        self._require_ready("verify_balance")
        return compute_balance(self._transactions) == self._balance


def create_ledger_engine(
    storage: Optional[LedgerStorageInterface] = None,
    settings: Optional[Settings] = None,
) -> LedgerEngine:
    """
    Factory function to wire up a ledger engine.

    Args:
        storage: Storage backend. Defaults to the JSON file store
                 at the configured location.
        settings: Settings to use. Defaults to the cached settings.

    Returns:
        An uninitialized engine; call initialize() before use
    """
    settings = settings or get_settings()
    ledger_settings = settings.ledger

    configure_logging(settings.app.log_level)

    if storage is None:
        storage = JsonFileLedgerStorage(
            path=ledger_settings.storage_path,
            timeout=ledger_settings.io_timeout_seconds,
        )

    return LedgerEngine(
        storage=storage,
        validator=TransactionValidator(ledger_settings.max_description_length),
        audit_logger=AuditLogger(),
    )
