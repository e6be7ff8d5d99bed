"""
Core Data Models for Koinku

These models define the strict schemas for all data flowing through the ledger.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging
4. Keep the balance derivable from the transaction log alone

DESIGN DECISION: Transactions are frozen Pydantic models.
Once recorded, a transaction is never edited or deleted, so the model
refuses attribute assignment outright.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# Version written into every persisted document.
# Bump when the record layout changes; older versions must stay loadable.
SCHEMA_VERSION = 1

# Documents written before versioning existed are a bare list of records.
LEGACY_SCHEMA_VERSION = 0


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """
    Direction of a transaction.

    DESIGN DECISION: The sign lives here, not in the amount.
    Amounts are always positive; the kind decides whether they add or subtract.
    """
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def sign(self) -> str:
        return "+" if self is TransactionKind.INCOME else "-"


class NoticeKind(str, Enum):
    """Non-fatal conditions the engine reports back to its caller."""
    STORAGE_UNAVAILABLE = "storage_unavailable"  # load could not read the medium
    CORRUPT_DATA = "corrupt_data"                # load found malformed content
    STORAGE_WRITE_FAILED = "storage_write_failed"  # save failed, durability unconfirmed


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    One recorded income or expense event.

    CRITICAL: Transactions are immutable once created.
    Only the ledger engine creates them, exactly once per record call.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(
        ...,
        ge=1,
        description="Unique, strictly increasing identifier"
    )
    kind: TransactionKind = Field(
        ...,
        description="Income or expense"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive amount in the ledger's single currency"
    )
    description: str = Field(
        ...,
        min_length=1,
        description="What the money was for"
    )
    timestamp: datetime = Field(
        ...,
        description="When the transaction was recorded (UTC)"
    )

    @field_validator('timestamp')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def signed_amount(self) -> float:
        """Contribution of this transaction to the balance."""
        if self.kind is TransactionKind.INCOME:
            return self.amount
        return -self.amount

    @property
    def display_amount(self) -> str:
        """Amount paired with its +/- indicator, e.g. '+100000' or '-25.5'."""
        return f"{self.kind.sign}{format_amount(self.amount)}"

    def display_timestamp(self, fmt: str = "%d/%m/%Y %H:%M:%S") -> str:
        """Human-readable timestamp in local time."""
        return self.timestamp.astimezone().strftime(fmt)

    def to_display_dict(self, timestamp_format: str = "%d/%m/%Y %H:%M:%S") -> dict:
        """
        Convert to what a history list row needs to render.
        """
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.display_amount,
            "timestamp": self.display_timestamp(timestamp_format),
        }

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "transaction_id": self.id,
            "kind": self.kind.value,
            "amount": self.amount,
            "timestamp": self.timestamp.isoformat(),
        }


def format_amount(amount: float) -> str:
    """Render whole amounts without a trailing '.0'."""
    if amount.is_integer():
        return str(int(amount))
    return repr(amount)


def compute_balance(transactions: Iterable[Transaction]) -> float:
    """
    Fold a transaction sequence into its balance.

    Income adds, expense subtracts. Iterates in the order given, which for
    the ledger is history order (newest first).
    """
    total = 0.0
    for transaction in transactions:
        if transaction.kind is TransactionKind.INCOME:
            total += transaction.amount
        else:
            total -= transaction.amount
    return total


# =============================================================================
# PERSISTED DOCUMENT
# =============================================================================

# Shapes of `toLocaleString()` output seen in unversioned records.
# Day-first formats are tried before month-first.
LEGACY_DATE_FORMATS = (
    "%d/%m/%Y, %H.%M.%S",     # id-ID
    "%d/%m/%Y, %H:%M:%S",     # en-GB
    "%m/%d/%Y, %I:%M:%S %p",  # en-US
    "%d.%m.%Y, %H:%M:%S",     # de-DE
    "%Y/%m/%d %H:%M:%S",      # ja-JP
)


def parse_legacy_date(value: str) -> Optional[datetime]:
    """
    Parse a locale-formatted date string as local time.

    Returns None if no known format matches.
    """
    for fmt in LEGACY_DATE_FORMATS:
        try:
            parsed = datetime.strptime(value.replace("\u202f", " ").strip(), fmt)
        except ValueError:
            continue
        return parsed.astimezone(timezone.utc)
    return None


def upgrade_legacy_record(record: Any) -> Any:
    """
    Map an unversioned record onto the current field names.

    Unversioned records look like
    {"id", "type", "amount", "description", "date"}, where `date` is a
    locale string without a zone and `id` is the creation time in epoch
    milliseconds. `type` becomes `kind`; `date` becomes `timestamp`, falling
    back to the id when the date can't be parsed.

    Records already in the current shape pass through unchanged.
    """
    if not isinstance(record, dict):
        return record

    upgraded = dict(record)
    if "kind" not in upgraded and "type" in upgraded:
        upgraded["kind"] = upgraded.pop("type")

    if "timestamp" not in upgraded:
        date = upgraded.pop("date", None)
        timestamp = parse_legacy_date(date) if isinstance(date, str) else None
        if timestamp is None and isinstance(upgraded.get("id"), (int, float)):
            try:
                timestamp = datetime.fromtimestamp(upgraded["id"] / 1000, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                timestamp = None
        if timestamp is not None:
            upgraded["timestamp"] = timestamp

    return upgraded


class LedgerDocument(BaseModel):
    """
    The blob stored under the ledger's well-known key.

    Fields are named, never positional, so records can gain fields later
    without breaking older readers.
    """

    schema_version: int = Field(
        default=SCHEMA_VERSION,
        ge=LEGACY_SCHEMA_VERSION,
        description="Layout version of this document"
    )
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Transactions, newest first"
    )

    @field_validator('schema_version')
    @classmethod
    def reject_future_versions(cls, v: int) -> int:
        """A newer writer may have changed semantics we can't see."""
        if v > SCHEMA_VERSION:
            raise ValueError(
                f"Unsupported schema version {v} (newest known: {SCHEMA_VERSION})"
            )
        return v

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'LedgerDocument':
        """Ids must be unique across the whole log."""
        seen = set()
        for transaction in self.transactions:
            if transaction.id in seen:
                raise ValueError(f"Duplicate transaction id: {transaction.id}")
            seen.add(transaction.id)
        return self

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)

    @classmethod
    def from_json(cls, blob: str) -> 'LedgerDocument':
        """
        Parse a stored blob.

        Accepts both the versioned object form and the unversioned bare list
        written by the first version of the app.

        Raises:
            ValueError: If the blob is not valid JSON or fails validation
                        (pydantic's ValidationError is a ValueError)
        """
        try:
            data = json.loads(blob)
        except RecursionError as e:
            raise ValueError("Ledger document is nested too deeply") from e

        if isinstance(data, list):
            data = {
                "schema_version": LEGACY_SCHEMA_VERSION,
                "transactions": [upgrade_legacy_record(r) for r in data],
            }
        if not isinstance(data, dict):
            raise ValueError(
                f"Ledger document must be an object or list, got {type(data).__name__}"
            )
        return cls.model_validate(data)


# =============================================================================
# ENGINE RESULTS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem with user input."""

    field: str = Field(
        ...,
        description="Input field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class LedgerNotice(BaseModel):
    """
    A non-fatal condition to show the user.

    The engine stays usable; the notice only tells the caller
    that data is missing or not yet durable.
    """

    kind: NoticeKind
    message: str
    error_type: Optional[str] = Field(
        default=None,
        description="Class name of the underlying storage error"
    )


class RecordResult(BaseModel):
    """Outcome of a successful record call."""

    transaction: Transaction
    notice: Optional[LedgerNotice] = None

    @property
    def durable(self) -> bool:
        """Was the updated log persisted?"""
        return self.notice is None


class LedgerSnapshot(BaseModel):
    """
    Read model of the ledger at one instant.

    This is what a view renders: the balance and the history,
    plus per-direction totals.
    """
    model_config = ConfigDict(frozen=True)

    balance: float
    transactions: tuple[Transaction, ...] = ()
    income_total: float = 0.0
    expense_total: float = 0.0

    @classmethod
    def from_transactions(cls, transactions: tuple[Transaction, ...]) -> 'LedgerSnapshot':
        income = sum(t.amount for t in transactions if t.kind is TransactionKind.INCOME)
        expense = sum(t.amount for t in transactions if t.kind is TransactionKind.EXPENSE)
        return cls(
            balance=compute_balance(transactions),
            transactions=transactions,
            income_total=income,
            expense_total=expense,
        )

    @property
    def is_empty(self) -> bool:
        return not self.transactions

    def to_display_dict(
        self,
        timestamp_format: str = "%d/%m/%Y %H:%M:%S",
        currency_label: str = "Rp",
    ) -> dict:
        """
        Convert to what a ledger screen needs: one balance line
        and the history rows, newest first.
        """
        return {
            "balance": f"{currency_label} {format_amount(self.balance)}",
            "transactions": [
                t.to_display_dict(timestamp_format) for t in self.transactions
            ],
        }
