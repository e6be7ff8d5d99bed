"""
Data Models Package

This package contains all Pydantic models used by the Koinku ledger.
All data flowing through the system must conform to these schemas.
"""

from koinku.models.ledger import (
    LEGACY_SCHEMA_VERSION,
    SCHEMA_VERSION,
    LedgerDocument,
    LedgerNotice,
    LedgerSnapshot,
    NoticeKind,
    RecordResult,
    Transaction,
    TransactionKind,
    ValidationIssue,
    compute_balance,
    format_amount,
)
from koinku.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "LEGACY_SCHEMA_VERSION",
    "SCHEMA_VERSION",
    "LedgerDocument",
    "LedgerNotice",
    "LedgerSnapshot",
    "NoticeKind",
    "RecordResult",
    "Transaction",
    "TransactionKind",
    "ValidationIssue",
    "compute_balance",
    "format_amount",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
