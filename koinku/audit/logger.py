"""
Audit Logger

DESIGN DECISION: Every ledger mutation and storage failure is logged.
This provides:
1. Traceability of recorded transactions
2. Debugging capability when persistence fails
3. A durable-failure signal that doesn't depend on the UI showing it

The audit logger:
- Writes structured JSON lines via structlog
- Routes events to a log level matching their severity
- Never raises into the engine
"""

import logging
from typing import Optional

import structlog

from koinku.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route structlog output through the stdlib root logger.

    structlog's level filter defers to the stdlib logger,
    so without this only warnings and above would be emitted.
    """
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger("koinku").setLevel(level)


class AuditLogger:
    """
    Central audit logging service for the ledger engine.
    """

    _LEVELS = {
        AuditSeverity.DEBUG: "debug",
        AuditSeverity.INFO: "info",
        AuditSeverity.WARNING: "warning",
        AuditSeverity.ERROR: "error",
        AuditSeverity.CRITICAL: "critical",
    }

    def __init__(self, logger_name: str = "koinku.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """
        Log an audit event at the level matching its severity.

        A failing log sink is reported on the stdlib logger and
        never propagates to the caller.
        """
        try:
            method = getattr(self._logger, self._LEVELS[event.severity])
            method("audit_event", **event.to_log_dict())
        except Exception:
            # stdlib handlers report their own errors instead of raising
            logging.getLogger("koinku.audit").exception(
                "audit_log_failed event_type=%s event_id=%s",
                event.event_type.value,
                event.event_id,
            )

    def log_ledger_loaded(self, transaction_count: int, balance: float) -> None:
        """Log a successful startup load."""
        self.log(AuditEventBuilder.ledger_loaded(
            transaction_count=transaction_count,
            balance=balance,
        ))

    def log_ledger_load_failed(self, error: Exception) -> None:
        """Log a failed startup load."""
        self.log(AuditEventBuilder.ledger_load_failed(
            error_type=type(error).__name__,
            error_message=str(error),
        ))

    def log_validation_failed(self, issues: list[dict]) -> None:
        """Log rejected user input."""
        self.log(AuditEventBuilder.validation_failed(issues=issues))

    def log_transaction_recorded(
        self,
        transaction_id: int,
        kind: str,
        amount: float,
        balance: float,
    ) -> None:
        """Log a recorded transaction."""
        self.log(AuditEventBuilder.transaction_recorded(
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
            balance=balance,
        ))

    def log_ledger_saved(self, transaction_count: int) -> None:
        """Log a successful save."""
        self.log(AuditEventBuilder.ledger_saved(transaction_count=transaction_count))

    def log_save_failed(
        self,
        transaction_count: int,
        error: Exception,
        transaction_id: Optional[int] = None,
    ) -> None:
        """Log a failed save."""
        self.log(AuditEventBuilder.save_failed(
            transaction_count=transaction_count,
            error_type=type(error).__name__,
            error_message=str(error),
            transaction_id=transaction_id,
        ))
