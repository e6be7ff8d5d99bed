"""Audit logging package."""

from koinku.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
