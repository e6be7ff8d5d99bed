"""Input validation package."""

from koinku.validation.validator import (
    TransactionValidationError,
    TransactionValidator,
    ValidatedInput,
)

__all__ = ["TransactionValidationError", "TransactionValidator", "ValidatedInput"]
