"""
Transaction Input Validation

DESIGN DECISION: The presentation layer forwards raw field values untouched.
All parsing and checking happens here, so every front end gets the same
rules and the same error messages.

Checks:
- Kind is one of income/expense
- Amount parses to a finite number greater than zero
- Description is non-empty after trimming, and not absurdly long

IMPORTANT: Validation NEVER silently fixes issues.
Every problem is collected and reported together, so the user can correct
all fields in one pass.
"""

import math
from decimal import Decimal
from typing import Any, NamedTuple, Optional, Union

from koinku.config import get_settings
from koinku.models.ledger import TransactionKind, ValidationIssue


class TransactionValidationError(ValueError):
    """
    User input was rejected.

    Carries every issue found, one per failing field.
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        summary = "; ".join(f"{i.field}: {i.message}" for i in issues)
        super().__init__(f"Invalid transaction input ({summary})")

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]


class ValidatedInput(NamedTuple):
    """Input that passed every check, in canonical types."""
    kind: TransactionKind
    amount: float
    description: str


class TransactionValidator:
    """
    Validates raw record() input.
    """

    def __init__(self, max_description_length: Optional[int] = None):
        """
        Initialize validator.

        Args:
            max_description_length: Longest accepted description.
                                    Defaults to the configured value.
        """
        if max_description_length is None:
            max_description_length = get_settings().ledger.max_description_length
        self._max_description_length = max_description_length

    def _check_kind(
        self,
        raw: Union[TransactionKind, str, Any],
    ) -> tuple[Optional[TransactionKind], Optional[ValidationIssue]]:
        if isinstance(raw, TransactionKind):
            return raw, None
        if isinstance(raw, str):
            try:
                return TransactionKind(raw.strip().lower()), None
            except ValueError:
                pass
        return None, ValidationIssue(
            field="kind",
            issue_type="invalid_value",
            message=f"Kind must be 'income' or 'expense', got {raw!r}",
        )

    def _check_amount(
        self,
        raw: Any,
    ) -> tuple[Optional[float], Optional[ValidationIssue]]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None, ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
            )

        # bool is an int subclass; True is not an amount
        if isinstance(raw, bool) or not isinstance(raw, (str, int, float, Decimal)):
            return None, ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount must be a number, got {type(raw).__name__}",
            )

        try:
            value = float(raw.strip() if isinstance(raw, str) else raw)
        except (ValueError, OverflowError):
            return None, ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount is not a number: {raw!r}",
            )

        if not math.isfinite(value):
            return None, ValidationIssue(
                field="amount",
                issue_type="not_finite",
                message="Amount must be a finite number",
            )

        if value <= 0:
            return None, ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message="Amount must be greater than zero",
            )

        return value, None

    def _check_description(
        self,
        raw: Any,
    ) -> tuple[Optional[str], Optional[ValidationIssue]]:
        text = raw.strip() if isinstance(raw, str) else ""
        if not text:
            return None, ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
            )

        if len(text) > self._max_description_length:
            return None, ValidationIssue(
                field="description",
                issue_type="too_long",
                message=(
                    f"Description is {len(text)} characters; "
                    f"the limit is {self._max_description_length}"
                ),
            )

        return text, None

    def parse_kind(self, raw: Any) -> TransactionKind:
        kind, issue = self._check_kind(raw)
        if issue:
            raise TransactionValidationError([issue])
        return kind

    def parse_amount(self, raw: Any) -> float:
        amount, issue = self._check_amount(raw)
        if issue:
            raise TransactionValidationError([issue])
        return amount

    def normalize_description(self, raw: Any) -> str:
        description, issue = self._check_description(raw)
        if issue:
            raise TransactionValidationError([issue])
        return description

    def validate(self, kind: Any, amount: Any, description: Any) -> ValidatedInput:
        """
        Check all three fields, collecting every issue.

        Raises:
            TransactionValidationError: If any field is invalid
        """
        parsed_kind, kind_issue = self._check_kind(kind)
        parsed_amount, amount_issue = self._check_amount(amount)
        parsed_description, description_issue = self._check_description(description)

        issues = [i for i in (kind_issue, amount_issue, description_issue) if i]
        if issues:
            raise TransactionValidationError(issues)

        return ValidatedInput(parsed_kind, parsed_amount, parsed_description)

    def get_user_friendly_summary(self, error: TransactionValidationError) -> str:
        """
        Turn a validation error into a short message for an alert dialog.
        """
        lines = ["Please check your input:"]
        for issue in error.issues:
            lines.append(f"• {issue.message}")
        return "\n".join(lines)
