"""Tests for transaction input validation."""

from decimal import Decimal

import pytest

from koinku.models.ledger import TransactionKind
from koinku.validation import TransactionValidationError, TransactionValidator


@pytest.fixture
def validator():
    return TransactionValidator(max_description_length=20)


class TestAmountParsing:
    """Tests for raw amount input."""

    @pytest.mark.parametrize("raw, expected", [
        ("100000", 100000.0),
        ("  12.5 ", 12.5),
        (7, 7.0),
        (0.25, 0.25),
        (Decimal("3.10"), 3.1),
    ])
    def test_valid_amounts(self, validator, raw, expected):
        assert validator.parse_amount(raw) == expected

    @pytest.mark.parametrize("raw, issue_type", [
        ("abc", "invalid_format"),
        ("12abc", "invalid_format"),
        ("", "missing"),
        ("   ", "missing"),
        (None, "missing"),
        (True, "invalid_format"),
        ([5], "invalid_format"),
        ("inf", "not_finite"),
        ("nan", "not_finite"),
        ("1e400", "not_finite"),
        ("0", "not_positive"),
        (-5, "not_positive"),
    ])
    def test_invalid_amounts(self, validator, raw, issue_type):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.parse_amount(raw)
        assert exc_info.value.issues[0].field == "amount"
        assert exc_info.value.issues[0].issue_type == issue_type


class TestDescription:
    """Tests for description input."""

    def test_description_is_trimmed(self, validator):
        assert validator.normalize_description("  Food  ") == "Food"

    def test_blank_description_rejected(self, validator):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.normalize_description(" \t ")
        assert exc_info.value.issues[0].issue_type == "missing"

    def test_long_description_rejected(self, validator):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.normalize_description("x" * 21)
        assert exc_info.value.issues[0].issue_type == "too_long"

    def test_description_length_defaults_to_settings(self, monkeypatch):
        """Test that the limit comes from configuration when not given."""
        from koinku.config import get_settings

        monkeypatch.setenv("KOINKU_MAX_DESCRIPTION_LENGTH", "5")
        get_settings.cache_clear()
        with pytest.raises(TransactionValidationError):
            TransactionValidator().normalize_description("too long")


class TestKind:
    """Tests for the income/expense selector."""

    def test_enum_passes_through(self, validator):
        assert validator.parse_kind(TransactionKind.EXPENSE) is TransactionKind.EXPENSE

    def test_string_values_accepted(self, validator):
        assert validator.parse_kind("income") is TransactionKind.INCOME
        assert validator.parse_kind(" Expense ") is TransactionKind.EXPENSE

    def test_unknown_kind_rejected(self, validator):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.parse_kind("transfer")
        assert exc_info.value.issues[0].field == "kind"


class TestValidate:
    """Tests for whole-input validation."""

    def test_valid_input(self, validator):
        result = validator.validate("income", "100000", " Salary ")
        assert result.kind is TransactionKind.INCOME
        assert result.amount == 100000.0
        assert result.description == "Salary"

    def test_all_issues_collected(self, validator):
        """Test that every failing field is reported at once."""
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.validate("gift", "abc", "")
        assert exc_info.value.fields == ["kind", "amount", "description"]

    def test_error_is_a_value_error(self, validator):
        with pytest.raises(ValueError):
            validator.validate(TransactionKind.INCOME, "-1", "x")

    def test_user_friendly_summary(self, validator):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.validate(TransactionKind.INCOME, "", "")
        summary = validator.get_user_friendly_summary(exc_info.value)
        assert summary.startswith("Please check your input:")
        assert "Amount is required" in summary
        assert "Description is required" in summary
