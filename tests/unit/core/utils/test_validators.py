"""Tests for input validators and output formatting."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.errors import ErrorKind, ServiceError
from core.utils.formatting import format_datetime, format_day, format_decimal
from core.utils.validators import (
    MAX_MESSAGE_LENGTH,
    optional_amount,
    optional_days,
    parse_decimal,
    require_positive_amount,
    require_text,
    validate_address,
    validate_email,
)


def _message(callable_, *args, **kwargs) -> str:
    with pytest.raises(ServiceError) as exc_info:
        callable_(*args, **kwargs)
    assert exc_info.value.kind == ErrorKind.VALIDATION_FAILED
    return exc_info.value.message


class TestRequireText:
    def test_trims(self):
        assert require_text("text", "  hello \n") == "hello"

    @pytest.mark.parametrize("value", [None, "", "   ", "\n\t"])
    def test_blank_is_required(self, value):
        assert _message(require_text, "text", value) == "text: is required"

    def test_limit_counts_code_points(self):
        """Multi-byte characters count once."""
        text = "я" * MAX_MESSAGE_LENGTH
        assert require_text("text", text, max_length=MAX_MESSAGE_LENGTH) == text

    def test_too_long(self):
        text = "a" * (MAX_MESSAGE_LENGTH + 1)
        assert _message(require_text, "text", text, max_length=MAX_MESSAGE_LENGTH) == (
            "text: is too long"
        )


class TestAmounts:
    def test_parse(self):
        assert parse_decimal("price", "100.20") == Decimal("100.20")
        assert parse_decimal("price", None) == Decimal("0")

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity"])
    def test_parse_invalid(self, value):
        assert _message(parse_decimal, "price", value) == "price: invalid format"

    def test_positive_amount(self):
        assert require_positive_amount("price", Decimal("0.5")) == Decimal("0.5")

    def test_zero_amount_is_required(self):
        assert _message(require_positive_amount, "price", Decimal("0")) == "price: is required"

    def test_negative_amount(self):
        assert _message(require_positive_amount, "price", Decimal("-1")) == (
            "price: must be positive"
        )

    def test_optional_amount(self):
        assert optional_amount("budget", Decimal("0")) is None
        assert optional_amount("budget", None) is None
        assert optional_amount("budget", Decimal("3")) == Decimal("3")
        assert _message(optional_amount, "budget", Decimal("-3")) == "budget: must be positive"

    def test_optional_days(self):
        assert optional_days("duration", None) is None
        assert optional_days("duration", 0) is None
        assert optional_days("duration", 7) == 7
        assert _message(optional_days, "duration", -1) == "duration: must not be negative"


class TestAddress:
    def test_lowercases(self):
        assert validate_address("a", "0xAB8722B889D231D62C9EB35EB1B557926F3B3289") == (
            "0xab8722b889d231d62c9eb35eb1b557926f3b3289"
        )

    def test_required(self):
        assert _message(validate_address, "contract_address", "") == (
            "contract_address: is required"
        )

    def test_optional_blank(self):
        assert validate_address("ethereum_address", "  ", required=False) == ""

    def test_invalid(self):
        assert _message(validate_address, "ethereum_address", "0x123") == (
            "ethereum_address: invalid format"
        )


class TestEmail:
    def test_lowercases(self):
        assert validate_email("email", "John.Doe@Example.com") == "john.doe@example.com"

    def test_blank_allowed(self):
        assert validate_email("email", None) == ""

    def test_invalid(self):
        assert _message(validate_email, "email", "not-an-email") == "email: invalid format"


class TestFormatting:
    @pytest.mark.parametrize("value,expected", [
        (Decimal("100.200"), "100.2"),
        (Decimal("1E+2"), "100"),
        (Decimal("0.000000000000000001"), "0.000000000000000001"),
        (Decimal("0E-18"), "0"),
        (None, None),
    ])
    def test_format_decimal(self, value, expected):
        assert format_decimal(value) == expected

    def test_naive_datetime_is_utc(self):
        assert format_datetime(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05+00:00"

    def test_day_uses_utc(self):
        moment = datetime(2024, 1, 2, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert format_day(moment) == "2024-01-01"
