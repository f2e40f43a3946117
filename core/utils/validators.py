"""Validation utilities for request fields.

Each helper returns the cleaned value or raises a field-scoped
validation ServiceError.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from email_validator import validate_email as _validate_email, EmailNotValidError

from core.errors import (
    field_invalid_format,
    field_must_be_positive,
    field_must_not_be_negative,
    field_required,
    field_too_long,
)
from core.security import is_ethereum_address, normalize_address

MAX_MESSAGE_LENGTH = 4096


def require_text(field: str, value: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Trim a text field and make sure something is left.

    Args:
        field: Field name used in the error message
        value: Raw value
        max_length: Upper bound in code points

    Returns:
        Trimmed text
    """
    text = (value or "").strip()
    if not text:
        raise field_required(field)
    if max_length is not None and len(text) > max_length:
        raise field_too_long(field)
    return text


def parse_decimal(field: str, value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise field_invalid_format(field)
    if not result.is_finite():
        raise field_invalid_format(field)
    return result


def require_positive_amount(field: str, value: Any) -> Decimal:
    """Amount that must be given and greater than zero."""
    amount = parse_decimal(field, value)
    if amount == 0:
        raise field_required(field)
    if amount < 0:
        raise field_must_be_positive(field)
    return amount


def optional_amount(field: str, value: Any) -> Optional[Decimal]:
    """Amount where zero means "not set"."""
    amount = parse_decimal(field, value)
    if amount < 0:
        raise field_must_be_positive(field)
    return amount if amount != 0 else None


def optional_days(field: str, value: Optional[int]) -> Optional[int]:
    """Duration in days where zero means "not set"."""
    if value is None:
        return None
    if value < 0:
        raise field_must_not_be_negative(field)
    return value or None


def validate_address(field: str, value: Optional[str], required: bool = True) -> str:
    """
    Check a blockchain address and return it lowercased.

    Empty input is allowed when `required` is False and yields "".
    """
    address = (value or "").strip()
    if not address:
        if required:
            raise field_required(field)
        return ""
    if not is_ethereum_address(address):
        raise field_invalid_format(field)
    return normalize_address(address)


def validate_email(field: str, value: Optional[str]) -> str:
    """
    Validate email address format.

    Args:
        field: Field name used in the error message
        value: Email address to validate ("" is accepted)

    Returns:
        Lowercased address
    """
    email = (value or "").strip()
    if not email:
        return ""
    try:
        _validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise field_invalid_format(field)
    return email.lower()
