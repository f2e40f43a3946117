"""
Security primitives: password hashing, identifiers and address checks.
"""

import re
import secrets
from typing import Optional

import bcrypt

# Realm of self-service accounts created through signup
INHOUSE_REALM = "inhouse"

ETHEREUM_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

_ID_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_ID_LENGTH = 22


def new_id() -> str:
    """Generate a random 22 character identifier."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def hash_password(password: str) -> str:
    """
    Hash a password with a fresh bcrypt salt.

    Args:
        password: Plain text password

    Returns:
        bcrypt hash as text
    """
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Compare a password with a stored hash in constant time."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def is_ethereum_address(value: Optional[str]) -> bool:
    return bool(value) and ETHEREUM_ADDRESS_PATTERN.match(value) is not None


def normalize_address(value: Optional[str]) -> str:
    """Trimmed lowercase form of a blockchain address ("" when unset)."""
    return (value or "").strip().lower()
