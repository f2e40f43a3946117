"""
Service error taxonomy.

Every failure a service reports is a ServiceError tagged with an ErrorKind.
The HTTP layer turns the kind into a status code through STATUS_BY_KIND and
nothing else, so there is a single place where the mapping lives.
"""

from enum import Enum
from typing import Optional

from fastapi import status


class ErrorKind(str, Enum):
    """Kinds of failures reported by services."""
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    UNAUTHORIZED = "unauthorized"
    INSUFFICIENT_RIGHTS = "insufficient_rights"
    DUPLICATION = "duplication"
    APPLICATION_ALREADY_EXISTS = "application_already_exists"
    INAPPROPRIATE_ACTION = "inappropriate_action"
    INVALID_FORMAT = "invalid_format"
    INSUFFICIENT_FUNDS = "insufficient_funds"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INSUFFICIENT_RIGHTS: status.HTTP_403_FORBIDDEN,
    ErrorKind.DUPLICATION: status.HTTP_409_CONFLICT,
    ErrorKind.APPLICATION_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.INAPPROPRIATE_ACTION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_FORMAT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INSUFFICIENT_FUNDS: status.HTTP_422_UNPROCESSABLE_ENTITY,
}

DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NOT_FOUND: "entity not found",
    ErrorKind.VALIDATION_FAILED: "validation failed",
    ErrorKind.UNAUTHORIZED: "Authorization required",
    ErrorKind.INSUFFICIENT_RIGHTS: "insufficient rights",
    ErrorKind.DUPLICATION: "duplication",
    ErrorKind.APPLICATION_ALREADY_EXISTS: "application already exists",
    ErrorKind.INAPPROPRIATE_ACTION: "inappropriate action",
    ErrorKind.INVALID_FORMAT: "invalid format",
    ErrorKind.INSUFFICIENT_FUNDS: "the contract does not have sufficient funds",
}


class ServiceError(Exception):
    """A classified failure carrying a client-facing message."""

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        tech_info: Optional[str] = None,
    ):
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        self.tech_info = tech_info
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict[str, str]:
        body = {"message": self.message}
        if self.tech_info:
            body["tech_info"] = self.tech_info
        return body

    def __repr__(self) -> str:
        return f"ServiceError({self.kind.value!r}, {self.message!r})"


# ==================== Shorthands ===================== #

def not_found(message: Optional[str] = None) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, message)


def unauthorized(message: Optional[str] = None) -> ServiceError:
    return ServiceError(ErrorKind.UNAUTHORIZED, message)


def insufficient_rights(message: Optional[str] = None) -> ServiceError:
    return ServiceError(ErrorKind.INSUFFICIENT_RIGHTS, message)


def inappropriate_action(message: Optional[str] = None) -> ServiceError:
    return ServiceError(ErrorKind.INAPPROPRIATE_ACTION, message)


def duplication(message: str, tech_info: Optional[str] = None) -> ServiceError:
    return ServiceError(ErrorKind.DUPLICATION, message, tech_info)


def validation_failed(message: str) -> ServiceError:
    return ServiceError(ErrorKind.VALIDATION_FAILED, message)


def field_required(field: str) -> ServiceError:
    return validation_failed(f"{field}: is required")


def field_must_be_positive(field: str) -> ServiceError:
    return validation_failed(f"{field}: must be positive")


def field_must_not_be_negative(field: str) -> ServiceError:
    return validation_failed(f"{field}: must not be negative")


def field_too_long(field: str) -> ServiceError:
    return validation_failed(f"{field}: is too long")


def field_invalid_format(field: str) -> ServiceError:
    return validation_failed(f"{field}: invalid format")
