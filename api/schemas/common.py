"""Common Pydantic schemas shared across the API."""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Optional
from pydantic import BaseModel, Field


T = TypeVar("T")


@dataclass(frozen=True)
class FieldUpdate(Generic[T]):
    """
    A value in a partial update together with whether it was sent at all.

    `FieldUpdate()` means "leave the field alone"; `FieldUpdate(True, None)`
    means "the client sent null".
    """

    present: bool = False
    value: Optional[T] = None

    @classmethod
    def of(cls, value: T) -> "FieldUpdate[T]":
        return cls(True, value)


UNCHANGED: FieldUpdate[Any] = FieldUpdate()


class PatchRequest(BaseModel):
    """Base for request bodies where omitted fields must stay untouched."""

    def field_update(self, name: str) -> FieldUpdate:
        if name in self.model_fields_set:
            return FieldUpdate.of(getattr(self, name))
        return UNCHANGED


class ErrorResponse(BaseModel):
    """Error response model."""

    message: str = Field(description="Human readable error message")
    tech_info: Optional[str] = Field(None, description="Technical details for diagnostics")
