"""Request schemas for authentication and person management."""

from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, Field

from api.schemas.common import FieldUpdate, PatchRequest, UNCHANGED


class SignupRequest(BaseModel):
    login: Optional[str] = Field(None, description="Login, defaults to the generated person id")
    password: Optional[str] = Field(None, description="Password")
    display_name: Optional[str] = Field(None, description="Name shown to other people")
    email: Optional[str] = Field(None, description="Contact email")
    ethereum_address: Optional[str] = Field(None, description="Wallet address")


class LoginRequest(BaseModel):
    login: Optional[str] = None
    password: Optional[str] = None


class PasswordUpdateRequest(BaseModel):
    old_password: Optional[str] = None
    new_password: Optional[str] = None


class PersonCreateRequest(SignupRequest):
    """Administrative person creation."""
    is_admin: bool = False


class PersonPatchRequest(PatchRequest):
    ethereum_address: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None

    def to_patch(self) -> "PersonPatch":
        return PersonPatch(
            ethereum_address=self.field_update("ethereum_address"),
            display_name=self.field_update("display_name"),
            email=self.field_update("email"),
        )


@dataclass(frozen=True)
class PersonPatch:
    ethereum_address: FieldUpdate[str] = UNCHANGED
    display_name: FieldUpdate[str] = UNCHANGED
    email: FieldUpdate[str] = UNCHANGED

