"""Request schemas for applications."""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class CreateApplicationRequest(BaseModel):
    """Request model for applying to a job."""
    comment: Optional[str] = Field(None, description="Cover letter, becomes the first chat message")
    price: Optional[Decimal] = Field(None, description="Proposed price")
