"""Request schemas for jobs."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from api.schemas.common import FieldUpdate, PatchRequest, UNCHANGED


class CreateJobRequest(BaseModel):
    """Request model for creating a new job."""
    title: Optional[str] = Field(None, description="Job title")
    description: Optional[str] = Field(None, description="What has to be done")
    budget: Optional[Decimal] = Field(None, description="Budget, zero or absent means not specified")
    duration: Optional[int] = Field(None, description="Expected duration in days")


class UpdateJobRequest(PatchRequest):
    """Request model for updating a job. Omitted fields stay as they are."""
    title: Optional[str] = None
    description: Optional[str] = None
    budget: Optional[Decimal] = None
    duration: Optional[int] = None

    def to_patch(self) -> "JobPatch":
        return JobPatch(
            title=self.field_update("title"),
            description=self.field_update("description"),
            budget=self.field_update("budget"),
            duration=self.field_update("duration"),
        )


@dataclass(frozen=True)
class JobPatch:
    title: FieldUpdate[str] = UNCHANGED
    description: FieldUpdate[str] = UNCHANGED
    budget: FieldUpdate[Decimal] = UNCHANGED
    duration: FieldUpdate[int] = UNCHANGED
