"""Request schemas for contracts."""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class CreateContractRequest(BaseModel):
    """Request model for creating a contract from an application."""
    application_id: Optional[str] = Field(None, description="Source application")
    performer_id: Optional[str] = Field(None, description="Must match the applicant when given")
    title: Optional[str] = Field(None, description="Contract title")
    description: Optional[str] = Field(None, description="Scope of work")
    price: Optional[Decimal] = Field(None, description="Agreed price, must be positive")
    duration: Optional[int] = Field(None, description="Duration in days")


class DeployContractRequest(BaseModel):
    """Request model for the deploy action."""
    contract_address: Optional[str] = Field(None, description="Address of the deployed contract")
