"""
Pydantic schemas for API response models.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
    """Response schema for a profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Profile ID")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    profession: str = Field(..., description="Profession")
    balance: Decimal = Field(..., description="Current balance")
    type: str = Field(..., description="Profile type (client/contractor)")


class ContractResponse(BaseModel):
    """Response schema for a contract."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Contract ID")
    terms: str = Field(..., description="Contract terms")
    status: str = Field(..., description="Contract status (new/in_progress/terminated)")
    client_id: int = Field(..., description="Client profile ID")
    contractor_id: int = Field(..., description="Contractor profile ID")


class JobResponse(BaseModel):
    """Response schema for a job."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Job ID")
    description: str = Field(..., description="Job description")
    price: Decimal = Field(..., description="Job price")
    paid: bool = Field(..., description="Whether the job has been paid")
    payment_date: Optional[datetime] = Field(default=None, description="Payment timestamp")
    contract_id: int = Field(..., description="Contract ID")


class BestProfessionResponse(BaseModel):
    """Response schema for the best-profession report."""

    profession: str = Field(..., description="Profession with the highest earnings")
    total_paid: Decimal = Field(..., description="Total paid to that profession")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"examples": [{"profession": "Programmer", "total_paid": "2704.00"}]},
    )


class BestClientResponse(BaseModel):
    """One row of the best-clients report."""

    model_config = ConfigDict(from_attributes=True)

    client_id: int = Field(..., description="Client profile ID")
    full_name: str = Field(..., description="Client display name")
    total_paid: Decimal = Field(..., description="Total paid by the client")


class HealthCheckResponse(BaseModel):
    """Response schema for health checks."""

    status: str = Field(..., description="Overall health status (healthy/unhealthy)")
    checks: Optional[Dict[str, Any]] = Field(default=None, description="Individual service checks")
    message: Optional[str] = Field(default=None, description="Status message")


class ErrorResponse(BaseModel):
    """Error body returned for every marketplace error."""

    error: Dict[str, Any] = Field(..., description="Error code, message, type and context")
