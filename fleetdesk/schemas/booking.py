from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from fleetdesk.models.booking import BookingStatus
from fleetdesk.schemas.common import OptionalStr, RequiredStr, to_naive_utc


class BookingCreate(BaseModel):
    """Schema for the public booking form."""
    name: RequiredStr = Field(..., description="Customer name")
    phoneNumber: RequiredStr = Field(..., description="Customer phone number")
    email: Optional[EmailStr] = Field(None, description="Receives the confirmation mail when given")
    date: datetime = Field(..., description="Trip date")
    time: RequiredStr = Field(..., description="Pickup time, free text (e.g. '09:30')")
    pickup: RequiredStr = Field(..., description="Pickup location")
    drop: RequiredStr = Field(..., description="Drop location")
    description: Optional[OptionalStr] = None
    vehicle: RequiredStr = Field(..., description="Requested vehicle type")

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("date", mode="before")
    @classmethod
    def normalise_date(cls, v: Any) -> Any:
        return to_naive_utc(v)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, v: Any) -> Any:
        allowed = [s.value for s in BookingStatus]
        if v not in allowed:
            raise ValueError(f"Invalid status value. Must be one of: {', '.join(allowed)}")
        return v


class BookingOut(BaseModel):
    id: str
    name: str
    phoneNumber: str
    email: Optional[str] = None
    date: datetime
    time: str
    pickup: str
    drop: str
    description: Optional[str] = None
    vehicle: str
    status: BookingStatus
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    model_config = {"from_attributes": True}
