from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from fleetdesk.schemas.common import ShortStr


class DriverCreate(BaseModel):
    driverName: ShortStr = Field(..., description="Driver's full name")
    driverPhoneNumber: ShortStr = Field(..., description="Contact number")
    driverImage: Optional[str] = Field(None, description="URL of the driver's photo")


class DriverUpdate(BaseModel):
    driverName: Optional[ShortStr] = None
    driverPhoneNumber: Optional[ShortStr] = None
    driverImage: Optional[str] = None


class DriverOut(BaseModel):
    id: str
    userId: str
    driverName: str
    driverPhoneNumber: str
    driverImage: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    model_config = {"from_attributes": True}
