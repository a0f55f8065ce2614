from datetime import datetime
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, Field

from fleetdesk.models.vehicle import VehicleType


def _require_number(v: str) -> str:
    if not v.strip():
        raise ValueError("Vehicle number cannot be empty")
    return v


VehicleNumber = Annotated[str, Field(max_length=40), AfterValidator(_require_number)]


class VehicleCreate(BaseModel):
    """Schema for registering a vehicle."""
    vehicleNumber: VehicleNumber = Field(..., description="Registration number, e.g. 'KA 01 AB 1234'")
    vehicleType: VehicleType = Field(..., description="Vehicle category")


class VehicleUpdate(BaseModel):
    """Schema for a partial vehicle update."""
    vehicleNumber: Optional[VehicleNumber] = None
    vehicleType: Optional[VehicleType] = None


class VehicleOut(BaseModel):
    id: str
    userId: str
    vehicleNumber: str
    vehicleType: Optional[VehicleType] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VehicleStats(BaseModel):
    totalVehicles: int
    vehiclesByType: Dict[str, int]
    recentVehicles: List[VehicleOut]
