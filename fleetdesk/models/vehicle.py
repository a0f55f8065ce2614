import re
from enum import Enum
from typing import Optional

from fleetdesk.models.base import Record

_WHITESPACE = re.compile(r"\s+")


class VehicleType(str, Enum):
    CAR = "Car"
    TRUCK = "Truck"
    VAN = "Van"
    BUS = "Bus"
    MOTORCYCLE = "Motorcycle"
    AUTO_RICKSHAW = "Auto Rickshaw"
    TEMPO_TRAVELLER = "Tempo Traveller"
    TRAILER = "Trailer"
    OTHER = "Other"


def normalize_vehicle_number(value: str) -> str:
    """Collapse runs of whitespace, trim and uppercase a registration number."""
    return _WHITESPACE.sub(" ", value).strip().upper()


class Vehicle(Record):
    userId: str
    vehicleNumber: str
    vehicleType: Optional[VehicleType] = None
