from datetime import datetime
from enum import Enum
from typing import Optional

from fleetdesk.models.base import Record


class BookingStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    IN_PROGRESS = "inProgress"


class Booking(Record):
    """A public trip request; bookings are not owned by any user."""
    name: str
    phoneNumber: str
    email: Optional[str] = None
    date: datetime
    time: str
    pickup: str
    drop: str
    description: Optional[str] = None
    vehicle: str
    status: BookingStatus = BookingStatus.PENDING
