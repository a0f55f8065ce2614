from typing import Optional

from fleetdesk.models.base import Record


class Driver(Record):
    userId: str
    driverName: str
    driverPhoneNumber: str
    driverImage: Optional[str] = None
