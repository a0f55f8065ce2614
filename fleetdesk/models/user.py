"""
Persisted shape of the users collection.
"""

from enum import Enum

from fleetdesk.models.base import Record


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(Record):
    """An account owning vehicles, drivers, settings and invoices."""
    email: str
    passwordHash: str
    role: UserRole = UserRole.USER
    businessName: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
