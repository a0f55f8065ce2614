from fleetdesk.repositories.billings import BillingRepository
from fleetdesk.repositories.bookings import BookingRepository
from fleetdesk.repositories.drivers import DriverRepository
from fleetdesk.repositories.settings import SettingsRepository
from fleetdesk.repositories.users import UserRepository
from fleetdesk.repositories.vehicles import VehicleRepository

__all__ = [
    "BillingRepository",
    "BookingRepository",
    "DriverRepository",
    "SettingsRepository",
    "UserRepository",
    "VehicleRepository",
]
