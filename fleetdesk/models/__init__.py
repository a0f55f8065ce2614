"""
Import all persisted record types from their respective modules.
"""

from fleetdesk.models.base import Record
from fleetdesk.models.user import User, UserRole
from fleetdesk.models.vehicle import Vehicle, VehicleType, normalize_vehicle_number
from fleetdesk.models.driver import Driver
from fleetdesk.models.booking import Booking, BookingStatus
from fleetdesk.models.settings import BankDetails, CompanySettings
from fleetdesk.models.billing import (
    Billing,
    BillingDetail,
    BillingItem,
    InvoiceBankDetails,
    VehicleRef,
)

# Export all models
__all__ = [
    "Record",
    "User",
    "UserRole",
    "Vehicle",
    "VehicleType",
    "normalize_vehicle_number",
    "Driver",
    "Booking",
    "BookingStatus",
    "BankDetails",
    "CompanySettings",
    "Billing",
    "BillingDetail",
    "BillingItem",
    "InvoiceBankDetails",
    "VehicleRef",
]
