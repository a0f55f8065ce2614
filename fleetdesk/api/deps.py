from fastapi import Depends, Request
from pymongo.database import Database

from fleetdesk.core.config import settings
from fleetdesk.db.session import get_db
from fleetdesk.repositories import (
    BillingRepository,
    BookingRepository,
    DriverRepository,
    SettingsRepository,
    VehicleRepository,
)
from fleetdesk.services.auth_service import AuthService
from fleetdesk.services.email_service import EmailService, TokenCache


def get_vehicle_repository(db: Database = Depends(get_db)) -> VehicleRepository:
    return VehicleRepository(db)


def get_billing_repository(db: Database = Depends(get_db)) -> BillingRepository:
    return BillingRepository(db)


def get_driver_repository(db: Database = Depends(get_db)) -> DriverRepository:
    return DriverRepository(db)


def get_settings_repository(db: Database = Depends(get_db)) -> SettingsRepository:
    return SettingsRepository(db)


def get_booking_repository(db: Database = Depends(get_db)) -> BookingRepository:
    return BookingRepository(db)


def get_email_service(request: Request) -> EmailService:
    """Mail sender bound to the application's OAuth2 token cache."""
    token_cache = getattr(request.app.state, "token_cache", None)
    if token_cache is None:
        token_cache = TokenCache(settings.GOOGLE_REFRESH_TOKEN)
        request.app.state.token_cache = token_cache
    return EmailService(settings, token_cache)


def get_auth_service(
    db: Database = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> AuthService:
    return AuthService(db, email_service)
