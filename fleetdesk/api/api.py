from fastapi import APIRouter

from fleetdesk.api.endpoints import auth, billings, bookings, drivers, health, settings, vehicles

# Create API router
api_router = APIRouter()

# Include endpoint routers with appropriate prefixes and tags
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(vehicles.router, prefix="/vehicles", tags=["vehicles"])
api_router.include_router(billings.router, prefix="/billings", tags=["billings"])
api_router.include_router(drivers.router, prefix="/drivers", tags=["drivers"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
