import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from fleetdesk.api.api import api_router
from fleetdesk.api.endpoints import health
from fleetdesk.core.config import settings
from fleetdesk.core.errors import add_exception_handlers
from fleetdesk.core.middleware import add_middleware
from fleetdesk.db.init_db import init_db
from fleetdesk.db.session import get_database
from fleetdesk.services.email_service import TokenCache

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="FleetDesk API for vehicle fleets, drivers, invoices and trip bookings",
    version="0.1.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
)

# Set CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
add_middleware(app)
add_exception_handlers(app)

# Include API router
app.include_router(api_router, prefix=settings.API_PREFIX)
# Load balancers check /health without the API prefix
app.include_router(health.router, prefix="/health", tags=["health"], include_in_schema=False)

@app.get("/")
async def root():
    """Root endpoint with basic service information."""
    return {
        "status": True,
        "message": "Welcome to FleetDesk API",
        "data": {
            "version": "0.1.0",
            "environment": settings.ENVIRONMENT,
            "docs_url": "/docs",
        },
    }

@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info(f"Starting FleetDesk API ({settings.ENVIRONMENT})...")
    app.state.token_cache = TokenCache(settings.GOOGLE_REFRESH_TOKEN)
    try:
        init_db(get_database())
    except PyMongoError as e:
        # The health endpoint reports the store as offline
        logger.error(f"Could not initialise the document store: {e}")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fleetdesk.main:app", host="0.0.0.0", port=8000, reload=True)
