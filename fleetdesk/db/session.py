from pymongo import MongoClient
from pymongo.database import Database

from fleetdesk.core.config import settings

# The client connects lazily on first use and pools connections itself
client = MongoClient(
    settings.MONGODB_URL,
    serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
    tz_aware=False,
)

def get_database() -> Database:
    """Return the configured application database."""
    return client[settings.MONGODB_DB]

# Dependency to get the database handle
def get_db():
    """
    Dependency for FastAPI endpoints that need the document store.
    The client is shared; each request just receives the database handle.
    """
    yield get_database()
