import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pymongo.database import Database
from pymongo.errors import PyMongoError

from fleetdesk.db.session import get_db
from fleetdesk.schemas.common import ok

router = APIRouter()

_started = time.monotonic()


@router.get("")
def health_check(db: Database = Depends(get_db)):
    """
    Health check endpoint that verifies API and database status.

    The service answers even when the document store is unreachable;
    ``database`` then reads ``offline``.
    """
    database = "online"
    try:
        db.list_collection_names()
    except PyMongoError:
        database = "offline"

    return ok("Server is healthy", {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _started, 3),
        "database": database,
    })
