import logging
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

logger = logging.getLogger(__name__)

# collection -> list of (keys, options)
INDEXES = {
    "users": [
        ([("email", ASCENDING)], {"unique": True}),
    ],
    "vehicles": [
        ([("userId", ASCENDING), ("vehicleNumber", ASCENDING)], {"unique": True}),
        ([("userId", ASCENDING), ("createdAt", DESCENDING)], {}),
    ],
    "drivers": [
        ([("userId", ASCENDING)], {}),
    ],
    "settings": [
        ([("userId", ASCENDING)], {"unique": True}),
    ],
    "billings": [
        ([("userId", ASCENDING), ("createdAt", DESCENDING)], {}),
        ([("userId", ASCENDING), ("billingDate", DESCENDING)], {}),
        ([("userId", ASCENDING), ("isCompleted", ASCENDING)], {}),
    ],
    "bookings": [
        ([("date", ASCENDING), ("time", ASCENDING)], {}),
    ],
}

def init_db(db: Database) -> None:
    """
    Create the indexes the repositories rely on.
    Unique indexes back the per-user uniqueness rules, so this must run
    before the service accepts writes.
    """
    for collection_name, indexes in INDEXES.items():
        for keys, options in indexes:
            db[collection_name].create_index(keys, **options)
        logger.info(f"Indexes ensured for collection {collection_name}")

    logger.info("Document store indexes created successfully")
