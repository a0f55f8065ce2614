"""
Setup script for the FleetDesk document store.
Creates the indexes and converts invoices still stored in the old single item shape.
"""

import logging

from fleetdesk.db.init_db import init_db
from fleetdesk.db.migrations import migrate_legacy_billings
from fleetdesk.db.session import get_database

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def setup_database():
    """Create indexes and run the billing migration."""
    logger.info("Creating FleetDesk indexes...")
    db = get_database()
    try:
        init_db(db)
        migrated = migrate_legacy_billings(db)
        logger.info(f"Database ready ({migrated} billing document(s) migrated)")
    except Exception as e:
        logger.error(f"Error setting up the database: {e}")
        raise

if __name__ == "__main__":
    setup_database()
