"""
One-time migration of invoices stored in the single line item shape.

Older invoices carried one vehicle, an HSN code, quantity, rate and a fixed
18% GST breakdown. They are rewritten into the multi-item shape so that
reads never need to know which shape a document has.
"""

import logging
from typing import Any, Dict

from pymongo.database import Database

from fleetdesk.core.errors import ValidationError
from fleetdesk.repositories.base import to_object_id, utcnow
from fleetdesk.services.billing_calculator import aggregate_invoice

logger = logging.getLogger(__name__)

DEFAULT_HSN_SAC = "996601"
LEGACY_UNIT = "Trip"
LEGACY_FIELDS = ("vehicleId", "hsnCode", "quantity", "rate", "subtotal", "taxAmount", "total")

# Documents without line items are in the old shape
LEGACY_QUERY = {"billingItems": {"$exists": False}}


def _bank_details_for(db: Database, owner_id: Any) -> Dict[str, str]:
    stored = db["settings"].find_one({"userId": owner_id}) or {}
    bank = stored.get("bankDetails") or {}
    return {
        "bankName": bank.get("bankName", ""),
        "branch": bank.get("branchName", ""),
        "accountNumber": bank.get("accountNumber", ""),
        "ifscCode": bank.get("ifscCode", ""),
    }


def _vehicle_ids(doc: Dict[str, Any]):
    ids = doc.get("vehicleIds") or ([doc["vehicleId"]] if doc.get("vehicleId") else [])
    oids = [to_object_id(v) for v in ids]
    return [oid for oid in oids if oid is not None]


def migrate_legacy_billings(db: Database) -> int:
    """
    Convert every old-shape invoice in place and return how many were converted.

    Running it again finds nothing to do. Documents whose amounts cannot be
    recomputed are left untouched and logged.
    """
    billings = db["billings"]
    migrated = 0
    for doc in billings.find(LEGACY_QUERY):
        item = {
            "description": doc.get("workingTime") or "Vehicle hire",
            "hsnSac": doc.get("hsnCode") or DEFAULT_HSN_SAC,
            "unit": LEGACY_UNIT,
            "quantity": doc.get("quantity") or 1,
            "rate": doc.get("rate"),
        }
        try:
            totals = aggregate_invoice([item])
        except ValidationError as e:
            logger.warning(f"Skipping billing {doc['_id']}: {e.message}")
            continue

        billings.update_one(
            {"_id": doc["_id"]},
            {
                "$set": {
                    "vehicleIds": _vehicle_ids(doc),
                    "billingItems": [i.model_dump() for i in totals.billingItems],
                    "totalInvoiceValue": totals.totalInvoiceValue,
                    "bankDetails": _bank_details_for(db, doc.get("userId")),
                    "gstEnabled": True,
                    "period": doc.get("period", ""),
                    "projectLocation": doc.get("projectLocation", ""),
                    "placeOfSupply": doc.get("placeOfSupply", ""),
                    "updatedAt": utcnow(),
                },
                "$unset": {name: "" for name in LEGACY_FIELDS},
            },
        )
        migrated += 1

    logger.info(f"Migrated {migrated} legacy billing document(s)")
    return migrated
