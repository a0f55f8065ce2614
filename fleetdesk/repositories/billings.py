import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fleetdesk.core.errors import NotFoundError, ValidationError
from fleetdesk.models.billing import BillingDetail, VehicleRef
from fleetdesk.repositories.base import NEWEST_FIRST, OwnedRepository, to_object_id, utcnow
from fleetdesk.repositories.vehicles import VehicleRepository
from fleetdesk.schemas.billing import BillingCreate, BillingUpdate
from fleetdesk.schemas.common import Pagination
from fleetdesk.services.billing_calculator import aggregate_invoice, fill_item_defaults
from fleetdesk.services.query import (
    DateRange,
    ExactMatch,
    PageRequest,
    TextSearch,
    build_query,
    paginate,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("companyName", "recipientName", "workingTime")


class BillingRepository(OwnedRepository[BillingDetail]):
    collection_name = "billings"
    record_type = BillingDetail
    not_found_message = "Billing not found"

    def __init__(self, db):
        super().__init__(db)
        self.vehicles = VehicleRepository(db)

    def _populate(self, records: List[BillingDetail]) -> List[BillingDetail]:
        """Attach the vehicle numbers referenced by each invoice in one lookup."""
        ids = {vid for record in records for vid in record.vehicleIds}
        numbers = self.vehicles.numbers_by_id(list(ids))
        for record in records:
            record.vehicles = [
                VehicleRef(id=vid, vehicleNumber=numbers[vid])
                for vid in record.vehicleIds
                if vid in numbers
            ]
        return records

    def _vehicle_oids(self, owner_id: str, vehicle_ids: List[str]) -> List[Any]:
        unique_ids = list(dict.fromkeys(vehicle_ids))
        self.vehicles.ensure_owned(owner_id, unique_ids)
        return [to_object_id(v) for v in unique_ids]

    def create(self, owner_id: str, data: BillingCreate) -> BillingDetail:
        totals = aggregate_invoice(data.billingItems)
        bank_details = data.bankDetails.model_dump()
        vehicle_oids = self._vehicle_oids(owner_id, data.vehicleIds)

        document = data.model_dump(exclude={"billingItems", "bankDetails", "vehicleIds"})
        document.update(
            userId=to_object_id(owner_id),
            vehicleIds=vehicle_oids,
            billingDate=data.billingDate or utcnow(),
            billingItems=[item.model_dump() for item in totals.billingItems],
            bankDetails=bank_details,
            totalInvoiceValue=totals.totalInvoiceValue,
        )
        record = self._insert(document)
        logger.info(f"Billing {record.id} created with {len(totals.billingItems)} item(s), total {totals.totalInvoiceValue}")
        return self._populate([record])[0]

    def find_paged(
        self,
        owner_id: str,
        page_request: PageRequest,
        search: Optional[str] = None,
        company_name: Optional[str] = None,
        vehicle_id: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        is_completed: Optional[bool] = None,
    ) -> Tuple[List[BillingDetail], Pagination]:
        # An unparsable vehicle id is kept as a string so that it matches nothing
        vehicle_value = None
        if vehicle_id:
            vehicle_value = to_object_id(vehicle_id) or vehicle_id
        filters = [
            TextSearch(SEARCH_FIELDS, search or ""),
            ExactMatch("companyName", company_name or None, ignore_case=True),
            ExactMatch("vehicleIds", vehicle_value),
            DateRange("billingDate", date_from, date_to),
            ExactMatch("isCompleted", is_completed),
        ]
        query = build_query(filters, owner_id=to_object_id(owner_id))
        documents, pagination = paginate(self.collection, query, page_request, NEWEST_FIRST)
        return self._populate(self._to_records(documents)), pagination

    def get(self, owner_id: str, record_id: str) -> BillingDetail:
        return self._populate([super().get(owner_id, record_id)])[0]

    def update(self, owner_id: str, billing_id: str, data: BillingUpdate) -> BillingDetail:
        query = self._owned_filter(owner_id, billing_id)
        changes: Dict[str, Any] = data.model_dump(
            exclude_none=True,
            exclude={"billingItems", "bankDetails", "vehicleIds"},
        )

        if data.vehicleIds is not None:
            changes["vehicleIds"] = self._vehicle_oids(owner_id, data.vehicleIds)

        if data.billingItems is not None:
            filled = [fill_item_defaults(item.model_dump()) for item in data.billingItems]
            totals = aggregate_invoice(filled)
            changes["billingItems"] = [item.model_dump() for item in totals.billingItems]
            changes["totalInvoiceValue"] = totals.totalInvoiceValue

        if data.bankDetails is not None:
            for name, value in data.bankDetails.model_dump(exclude_none=True).items():
                changes[f"bankDetails.{name}"] = value

        if not changes:
            raise ValidationError("No valid fields provided for update")
        return self._populate([self._update(query, changes)])[0]

    def delete(self, owner_id: str, record_id: str) -> BillingDetail:
        """Only completed invoices can be removed."""
        query = self._owned_filter(owner_id, record_id)
        query["isCompleted"] = True
        doc = self.collection.find_one_and_delete(query)
        if doc is None:
            raise NotFoundError("Billing not found or not completed")
        return self.record_type.from_document(doc)

    def _completed_totals(self, match: Dict[str, Any]) -> Tuple[int, float]:
        rows = list(self.collection.aggregate([
            {"$match": match},
            {"$group": {"_id": None, "count": {"$sum": 1}, "revenue": {"$sum": "$totalInvoiceValue"}}},
        ]))
        if not rows:
            return 0, 0.0
        return rows[0]["count"], float(rows[0]["revenue"])

    def stats(self, owner_id: str) -> Dict[str, Any]:
        owner = to_object_id(owner_id)
        now = utcnow()
        month_start = datetime(now.year, now.month, 1)

        total_bills, total_revenue = self._completed_totals({"userId": owner, "isCompleted": True})
        monthly_bills, monthly_revenue = self._completed_totals(
            {"userId": owner, "isCompleted": True, "createdAt": {"$gte": month_start}}
        )
        return {
            "totalBills": total_bills,
            "totalRevenue": round(total_revenue, 2),
            "monthlyBills": monthly_bills,
            "monthlyRevenue": round(monthly_revenue, 2),
            "recentBills": self._populate(self.recent(owner_id, extra={"isCompleted": True})),
        }
