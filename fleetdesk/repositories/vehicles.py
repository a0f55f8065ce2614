from typing import Any, Dict, List, Optional, Tuple

from fleetdesk.core.errors import ConflictError, NotFoundError, ValidationError
from fleetdesk.models.vehicle import Vehicle, VehicleType, normalize_vehicle_number
from fleetdesk.repositories.base import NEWEST_FIRST, OwnedRepository, to_object_id
from fleetdesk.schemas.common import Pagination
from fleetdesk.schemas.vehicle import VehicleCreate, VehicleUpdate
from fleetdesk.services.query import PageRequest, TextSearch, build_query, paginate


class VehicleRepository(OwnedRepository[Vehicle]):
    collection_name = "vehicles"
    record_type = Vehicle
    not_found_message = "Vehicle not found"
    conflict_message = "Vehicle number already exists"

    @staticmethod
    def vehicle_types() -> List[str]:
        return [t.value for t in VehicleType]

    def _ensure_number_free(self, owner_id: str, number: str, exclude_id: Any = None) -> None:
        query: Dict[str, Any] = {"userId": to_object_id(owner_id), "vehicleNumber": number}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if self.collection.find_one(query):
            raise ConflictError(self.conflict_message)

    def create(self, owner_id: str, data: VehicleCreate) -> Vehicle:
        number = normalize_vehicle_number(data.vehicleNumber)
        self._ensure_number_free(owner_id, number)
        return self._insert({
            "userId": to_object_id(owner_id),
            "vehicleNumber": number,
            "vehicleType": data.vehicleType.value,
        })

    def find_paged(self, owner_id: str, search: Optional[str], page_request: PageRequest) -> Tuple[List[Vehicle], Pagination]:
        query = build_query([TextSearch(("vehicleNumber",), search or "")], owner_id=to_object_id(owner_id))
        documents, pagination = paginate(self.collection, query, page_request, NEWEST_FIRST)
        return self._to_records(documents), pagination

    def update(self, owner_id: str, vehicle_id: str, data: VehicleUpdate) -> Vehicle:
        query = self._owned_filter(owner_id, vehicle_id)
        changes: Dict[str, Any] = {}
        if data.vehicleNumber is not None:
            number = normalize_vehicle_number(data.vehicleNumber)
            self._ensure_number_free(owner_id, number, exclude_id=query["_id"])
            changes["vehicleNumber"] = number
        if data.vehicleType is not None:
            changes["vehicleType"] = data.vehicleType.value
        if not changes:
            raise ValidationError("No valid fields provided for update")
        return self._update(query, changes)

    def count_owned(self, owner_id: str, vehicle_ids: List[str]) -> int:
        """How many of the given ids are vehicles belonging to ``owner_id``."""
        oids = [to_object_id(v) for v in vehicle_ids]
        if any(oid is None for oid in oids):
            return 0
        return self.collection.count_documents({"_id": {"$in": oids}, "userId": to_object_id(owner_id)})

    def ensure_owned(self, owner_id: str, vehicle_ids: List[str]) -> None:
        """Reject the whole set if any id is unknown or belongs to another user."""
        unique_ids = list(dict.fromkeys(vehicle_ids))
        if self.count_owned(owner_id, unique_ids) != len(unique_ids):
            raise NotFoundError("One or more vehicles not found or don't belong to user")

    def numbers_by_id(self, vehicle_ids: List[str]) -> Dict[str, str]:
        oids = [oid for oid in (to_object_id(v) for v in vehicle_ids) if oid is not None]
        if not oids:
            return {}
        cursor = self.collection.find({"_id": {"$in": oids}}, {"vehicleNumber": 1})
        return {str(doc["_id"]): doc["vehicleNumber"] for doc in cursor}

    def stats(self, owner_id: str) -> Dict[str, Any]:
        owner = to_object_id(owner_id)
        by_type = self.collection.aggregate([
            {"$match": {"userId": owner}},
            {"$group": {"_id": "$vehicleType", "count": {"$sum": 1}}},
        ])
        return {
            "totalVehicles": self.collection.count_documents({"userId": owner}),
            "vehiclesByType": {(row["_id"] or "Unspecified"): row["count"] for row in by_type},
            "recentVehicles": self.recent(owner_id),
        }
