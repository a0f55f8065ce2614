from typing import List, Optional, Tuple

from fleetdesk.core.errors import ValidationError
from fleetdesk.models.driver import Driver
from fleetdesk.repositories.base import NEWEST_FIRST, OwnedRepository, to_object_id
from fleetdesk.schemas.common import Pagination
from fleetdesk.schemas.driver import DriverCreate, DriverUpdate
from fleetdesk.services.query import PageRequest, TextSearch, build_query, paginate


class DriverRepository(OwnedRepository[Driver]):
    collection_name = "drivers"
    record_type = Driver
    not_found_message = "Driver not found"

    def create(self, owner_id: str, data: DriverCreate) -> Driver:
        document = data.model_dump()
        document["userId"] = to_object_id(owner_id)
        return self._insert(document)

    def find_paged(self, owner_id: str, search: Optional[str], page_request: PageRequest) -> Tuple[List[Driver], Pagination]:
        query = build_query(
            [TextSearch(("driverName", "driverPhoneNumber"), search or "")],
            owner_id=to_object_id(owner_id),
        )
        documents, pagination = paginate(self.collection, query, page_request, NEWEST_FIRST)
        return self._to_records(documents), pagination

    def update(self, owner_id: str, driver_id: str, data: DriverUpdate) -> Driver:
        query = self._owned_filter(owner_id, driver_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise ValidationError("No valid fields provided for update")
        return self._update(query, changes)
