import calendar
import re
from datetime import datetime, time, timedelta
from typing import List, Optional, Tuple

from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database

from fleetdesk.core.errors import NotFoundError, ValidationError
from fleetdesk.models.booking import Booking, BookingStatus
from fleetdesk.repositories.base import NEWEST_FIRST, to_object_id, utcnow
from fleetdesk.schemas.booking import BookingCreate
from fleetdesk.schemas.common import Pagination
from fleetdesk.services.query import DateRange, PageRequest, build_query, paginate

_MONTH_YEAR = re.compile(r"^(\d{1,2})-(\d{4})$")

# Chronological order for schedules
SCHEDULE_ORDER = [("date", ASCENDING), ("time", ASCENDING)]


def current_week(today: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Monday 00:00 through Sunday 23:59:59.999999 of the week containing ``today``."""
    today = today or utcnow()
    monday = datetime.combine((today - timedelta(days=today.weekday())).date(), time.min)
    sunday = datetime.combine((monday + timedelta(days=6)).date(), time.max)
    return monday, sunday


def month_bounds(month_year: str) -> Tuple[datetime, datetime]:
    """Parse ``MM-YYYY`` into the first and last instant of that month."""
    match = _MONTH_YEAR.match(month_year.strip())
    month = int(match.group(1)) if match else 0
    if not match or not 1 <= month <= 12:
        raise ValidationError(
            "Invalid month or year format. Please use MM-YYYY format (e.g., 10-2025 for October 2025)."
        )
    year = int(match.group(2))
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime.combine(datetime(year, month, last_day).date(), time.max)
    return start, end


class BookingRepository:
    """Public trip requests. Bookings are not scoped to any user."""

    def __init__(self, db: Database):
        self.collection = db["bookings"]

    def create(self, data: BookingCreate) -> Booking:
        now = utcnow()
        doc = data.model_dump()
        doc.update(status=BookingStatus.PENDING.value, createdAt=now, updatedAt=now)
        doc["_id"] = self.collection.insert_one(doc).inserted_id
        return Booking.from_document(doc)

    def list_all(self) -> List[Booking]:
        return [Booking.from_document(doc) for doc in self.collection.find({}).sort(NEWEST_FIRST)]

    def list_range(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
        page_request: PageRequest,
    ) -> Tuple[List[Booking], Pagination]:
        """
        Bookings between two days inclusive, in schedule order.
        A missing bound falls back to the matching end of the current week.
        """
        week_start, week_end = current_week()
        start = datetime.combine(start.date(), time.min) if start else week_start
        end = datetime.combine(end.date(), time.max) if end else week_end
        query = build_query([DateRange("date", start, end)])
        documents, pagination = paginate(self.collection, query, page_request, SCHEDULE_ORDER)
        return [Booking.from_document(doc) for doc in documents], pagination

    def list_month(self, month_year: str) -> List[Booking]:
        start, end = month_bounds(month_year)
        query = build_query([DateRange("date", start, end)])
        return [Booking.from_document(doc) for doc in self.collection.find(query).sort(SCHEDULE_ORDER)]

    def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        oid = to_object_id(booking_id)
        if oid is None:
            raise NotFoundError("Booking not found")
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {"status": status.value, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("Booking not found")
        return Booking.from_document(doc)
