import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status

from fleetdesk.api.deps import get_booking_repository, get_email_service
from fleetdesk.core.errors import ValidationError
from fleetdesk.repositories.bookings import BookingRepository
from fleetdesk.schemas.booking import BookingCreate, BookingOut, BookingStatusUpdate
from fleetdesk.schemas.common import ApiResponse, Page, ok
from fleetdesk.services.email_service import EmailService
from fleetdesk.services.query import PageRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_day(value: Optional[str]) -> Optional[datetime]:
    if not value or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip()[:10])
    except ValueError:
        raise ValidationError(f"Invalid date: {value}. Use YYYY-MM-DD")


@router.post("", response_model=ApiResponse[BookingOut], status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    background_tasks: BackgroundTasks,
    bookings: BookingRepository = Depends(get_booking_repository),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Public booking form.

    The customer confirmation (when an email is given) and the admin
    notification are sent after the response; mail failures are only logged.
    """
    booking = bookings.create(data)
    logger.info(f"Booking {booking.id} created for {booking.date.date()} {booking.time}")
    background_tasks.add_task(email_service.send_booking_confirmation, booking)
    background_tasks.add_task(email_service.send_booking_notification, booking)
    return ok("Booking created successfully", booking)


@router.get("", response_model=ApiResponse[List[BookingOut]])
def list_bookings(bookings: BookingRepository = Depends(get_booking_repository)):
    return ok("Bookings retrieved successfully", bookings.list_all())


@router.get("/range", response_model=ApiResponse[Page[BookingOut]])
def list_bookings_in_range(
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
    bookings: BookingRepository = Depends(get_booking_repository),
):
    """Bookings between two days inclusive; missing bounds default to the current week."""
    items, pagination = bookings.list_range(
        _parse_day(startDate),
        _parse_day(endDate),
        PageRequest.from_params(page, limit),
    )
    return ok("Rangewise bookings retrieved successfully", {"items": items, "pagination": pagination})


@router.get("/month/{month_year}", response_model=ApiResponse[List[BookingOut]])
def list_bookings_for_month(
    month_year: str,
    bookings: BookingRepository = Depends(get_booking_repository),
):
    return ok("Bookings retrieved successfully", bookings.list_month(month_year))


@router.patch("/{booking_id}/status", response_model=ApiResponse[BookingOut])
def update_booking_status(
    booking_id: str,
    data: BookingStatusUpdate,
    bookings: BookingRepository = Depends(get_booking_repository),
):
    return ok("Booking status updated successfully", bookings.update_status(booking_id, data.status))
