from datetime import datetime, time
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, status

from fleetdesk.api.deps import get_billing_repository
from fleetdesk.core.errors import ValidationError
from fleetdesk.core.security import get_current_user
from fleetdesk.models.user import User
from fleetdesk.repositories.billings import BillingRepository
from fleetdesk.schemas.billing import (
    BillingCalculateRequest,
    BillingCalculation,
    BillingCreate,
    BillingOut,
    BillingStats,
    BillingUpdate,
    InvoiceEstimate,
)
from fleetdesk.schemas.common import ApiResponse, Page, ok, to_naive_utc
from fleetdesk.services.billing_calculator import aggregate_invoice, calculate_legacy_amounts
from fleetdesk.services.query import PageRequest

router = APIRouter()


def _parse_date(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """Parse a filter date; a bare day used as an upper bound covers the whole day."""
    if not value or not value.strip():
        return None
    value = value.strip()
    try:
        parsed = to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")
    if end_of_day and len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed


@router.post("", response_model=ApiResponse[BillingOut], status_code=status.HTTP_201_CREATED)
def create_billing(
    data: BillingCreate,
    current_user: User = Depends(get_current_user),
    billings: BillingRepository = Depends(get_billing_repository),
):
    """
    Create an invoice.

    Item totals and the invoice value are computed here; every referenced
    vehicle must belong to the current user.
    """
    return ok("Billing created successfully", billings.create(current_user.id, data))


@router.get("", response_model=ApiResponse[Page[BillingOut]])
def list_billings(
    searchQuery: Optional[str] = Query(None, description="Matches company, recipient or working time"),
    companyName: Optional[str] = None,
    vehicleId: Optional[str] = None,
    dateFrom: Optional[str] = Query(None, description="Earliest billing date, inclusive"),
    dateTo: Optional[str] = Query(None, description="Latest billing date, inclusive"),
    isCompleted: Optional[bool] = None,
    page: int = 1,
    limit: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    billings: BillingRepository = Depends(get_billing_repository),
):
    items, pagination = billings.find_paged(
        current_user.id,
        PageRequest.from_params(page, limit),
        search=searchQuery,
        company_name=companyName,
        vehicle_id=vehicleId,
        date_from=_parse_date(dateFrom),
        date_to=_parse_date(dateTo, end_of_day=True),
        is_completed=isCompleted,
    )
    return ok("Billings retrieved successfully", {"items": items, "pagination": pagination})


@router.get("/stats", response_model=ApiResponse[BillingStats])
def billing_stats(
    current_user: User = Depends(get_current_user),
    billings: BillingRepository = Depends(get_billing_repository),
):
    return ok("Billing statistics retrieved successfully", billings.stats(current_user.id))


@router.post("/calculate", response_model=ApiResponse[Union[BillingCalculation, InvoiceEstimate]])
def calculate_billing(
    data: BillingCalculateRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Estimate amounts without storing anything.

    With ``billingItems`` the per-item totals and invoice value are returned;
    otherwise a single quantity/rate line with the GST breakdown.
    """
    if data.billingItems:
        totals = aggregate_invoice(data.billingItems)
        return ok("Billing calculation completed", totals.model_dump())
    if not data.rate:
        raise ValidationError("Valid rate is required")
    return ok("Billing calculation completed", calculate_legacy_amounts(data.quantity, data.rate))


@router.get("/{billing_id}", response_model=ApiResponse[BillingOut])
def get_billing(
    billing_id: str,
    current_user: User = Depends(get_current_user),
    billings: BillingRepository = Depends(get_billing_repository),
):
    return ok("Billing retrieved successfully", billings.get(current_user.id, billing_id))


@router.put("/{billing_id}", response_model=ApiResponse[BillingOut])
def update_billing(
    billing_id: str,
    data: BillingUpdate,
    current_user: User = Depends(get_current_user),
    billings: BillingRepository = Depends(get_billing_repository),
):
    """Partial update. Replacing ``billingItems`` recomputes the invoice value."""
    return ok("Billing updated successfully", billings.update(current_user.id, billing_id, data))


@router.delete("/{billing_id}", response_model=ApiResponse[BillingOut])
def delete_billing(
    billing_id: str,
    current_user: User = Depends(get_current_user),
    billings: BillingRepository = Depends(get_billing_repository),
):
    """Only completed invoices can be deleted."""
    return ok("Billing deleted successfully", billings.delete(current_user.id, billing_id))
