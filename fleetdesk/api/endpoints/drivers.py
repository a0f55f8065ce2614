from typing import Optional

from fastapi import APIRouter, Depends, status

from fleetdesk.api.deps import get_driver_repository
from fleetdesk.core.security import get_current_user
from fleetdesk.models.user import User
from fleetdesk.repositories.drivers import DriverRepository
from fleetdesk.schemas.common import ApiResponse, Page, ok
from fleetdesk.schemas.driver import DriverCreate, DriverOut, DriverUpdate
from fleetdesk.services.query import PageRequest

router = APIRouter()


@router.post("", response_model=ApiResponse[DriverOut], status_code=status.HTTP_201_CREATED)
def create_driver(
    data: DriverCreate,
    current_user: User = Depends(get_current_user),
    drivers: DriverRepository = Depends(get_driver_repository),
):
    return ok("Driver created successfully", drivers.create(current_user.id, data))


@router.get("", response_model=ApiResponse[Page[DriverOut]])
def list_drivers(
    search: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    drivers: DriverRepository = Depends(get_driver_repository),
):
    """List the current user's drivers, searchable by name or phone number."""
    items, pagination = drivers.find_paged(current_user.id, search, PageRequest.from_params(page, limit))
    return ok("Drivers retrieved successfully", {"items": items, "pagination": pagination})


@router.get("/{driver_id}", response_model=ApiResponse[DriverOut])
def get_driver(
    driver_id: str,
    current_user: User = Depends(get_current_user),
    drivers: DriverRepository = Depends(get_driver_repository),
):
    return ok("Driver retrieved successfully", drivers.get(current_user.id, driver_id))


@router.put("/{driver_id}", response_model=ApiResponse[DriverOut])
def update_driver(
    driver_id: str,
    data: DriverUpdate,
    current_user: User = Depends(get_current_user),
    drivers: DriverRepository = Depends(get_driver_repository),
):
    return ok("Driver updated successfully", drivers.update(current_user.id, driver_id, data))


@router.delete("/{driver_id}", response_model=ApiResponse[DriverOut])
def delete_driver(
    driver_id: str,
    current_user: User = Depends(get_current_user),
    drivers: DriverRepository = Depends(get_driver_repository),
):
    return ok("Driver deleted successfully", drivers.delete(current_user.id, driver_id))
