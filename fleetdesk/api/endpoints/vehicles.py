from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from fleetdesk.api.deps import get_vehicle_repository
from fleetdesk.core.security import get_current_user
from fleetdesk.models.user import User
from fleetdesk.repositories.vehicles import VehicleRepository
from fleetdesk.schemas.common import ApiResponse, Page, ok
from fleetdesk.schemas.vehicle import VehicleCreate, VehicleOut, VehicleStats, VehicleUpdate
from fleetdesk.services.query import PageRequest

router = APIRouter()


@router.post("", response_model=ApiResponse[VehicleOut], status_code=status.HTTP_201_CREATED)
def create_vehicle(
    data: VehicleCreate,
    current_user: User = Depends(get_current_user),
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
):
    """
    Register a vehicle for the current user.

    The number is stored uppercased with whitespace collapsed and must be
    unique among the user's vehicles.
    """
    vehicle = vehicles.create(current_user.id, data)
    return ok("Vehicle created successfully", vehicle)


@router.get("", response_model=ApiResponse[Page[VehicleOut]])
def list_vehicles(
    search: Optional[str] = Query(None, description="Substring of the vehicle number"),
    page: int = 1,
    limit: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
):
    items, pagination = vehicles.find_paged(current_user.id, search, PageRequest.from_params(page, limit))
    message = "Vehicles retrieved successfully" if items else "No vehicles found"
    return ok(message, {"items": items, "pagination": pagination})


@router.get("/stats", response_model=ApiResponse[VehicleStats])
def vehicle_stats(
    current_user: User = Depends(get_current_user),
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
):
    return ok("Vehicle statistics retrieved successfully", vehicles.stats(current_user.id))


@router.get("/types", response_model=ApiResponse[List[str]])
def vehicle_types(current_user: User = Depends(get_current_user)):
    return ok("Vehicle types retrieved successfully", VehicleRepository.vehicle_types())


@router.get("/{vehicle_id}", response_model=ApiResponse[VehicleOut])
def get_vehicle(
    vehicle_id: str,
    current_user: User = Depends(get_current_user),
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
):
    return ok("Vehicle retrieved successfully", vehicles.get(current_user.id, vehicle_id))


@router.put("/{vehicle_id}", response_model=ApiResponse[VehicleOut])
def update_vehicle(
    vehicle_id: str,
    data: VehicleUpdate,
    current_user: User = Depends(get_current_user),
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
):
    return ok("Vehicle updated successfully", vehicles.update(current_user.id, vehicle_id, data))


@router.delete("/{vehicle_id}", response_model=ApiResponse[VehicleOut])
def delete_vehicle(
    vehicle_id: str,
    current_user: User = Depends(get_current_user),
    vehicles: VehicleRepository = Depends(get_vehicle_repository),
):
    return ok("Vehicle deleted successfully", vehicles.delete(current_user.id, vehicle_id))
