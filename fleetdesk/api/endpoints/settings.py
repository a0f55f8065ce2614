from fastapi import APIRouter, Depends, status

from fleetdesk.api.deps import get_settings_repository
from fleetdesk.core.security import get_current_user
from fleetdesk.models.user import User
from fleetdesk.repositories.settings import SettingsRepository
from fleetdesk.schemas.common import ApiResponse, ok
from fleetdesk.schemas.settings import SettingsCreate, SettingsOut, SettingsUpdate

router = APIRouter()


@router.post("", response_model=ApiResponse[SettingsOut], status_code=status.HTTP_201_CREATED)
def create_settings(
    data: SettingsCreate,
    current_user: User = Depends(get_current_user),
    repo: SettingsRepository = Depends(get_settings_repository),
):
    """Create the company profile; each user has at most one."""
    return ok("Settings created successfully", repo.create(current_user.id, data))


@router.get("", response_model=ApiResponse[SettingsOut])
def get_settings(
    current_user: User = Depends(get_current_user),
    repo: SettingsRepository = Depends(get_settings_repository),
):
    return ok("Settings retrieved successfully", repo.get(current_user.id))


@router.put("", response_model=ApiResponse[SettingsOut])
def update_settings(
    data: SettingsUpdate,
    current_user: User = Depends(get_current_user),
    repo: SettingsRepository = Depends(get_settings_repository),
):
    """Partial update; bank details are merged field by field."""
    return ok("Settings updated successfully", repo.update(current_user.id, data))


@router.delete("", response_model=ApiResponse[SettingsOut])
def delete_settings(
    current_user: User = Depends(get_current_user),
    repo: SettingsRepository = Depends(get_settings_repository),
):
    return ok("Settings deleted successfully", repo.delete(current_user.id))
