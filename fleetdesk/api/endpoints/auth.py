from fastapi import APIRouter, Depends, status

from fleetdesk.api.deps import get_auth_service
from fleetdesk.core.security import get_current_user
from fleetdesk.models.user import User
from fleetdesk.schemas.auth import (
    AuthData,
    ForgotPasswordRequest,
    LoginRequest,
    ProfileData,
    RegisterRequest,
    ResetPasswordRequest,
    ResetTokenData,
)
from fleetdesk.schemas.common import ApiResponse, ok
from fleetdesk.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=ApiResponse[AuthData], status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    """Create an account and return it together with a bearer token."""
    user, token = service.register(data)
    return ok("User registered successfully", {"user": user, "token": token})


@router.post("/login", response_model=ApiResponse[AuthData])
def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    user, token = service.login(data)
    return ok("Login successful", {"user": user, "token": token})


@router.get("/me", response_model=ApiResponse[ProfileData])
def get_profile(current_user: User = Depends(get_current_user)):
    return ok("Profile retrieved successfully", {"user": current_user})


@router.post("/logout", response_model=ApiResponse[None])
def logout(current_user: User = Depends(get_current_user)):
    """
    Tokens are not stored server side, so there is nothing to revoke;
    the client simply discards its token.
    """
    return ok("Logout successful")


@router.post("/forgot-password", response_model=ApiResponse[ResetTokenData])
def forgot_password(data: ForgotPasswordRequest, service: AuthService = Depends(get_auth_service)):
    """
    Mail a password reset token to the account's address.

    In development the token is also returned in the response.
    """
    token = service.forgot_password(data.email)
    return ok("Password reset instructions sent to your email", {"resetToken": token})


@router.post("/reset-password", response_model=ApiResponse[None])
def reset_password(data: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    service.reset_password(data.token, data.newPassword)
    return ok("Password reset successfully")
