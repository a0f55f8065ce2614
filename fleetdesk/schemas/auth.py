from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from fleetdesk.models.user import UserRole
from fleetdesk.schemas.common import ShortStr


class RegisterRequest(BaseModel):
    """Schema for creating an account."""
    email: EmailStr = Field(..., description="Login email, stored lowercased")
    password: str = Field(..., description="Plain password, hashed before storage")
    businessName: ShortStr = Field(..., description="Name of the business")
    role: UserRole = Field(UserRole.USER, description="Only honoured when admin signup is enabled")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Reset token issued by forgot-password")
    newPassword: str = Field(..., description="Replacement password")


class UserOut(BaseModel):
    """Outward view of a user. The password hash never leaves the service."""
    id: str
    email: str
    role: UserRole
    businessName: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AuthData(BaseModel):
    user: UserOut
    token: str


class ProfileData(BaseModel):
    user: UserOut


class ResetTokenData(BaseModel):
    resetToken: Optional[str] = Field(None, description="Only echoed in development")
