from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel
from pymongo.database import Database

from fleetdesk.core.config import settings
from fleetdesk.core.errors import AuthenticationError, AuthorizationError, ValidationError
from fleetdesk.db.session import get_db
from fleetdesk.models.user import User
from fleetdesk.repositories.users import UserRepository

# Security scheme for Swagger UI; missing credentials are reported by get_current_user
security = HTTPBearer(auto_error=False)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

RESET_TOKEN_TYPE = "reset"


class TokenPayload(BaseModel):
    """Model representing JWT token payload."""
    userId: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    type: Optional[str] = None
    exp: Optional[int] = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Malformed stored hash
        return False


def _encode(claims: Dict[str, Any], expires_minutes: int) -> str:
    to_encode = dict(claims)
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user: User) -> str:
    return _encode(
        {"userId": user.id, "email": user.email, "role": user.role.value},
        settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def create_reset_token(user_id: str) -> str:
    return _encode({"userId": user_id, "type": RESET_TOKEN_TYPE}, settings.RESET_TOKEN_EXPIRE_MINUTES)


def decode_access_token(token: str) -> TokenPayload:
    """Verify and decode a bearer token. Reset tokens are not accepted here."""
    try:
        payload = TokenPayload(**jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]))
    except JWTError:
        raise AuthenticationError("Invalid or expired token")
    if payload.type is not None or not payload.userId:
        raise AuthenticationError("Invalid or expired token")
    return payload


def decode_reset_token(token: str) -> str:
    """Return the user id carried by a password reset token."""
    try:
        payload = TokenPayload(**jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]))
    except ExpiredSignatureError:
        raise ValidationError("Reset token has expired")
    except JWTError:
        raise ValidationError("Invalid reset token")
    if payload.type != RESET_TOKEN_TYPE or not payload.userId:
        raise ValidationError("Invalid reset token")
    return payload.userId


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(get_db),
) -> User:
    """Dependency to get the current user from the bearer token."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    payload = decode_access_token(credentials.credentials)

    user = UserRepository(db).get_by_id(payload.userId)
    if user is None:
        raise AuthenticationError("User no longer exists")
    return user


def admin_required(current_user: User = Depends(get_current_user)) -> User:
    """Dependency to require admin role."""
    if not current_user.is_admin:
        raise AuthorizationError()
    return current_user
