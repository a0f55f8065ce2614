import logging
from typing import Optional, Tuple

from pymongo.database import Database

from fleetdesk.core.config import settings
from fleetdesk.core.errors import AuthenticationError, NotFoundError, ValidationError
from fleetdesk.core.security import (
    create_access_token,
    create_reset_token,
    decode_reset_token,
    hash_password,
    verify_password,
)
from fleetdesk.models.user import User, UserRole
from fleetdesk.repositories.users import UserRepository
from fleetdesk.schemas.auth import LoginRequest, RegisterRequest
from fleetdesk.services.email_service import EmailService

logger = logging.getLogger(__name__)


def check_password_policy(password: str) -> None:
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long")


class AuthService:
    """
    Account lifecycle: registration, login and password reset.

    Tokens are stateless JWTs, so logout needs no server side work.
    """

    def __init__(self, db: Database, email_service: Optional[EmailService] = None):
        self.users = UserRepository(db)
        self.email_service = email_service

    def register(self, data: RegisterRequest) -> Tuple[User, str]:
        check_password_policy(data.password)

        role = data.role
        if role == UserRole.ADMIN and not settings.ALLOW_ADMIN_SIGNUP:
            logger.warning(f"Admin signup requested for {data.email} while disabled; creating a regular user")
            role = UserRole.USER

        user = self.users.create(
            email=data.email,
            password_hash=hash_password(data.password),
            business_name=data.businessName,
            role=role,
        )
        logger.info(f"Registered user {user.id} ({user.role.value})")
        return user, create_access_token(user)

    def login(self, data: LoginRequest) -> Tuple[User, str]:
        user = self.users.get_by_email(data.email)
        # Same answer for unknown email and wrong password
        if user is None or not verify_password(data.password, user.passwordHash):
            logger.info(f"Failed login for {data.email}")
            raise AuthenticationError("Invalid credentials")
        return user, create_access_token(user)

    def forgot_password(self, email: str) -> Optional[str]:
        """
        Issue a reset token and mail it to the user.

        Returns the token in development so it can be used without a mailbox,
        None otherwise.
        """
        user = self.users.get_by_email(email)
        if user is None:
            raise NotFoundError("No user found with this email address")

        token = create_reset_token(user.id)
        if self.email_service is not None:
            self.email_service.send_password_reset(user.email, token)
        return token if settings.is_development else None

    def reset_password(self, token: str, new_password: str) -> None:
        check_password_policy(new_password)
        user_id = decode_reset_token(token)
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        self.users.set_password(user.id, hash_password(new_password))
        logger.info(f"Password reset for user {user.id}")
