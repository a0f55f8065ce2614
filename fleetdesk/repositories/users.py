import logging
from typing import Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from fleetdesk.core.errors import ConflictError, NotFoundError
from fleetdesk.models.user import User, UserRole
from fleetdesk.repositories.base import to_object_id, utcnow

logger = logging.getLogger(__name__)


class UserRepository:
    """Accounts, keyed by lowercased email."""

    def __init__(self, db: Database):
        self.collection = db["users"]

    def get_by_email(self, email: str) -> Optional[User]:
        doc = self.collection.find_one({"email": email.strip().lower()})
        return User.from_document(doc) if doc else None

    def get_by_id(self, user_id: str) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return User.from_document(doc) if doc else None

    def create(self, email: str, password_hash: str, business_name: str, role: UserRole = UserRole.USER) -> User:
        email = email.strip().lower()
        if self.collection.find_one({"email": email}):
            raise ConflictError("User with this email already exists")

        now = utcnow()
        doc = {
            "email": email,
            "passwordHash": password_hash,
            "role": role.value,
            "businessName": business_name.strip(),
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            doc["_id"] = self.collection.insert_one(doc).inserted_id
        except DuplicateKeyError:
            logger.warning(f"Concurrent registration for {email}")
            raise ConflictError("User with this email already exists")
        return User.from_document(doc)

    def set_password(self, user_id: str, password_hash: str) -> None:
        result = self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {"passwordHash": password_hash, "updatedAt": utcnow()}},
        )
        if result.matched_count == 0:
            raise NotFoundError("User not found")
