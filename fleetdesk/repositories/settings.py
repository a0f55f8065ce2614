from typing import Any, Dict

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from fleetdesk.core.errors import ConflictError, NotFoundError, ValidationError
from fleetdesk.models.settings import CompanySettings
from fleetdesk.repositories.base import to_object_id, utcnow
from fleetdesk.schemas.settings import SettingsCreate, SettingsUpdate

# Codes that are stored uppercased
_UPPERCASE_FIELDS = ("gstNumber", "panNumber")


def _normalise(values: Dict[str, Any]) -> Dict[str, Any]:
    for name in _UPPERCASE_FIELDS:
        if values.get(name):
            values[name] = values[name].upper()
    bank = values.get("bankDetails")
    if bank and bank.get("ifscCode"):
        bank["ifscCode"] = bank["ifscCode"].upper()
    return values


class SettingsRepository:
    """The company profile of each user; a user has at most one."""
    not_found_message = "Settings not found"
    conflict_message = "Settings already exist for this user"

    def __init__(self, db: Database):
        self.collection = db["settings"]

    def _owner(self, owner_id: str) -> Dict[str, Any]:
        return {"userId": to_object_id(owner_id)}

    def get(self, owner_id: str) -> CompanySettings:
        doc = self.collection.find_one(self._owner(owner_id))
        if doc is None:
            raise NotFoundError(self.not_found_message)
        return CompanySettings.from_document(doc)

    def create(self, owner_id: str, data: SettingsCreate) -> CompanySettings:
        if self.collection.find_one(self._owner(owner_id)):
            raise ConflictError(self.conflict_message)
        now = utcnow()
        doc = _normalise(data.model_dump())
        doc.update(self._owner(owner_id), createdAt=now, updatedAt=now)
        try:
            doc["_id"] = self.collection.insert_one(doc).inserted_id
        except DuplicateKeyError:
            raise ConflictError(self.conflict_message)
        return CompanySettings.from_document(doc)

    def update(self, owner_id: str, data: SettingsUpdate) -> CompanySettings:
        values = _normalise(data.model_dump(exclude_unset=True, exclude_none=True))
        if not values:
            raise ValidationError("No valid fields provided for update")

        changes: Dict[str, Any] = {"updatedAt": utcnow()}
        # Bank details merge field by field into the stored sub-document
        for name, value in values.pop("bankDetails", {}).items():
            changes[f"bankDetails.{name}"] = value
        changes.update(values)

        doc = self.collection.find_one_and_update(
            self._owner(owner_id),
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError(self.not_found_message)
        return CompanySettings.from_document(doc)

    def delete(self, owner_id: str) -> CompanySettings:
        doc = self.collection.find_one_and_delete(self._owner(owner_id))
        if doc is None:
            raise NotFoundError(self.not_found_message)
        return CompanySettings.from_document(doc)
