import logging
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from fleetdesk.core.errors import ConflictError, NotFoundError
from fleetdesk.models.base import Record

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

# Newest first; _id breaks ties between documents created in the same millisecond
NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id, returning None for anything that cannot be an ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class OwnedRepository(Generic[R]):
    """
    Storage for one collection whose documents belong to a single user.

    Every lookup is filtered by ``userId``; a document owned by someone else
    is reported exactly like a missing one.
    """
    collection_name: str
    record_type: Type[R]
    not_found_message: str = "Resource not found"
    conflict_message: str = "Resource already exists"

    def __init__(self, db: Database):
        self.db = db
        self.collection = db[self.collection_name]

    def _owned_filter(self, owner_id: str, record_id: str) -> Dict[str, Any]:
        oid = to_object_id(record_id)
        owner = to_object_id(owner_id)
        if oid is None or owner is None:
            raise NotFoundError(self.not_found_message)
        return {"_id": oid, "userId": owner}

    def _to_records(self, documents: List[Dict[str, Any]]) -> List[R]:
        return [self.record_type.from_document(doc) for doc in documents]

    def _insert(self, document: Dict[str, Any]) -> R:
        now = utcnow()
        document.setdefault("createdAt", now)
        document.setdefault("updatedAt", now)
        try:
            result = self.collection.insert_one(document)
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key on insert into {self.collection_name}: {e}")
            raise ConflictError(self.conflict_message)
        document["_id"] = result.inserted_id
        return self.record_type.from_document(document)

    def _update(self, query: Dict[str, Any], changes: Dict[str, Any]) -> R:
        changes["updatedAt"] = utcnow()
        try:
            doc = self.collection.find_one_and_update(
                query,
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key on update in {self.collection_name}: {e}")
            raise ConflictError(self.conflict_message)
        if doc is None:
            raise NotFoundError(self.not_found_message)
        return self.record_type.from_document(doc)

    def get(self, owner_id: str, record_id: str) -> R:
        doc = self.collection.find_one(self._owned_filter(owner_id, record_id))
        if doc is None:
            raise NotFoundError(self.not_found_message)
        return self.record_type.from_document(doc)

    def delete(self, owner_id: str, record_id: str, extra: Optional[Dict[str, Any]] = None) -> R:
        """Hard delete; ``extra`` adds conditions the document must also meet."""
        query = self._owned_filter(owner_id, record_id)
        if extra:
            query.update(extra)
        doc = self.collection.find_one_and_delete(query)
        if doc is None:
            raise NotFoundError(self.not_found_message)
        return self.record_type.from_document(doc)

    def recent(self, owner_id: str, limit: int = 5, extra: Optional[Dict[str, Any]] = None) -> List[R]:
        query = {"userId": to_object_id(owner_id)}
        if extra:
            query.update(extra)
        cursor = self.collection.find(query).sort(NEWEST_FIRST).limit(limit)
        return self._to_records(list(cursor))
