from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel


def _stringify(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [_stringify(v) for v in value]
    if isinstance(value, dict):
        return {k: _stringify(v) for k, v in value.items()}
    return value


class Record(BaseModel):
    """Base class for persisted documents read back from the store."""
    id: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]):
        """Build a record from a raw document, turning ObjectIds into strings."""
        data = {k: _stringify(v) for k, v in doc.items() if k != "_id"}
        data["id"] = str(doc["_id"])
        return cls.model_validate(data)
