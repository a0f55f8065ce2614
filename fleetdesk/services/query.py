"""
Typed list filters and pagination shared by the repositories.

Filters are built as explicit values of three kinds (text search, exact match,
date range), checked, and only then translated into a store query.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pymongo.collection import Collection

from fleetdesk.core.config import settings
from fleetdesk.core.errors import ValidationError
from fleetdesk.schemas.common import Pagination


@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive substring match against any of ``fields``."""
    fields: Tuple[str, ...]
    term: str


@dataclass(frozen=True)
class ExactMatch:
    field: str
    value: Any
    ignore_case: bool = False


@dataclass(frozen=True)
class DateRange:
    """Inclusive range; either bound may be open."""
    field: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None


Filter = Union[TextSearch, ExactMatch, DateRange]


def _is_active(f: Filter) -> bool:
    if isinstance(f, TextSearch):
        return bool(f.term and f.term.strip()) and bool(f.fields)
    if isinstance(f, ExactMatch):
        return f.value is not None
    if isinstance(f, DateRange):
        return f.start is not None or f.end is not None
    raise TypeError(f"Unknown filter kind: {type(f).__name__}")


def _translate(f: Filter) -> Dict[str, Any]:
    if isinstance(f, TextSearch):
        pattern = re.escape(f.term.strip())
        clauses = [{name: {"$regex": pattern, "$options": "i"}} for name in f.fields]
        return clauses[0] if len(clauses) == 1 else {"$or": clauses}
    if isinstance(f, ExactMatch):
        if f.ignore_case and isinstance(f.value, str):
            return {f.field: {"$regex": f"^{re.escape(f.value.strip())}$", "$options": "i"}}
        return {f.field: f.value}
    bounds = {}
    if f.start is not None:
        bounds["$gte"] = f.start
    if f.end is not None:
        bounds["$lte"] = f.end
    return {f.field: bounds}


def build_query(filters: Sequence[Filter], owner_id: Any = None) -> Dict[str, Any]:
    """
    Combine the active filters (and the owner scope, when given) into one query.

    Inactive filters such as blank search terms or fully open ranges are
    dropped. A range whose start lies after its end is rejected.
    """
    clauses: List[Dict[str, Any]] = []
    if owner_id is not None:
        clauses.append({"userId": owner_id})
    for f in filters:
        if not _is_active(f):
            continue
        if isinstance(f, DateRange) and f.start and f.end and f.start > f.end:
            raise ValidationError(f"Invalid {f.field} range: start is after end")
        clauses.append(_translate(f))

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_params(cls, page: Optional[int] = None, limit: Optional[int] = None) -> "PageRequest":
        """Clamp page to >= 1 and limit to [1, MAX_PAGE_SIZE]."""
        page = max(1, page or 1)
        limit = limit or settings.DEFAULT_PAGE_SIZE
        limit = min(settings.MAX_PAGE_SIZE, max(1, limit))
        return cls(page=page, limit=limit)


def build_pagination(page_request: PageRequest, total: int) -> Pagination:
    total_pages = math.ceil(total / page_request.limit)
    return Pagination(
        currentPage=page_request.page,
        totalPages=total_pages,
        totalCount=total,
        hasNext=page_request.page < total_pages,
        hasPrev=page_request.page > 1,
    )


def paginate(
    collection: Collection,
    query: Dict[str, Any],
    page_request: PageRequest,
    sort: Sequence[Tuple[str, int]],
) -> Tuple[List[Dict[str, Any]], Pagination]:
    """Fetch one page of documents and the pagination block describing it."""
    documents = list(
        collection.find(query)
        .sort(list(sort))
        .skip(page_request.skip)
        .limit(page_request.limit)
    )
    total = collection.count_documents(query)
    return documents, build_pagination(page_request, total)
