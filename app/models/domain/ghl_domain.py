# app/models/domain/ghl_domain.py
"""
GHL Domain Models
Filter trees, pagination cursors and record shapes used when talking to the
LeadConnector (GHL) search and export endpoints.

The client only builds and serializes filter trees; the server evaluates them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

Scalar = Union[str, int, float, bool]


class Combinator(str, Enum):
    AND = "AND"
    OR = "OR"


class FilterOperator(str, Enum):
    EQ = "eq"
    CONTAINS = "contains"
    RANGE = "range"
    MATCH = "match"


@dataclass(frozen=True)
class RangeBounds:
    """Bounds for a `range` leaf. Unset bounds are omitted on the wire."""

    gt: float | None = None
    gte: float | None = None
    lt: float | None = None
    lte: float | None = None

    def to_dict(self) -> dict[str, float]:
        bounds = {"gt": self.gt, "gte": self.gte, "lt": self.lt, "lte": self.lte}
        return {key: value for key, value in bounds.items() if value is not None}


@dataclass(frozen=True)
class FilterLeaf:
    field: str
    operator: FilterOperator
    value: Scalar | tuple[Scalar, ...] | RangeBounds

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.value, RangeBounds):
            value: Any = self.value.to_dict()
        elif isinstance(self.value, tuple):
            value = list(self.value)
        else:
            value = self.value
        return {"field": self.field, "operator": self.operator.value, "value": value}


@dataclass(frozen=True)
class FilterGroup:
    combinator: Combinator
    filters: tuple["FilterNode", ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.combinator.value,
            "filters": [node.to_dict() for node in self.filters],
        }


FilterNode = Union[FilterGroup, FilterLeaf]


def all_of(*filters: FilterNode) -> FilterGroup:
    return FilterGroup(Combinator.AND, tuple(filters))


def any_of(*filters: FilterNode) -> FilterGroup:
    return FilterGroup(Combinator.OR, tuple(filters))


def serialize_filters(root: FilterNode) -> list[dict[str, Any]]:
    """Wire format for the `filters` request field: a list of top-level nodes."""
    return [root.to_dict()]


class PaginationMode(str, Enum):
    PAGE_NUMBER = "page_number"
    SEARCH_AFTER = "search_after"


@dataclass
class PageCursor:
    """
    Position of a paginated fetch session.

    Starts in page-number mode. Once a response hands back a searchAfter token
    the cursor switches to search-after mode and stays there.
    """

    mode: PaginationMode = PaginationMode.PAGE_NUMBER
    page: int = 1
    token: str | list | None = None

    def adopt_token(self, token: str | list) -> None:
        self.mode = PaginationMode.SEARCH_AFTER
        self.token = token

    def advance(self) -> None:
        if self.mode is PaginationMode.PAGE_NUMBER:
            self.page += 1

    def apply(self, body: dict[str, Any]) -> dict[str, Any]:
        """Add the page or searchAfter field to a request body."""
        if self.mode is PaginationMode.PAGE_NUMBER:
            body["page"] = self.page
        elif self.token:
            body["searchAfter"] = self.token
        return body


@dataclass
class FetchResult:
    """Outcome of a paginated fetch session."""

    records: dict[str, dict[str, Any]] = field(default_factory=dict)
    reported_total: int = 0
    rounds: int = 0
    ceiling_reached: bool = False

    @property
    def total_fetched(self) -> int:
        return len(self.records)

    @property
    def total(self) -> int:
        return max(self.reported_total, len(self.records))


class SmsMessage:
    """Domain model for an exported conversation message."""

    def __init__(self, data: dict):
        self.id = data.get("id") if isinstance(data.get("id"), str) else ""
        self.status = data.get("status")
        self.direction = data.get("direction")
        self.date_added = self._parse_datetime(data.get("dateAdded"))
        self.raw_data = data

    def _parse_datetime(self, value: Any) -> datetime | None:
        if not value or not isinstance(value, str):
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
