"""
Call analytics service.

Reads every call record from the Supabase calls table and rolls it up into
direction, status and disconnection-reason counts.
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from app.config import settings
from app.db.helpers import fetch_all_paged
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

CALLS_PAGE_SIZE = 1000

# Keys the dashboards render as "No Data"
NO_STATUS_KEY = "sin_status"
NO_REASON_KEY = "sin_razon"


@dataclass(slots=True)
class CallMetrics:
    total_calls: int = 0
    inbound: int = 0
    outbound: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    by_disconnection_reason: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


async def fetch_all_calls() -> list[dict[str, Any]]:
    """Every row of the configured calls table, ordered by id."""
    logger.info("Fetching all calls", table=settings.SUPABASE_TABLE)
    calls = await fetch_all_paged(settings.SUPABASE_TABLE, order_by="id", page_size=CALLS_PAGE_SIZE)
    logger.info("Fetched calls", total_calls=len(calls))
    return calls


def process_call_data(calls: Iterable[Mapping[str, Any]]) -> CallMetrics:
    metrics = CallMetrics()

    for call in calls:
        metrics.total_calls += 1

        direction = call.get("direction")
        if direction == "inbound":
            metrics.inbound += 1
        elif direction == "outbound":
            metrics.outbound += 1

        status = call.get("call_status") or NO_STATUS_KEY
        metrics.by_status[status] = metrics.by_status.get(status, 0) + 1

        reason = call.get("disconnection_reason") or NO_REASON_KEY
        metrics.by_disconnection_reason[reason] = metrics.by_disconnection_reason.get(reason, 0) + 1

    return metrics


async def compute_call_metrics() -> CallMetrics:
    calls = await fetch_all_calls()
    return process_call_data(calls)
