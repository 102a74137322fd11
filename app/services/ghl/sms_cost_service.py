"""
SMS messaging cost service.
Drains the cursor-only message export and prices it at a flat per-message rate,
and proxies the single-page contact listing used by the SMS costs table.
"""

from typing import Any

from app.config import settings
from app.infrastructure.observability.logging import get_logger
from app.models.domain.ghl_domain import (
    FilterGroup,
    FilterLeaf,
    FilterOperator,
    SmsMessage,
    all_of,
    any_of,
    serialize_filters,
)
from app.services.ghl.aggregation import (
    SMS_COST_FIELD_ID,
    contact_sms_cost,
    count_by_direction,
    count_by_status,
    normalize_status_filter,
    total_cost,
)
from app.services.ghl.client import GhlClient
from app.services.ghl.pagination import MAX_ROUNDS, PAGE_LIMIT

logger = get_logger(__name__)


async def fetch_all_messages(
    client: GhlClient, limit: int = PAGE_LIMIT, max_rounds: int = MAX_ROUNDS
) -> tuple[list[SmsMessage], int]:
    """
    Follow `nextCursor` through the message export.

    Returns:
        Tuple of (messages deduplicated by id, total reported on the first page)
    """
    messages: dict[str, SmsMessage] = {}
    reported_total = 0
    cursor: str | None = None

    for round_number in range(1, max_rounds + 1):
        data = await client.export_messages(cursor=cursor, limit=limit)

        page = data.get("messages")
        page = page if isinstance(page, list) else []
        if round_number == 1 and isinstance(data.get("total"), int):
            reported_total = data["total"]

        for raw in page:
            if not isinstance(raw, dict):
                continue
            message = SmsMessage(raw)
            if message.id and message.id not in messages:
                messages[message.id] = message

        next_cursor = data.get("nextCursor")
        logger.debug(
            "Fetched message export page",
            round=round_number,
            page_messages=len(page),
            merged_messages=len(messages),
            has_next=bool(next_cursor),
        )

        if not page or not isinstance(next_cursor, str) or not next_cursor:
            break
        cursor = next_cursor
    else:
        logger.warning("Message export hit round ceiling", max_rounds=max_rounds, merged_messages=len(messages))

    return list(messages.values()), reported_total


async def get_sms_cost_summary(client: GhlClient, status_filter: str | None = None) -> dict[str, Any]:
    """Price every exported SMS at SMS_COST_PER_MESSAGE."""
    messages, reported_total = await fetch_all_messages(client)
    per_unit_cost = settings.SMS_COST_PER_MESSAGE
    cost = total_cost(messages, per_unit_cost, status_filter)

    logger.info(
        "SMS cost summary computed",
        total_messages=len(messages),
        status_filter=status_filter,
        total_cost=cost,
    )

    return {
        "totalMessages": len(messages),
        "totalReported": max(reported_total, len(messages)),
        "byStatus": count_by_status(messages),
        "byDirection": count_by_direction(messages),
        "costPerMessage": per_unit_cost,
        "totalCost": round(cost, 2),
        "statusFilter": normalize_status_filter(status_filter),
    }


def sms_contacts_filters() -> FilterGroup:
    return any_of(all_of(FilterLeaf(f"customFields.{SMS_COST_FIELD_ID}", FilterOperator.EQ, "1")))


async def get_sms_contacts_page(client: GhlClient, page: int = 1, page_limit: int = 20) -> dict[str, Any]:
    """One page of contacts carrying an SMS cost, newest first, plus that page's cost."""
    body = {
        "filters": serialize_filters(sms_contacts_filters()),
        "page": page,
        "pageLimit": page_limit,
        "sort": [{"field": "dateAdded", "direction": "desc"}],
    }
    data = await client.search_contacts(body)

    contacts = data.get("contacts")
    contacts = contacts if isinstance(contacts, list) else []
    page_cost = sum(contact_sms_cost(contact) for contact in contacts if isinstance(contact, dict))

    return {**data, "pageCost": page_cost}
