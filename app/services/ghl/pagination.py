"""
Paginated contact fetch against the GHL search endpoint.

The same endpoint family answers either with page numbers or with a
searchAfter cursor. A session starts on page numbers and switches to the
cursor for good as soon as one response carries a token. Contacts are merged
by id (first one seen wins) and the loop stops on the first of:

    1. the merged set reaches the total reported on the first page
    2. a round returns no contacts
    3. page-number mode, no reported total, and a short page
    4. MAX_ROUNDS rounds (returns what was collected)

Rounds run strictly one after another; the cursor is stateful upstream.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from app.infrastructure.observability.logging import get_logger
from app.models.domain.ghl_domain import (
    FetchResult,
    FilterNode,
    PageCursor,
    PaginationMode,
    serialize_filters,
)

logger = get_logger(__name__)

PAGE_LIMIT = 100
MAX_ROUNDS = 200

SearchFn = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


def extract_records(data: dict[str, Any]) -> list[Any]:
    """Record array of a search response; `contacts` wins over `results`."""
    contacts = data.get("contacts")
    if isinstance(contacts, list):
        return contacts
    results = data.get("results")
    if isinstance(results, list):
        return results
    return []


def extract_total(data: dict[str, Any]) -> int:
    total = data.get("total")
    if isinstance(total, int) and not isinstance(total, bool) and total > 0:
        return total
    return 0


def extract_search_after(data: dict[str, Any]) -> str | list | None:
    token = data.get("searchAfter")
    if isinstance(token, (str, list)) and token:
        return token
    return None


def merge_records(target: dict[str, dict[str, Any]], records: list[Any]) -> int:
    """Insert records with a non-empty string id not yet present. Returns how many were added."""
    added = 0
    for record in records:
        if not isinstance(record, dict):
            continue
        record_id = record.get("id")
        if not isinstance(record_id, str) or not record_id:
            continue
        if record_id not in target:
            target[record_id] = record
            added += 1
    return added


async def fetch_all_contacts(
    search: SearchFn,
    filters: FilterNode,
    base_body: dict[str, Any] | None = None,
    page_limit: int = PAGE_LIMIT,
    max_rounds: int = MAX_ROUNDS,
) -> FetchResult:
    """
    Drain a contact search into a deduplicated result set.

    Args:
        search: Coroutine issuing one search request (e.g. GhlClient.search_contacts)
        filters: Filter tree sent with every round
        base_body: Extra request fields copied into every round (e.g. sort)
        page_limit: Page size requested per round
        max_rounds: Hard ceiling on rounds

    Returns:
        FetchResult with contacts keyed by id and the reported total

    Raises:
        UpstreamFetchFailed: Propagated from `search` on the first failing round
    """
    result = FetchResult()
    cursor = PageCursor()
    serialized_filters = serialize_filters(filters)

    logger.info("Starting paginated contact fetch", page_limit=page_limit, max_rounds=max_rounds)

    for round_number in range(1, max_rounds + 1):
        body = {**(base_body or {}), "pageLimit": page_limit, "filters": serialized_filters}
        cursor.apply(body)

        data = await search(body)
        result.rounds = round_number

        records = extract_records(data)
        if round_number == 1:
            result.reported_total = extract_total(data)

        added = merge_records(result.records, records)

        token = extract_search_after(data)
        if token is not None:
            cursor.adopt_token(token)

        logger.debug(
            "Fetched contact page",
            round=round_number,
            mode=cursor.mode.value,
            page=cursor.page,
            page_records=len(records),
            new_records=added,
            merged_records=len(result.records),
        )

        if result.reported_total and len(result.records) >= result.reported_total:
            break

        if not records:
            break

        if cursor.mode is PaginationMode.PAGE_NUMBER:
            if not result.reported_total and len(records) < page_limit:
                break
            cursor.advance()
    else:
        result.ceiling_reached = True
        logger.warning(
            "Contact fetch hit round ceiling",
            max_rounds=max_rounds,
            merged_records=len(result.records),
            reported_total=result.reported_total,
        )

    logger.info(
        "Finished paginated contact fetch",
        rounds=result.rounds,
        total_fetched=result.total_fetched,
        reported_total=result.reported_total,
        mode=cursor.mode.value,
    )
    return result
