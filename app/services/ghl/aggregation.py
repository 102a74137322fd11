"""Tag and SMS cost aggregation over fetched GHL records."""

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from app.models.domain.ghl_domain import SmsMessage

DEFAULT_MESSAGE_STATUS = "pending"
# Message statuses GHL reports on the conversations export
KNOWN_MESSAGE_STATUSES = frozenset(
    {
        "pending",
        "scheduled",
        "sent",
        "delivered",
        "read",
        "undelivered",
        "failed",
        "connected",
        "opened",
        "clicked",
        "opt_out",
    }
)
SMS_COST_FIELD_ID = "TPtURWK4SpGRRn90jsXG"


def aggregate_tags(
    records: Iterable[Mapping[str, Any]], category_universe: Sequence[str]
) -> dict[str, int]:
    """
    Count tag occurrences restricted to `category_universe`.

    Every universe key is present in the result, zero when unmatched. Tags
    outside the universe are ignored.
    """
    counts = {category: 0 for category in category_universe}
    for record in records:
        tags = record.get("tags")
        if not isinstance(tags, list):
            continue
        for tag in tags:
            if isinstance(tag, str) and tag in counts:
                counts[tag] += 1
    return counts


def normalize_status(status: Any) -> str:
    """Lowercased known status; absent or unrecognized values count as pending."""
    if isinstance(status, str):
        normalized = status.strip().lower()
        if normalized in KNOWN_MESSAGE_STATUSES:
            return normalized
    return DEFAULT_MESSAGE_STATUS


def normalize_status_filter(status_filter: str | None) -> str | None:
    """Case-insensitive form of a requested status; blank means no filter."""
    if status_filter is None or not status_filter.strip():
        return None
    return status_filter.strip().lower()


def total_cost(
    messages: Iterable[SmsMessage],
    per_unit_cost: float,
    status_filter: str | None = None,
) -> float:
    """Count messages (optionally only one status, case-insensitive) times the unit cost."""
    wanted = normalize_status_filter(status_filter)
    count = sum(
        1 for message in messages if wanted is None or normalize_status(message.status) == wanted
    )
    return count * per_unit_cost


def count_by_status(messages: Iterable[SmsMessage]) -> dict[str, int]:
    return dict(Counter(normalize_status(message.status) for message in messages))


def count_by_direction(messages: Iterable[SmsMessage]) -> dict[str, int]:
    return dict(
        Counter(
            message.direction.lower()
            if isinstance(message.direction, str) and message.direction
            else "unknown"
            for message in messages
        )
    )


def contact_sms_cost(contact: Mapping[str, Any]) -> float:
    """SMS cost stored on a contact's custom field; 0 when absent or not numeric."""
    custom_fields = contact.get("customFields")
    if not isinstance(custom_fields, list):
        return 0.0
    for custom_field in custom_fields:
        if isinstance(custom_field, dict) and custom_field.get("id") == SMS_COST_FIELD_ID:
            value = custom_field.get("value")
            if isinstance(value, list):
                value = value[0] if value else None
            try:
                return float(value or 0)
            except (TypeError, ValueError):
                return 0.0
    return 0.0
