"""
ATC conversion counts: profile -> filter tree -> paginated fetch -> tag counts.
"""

from typing import Any

from app.infrastructure.observability.logging import get_logger
from app.services.ghl.aggregation import aggregate_tags
from app.services.ghl.client import GhlClient
from app.services.ghl.filter_builder import DashboardType, get_profile
from app.services.ghl.pagination import fetch_all_contacts

logger = get_logger(__name__)


async def get_tag_conversion_counts(client: GhlClient, dashboard_type: DashboardType) -> dict[str, Any]:
    """
    Count the profile's tags across every contact matching its filters.

    Raises:
        UpstreamFetchFailed: If any search round fails; no partial counts are returned
    """
    profile = get_profile(dashboard_type)
    result = await fetch_all_contacts(client.search_contacts, profile.build_filters())
    counts = aggregate_tags(result.records.values(), profile.tags)

    logger.info(
        "Tag conversion counts computed",
        dashboard_type=dashboard_type.value,
        total_fetched=result.total_fetched,
        reported_total=result.reported_total,
        rounds=result.rounds,
        ceiling_reached=result.ceiling_reached,
    )

    return {
        "totalReported": result.total,
        "totalFetched": result.total_fetched,
        "counts": counts,
        "tags": list(profile.tags),
        "dashboardType": dashboard_type.value,
    }
