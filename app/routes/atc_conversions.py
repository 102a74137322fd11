"""
ATC conversion routes.
Tag counts for the lending and reactivation dashboards, computed from GHL.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.dependencies import get_ghl_client, get_tag_counts_caches
from app.infrastructure.observability.logging import get_logger
from app.models.api.analytics_request import TagConversionRequest
from app.models.api.analytics_response import TagConversionResponse
from app.services.ghl.client import GhlClient, UpstreamFetchFailed
from app.services.ghl.filter_builder import DashboardType
from app.services.ghl.tag_conversion_service import get_tag_conversion_counts
from app.services.metrics_cache import MetricsCache

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["atc-conversions"])


async def _read_dashboard_type(request: Request) -> DashboardType:
    """Dashboard selector from the body; missing, invalid or unknown means the default."""
    try:
        payload = TagConversionRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return DashboardType.parse(None)
    return DashboardType.parse(payload.dashboard_type)


@router.post("/atc-conversions", response_model=TagConversionResponse)
async def atc_conversions(
    request: Request,
    client: GhlClient = Depends(get_ghl_client),
    caches: dict[DashboardType, MetricsCache] = Depends(get_tag_counts_caches),
):
    """Count profile tags across every matching GHL contact. Upstream failures become 502, anything else 500."""
    dashboard_type = await _read_dashboard_type(request)
    cache = caches[dashboard_type]

    if cache.is_valid():
        cached, _ = cache.get()
        logger.info("Returning cached tag counts", dashboard_type=dashboard_type.value)
        return cached

    try:
        counts = await get_tag_conversion_counts(client, dashboard_type)
    except UpstreamFetchFailed:
        raise
    except Exception as e:
        logger.error(
            "Error fetching tag conversions",
            dashboard_type=dashboard_type.value,
            error=str(e),
            error_type=type(e).__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch tag conversions", "message": str(e) or type(e).__name__},
        )

    cache.set(counts)
    return counts
