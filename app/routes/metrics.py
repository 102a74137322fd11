"""
Call analytics routes.
Call metrics from Supabase, cached in memory for a few minutes.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.dependencies import get_metrics_cache
from app.infrastructure.observability.logging import get_logger
from app.models.api.analytics_response import CallMetricsResponse, RefreshResponse
from app.services.call_metrics_service import compute_call_metrics
from app.services.metrics_cache import MetricsCache

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["call-metrics"])


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, UTC).isoformat().replace("+00:00", "Z")


@router.get("/metrics", response_model=CallMetricsResponse, response_model_exclude_none=True)
async def get_metrics(cache: MetricsCache = Depends(get_metrics_cache)):
    """Cached call metrics; recomputed once the cache window lapses."""
    if cache.is_valid():
        data, stored_at = cache.get()
        logger.info("Returning cached call metrics")
        return {"data": data, "cached": True, "lastUpdate": _iso(stored_at)}

    try:
        logger.info("Computing fresh call metrics")
        metrics = await compute_call_metrics()
        data = metrics.to_dict()
        stored_at = cache.set(data)

        response = {"data": data, "cached": False, "lastUpdate": _iso(stored_at)}
        if metrics.total_calls == 0:
            response["warning"] = "No calls found in database"
        return response

    except Exception as e:
        logger.error("Error fetching call metrics", error=str(e), error_type=type(e).__name__)

        cached = cache.get()
        if cached is not None:
            data, stored_at = cached
            return {
                "data": data,
                "cached": True,
                "warning": "Using cached data due to fetch error",
                "lastUpdate": _iso(stored_at),
            }

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch metrics", "message": str(e) or type(e).__name__},
        )


@router.post("/refresh", response_model=RefreshResponse, response_model_exclude_none=True)
async def refresh_metrics(cache: MetricsCache = Depends(get_metrics_cache)):
    """Drop the cached call metrics and recompute them."""
    try:
        cache.clear()
        metrics = await compute_call_metrics()
        data = metrics.to_dict()
        stored_at = cache.set(data)

        logger.info("Call metrics cache refreshed", last_update=_iso(stored_at), total_calls=metrics.total_calls)
        return {"success": True, "data": data, "cached": False, "lastUpdate": _iso(stored_at)}

    except Exception as e:
        logger.error("Error refreshing call metrics", error=str(e), error_type=type(e).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to refresh metrics", "message": str(e) or type(e).__name__},
        )
