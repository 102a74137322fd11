"""
SMS messaging cost routes.
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from app.dependencies import get_ghl_client
from app.infrastructure.observability.logging import get_logger
from app.models.api.analytics_request import SmsContactsPageRequest
from app.models.api.analytics_response import SmsCostSummaryResponse
from app.services.ghl.client import GhlClient, UpstreamFetchFailed
from app.services.ghl.sms_cost_service import get_sms_contacts_page, get_sms_cost_summary

logger = get_logger(__name__)

router = APIRouter(prefix="/api/sms-messaging-costs", tags=["sms-messaging-costs"])


def _error_response(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": error, "message": str(exc) or type(exc).__name__},
    )


@router.post("")
async def sms_contacts_page(
    payload: SmsContactsPageRequest | None = None,
    client: GhlClient = Depends(get_ghl_client),
):
    """One page of contacts with an SMS cost, upstream JSON plus `pageCost`."""
    payload = payload or SmsContactsPageRequest()
    try:
        return await get_sms_contacts_page(client, page=payload.page, page_limit=payload.page_limit)
    except UpstreamFetchFailed:
        raise
    except Exception as e:
        logger.error("Error fetching SMS contacts page", page=payload.page, error=str(e), error_type=type(e).__name__)
        return _error_response("Failed to fetch SMS contacts", e)


@router.get("/summary", response_model=SmsCostSummaryResponse)
async def sms_cost_summary(
    status_filter: str | None = Query(default=None, alias="status", description="Only price messages with this status"),
    client: GhlClient = Depends(get_ghl_client),
):
    """Flat-rate cost of every exported SMS."""
    try:
        return await get_sms_cost_summary(client, status_filter=status_filter)
    except UpstreamFetchFailed:
        raise
    except Exception as e:
        logger.error("Error computing SMS cost summary", error=str(e), error_type=type(e).__name__)
        return _error_response("Failed to compute SMS costs", e)
