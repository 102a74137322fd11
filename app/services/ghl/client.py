"""
LeadConnector (GHL) API client for contact search and message export.
Low-level HTTP client: one request per call, no retries.
A failed upstream call is surfaced to the caller straight away.
"""

from typing import Any

import httpx

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

CONTACT_SEARCH_PATH = "/contacts/search"
MESSAGE_EXPORT_PATH = "/conversations/messages/export"


class GhlApiError(Exception):
    """Base exception for GHL API errors."""


class UpstreamFetchFailed(GhlApiError):
    """GHL answered with a non-2xx status. Carries the response body verbatim."""

    def __init__(self, status_code: int, body: str, operation: str = "request"):
        super().__init__(f"GHL {operation} failed (HTTP {status_code})")
        self.status_code = status_code
        self.body = body
        self.operation = operation


class GhlClient:
    """
    Async client for the GHL endpoints the dashboards read from.

    Holds a single httpx.AsyncClient; call close() on shutdown.
    """

    def __init__(
        self,
        base_url: str | None = None,
        location_id: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.GHL_BASE_URL).rstrip("/")
        self.location_id = location_id if location_id is not None else settings.GHL_LOCATION_ID
        self._client = http_client or self._create_client()

    def _create_client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(settings.GHL_REQUEST_TIMEOUT)
        limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        return httpx.AsyncClient(timeout=timeout, limits=limits, headers=settings.ghl_headers())

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _handle_api_response(self, response: httpx.Response, operation: str) -> dict[str, Any]:
        """
        Validate a GHL response and return its JSON body.

        Non-2xx responses raise UpstreamFetchFailed. A 2xx body that is not a
        JSON object is logged and treated as empty.
        """
        logger.debug(
            f"GHL {operation} response",
            status_code=response.status_code,
            response_size=len(response.content),
        )

        if not response.is_success:
            logger.error(
                f"GHL {operation} failed",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise UpstreamFetchFailed(response.status_code, response.text, operation)

        try:
            data = response.json() if response.content else {}
        except ValueError as e:
            logger.warning(f"GHL {operation} returned invalid JSON", error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.warning(f"GHL {operation} returned unexpected payload", payload_type=type(data).__name__)
            return {}
        return data

    async def search_contacts(self, body: dict[str, Any]) -> dict[str, Any]:
        """
        POST a contact search. `locationId` is filled in when the body omits it.

        Raises:
            UpstreamFetchFailed: If GHL answers with a non-2xx status
        """
        payload = {"locationId": self.location_id, **body}
        response = await self._client.post(f"{self.base_url}{CONTACT_SEARCH_PATH}", json=payload)
        return self._handle_api_response(response, "contact_search")

    async def export_messages(
        self,
        cursor: str | None = None,
        limit: int = 100,
        channel: str = "SMS",
    ) -> dict[str, Any]:
        """
        GET one page of the message export, newest first.

        Raises:
            UpstreamFetchFailed: If GHL answers with a non-2xx status
        """
        params: dict[str, Any] = {
            "locationId": self.location_id,
            "channel": channel,
            "limit": limit,
            "sortBy": "dateAdded",
            "sortOrder": "desc",
        }
        if cursor:
            params["cursor"] = cursor

        response = await self._client.get(f"{self.base_url}{MESSAGE_EXPORT_PATH}", params=params)
        return self._handle_api_response(response, "message_export")
