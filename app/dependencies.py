"""
FastAPI dependencies handing request handlers their shared collaborators.

Everything here lives on `app.state`; tests swap it out through
`app.dependency_overrides`.
"""

from collections.abc import AsyncIterator

from fastapi import Request

from app.services.ghl.client import GhlClient
from app.services.ghl.filter_builder import DashboardType
from app.services.metrics_cache import MetricsCache


async def get_ghl_client(request: Request) -> AsyncIterator[GhlClient]:
    client = getattr(request.app.state, "ghl_client", None)
    if client is not None:
        yield client
        return

    # Lifespan did not run (e.g. a bare TestClient); the client lives for this request only
    client = GhlClient()
    try:
        yield client
    finally:
        await client.close()


def get_metrics_cache(request: Request) -> MetricsCache:
    return request.app.state.metrics_cache


def get_tag_counts_caches(request: Request) -> dict[DashboardType, MetricsCache]:
    return request.app.state.tag_counts_caches
