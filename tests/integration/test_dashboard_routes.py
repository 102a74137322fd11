"""
Tests for the dashboard API routes.
"""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_ghl_client, get_metrics_cache, get_tag_counts_caches
from app.main import app
from app.services.call_metrics_service import CallMetrics
from app.services.ghl.client import UpstreamFetchFailed
from app.services.ghl.filter_builder import PITCHED_DS_TAGS
from tests.fakes import FakeGhlClient, make_contacts

client = TestClient(app)


@pytest.fixture
def override(metrics_cache, tag_counts_caches):
    def _apply(ghl_client=None):
        app.dependency_overrides[get_metrics_cache] = lambda: metrics_cache
        app.dependency_overrides[get_tag_counts_caches] = lambda: tag_counts_caches
        if ghl_client is not None:
            app.dependency_overrides[get_ghl_client] = lambda: ghl_client

    yield _apply
    app.dependency_overrides.clear()


def test_atc_conversions_counts_profile_tags(override):
    ghl = FakeGhlClient(
        search_responses=[
            {
                "contacts": make_contacts(0, 2, tags=["pitched ds atc day 1"])
                + make_contacts(2, 1, tags=["atc day 1"]),
                "total": 3,
            }
        ]
    )
    override(ghl)

    response = client.post("/api/atc-conversions", json={"dashboardType": "reactivation-pitched-ds"})

    assert response.status_code == 200
    data = response.json()
    assert data["dashboardType"] == "reactivation-pitched-ds"
    assert data["totalFetched"] == 3
    assert data["totalReported"] == 3
    assert data["tags"] == list(PITCHED_DS_TAGS)
    assert data["counts"]["pitched ds atc day 1"] == 2
    assert sum(data["counts"].values()) == 2


def test_atc_conversions_defaults_without_body(override):
    ghl = FakeGhlClient(search_responses=[{"contacts": []}])
    override(ghl)

    response = client.post("/api/atc-conversions", content=b"not json")

    assert response.status_code == 200
    assert response.json()["dashboardType"] == "lending-tower"
    assert response.json()["totalFetched"] == 0


def test_atc_conversions_served_from_cache(override):
    ghl = FakeGhlClient(search_responses=[{"contacts": make_contacts(0, 1, tags=["atc day 2"])}])
    override(ghl)

    first = client.post("/api/atc-conversions", json={"dashboardType": "lending-tower"})
    second = client.post("/api/atc-conversions", json={"dashboardType": "lending-tower"})

    assert first.json() == second.json()
    assert len(ghl.search_contacts.bodies) == 1


def test_atc_conversions_upstream_failure_is_502(override):
    ghl = FakeGhlClient()
    ghl.search_contacts = AsyncMock(side_effect=UpstreamFetchFailed(401, "Invalid JWT", "contact_search"))
    override(ghl)

    response = client.post("/api/atc-conversions", json={})

    assert response.status_code == 502
    assert response.json() == {"error": "GHL request failed", "details": "Invalid JWT"}


def test_atc_conversions_transport_error_is_500(override, tag_counts_caches):
    ghl = FakeGhlClient()
    ghl.search_contacts = AsyncMock(side_effect=httpx.ConnectTimeout("connect timed out"))
    override(ghl)

    response = client.post("/api/atc-conversions", json={"dashboardType": "reactivation-leads"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch tag conversions", "message": "connect timed out"}
    assert all(cache.get() is None for cache in tag_counts_caches.values())


def test_sms_contacts_page_proxy(override):
    ghl = FakeGhlClient(search_responses=[{"contacts": [{"id": "c-1"}], "total": 1}])
    override(ghl)

    response = client.post("/api/sms-messaging-costs", json={"page": 3, "pageLimit": 50})

    assert response.status_code == 200
    assert response.json() == {"contacts": [{"id": "c-1"}], "total": 1, "pageCost": 0.0}
    body = ghl.search_contacts.bodies[0]
    assert body["page"] == 3
    assert body["pageLimit"] == 50


def test_sms_cost_summary_route(override, monkeypatch):
    monkeypatch.setattr("app.services.ghl.sms_cost_service.settings.SMS_COST_PER_MESSAGE", 0.02)
    ghl = FakeGhlClient(
        export_pages=[{"messages": [{"id": "m-1", "status": "delivered"}, {"id": "m-2"}], "nextCursor": None}]
    )
    override(ghl)

    response = client.get("/api/sms-messaging-costs/summary", params={"status": "delivered"})

    assert response.status_code == 200
    data = response.json()
    assert data["totalMessages"] == 2
    assert data["totalCost"] == 0.02
    assert data["statusFilter"] == "delivered"
    assert data["costPerMessage"] == 0.02


def test_sms_contacts_page_transport_error_is_500(override):
    ghl = FakeGhlClient()
    ghl.search_contacts = AsyncMock(side_effect=httpx.ReadTimeout("read timed out"))
    override(ghl)

    response = client.post("/api/sms-messaging-costs", json={"page": 1})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch SMS contacts", "message": "read timed out"}


def test_sms_cost_summary_transport_error_is_500(override):
    ghl = FakeGhlClient()
    ghl.export_messages = AsyncMock(side_effect=httpx.ReadTimeout("read timed out"))
    override(ghl)

    response = client.get("/api/sms-messaging-costs/summary")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to compute SMS costs", "message": "read timed out"}


def test_sms_cost_summary_upstream_failure_is_502(override):
    ghl = FakeGhlClient()
    ghl.export_messages = AsyncMock(side_effect=UpstreamFetchFailed(503, "unavailable", "message_export"))
    override(ghl)

    response = client.get("/api/sms-messaging-costs/summary")

    assert response.status_code == 502
    assert response.json() == {"error": "GHL request failed", "details": "unavailable"}


def test_metrics_fresh_then_cached(override, monkeypatch):
    compute_mock = AsyncMock(return_value=CallMetrics(total_calls=2, inbound=1, outbound=1))
    monkeypatch.setattr("app.routes.metrics.compute_call_metrics", compute_mock)
    override()

    first = client.get("/api/metrics")
    second = client.get("/api/metrics")

    assert first.status_code == 200
    assert first.json()["cached"] is False
    assert first.json()["data"]["total_calls"] == 2
    assert "warning" not in first.json()
    assert second.json()["cached"] is True
    assert second.json()["lastUpdate"] == first.json()["lastUpdate"]
    assert compute_mock.await_count == 1


def test_metrics_warns_on_empty_table(override, monkeypatch):
    monkeypatch.setattr("app.routes.metrics.compute_call_metrics", AsyncMock(return_value=CallMetrics()))
    override()

    response = client.get("/api/metrics")

    assert response.status_code == 200
    assert response.json()["warning"] == "No calls found in database"


def test_metrics_falls_back_to_stale_cache_on_error(override, monkeypatch, metrics_cache, clock):
    metrics_cache.set(CallMetrics(total_calls=5).to_dict())
    clock.advance(600)
    monkeypatch.setattr(
        "app.routes.metrics.compute_call_metrics", AsyncMock(side_effect=RuntimeError("db down"))
    )
    override()

    response = client.get("/api/metrics")

    assert response.status_code == 200
    data = response.json()
    assert data["cached"] is True
    assert data["warning"] == "Using cached data due to fetch error"
    assert data["data"]["total_calls"] == 5


def test_metrics_error_without_cache_is_500(override, monkeypatch):
    monkeypatch.setattr(
        "app.routes.metrics.compute_call_metrics", AsyncMock(side_effect=RuntimeError("db down"))
    )
    override()

    response = client.get("/api/metrics")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch metrics", "message": "db down"}


def test_refresh_bypasses_valid_cache(override, monkeypatch, metrics_cache):
    metrics_cache.set(CallMetrics(total_calls=1).to_dict())
    monkeypatch.setattr(
        "app.routes.metrics.compute_call_metrics", AsyncMock(return_value=CallMetrics(total_calls=9))
    )
    override()

    response = client.post("/api/refresh")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["cached"] is False
    assert data["data"]["total_calls"] == 9
    assert metrics_cache.get()[0]["total_calls"] == 9


def test_refresh_failure_is_500(override, monkeypatch, metrics_cache):
    metrics_cache.set(CallMetrics(total_calls=1).to_dict())
    monkeypatch.setattr(
        "app.routes.metrics.compute_call_metrics", AsyncMock(side_effect=RuntimeError("timeout"))
    )
    override()

    response = client.post("/api/refresh")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to refresh metrics", "message": "timeout"}
    assert metrics_cache.get() is None


def test_request_id_header_is_set(override):
    override(FakeGhlClient(search_responses=[{"contacts": []}]))

    response = client.post("/api/atc-conversions", json={})

    assert response.headers["X-Request-ID"]
