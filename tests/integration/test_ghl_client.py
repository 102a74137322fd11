import json
import re

import pytest

from app.services.ghl.client import GhlClient, UpstreamFetchFailed
from app.services.ghl.filter_builder import DashboardType
from app.services.ghl.sms_cost_service import fetch_all_messages
from app.services.ghl.tag_conversion_service import get_tag_conversion_counts

SEARCH_URL = "https://services.leadconnectorhq.com/contacts/search"
EXPORT_URL = re.compile(r"https://services\.leadconnectorhq\.com/conversations/messages/export.*")


@pytest.mark.asyncio
async def test_search_contacts_adds_location_id(httpx_mock):
    client = GhlClient(location_id="loc-1")
    httpx_mock.add_response(method="POST", url=SEARCH_URL, json={"contacts": [{"id": "c-1"}], "total": 1})

    data = await client.search_contacts({"pageLimit": 10, "page": 1})
    await client.close()

    assert data["contacts"] == [{"id": "c-1"}]
    sent = json.loads(httpx_mock.get_request().content)
    assert sent == {"locationId": "loc-1", "pageLimit": 10, "page": 1}


@pytest.mark.asyncio
async def test_search_contacts_non_2xx_raises_with_body(httpx_mock):
    client = GhlClient(location_id="loc-1")
    httpx_mock.add_response(method="POST", url=SEARCH_URL, status_code=422, text="filters invalid")

    with pytest.raises(UpstreamFetchFailed) as exc:
        await client.search_contacts({})
    await client.close()

    assert exc.value.status_code == 422
    assert exc.value.body == "filters invalid"


@pytest.mark.asyncio
async def test_invalid_json_is_treated_as_empty(httpx_mock):
    client = GhlClient(location_id="loc-1")
    httpx_mock.add_response(method="POST", url=SEARCH_URL, content=b"<html>oops</html>")

    data = await client.search_contacts({})
    await client.close()

    assert data == {}


@pytest.mark.asyncio
async def test_tag_conversion_counts_end_to_end(httpx_mock):
    client = GhlClient(location_id="loc-1")
    httpx_mock.add_response(
        method="POST",
        url=SEARCH_URL,
        json={
            "contacts": [
                {"id": "c-1", "tags": ["atc day 1", "atc day 7"]},
                {"id": "c-2", "tags": ["atc day 1", "vip"]},
            ],
            "searchAfter": "cursor-1",
        },
    )
    httpx_mock.add_response(
        method="POST",
        url=SEARCH_URL,
        json={"contacts": [{"id": "c-2", "tags": ["atc day 1"]}, {"id": "c-3", "tags": ["atc day 331"]}]},
    )
    httpx_mock.add_response(method="POST", url=SEARCH_URL, json={"contacts": []})

    result = await get_tag_conversion_counts(client, DashboardType.LENDING_TOWER)
    await client.close()

    assert result["totalFetched"] == 3
    assert result["totalReported"] == 3
    assert result["counts"]["atc day 1"] == 2
    assert result["counts"]["atc day 7"] == 1
    assert result["counts"]["atc day 331"] == 1
    assert "vip" not in result["counts"]
    assert len(result["counts"]) == 13

    bodies = [json.loads(request.content) for request in httpx_mock.get_requests()]
    assert bodies[0]["page"] == 1
    assert bodies[1]["searchAfter"] == "cursor-1"
    assert bodies[2]["searchAfter"] == "cursor-1"


@pytest.mark.asyncio
async def test_export_follows_next_cursor(httpx_mock):
    client = GhlClient(location_id="loc-1")
    httpx_mock.add_response(
        method="GET",
        url=EXPORT_URL,
        json={"messages": [{"id": "m-1", "status": "delivered"}], "nextCursor": "n-1", "total": 2},
    )
    httpx_mock.add_response(
        method="GET",
        url=EXPORT_URL,
        json={"messages": [{"id": "m-1"}, {"id": "m-2"}], "nextCursor": None, "total": 2},
    )

    messages, reported_total = await fetch_all_messages(client)
    await client.close()

    assert [message.id for message in messages] == ["m-1", "m-2"]
    assert messages[0].status == "delivered"
    assert reported_total == 2

    first, second = httpx_mock.get_requests()
    assert first.url.params["channel"] == "SMS"
    assert "cursor" not in first.url.params
    assert second.url.params["cursor"] == "n-1"
