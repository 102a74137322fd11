# app/models/api/analytics_response.py
"""
Dashboard API response models.
Used by routes for output formatting. Wire names are camelCase to match
what the dashboard front end already consumes.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TagConversionResponse(CamelModel):
    """Tag counts for one dashboard profile."""

    total_reported: int = Field(..., description="Larger of the upstream total and contacts fetched")
    total_fetched: int = Field(..., description="Distinct contacts fetched")
    counts: dict[str, int] = Field(..., description="Count per tag; every profile tag present")
    tags: list[str] = Field(..., description="Profile tags in display order")
    dashboard_type: str = Field(..., description="Profile the counts belong to")


class SmsCostSummaryResponse(CamelModel):
    """Flat-rate cost of exported SMS messages."""

    total_messages: int = Field(..., description="Distinct messages exported")
    total_reported: int = Field(..., description="Larger of the upstream total and messages exported")
    by_status: dict[str, int] = Field(..., description="Messages per normalized status")
    by_direction: dict[str, int] = Field(..., description="Messages per direction")
    cost_per_message: float = Field(..., description="Flat price per message in USD")
    total_cost: float = Field(..., description="Cost of the counted messages, two decimals")
    status_filter: str | None = Field(None, description="Status the cost was restricted to")


class CallMetricsData(BaseModel):
    """Call record rollup."""

    total_calls: int = Field(..., description="Number of call records")
    inbound: int = Field(..., description="Inbound calls")
    outbound: int = Field(..., description="Outbound calls")
    by_status: dict[str, int] = Field(..., description="Calls per call status")
    by_disconnection_reason: dict[str, int] = Field(..., description="Calls per disconnection reason")


class CallMetricsResponse(CamelModel):
    """Call metrics, possibly served from cache."""

    data: CallMetricsData
    cached: bool = Field(..., description="Served from the in-memory cache")
    last_update: str = Field(..., description="ISO-8601 time the data was computed")
    warning: str | None = Field(None, description="Set when data is empty or stale")


class RefreshResponse(CallMetricsResponse):
    success: bool = True
