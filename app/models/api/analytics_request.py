# app/models/api/analytics_request.py
"""
Dashboard API request models.
"""

from pydantic import BaseModel, ConfigDict, Field


class TagConversionRequest(BaseModel):
    """Body of the ATC conversions request. Unknown dashboards fall back to the default."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    dashboard_type: str | None = Field(None, alias="dashboardType", description="Dashboard profile")


class SmsContactsPageRequest(BaseModel):
    """Page selector for the SMS contacts table."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page: int = Field(default=1, ge=1, description="1-based page number")
    page_limit: int = Field(default=20, ge=1, le=100, alias="pageLimit", description="Contacts per page")
