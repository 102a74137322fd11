"""
Dashboard profiles and the contact-search filter trees they send to GHL.

Each DashboardType maps to one AggregationProfile: the ordered tag universe
counted on the dashboard and a pure builder producing its filter tree.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from app.models.domain.ghl_domain import (
    FilterLeaf,
    FilterNode,
    FilterOperator,
    all_of,
    any_of,
)

ENROLLMENT_FIELD = "customFields.lSLvJkqnLA3fUBEFAfCz"
LEAD_TYPE_FIELD = "customFields.6fEKNMYWRgQiaZFPfQwT"

ENROLLMENT_STATES = ("LDR Enrolled", "ProLaw Enrolled")

# Upstream values, copied as they appear in GHL (the first one is missing its ")")
REJECTION_REASONS = (
    "Rejected (Pitched DS",
    "Rejected (Attempting to Contact DS)",
    "Rejected (Approval Call Set DS)",
    "Rejected (Partial DS)",
    "AP (FU) 15+ Days",
)

ATC_TAGS = tuple(
    f"atc day {day}" for day in (1, 2, 3, 7, 17, 35, 48, 69, 90, 125, 167, 241, 331)
)
PITCHED_DS_TAGS = tuple(
    f"pitched ds atc day {day}"
    for day in (1, 3, 5, 7, 10, 14, 18, 22, 28, 37, 42, 49, 56, 63)
)


class DashboardType(str, Enum):
    LENDING_TOWER = "lending-tower"
    REACTIVATION_PITCHED_DS = "reactivation-pitched-ds"
    REACTIVATION_LEADS = "reactivation-leads"

    @classmethod
    def parse(cls, value: object) -> "DashboardType":
        """Resolve a selector, falling back to the default dashboard."""
        try:
            return cls(value)
        except ValueError:
            return DEFAULT_DASHBOARD


DEFAULT_DASHBOARD = DashboardType.LENDING_TOWER


@dataclass(frozen=True)
class AggregationProfile:
    dashboard_type: DashboardType
    tags: tuple[str, ...]
    # GHL examples disagree on tag membership; each profile keeps what it was verified with
    tag_operator: FilterOperator
    builder: Callable[["AggregationProfile"], FilterNode]

    def tag_filter(self) -> FilterLeaf:
        return FilterLeaf("tags", self.tag_operator, self.tags)

    def build_filters(self) -> FilterNode:
        return self.builder(self)


def _enrolled_filters(profile: AggregationProfile) -> FilterNode:
    return any_of(
        *(
            all_of(profile.tag_filter(), FilterLeaf(ENROLLMENT_FIELD, FilterOperator.EQ, state))
            for state in ENROLLMENT_STATES
        )
    )


def _pitched_ds_filters(profile: AggregationProfile) -> FilterNode:
    return any_of(
        *(
            all_of(
                profile.tag_filter(),
                FilterLeaf(LEAD_TYPE_FIELD, FilterOperator.EQ, "Pitched DS Reactivation Lead"),
                FilterLeaf(ENROLLMENT_FIELD, FilterOperator.EQ, reason),
            )
            for reason in REJECTION_REASONS
        )
    )


def _reactivation_filters(profile: AggregationProfile) -> FilterNode:
    return any_of(
        *(
            all_of(
                profile.tag_filter(),
                FilterLeaf(LEAD_TYPE_FIELD, FilterOperator.EQ, "Reactivation Lead"),
                FilterLeaf(ENROLLMENT_FIELD, FilterOperator.EQ, state),
            )
            for state in ENROLLMENT_STATES
        )
    )


PROFILES: dict[DashboardType, AggregationProfile] = {
    DashboardType.LENDING_TOWER: AggregationProfile(
        dashboard_type=DashboardType.LENDING_TOWER,
        tags=ATC_TAGS,
        tag_operator=FilterOperator.EQ,
        builder=_enrolled_filters,
    ),
    DashboardType.REACTIVATION_PITCHED_DS: AggregationProfile(
        dashboard_type=DashboardType.REACTIVATION_PITCHED_DS,
        tags=PITCHED_DS_TAGS,
        tag_operator=FilterOperator.CONTAINS,
        builder=_pitched_ds_filters,
    ),
    DashboardType.REACTIVATION_LEADS: AggregationProfile(
        dashboard_type=DashboardType.REACTIVATION_LEADS,
        tags=ATC_TAGS,
        tag_operator=FilterOperator.CONTAINS,
        builder=_reactivation_filters,
    ),
}


def get_profile(dashboard_type: DashboardType) -> AggregationProfile:
    return PROFILES[dashboard_type]


def build_filters(dashboard_type: DashboardType) -> FilterNode:
    """Filter tree for a dashboard profile. Pure and deterministic."""
    return PROFILES[dashboard_type].build_filters()
