from app.models.domain.ghl_domain import (
    Combinator,
    FilterGroup,
    FilterLeaf,
    FilterOperator,
    RangeBounds,
    any_of,
    serialize_filters,
)
from app.services.ghl.filter_builder import (
    ATC_TAGS,
    ENROLLMENT_FIELD,
    LEAD_TYPE_FIELD,
    PITCHED_DS_TAGS,
    PROFILES,
    REJECTION_REASONS,
    DashboardType,
    build_filters,
)


def test_every_dashboard_type_has_a_profile():
    assert set(PROFILES) == set(DashboardType)
    assert len(ATC_TAGS) == 13
    assert len(PITCHED_DS_TAGS) == 14


def test_lending_tower_is_or_of_enrollment_states_with_tag_eq():
    tree = build_filters(DashboardType.LENDING_TOWER)

    assert tree.combinator is Combinator.OR
    assert len(tree.filters) == 2
    for group, state in zip(tree.filters, ("LDR Enrolled", "ProLaw Enrolled"), strict=True):
        assert group.combinator is Combinator.AND
        tag_leaf, enrollment_leaf = group.filters
        assert tag_leaf == FilterLeaf("tags", FilterOperator.EQ, ATC_TAGS)
        assert enrollment_leaf == FilterLeaf(ENROLLMENT_FIELD, FilterOperator.EQ, state)


def test_pitched_ds_fans_out_over_rejection_reasons():
    tree = build_filters(DashboardType.REACTIVATION_PITCHED_DS)

    assert tree.combinator is Combinator.OR
    assert len(tree.filters) == len(REJECTION_REASONS)
    for group, reason in zip(tree.filters, REJECTION_REASONS, strict=True):
        tag_leaf, lead_leaf, reason_leaf = group.filters
        assert tag_leaf.operator is FilterOperator.CONTAINS
        assert tag_leaf.value == PITCHED_DS_TAGS
        assert lead_leaf == FilterLeaf(LEAD_TYPE_FIELD, FilterOperator.EQ, "Pitched DS Reactivation Lead")
        assert reason_leaf.value == reason


def test_reactivation_leads_wire_format():
    wire = serialize_filters(build_filters(DashboardType.REACTIVATION_LEADS))

    assert len(wire) == 1
    assert wire[0]["group"] == "OR"
    first = wire[0]["filters"][0]
    assert first["group"] == "AND"
    assert first["filters"] == [
        {"field": "tags", "operator": "contains", "value": list(ATC_TAGS)},
        {"field": LEAD_TYPE_FIELD, "operator": "eq", "value": "Reactivation Lead"},
        {"field": ENROLLMENT_FIELD, "operator": "eq", "value": "LDR Enrolled"},
    ]


def test_build_filters_is_deterministic():
    for dashboard_type in DashboardType:
        assert build_filters(dashboard_type) == build_filters(dashboard_type)


def test_unknown_selector_falls_back_to_default():
    assert DashboardType.parse("reactivation-leads") is DashboardType.REACTIVATION_LEADS
    assert DashboardType.parse("nope") is DashboardType.LENDING_TOWER
    assert DashboardType.parse(None) is DashboardType.LENDING_TOWER
    assert DashboardType.parse(["lending-tower"]) is DashboardType.LENDING_TOWER


def test_range_leaf_omits_unset_bounds_and_nesting_serializes():
    tree = any_of(
        FilterGroup(
            Combinator.AND,
            (FilterLeaf("customFields.cost", FilterOperator.RANGE, RangeBounds(gt=1)),),
        )
    )

    assert tree.to_dict() == {
        "group": "OR",
        "filters": [
            {
                "group": "AND",
                "filters": [{"field": "customFields.cost", "operator": "range", "value": {"gt": 1}}],
            }
        ],
    }
