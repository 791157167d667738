"""Tests for the filter engine, facets and segment share."""

from datetime import date, datetime

import pytest

from crm_kpi.analytics import (
    FilterSpec,
    facet_counts,
    facet_values,
    filter_activities,
    segment_share,
)
from crm_kpi.analytics.filters import all_facet_counts
from crm_kpi.analytics.models import SegmentShare
from crm_kpi.exceptions import InvalidDateRangeError


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def activities(make_activity):
    """Mixed channels, segments and partners across early March 2024."""
    rows = [
        ("a1", date(2024, 3, 1), "Email", "Base Ativa", "Loja A", "B2C"),
        ("a2", date(2024, 3, 1), "SMS", "Base Ativa", "Loja B", "B2C"),
        ("a3", date(2024, 3, 2), "Email", "Reativação", "", "B2C"),
        ("a4", date(2024, 3, 3), "WhatsApp", "", "Loja A", "B2C"),
        ("a5", date(2024, 3, 5), "Email", "Base Ativa", "", "PJ"),
    ]
    return [
        make_activity(
            day,
            channel=channel,
            segment=segment,
            partner=partner,
            business_unit=bu,
            activity_id=activity_id,
        )
        for activity_id, day, channel, segment, partner, bu in rows
    ]


# =============================================================================
# FILTER SPEC
# =============================================================================


class TestFilterSpec:
    """Tests for FilterSpec construction."""

    def test_dimensions_become_frozensets(self) -> None:
        spec = FilterSpec(channels={"Email"}, segments=["Base Ativa"])
        assert spec.channels == frozenset({"Email"})
        assert spec.segments == frozenset({"Base Ativa"})
        assert spec.partners == frozenset()

    def test_datetime_bounds_become_dates(self) -> None:
        spec = FilterSpec(date_start=datetime(2024, 3, 1, 9), date_end=datetime(2024, 3, 2, 17))
        assert spec.date_start == date(2024, 3, 1)
        assert spec.date_end == date(2024, 3, 2)

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(InvalidDateRangeError):
            FilterSpec(date_start=date(2024, 3, 10), date_end=date(2024, 3, 9))

    def test_invalid_range_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            FilterSpec(date_start=date(2024, 3, 10), date_end=date(2024, 3, 1))

    def test_with_dates_keeps_dimensions(self) -> None:
        spec = FilterSpec(channels={"SMS"}, date_start=date(2024, 3, 1))
        moved = spec.with_dates(date(2024, 2, 1), date(2024, 2, 29))
        assert moved.channels == frozenset({"SMS"})
        assert moved.date_start == date(2024, 2, 1)
        assert spec.date_start == date(2024, 3, 1)


# =============================================================================
# FILTERING
# =============================================================================


class TestFilterActivities:
    """Tests for filter_activities."""

    def test_empty_spec_returns_everything(self, activities) -> None:
        assert filter_activities(activities, FilterSpec()) == activities

    def test_empty_input(self) -> None:
        assert filter_activities([], FilterSpec(channels={"Email"})) == []

    def test_single_dimension(self, activities) -> None:
        result = filter_activities(activities, FilterSpec(channels={"Email"}))
        assert [a.id for a in result] == ["a1", "a3", "a5"]

    def test_dimensions_combine_with_and(self, activities) -> None:
        spec = FilterSpec(channels={"Email"}, segments={"Base Ativa"}, business_units={"B2C"})
        assert [a.id for a in filter_activities(activities, spec)] == ["a1"]

    def test_date_bounds_inclusive(self, activities) -> None:
        spec = FilterSpec(date_start=date(2024, 3, 1), date_end=date(2024, 3, 2))
        assert [a.id for a in filter_activities(activities, spec)] == ["a1", "a2", "a3"]

    def test_datetime_end_keeps_same_day(self, activities) -> None:
        spec = FilterSpec(date_end=datetime(2024, 3, 1, 0, 0, 1))
        assert [a.id for a in filter_activities(activities, spec)] == ["a1", "a2"]

    def test_open_start(self, activities) -> None:
        spec = FilterSpec(date_start=date(2024, 3, 3))
        assert [a.id for a in filter_activities(activities, spec)] == ["a4", "a5"]

    def test_no_match(self, activities) -> None:
        assert filter_activities(activities, FilterSpec(channels={"Push"})) == []


# =============================================================================
# FACETS
# =============================================================================


class TestFacets:
    """Tests for facet values and counts."""

    def test_values_sorted_and_non_empty(self, activities) -> None:
        values = facet_values(activities)
        assert values["channel"] == ["Email", "SMS", "WhatsApp"]
        assert values["segment"] == ["Base Ativa", "Reativação"]
        assert values["partner"] == ["Loja A", "Loja B"]
        assert values["business_unit"] == ["B2C", "PJ"]
        assert values["journey"] == []

    def test_counts_reflect_filtered_collection(self, activities) -> None:
        filtered = filter_activities(activities, FilterSpec(channels={"Email"}))
        counts = facet_counts(filtered, "channel")
        assert counts == {"Email": 3}
        assert "SMS" not in counts

    def test_counts_follow_other_filters(self, activities) -> None:
        filtered = filter_activities(activities, FilterSpec(segments={"Base Ativa"}))
        assert facet_counts(filtered, "channel") == {"Email": 2, "SMS": 1}

    def test_counts_skip_empty_values(self, activities) -> None:
        assert facet_counts(activities, "partner") == {"Loja A": 2, "Loja B": 1}

    def test_unknown_dimension(self, activities) -> None:
        with pytest.raises(ValueError, match="Unknown dimension"):
            facet_counts(activities, "region")

    def test_all_facet_counts_covers_every_dimension(self, activities) -> None:
        counts = all_facet_counts(activities)
        assert set(counts) == {"business_unit", "channel", "segment", "partner", "journey"}
        assert counts["journey"] == {}


# =============================================================================
# SEGMENT SHARE
# =============================================================================


class TestSegmentShare:
    """Tests for segment_share."""

    def test_segments_with_remainder(self, make_activity) -> None:
        day = date(2024, 3, 1)
        activities = [
            make_activity(day, segment="Base Ativa", cards=10),
            make_activity(day, segment="Reativação", cards=20),
            make_activity(day, segment="Reativação", cards=10),
            make_activity(day, segment="", cards=5),
        ]

        result = segment_share(activities, total_cards=100)

        assert result == [
            SegmentShare(name="Reativação", cards=30.0),
            SegmentShare(name="Base Ativa", cards=10.0),
            SegmentShare(name="Não Identificado", cards=5.0),
            SegmentShare(name="Outros B2C", cards=55.0),
        ]

    def test_no_remainder_when_crm_covers_total(self, make_activity) -> None:
        activities = [make_activity(date(2024, 3, 1), segment="Base Ativa", cards=50)]
        result = segment_share(activities, total_cards=40)
        assert [s.name for s in result] == ["Base Ativa"]

    def test_empty_activities(self) -> None:
        assert segment_share([], total_cards=25) == [SegmentShare(name="Outros B2C", cards=25.0)]
