"""Shared fixtures for engine tests."""

from datetime import date

import pytest

from crm_kpi.models import ActivityKPIs, DispatchActivity, OriginationDailyRow, PaidMediaDailyRow


def _activity(
    day: date,
    channel: str = "Email",
    cards: float = 0,
    proposals: float = 0,
    cost: float = 0,
    delivered: float = 0,
    sent: float = 0,
    business_unit: str = "B2C",
    segment: str = "Base",
    partner: str = "",
    journey: str = "",
    activity_id: str = "",
) -> DispatchActivity:
    return DispatchActivity(
        id=activity_id,
        dispatch_date=day,
        business_unit=business_unit,
        channel=channel,
        segment=segment,
        partner=partner,
        journey=journey,
        kpis=ActivityKPIs(
            cards_issued=cards,
            proposals=proposals,
            total_cost=cost,
            base_delivered=delivered,
            base_sent=sent,
        ),
    )


def _origination(day: date, cards: float = 0, proposals: float = 0) -> OriginationDailyRow:
    return OriginationDailyRow(date=day, total_cards=cards, total_proposals=proposals)


def _media(
    day: date,
    spend: float = 0,
    conversions: float = 0,
    impressions: float = 0,
    clicks: float = 0,
    channel: str = "meta",
    campaign: str = "always-on",
    objective: str = "b2c",
) -> PaidMediaDailyRow:
    return PaidMediaDailyRow(
        date=day,
        channel=channel,
        campaign=campaign,
        objective=objective,
        spend=spend,
        impressions=impressions,
        clicks=clicks,
        conversions=conversions,
    )


@pytest.fixture
def make_activity():
    """Factory for DispatchActivity with KPI keyword arguments."""
    return _activity


@pytest.fixture
def make_origination():
    """Factory for OriginationDailyRow."""
    return _origination


@pytest.fixture
def make_media():
    """Factory for PaidMediaDailyRow."""
    return _media


@pytest.fixture
def uneven_days() -> tuple[list[DispatchActivity], list[OriginationDailyRow]]:
    """Two days whose volumes differ enough that bucket means diverge from totals.

    Day 1: 10 CRM cards of 20 company cards, cost 100 (share 50%, CAC 10)
    Day 2: 30 CRM cards of 180 company cards, cost 900 (share 16.7%, CAC 30)
    Period: 40 of 200 cards (share 20%), cost 1000 (CAC 25)
    """
    activities = [
        _activity(date(2024, 3, 4), cards=10, proposals=40, cost=100, delivered=200),
        _activity(date(2024, 3, 5), cards=30, proposals=60, cost=900, delivered=1000),
    ]
    origination = [
        _origination(date(2024, 3, 4), cards=20, proposals=100),
        _origination(date(2024, 3, 5), cards=180, proposals=300),
    ]
    return activities, origination
