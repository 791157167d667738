"""Output models for analytics calculations."""

from dataclasses import dataclass
from datetime import date
from typing import Literal


@dataclass(frozen=True)
class DailyLedgerEntry:
    """CRM daily totals joined with company-wide origination for one date."""

    date: date
    crm_proposals: float
    crm_cards: float
    crm_cost: float
    crm_base_delivered: float
    crm_base_sent: float
    crm_campaign_count: int  # Activities on campaign channels (Email/SMS/WhatsApp)
    crm_activity_count: int
    total_proposals: float
    total_cards: float
    media_spend: float = 0.0
    media_impressions: float = 0.0
    media_clicks: float = 0.0
    media_conversions: float = 0.0


@dataclass(frozen=True)
class BucketMetrics:
    """Raw sums and derived ratios for one day/week/month bucket.

    Percent fields are on a 0-100 scale. Every ratio is 0 when its
    denominator is 0.
    """

    bucket_start: date
    day_of_week: str  # seg ter qua qui sex sab dom
    week_of_month: int  # ceil(day / 7)
    month: int
    year: int
    day_count: int  # Ledger days inside the bucket

    # Raw sums
    crm_proposals: float
    crm_cards: float
    crm_cost: float
    crm_base_delivered: float
    crm_base_sent: float
    crm_campaign_count: int
    crm_activity_count: int
    total_proposals: float
    total_cards: float
    media_spend: float
    media_impressions: float
    media_clicks: float
    media_conversions: float

    # Derived
    effective_base: float  # Delivered base, or sent base when delivery is absent
    share_proposals: float
    share_cards: float
    conversion_crm: float
    conversion_total: float
    performance_index: float  # conversion_crm / conversion_total
    cac: float  # crm_cost / crm_cards
    is_anomaly: bool


@dataclass(frozen=True)
class PeriodSummary:
    """Aggregate over an entire date range.

    Ratios are recomputed from period totals, never averaged across buckets.
    """

    period_start: date
    period_end: date
    day_count: int
    anomaly_day_count: int

    crm_proposals_total: float
    crm_cards_total: float
    crm_cost_total: float
    crm_base_delivered_total: float
    crm_base_sent_total: float
    total_proposals: float
    total_cards: float

    share_proposals: float
    share_cards: float
    cac: float
    conversion_crm: float
    conversion_total: float
    performance_index: float


@dataclass(frozen=True)
class PeriodAnalysis:
    """Bucket series plus summary for one range."""

    buckets: list[BucketMetrics]
    summary: PeriodSummary | None  # None when the range has no data


@dataclass(frozen=True)
class MetricDelta:
    """Change of one summary metric against the previous period."""

    metric: str
    current: float
    previous: float
    change: float | None  # None when a pct delta has previous == 0
    kind: Literal["pct", "points"]  # pct for volumes, points for rates


@dataclass(frozen=True)
class PeriodComparison:
    """Current vs immediately preceding range of the same length."""

    current_range: tuple[date, date]
    previous_range: tuple[date, date]
    current: PeriodSummary | None
    previous: PeriodSummary | None
    deltas: tuple[MetricDelta, ...]

    def get(self, metric: str) -> MetricDelta | None:
        """Look up the delta for a metric name."""
        for delta in self.deltas:
            if delta.metric == metric:
                return delta
        return None


@dataclass(frozen=True)
class ProjectionResult:
    """Month-end projection for a single metric."""

    metric: str
    current: float
    projected: float
    trend: Literal["up", "down", "stable"]
    confidence: int  # 0-100
    remaining_days: int
    pace: float  # Daily rate used for extrapolation


@dataclass(frozen=True)
class BudgetPacing:
    """Spend pacing against a monthly budget."""

    budget: float
    actual_spend: float
    percent_used: float
    percent_month_elapsed: float
    pacing_index: float  # percent_used / percent_month_elapsed (1.0 = on pace)
    projected_total: float
    projected_percent: float
    ideal_daily_pace: float  # Spend per remaining day to land on budget
    remaining_days: int
    status: Literal["ok", "risk", "failed"]


@dataclass(frozen=True)
class SegmentShare:
    """Cards issued attributed to one segment."""

    name: str
    cards: float


@dataclass(frozen=True)
class FacetSummary:
    """Filter control options and counts."""

    values: dict[str, list[str]]  # Over the unfiltered collection
    counts: dict[str, dict[str, int]]  # Over the filtered collection


@dataclass(frozen=True)
class MediaCorrelation:
    """Paid-media spend vs cards issued, at the best-fitting lag."""

    best_lag: int  # Days between spend and cards
    correlation: float
    r_squared: float
    slope: float  # Cards per unit of spend
    intercept: float
    quality: Literal["high", "moderate", "low"]
    days_analyzed: int
    total_spend: float
    total_cards: float
    effective_cpa: float  # total_spend / total_cards
