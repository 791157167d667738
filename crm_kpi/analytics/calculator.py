"""KPI Engine - facade over the aggregation, comparison and projection pipeline."""

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

import polars as pl

from ..models.activity import DispatchActivity
from ..models.kpi_pack import KPIPack
from ..models.origination import OriginationDailyRow
from ..models.paid_media import PaidMediaDailyRow
from ..settings import EngineConfig
from .aggregator import Granularity
from .comparator import compare_with_previous_period
from .filters import FilterSpec, all_facet_counts, facet_values, filter_activities, segment_share
from .models import (
    BucketMetrics,
    BudgetPacing,
    FacetSummary,
    MediaCorrelation,
    PeriodAnalysis,
    PeriodComparison,
    PeriodSummary,
    ProjectionResult,
    SegmentShare,
)
from .normalizer import build_ledger, media_outcome_daily, paid_media_daily
from .pipeline import analyze_period, range_ledger
from .projection import budget_pacing, project_metric, project_ratio
from .stats import media_correlation, pearson_correlation

logger = logging.getLogger(__name__)

# Composite metrics projected as numerator / denominator
DERIVED_RATIOS: dict[str, tuple[str, str]] = {
    "cpa": ("spend", "conversions"),
    "cpc": ("spend", "clicks"),
    "cac": ("crm_cost", "crm_cards"),
}

DEFAULT_PROJECTION_METRICS = ("spend", "conversions", "impressions", "clicks", "cpa")


def _jsonable(obj: Any) -> Any:
    """asdict() output with dates rendered as ISO strings."""
    if obj is None:
        return None
    data = asdict(obj)
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in data.items()}


@dataclass
class KPIEngine:
    """Marketing KPI engine over in-memory batches of rows.

    Every method recomputes from the inputs; nothing is cached between calls
    and the inputs are never mutated.

    Attributes:
        activities: CRM dispatch activities
        origination_rows: Company-wide daily origination
        paid_media_rows: Paid-media daily rows (optional)
        config: Thresholds and pipeline knobs
    """

    activities: Sequence[DispatchActivity]
    origination_rows: Sequence[OriginationDailyRow]
    paid_media_rows: Sequence[PaidMediaDailyRow] = ()
    config: EngineConfig = field(default_factory=EngineConfig)

    # =========================================================================
    # PERIOD ANALYSIS
    # =========================================================================

    def analyze(
        self,
        filters: FilterSpec,
        granularity: Granularity | str = Granularity.DAILY,
    ) -> PeriodAnalysis:
        """Bucket series and summary for the filtered range."""
        return analyze_period(
            self.activities,
            self.origination_rows,
            filters,
            granularity,
            self.config,
            self.paid_media_rows,
        )

    def bucket_metrics(
        self,
        filters: FilterSpec,
        granularity: Granularity | str = Granularity.DAILY,
    ) -> list[BucketMetrics]:
        """Sorted BucketMetrics for the filtered range."""
        return self.analyze(filters, granularity).buckets

    def period_summary(self, filters: FilterSpec) -> PeriodSummary | None:
        """PeriodSummary for the filtered range, None when there is no data."""
        return self.analyze(filters).summary

    def compare_with_previous(self, filters: FilterSpec) -> PeriodComparison:
        """Current range against the equivalent preceding range."""
        return compare_with_previous_period(
            self.activities,
            self.origination_rows,
            filters,
            self.config,
            self.paid_media_rows,
        )

    # =========================================================================
    # PROJECTIONS
    # =========================================================================

    def daily_series(
        self,
        source: str = "paid_media",
        filters: FilterSpec | None = None,
    ) -> pl.DataFrame:
        """Unbucketed daily series used for projections.

        Args:
            source: "paid_media" for spend/conversion columns, "ledger" for
                CRM and origination counters
            filters: Dimension filters for the ledger source (dates ignored)
        """
        if source == "paid_media":
            return paid_media_daily(self.paid_media_rows)
        if source == "ledger":
            spec = (filters or FilterSpec()).with_dates(None, None)
            return build_ledger(
                filter_activities(self.activities, spec),
                self.origination_rows,
                self.paid_media_rows,
                campaign_channels=self.config.campaign_channels,
                duplicate_policy=self.config.duplicate_policy,
            )
        raise ValueError(f"Unknown series source: {source!r}")

    def project_month(
        self,
        as_of: date,
        metrics: Sequence[str] = DEFAULT_PROJECTION_METRICS,
        source: str = "paid_media",
        filters: FilterSpec | None = None,
    ) -> dict[str, ProjectionResult]:
        """Project each metric to the end of the as_of month.

        Composite metrics in DERIVED_RATIOS are projected from their projected
        numerator and denominator.
        """
        series = self.daily_series(source, filters)

        def project(metric: str) -> ProjectionResult:
            return project_metric(
                series,
                metric,
                as_of,
                recent_window=self.config.recent_window,
                min_points_for_recent=self.config.min_points_for_recent,
                trend_band=self.config.trend_band,
            )

        results: dict[str, ProjectionResult] = {}
        for metric in metrics:
            if metric in DERIVED_RATIOS:
                num, den = DERIVED_RATIOS[metric]
                results[metric] = project_ratio(project(num), project(den), metric)
            else:
                results[metric] = project(metric)
        return results

    def budget_pacing(
        self,
        budget: float,
        as_of: date,
        channels: Sequence[str] | None = None,
        objectives: Sequence[str] | None = None,
    ) -> BudgetPacing:
        """Pace month-to-date paid-media spend (through as_of) against a budget."""
        daily = paid_media_daily(self.paid_media_rows, channels, objectives)
        month_to_date = daily.filter(
            (pl.col("date") >= as_of.replace(day=1)) & (pl.col("date") <= as_of)
        )
        return budget_pacing(budget, float(month_to_date["spend"].sum()), as_of)

    # =========================================================================
    # BREAKDOWNS
    # =========================================================================

    def facets(self, filters: FilterSpec | None = None) -> FacetSummary:
        """Filter options over all activities, counts over the filtered ones."""
        filtered = filter_activities(self.activities, filters or FilterSpec())
        return FacetSummary(
            values=facet_values(self.activities),
            counts=all_facet_counts(filtered),
        )

    def segment_share(self, filters: FilterSpec) -> list[SegmentShare]:
        """CRM cards per segment plus the non-CRM remainder of company cards."""
        summary = self.period_summary(filters)
        total_cards = summary.total_cards if summary else 0.0
        return segment_share(filter_activities(self.activities, filters), total_cards)

    def media_correlation(self, filters: FilterSpec) -> MediaCorrelation | None:
        """Paid-media spend vs company cards over the filtered date range.

        Both sources are company-wide, so only the date bounds apply.

        Raises:
            ValueError: If the filters do not carry both date bounds.
        """
        if filters.date_start is None or filters.date_end is None:
            raise ValueError("date_start and date_end must be set for media correlation")
        daily = media_outcome_daily(
            self.origination_rows,
            self.paid_media_rows,
            duplicate_policy=self.config.duplicate_policy,
        )
        return media_correlation(daily, filters.date_start, filters.date_end)

    # =========================================================================
    # KPI PACK (CONSOLIDATED OUTPUT)
    # =========================================================================

    def kpi_pack(
        self,
        filters: FilterSpec,
        as_of: date,
        granularity: Granularity | str = Granularity.DAILY,
    ) -> KPIPack:
        """Run every analysis for one selection and package the results.

        Raises:
            ValueError: If the filters do not carry both date bounds.
        """
        if filters.date_start is None or filters.date_end is None:
            raise ValueError("date_start and date_end must be set to build a KPI pack")

        granularity = Granularity(granularity)
        analysis = self.analyze(filters, granularity)
        comparison = self.compare_with_previous(filters)
        projections = self.project_month(as_of) if self.paid_media_rows else {}
        facets = self.facets(filters)
        ledger = range_ledger(
            self.activities, self.origination_rows, filters, self.config, self.paid_media_rows
        )

        correlation = None
        if self.paid_media_rows:
            correlation = self.media_correlation(filters)

        logger.debug(
            "Built KPI pack for %s..%s (%s): %d buckets",
            filters.date_start,
            filters.date_end,
            granularity.value,
            len(analysis.buckets),
        )

        return KPIPack(
            generated_at=datetime.now(),
            date_range=(filters.date_start, filters.date_end),
            granularity=granularity.value,
            as_of=as_of,
            buckets=[_jsonable(b) for b in analysis.buckets],
            summary=_jsonable(analysis.summary),
            previous_summary=_jsonable(comparison.previous),
            deltas=[asdict(d) for d in comparison.deltas],
            projections={k: asdict(v) for k, v in projections.items()},
            segment_share=[asdict(s) for s in self.segment_share(filters)],
            facets={"values": facets.values, "counts": facets.counts},
            media_correlation=asdict(correlation) if correlation else None,
            correlations={
                "media_spend_vs_total_cards": pearson_correlation(
                    ledger, "media_spend", "total_cards", min_samples=10
                ),
                "crm_cards_vs_total_cards": pearson_correlation(
                    ledger, "crm_cards", "total_cards", min_samples=10
                ),
            },
        )
