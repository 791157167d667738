"""Analytics module for CRM share, origination and paid-media KPIs."""

from .aggregator import Granularity, bucket_ledger, filter_ledger_range
from .calculator import KPIEngine
from .comparator import compare_summaries, compare_with_previous_period, previous_period
from .filters import FilterSpec, facet_counts, facet_values, filter_activities, segment_share
from .metrics import bucket_metrics, summarize_period
from .models import (
    BucketMetrics,
    BudgetPacing,
    DailyLedgerEntry,
    FacetSummary,
    MediaCorrelation,
    MetricDelta,
    PeriodAnalysis,
    PeriodComparison,
    PeriodSummary,
    ProjectionResult,
    SegmentShare,
)
from .normalizer import build_ledger, ledger_entries, media_outcome_daily, paid_media_daily
from .pipeline import analyze_period
from .projection import budget_pacing, project_metric, project_ratio
from .stats import media_correlation

__all__ = [
    "BucketMetrics",
    "BudgetPacing",
    "DailyLedgerEntry",
    "FacetSummary",
    "FilterSpec",
    "Granularity",
    "KPIEngine",
    "MediaCorrelation",
    "MetricDelta",
    "PeriodAnalysis",
    "PeriodComparison",
    "PeriodSummary",
    "ProjectionResult",
    "SegmentShare",
    "analyze_period",
    "bucket_ledger",
    "bucket_metrics",
    "budget_pacing",
    "build_ledger",
    "compare_summaries",
    "compare_with_previous_period",
    "facet_counts",
    "facet_values",
    "filter_activities",
    "filter_ledger_range",
    "ledger_entries",
    "media_correlation",
    "media_outcome_daily",
    "paid_media_daily",
    "previous_period",
    "project_metric",
    "project_ratio",
    "segment_share",
    "summarize_period",
]
