"""Run filter -> normalize -> aggregate -> metrics for one date range."""

from collections.abc import Sequence

import polars as pl

from ..models.activity import DispatchActivity
from ..models.origination import OriginationDailyRow
from ..models.paid_media import PaidMediaDailyRow
from ..settings import EngineConfig
from .aggregator import Granularity, filter_ledger_range
from .filters import FilterSpec, filter_activities
from .metrics import bucket_metrics, summarize_period
from .models import PeriodAnalysis
from .normalizer import build_ledger


def range_ledger(
    activities: Sequence[DispatchActivity],
    origination_rows: Sequence[OriginationDailyRow],
    spec: FilterSpec,
    config: EngineConfig,
    paid_media_rows: Sequence[PaidMediaDailyRow] = (),
) -> pl.DataFrame:
    """Daily ledger for the filtered activities, clipped to the filter's dates.

    Origination and paid-media rows are not dimension-filtered; only their
    dates are clipped.
    """
    ledger = build_ledger(
        filter_activities(activities, spec),
        origination_rows,
        paid_media_rows,
        campaign_channels=config.campaign_channels,
        duplicate_policy=config.duplicate_policy,
    )
    return filter_ledger_range(ledger, spec.date_start, spec.date_end)


def analyze_period(
    activities: Sequence[DispatchActivity],
    origination_rows: Sequence[OriginationDailyRow],
    spec: FilterSpec,
    granularity: Granularity | str = Granularity.DAILY,
    config: EngineConfig | None = None,
    paid_media_rows: Sequence[PaidMediaDailyRow] = (),
) -> PeriodAnalysis:
    """Bucket series and period summary for the filter's date range."""
    config = config or EngineConfig()
    ledger = range_ledger(activities, origination_rows, spec, config, paid_media_rows)
    return PeriodAnalysis(
        buckets=bucket_metrics(
            ledger, granularity, config.anomaly_threshold, config.anomalies_enabled
        ),
        summary=summarize_period(ledger, config.anomaly_threshold, config.anomalies_enabled),
    )
