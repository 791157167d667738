"""Period comparator - current range vs the equivalent preceding range."""

import logging
from collections.abc import Sequence
from datetime import date, timedelta

from ..exceptions import InvalidDateRangeError
from ..models.activity import DispatchActivity
from ..models.origination import OriginationDailyRow
from ..models.paid_media import PaidMediaDailyRow
from ..settings import EngineConfig
from .filters import FilterSpec
from .metrics import summarize_period
from .models import MetricDelta, PeriodComparison, PeriodSummary
from .pipeline import range_ledger

logger = logging.getLogger(__name__)

# Summary attribute -> delta name. Volumes get % change, rates get point change.
VOLUME_METRICS: dict[str, str] = {
    "crm_cards_total": "crm_cards",
    "crm_proposals_total": "crm_proposals",
    "crm_cost_total": "crm_cost",
    "total_cards": "total_cards",
    "total_proposals": "total_proposals",
}

# Unit costs are currency amounts, not percentages: compared by % change
COST_METRICS: dict[str, str] = {
    "cac": "cac",
}

RATE_METRICS: dict[str, str] = {
    "share_cards": "share_cards",
    "share_proposals": "share_proposals",
    "conversion_crm": "conversion_crm",
    "conversion_total": "conversion_total",
    "performance_index": "performance_index",
}


def previous_period(start: date, end: date) -> tuple[date, date]:
    """Range of identical inclusive length ending the day before start.

    Raises:
        InvalidDateRangeError: If end is before start.
    """
    if end < start:
        raise InvalidDateRangeError(start, end)

    duration_days = (end - start).days + 1
    prev_end = start - timedelta(days=1)
    prev_start = prev_end - timedelta(days=duration_days - 1)
    return prev_start, prev_end


def pct_change(current: float, previous: float) -> float | None:
    """(current - previous) / previous * 100, or None when previous is 0."""
    if previous == 0:
        return None
    return (current - previous) / previous * 100


def compare_summaries(
    current: PeriodSummary | None,
    previous: PeriodSummary | None,
) -> tuple[MetricDelta, ...]:
    """Deltas between two summaries; empty when either side has no data."""
    if current is None or previous is None:
        return ()

    deltas = [
        MetricDelta(
            metric=name,
            current=getattr(current, attr),
            previous=getattr(previous, attr),
            change=pct_change(getattr(current, attr), getattr(previous, attr)),
            kind="pct",
        )
        for attr, name in {**VOLUME_METRICS, **COST_METRICS}.items()
    ]
    deltas.extend(
        MetricDelta(
            metric=name,
            current=getattr(current, attr),
            previous=getattr(previous, attr),
            change=getattr(current, attr) - getattr(previous, attr),
            kind="points",
        )
        for attr, name in RATE_METRICS.items()
    )
    return tuple(deltas)


def compare_with_previous_period(
    activities: Sequence[DispatchActivity],
    origination_rows: Sequence[OriginationDailyRow],
    spec: FilterSpec,
    config: EngineConfig | None = None,
    paid_media_rows: Sequence[PaidMediaDailyRow] = (),
) -> PeriodComparison:
    """Summarize the filter's range and the preceding range with the same filters.

    Raises:
        ValueError: If the filter does not carry both date bounds.
    """
    if spec.date_start is None or spec.date_end is None:
        raise ValueError("date_start and date_end must be set to compare periods")

    config = config or EngineConfig()
    prev_start, prev_end = previous_period(spec.date_start, spec.date_end)

    current = summarize_period(
        range_ledger(activities, origination_rows, spec, config, paid_media_rows),
        config.anomaly_threshold,
        config.anomalies_enabled,
    )
    previous = summarize_period(
        range_ledger(
            activities,
            origination_rows,
            spec.with_dates(prev_start, prev_end),
            config,
            paid_media_rows,
        ),
        config.anomaly_threshold,
        config.anomalies_enabled,
    )
    if previous is None:
        logger.info(
            "No data for previous period %s..%s", prev_start.isoformat(), prev_end.isoformat()
        )

    return PeriodComparison(
        current_range=(spec.date_start, spec.date_end),
        previous_range=(prev_start, prev_end),
        current=current,
        previous=previous,
        deltas=compare_summaries(current, previous),
    )
