"""Projection engine - month-end extrapolation from recent daily pace.

The projection is a recent-window average times the days left in the month.
"""

import calendar
import math
from datetime import date

import polars as pl

from ..exceptions import UnknownMetricError
from .models import BudgetPacing, ProjectionResult

RECENT_WINDOW = 7
MIN_POINTS_FOR_RECENT = 3
TREND_BAND = 0.05
CONFIDENCE_BOOST_AFTER = 7  # data points
CONFIDENCE_BOOST = 20

PACING_RISK_INDEX = 1.1
PACING_RISK_PROJECTED_PCT = 105.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _safe_div(num: float, den: float) -> float:
    return num / den if den > 0 else 0.0


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def month_series(series: pl.DataFrame, metric: str, as_of: date) -> pl.DataFrame:
    """Daily totals of one metric for the as_of calendar month, sorted by date.

    Several rows on the same date are summed into one data point.

    Raises:
        UnknownMetricError: If metric is not a column of series.
    """
    if metric not in series.columns:
        raise UnknownMetricError(metric, [c for c in series.columns if c != "date"])

    return (
        series.filter(
            (pl.col("date").dt.year() == as_of.year)
            & (pl.col("date").dt.month() == as_of.month)
        )
        .group_by("date")
        .agg(pl.col(metric).fill_null(0).sum().alias("value"))
        .sort("date")
    )


def classify_trend(recent_pace: float, overall_pace: float, band: float = TREND_BAND) -> str:
    """up/down when recent pace leaves a +/-band around the overall pace."""
    if overall_pace <= 0:
        return "stable"
    if recent_pace > overall_pace * (1 + band):
        return "up"
    if recent_pace < overall_pace * (1 - band):
        return "down"
    return "stable"


def projection_confidence(data_points: int, month_days: int) -> int:
    """Coverage of the month in percent, boosted once past a week of data."""
    confidence = _round_half_up(data_points / month_days * 100)
    if data_points > CONFIDENCE_BOOST_AFTER:
        confidence += CONFIDENCE_BOOST
    return min(100, confidence)


def project_metric(
    series: pl.DataFrame,
    metric: str,
    as_of: date,
    recent_window: int = RECENT_WINDOW,
    min_points_for_recent: int = MIN_POINTS_FOR_RECENT,
    trend_band: float = TREND_BAND,
) -> ProjectionResult:
    """Project one additive metric to the end of the as_of month.

    Args:
        series: Daily frame with a ``date`` column and the metric column
        metric: Column to project (must be additive, e.g. spend or cards)
        as_of: Any date inside the month to project

    Returns:
        ProjectionResult; a month without data yields zeros and confidence 0.
    """
    month = month_series(series, metric, as_of)
    if month.is_empty():
        return ProjectionResult(
            metric=metric,
            current=0.0,
            projected=0.0,
            trend="stable",
            confidence=0,
            remaining_days=0,
            pace=0.0,
        )

    month_days = days_in_month(as_of)
    data_points = len(month)
    last_data_day = month["date"].max().day
    values = month["value"]

    current_total = float(values.sum())
    overall_pace = current_total / data_points
    recent_pace = float(values.tail(recent_window).mean())

    pace = recent_pace if data_points >= min_points_for_recent else overall_pace
    remaining_days = month_days - last_data_day

    return ProjectionResult(
        metric=metric,
        current=current_total,
        projected=current_total + pace * remaining_days,
        trend=classify_trend(recent_pace, overall_pace, trend_band),
        confidence=projection_confidence(data_points, month_days),
        remaining_days=remaining_days,
        pace=pace,
    )


def project_ratio(
    numerator: ProjectionResult,
    denominator: ProjectionResult,
    metric: str,
) -> ProjectionResult:
    """Project a composite metric (e.g. CPA) from its projected parts.

    The ratio of projected totals is used; per-day ratios are never averaged.
    """
    current = _safe_div(numerator.current, denominator.current)
    projected = _safe_div(numerator.projected, denominator.projected)

    if projected > current:
        trend = "up"
    elif projected < current:
        trend = "down"
    else:
        trend = "stable"

    return ProjectionResult(
        metric=metric,
        current=current,
        projected=projected,
        trend=trend,
        confidence=_round_half_up((numerator.confidence + denominator.confidence) / 2),
        remaining_days=numerator.remaining_days,
        pace=_safe_div(numerator.pace, denominator.pace),
    )


def budget_pacing(budget: float, actual_spend: float, as_of: date) -> BudgetPacing:
    """Compare month-to-date spend with a monthly budget.

    Pacing index = (% of budget spent) / (% of month elapsed); 1.0 is on pace.
    Status is "failed" once the budget is exhausted, "risk" when spending
    runs ahead of the calendar or the straight-line projection overshoots.
    """
    month_days = days_in_month(as_of)
    current_day = as_of.day
    remaining_days = month_days - current_day

    percent_used = _safe_div(actual_spend, budget) * 100
    percent_month = current_day / month_days * 100
    pacing_index = _safe_div(percent_used, percent_month)

    projected_total = actual_spend / current_day * month_days
    projected_percent = _safe_div(projected_total, budget) * 100
    ideal_daily_pace = (
        max(0.0, budget - actual_spend) / remaining_days if remaining_days > 0 else 0.0
    )

    status = "ok"
    if pacing_index > PACING_RISK_INDEX or projected_percent > PACING_RISK_PROJECTED_PCT:
        status = "risk"
    if budget > 0 and percent_used >= 100:
        status = "failed"

    return BudgetPacing(
        budget=budget,
        actual_spend=actual_spend,
        percent_used=percent_used,
        percent_month_elapsed=percent_month,
        pacing_index=pacing_index,
        projected_total=projected_total,
        projected_percent=projected_percent,
        ideal_daily_pace=ideal_daily_pace,
        remaining_days=remaining_days,
        status=status,
    )
