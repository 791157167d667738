"""Statistical functions using scipy for spend/outcome correlation."""

from datetime import date

import numpy as np
import polars as pl
from scipy import stats

from .models import MediaCorrelation

MAX_LAG_DAYS = 7
MIN_DAYS_FOR_LAG_SEARCH = 5
MIN_PAIRS = 3


def pearson_correlation(
    df: pl.DataFrame,
    col_x: str,
    col_y: str,
    min_samples: int = 10,
) -> float | None:
    """Calculate Pearson correlation coefficient.

    Args:
        df: DataFrame with the columns
        col_x: First column name
        col_y: Second column name
        min_samples: Minimum non-null pairs required

    Returns:
        Correlation coefficient or None if insufficient data.
    """
    if col_x not in df.columns or col_y not in df.columns:
        return None

    valid = df.select([col_x, col_y]).drop_nulls()

    if len(valid) < min_samples:
        return None

    x = valid[col_x].to_numpy()
    y = valid[col_y].to_numpy()

    # Handle edge case of zero variance
    if np.std(x) == 0 or np.std(y) == 0:
        return None

    corr, _ = stats.pearsonr(x, y)
    return float(corr)


def lagged_pairs(daily: pl.DataFrame, start: date, end: date, lag: int) -> pl.DataFrame:
    """Spend on each day of [start, end] beside total cards ``lag`` days later.

    ``daily`` holds date, media_spend and total_cards columns. Only days with
    positive spend are kept. Cards may come from dates after ``end``.
    """
    days = pl.DataFrame({"date": pl.date_range(start, end, "1d", eager=True)})
    spend = days.join(daily.select("date", "media_spend"), on="date", how="left")
    cards = daily.select(
        pl.col("date").dt.offset_by(f"{-lag}d"), pl.col("total_cards")
    )
    return (
        spend.join(cards, on="date", how="left")
        .with_columns(pl.col("media_spend").fill_null(0.0), pl.col("total_cards").fill_null(0.0))
        .filter(pl.col("media_spend") > 0)
        .sort("date")
    )


def _regression(pairs: pl.DataFrame):
    x = pairs["media_spend"].to_numpy()
    y = pairs["total_cards"].to_numpy()
    if len(x) < MIN_PAIRS or np.std(x) == 0 or np.std(y) == 0:
        return None
    return stats.linregress(x, y)


def correlation_quality(r_squared: float) -> str:
    if r_squared >= 0.5:
        return "high"
    if r_squared >= 0.25:
        return "moderate"
    return "low"


def media_correlation(
    daily: pl.DataFrame,
    start: date,
    end: date,
    max_lag: int = MAX_LAG_DAYS,
) -> MediaCorrelation | None:
    """Regress total cards on paid-media spend at the best-fitting lag.

    ``daily`` is a media_outcome_daily frame. Lags 0..max_lag are tried and
    the one with the highest R-squared wins.
    Ranges shorter than MIN_DAYS_FOR_LAG_SEARCH only use lag 0.

    Returns:
        MediaCorrelation, or None when no lag has enough varying data.
    """
    day_count = (end - start).days + 1
    lags = range(max_lag + 1) if day_count >= MIN_DAYS_FOR_LAG_SEARCH else range(1)

    best = None
    for lag in lags:
        result = _regression(lagged_pairs(daily, start, end, lag))
        if result is None:
            continue
        r_squared = float(result.rvalue**2)
        if best is None or r_squared > best[1]:
            best = (lag, r_squared, result)

    if best is None:
        return None

    lag, r_squared, result = best
    in_range = daily.filter(pl.col("date").is_between(start, end))
    total_spend = float(in_range["media_spend"].sum())
    total_cards = float(in_range["total_cards"].sum())

    return MediaCorrelation(
        best_lag=lag,
        correlation=float(result.rvalue),
        r_squared=r_squared,
        slope=float(result.slope),
        intercept=float(result.intercept),
        quality=correlation_quality(r_squared),
        days_analyzed=day_count,
        total_spend=total_spend,
        total_cards=total_cards,
        effective_cpa=total_spend / total_cards if total_cards > 0 else 0.0,
    )
