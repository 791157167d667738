"""Aggregator - roll the daily ledger up into day/week/month buckets."""

from datetime import date
from enum import Enum

import polars as pl

from .expressions import bucket_key_expr, bucket_sums_expr


class Granularity(str, Enum):
    """Bucket size for aggregation."""

    DAILY = "daily"
    WEEKLY = "weekly"  # ISO week, starts Monday
    MONTHLY = "monthly"  # Calendar month, starts on the 1st


def filter_ledger_range(
    ledger: pl.DataFrame,
    start: date | None,
    end: date | None,
) -> pl.DataFrame:
    """Keep ledger dates inside [start, end]; a None bound is open."""
    if start is not None:
        ledger = ledger.filter(pl.col("date") >= start)
    if end is not None:
        ledger = ledger.filter(pl.col("date") <= end)
    return ledger


def bucket_ledger(
    ledger: pl.DataFrame,
    granularity: Granularity | str = Granularity.DAILY,
) -> pl.DataFrame:
    """Sum every ledger counter per bucket.

    Buckets at the edge of a range may be partial; they are not flagged.

    Returns:
        One row per bucket keyed by bucket_start, sorted ascending, with a
        day_count column.
    """
    granularity = Granularity(granularity)
    return (
        ledger.with_columns(bucket_key_expr(granularity.value))
        .group_by("bucket_start")
        .agg(bucket_sums_expr())
        .sort("bucket_start")
    )
