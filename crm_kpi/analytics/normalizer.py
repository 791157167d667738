"""Normalizer - merge activities, origination and paid media into a daily ledger."""

import logging
from collections.abc import Iterable, Sequence

import polars as pl

from ..models.activity import DispatchActivity
from ..models.origination import OriginationDailyRow
from ..models.paid_media import PaidMediaDailyRow
from ..settings import DuplicatePolicy
from .expressions import (
    LEDGER_COUNT_COLUMNS,
    LEDGER_SUM_COLUMNS,
    crm_daily_totals_expr,
    media_daily_totals_expr,
    media_efficiency_expr,
)
from .frames import activities_frame, origination_frame, paid_media_frame
from .models import DailyLedgerEntry

logger = logging.getLogger(__name__)

DEFAULT_CAMPAIGN_CHANNELS = frozenset({"Email", "SMS", "WhatsApp"})

LEDGER_COLUMNS = ["date", *LEDGER_SUM_COLUMNS]


def crm_daily_totals(
    activities: Sequence[DispatchActivity],
    campaign_channels: Iterable[str] = DEFAULT_CAMPAIGN_CHANNELS,
) -> pl.DataFrame:
    """Sum activity KPIs per dispatch date."""
    return activities_frame(activities).group_by("date").agg(
        crm_daily_totals_expr(campaign_channels)
    )


def origination_daily_totals(
    rows: Sequence[OriginationDailyRow],
    policy: DuplicatePolicy = DuplicatePolicy.FIRST,
) -> pl.DataFrame:
    """Reduce origination rows to exactly one row per date.

    Rows sharing a date are resolved by policy; the duplicated dates are
    logged as a warning since upstream data should not contain them.
    """
    policy = DuplicatePolicy(policy)
    df = origination_frame(rows)

    duplicated = df.filter(pl.col("date").is_duplicated())["date"].unique().sort()
    if len(duplicated) > 0:
        logger.warning(
            "Origination rows share %d date(s), resolving with policy=%s: %s",
            len(duplicated),
            policy.value,
            [d.isoformat() for d in duplicated.to_list()],
        )

    if policy == DuplicatePolicy.SUM:
        return df.group_by("date").agg(
            pl.col("total_proposals").sum(), pl.col("total_cards").sum()
        )
    keep = "first" if policy == DuplicatePolicy.FIRST else "last"
    return df.unique(subset="date", keep=keep, maintain_order=True)


def media_daily_totals(rows: Sequence[PaidMediaDailyRow]) -> pl.DataFrame:
    """Sum paid-media counters per date across campaigns."""
    return paid_media_frame(rows).group_by("date").agg(media_daily_totals_expr())


def build_ledger(
    activities: Sequence[DispatchActivity],
    origination_rows: Sequence[OriginationDailyRow],
    paid_media_rows: Sequence[PaidMediaDailyRow] = (),
    campaign_channels: Iterable[str] = DEFAULT_CAMPAIGN_CHANNELS,
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.FIRST,
) -> pl.DataFrame:
    """Build the daily ledger keyed by date.

    Every date present in the activities or the origination rows appears
    exactly once; the side that has no row for a date contributes zeros.
    Paid-media counters are attached to those dates only, so a date with
    nothing but media spend is not part of the ledger.

    Returns:
        DataFrame with LEDGER_COLUMNS, sorted by date.
    """
    crm = crm_daily_totals(activities, campaign_channels)
    origination = origination_daily_totals(origination_rows, duplicate_policy)
    media = media_daily_totals(paid_media_rows)

    dates = pl.concat([crm.select("date"), origination.select("date")]).unique()

    ledger = (
        dates.join(crm, on="date", how="left")
        .join(origination, on="date", how="left")
        .join(media, on="date", how="left")
        .with_columns(
            [
                pl.col(c).fill_null(0).cast(pl.Int64)
                if c in LEDGER_COUNT_COLUMNS
                else pl.col(c).fill_null(0.0).cast(pl.Float64)
                for c in LEDGER_SUM_COLUMNS
            ]
        )
        .select(LEDGER_COLUMNS)
        .sort("date")
    )

    logger.debug(
        "Built ledger: %d dates from %d activities, %d origination rows, %d media rows",
        len(ledger),
        len(activities),
        len(origination_rows),
        len(paid_media_rows),
    )
    return ledger


def ledger_entries(ledger: pl.DataFrame) -> list[DailyLedgerEntry]:
    """Materialize ledger rows as DailyLedgerEntry objects."""
    return [DailyLedgerEntry(**row) for row in ledger.select(LEDGER_COLUMNS).to_dicts()]


def media_outcome_daily(
    origination_rows: Sequence[OriginationDailyRow],
    paid_media_rows: Sequence[PaidMediaDailyRow],
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.FIRST,
) -> pl.DataFrame:
    """Daily paid-media spend beside company cards issued.

    Covers the union of media and origination dates, so spend on a day
    without origination is kept.

    Returns:
        DataFrame with date, media_spend and total_cards, sorted by date.
    """
    origination = origination_daily_totals(origination_rows, duplicate_policy)
    media = media_daily_totals(paid_media_rows)

    dates = pl.concat([origination.select("date"), media.select("date")]).unique()
    return (
        dates.join(media.select("date", "media_spend"), on="date", how="left")
        .join(origination.select("date", "total_cards"), on="date", how="left")
        .with_columns(
            pl.col("media_spend").fill_null(0.0).cast(pl.Float64),
            pl.col("total_cards").fill_null(0.0).cast(pl.Float64),
        )
        .sort("date")
    )


def paid_media_daily(
    rows: Sequence[PaidMediaDailyRow],
    channels: Iterable[str] | None = None,
    objectives: Iterable[str] | None = None,
) -> pl.DataFrame:
    """Daily paid-media series with recomputed CPM, CPC, CTR and CPA.

    Channel and objective filters match case-insensitively; None means all.

    Returns:
        DataFrame with date, spend, impressions, clicks, conversions and
        ratio columns, sorted by date.
    """
    df = paid_media_frame(rows)
    if channels:
        df = df.filter(pl.col("channel").is_in(sorted(c.lower() for c in channels)))
    if objectives:
        df = df.filter(pl.col("objective").is_in(sorted(o.lower() for o in objectives)))

    return (
        df.group_by("date")
        .agg(
            pl.col("spend").sum(),
            pl.col("impressions").sum(),
            pl.col("clicks").sum(),
            pl.col("conversions").sum(),
        )
        .with_columns(media_efficiency_expr())
        .sort("date")
    )
