"""Reusable Polars expressions for analytics calculations."""

from collections.abc import Iterable

import polars as pl

DAY_OF_WEEK_LABELS = ["seg", "ter", "qua", "qui", "sex", "sab", "dom"]

# Ledger counters summed by every bucket
LEDGER_SUM_COLUMNS = [
    "crm_proposals",
    "crm_cards",
    "crm_cost",
    "crm_base_delivered",
    "crm_base_sent",
    "crm_campaign_count",
    "crm_activity_count",
    "total_proposals",
    "total_cards",
    "media_spend",
    "media_impressions",
    "media_clicks",
    "media_conversions",
]

LEDGER_COUNT_COLUMNS = {"crm_campaign_count", "crm_activity_count"}


# =============================================================================
# SAFE RATIOS
# =============================================================================


def safe_ratio_expr(num: pl.Expr, den: pl.Expr, scale: float = 1.0) -> pl.Expr:
    """num / den * scale, or 0.0 when den is not positive."""
    return pl.when(den > 0).then(num / den * scale).otherwise(pl.lit(0.0))


# =============================================================================
# CRM DAILY TOTALS
# =============================================================================


def crm_daily_totals_expr(campaign_channels: Iterable[str]) -> list[pl.Expr]:
    """Expressions summing activity KPIs for one dispatch date."""
    return [
        pl.col("proposals").sum().alias("crm_proposals"),
        pl.col("cards_issued").sum().alias("crm_cards"),
        pl.col("total_cost").sum().alias("crm_cost"),
        pl.col("base_delivered").sum().alias("crm_base_delivered"),
        pl.col("base_sent").sum().alias("crm_base_sent"),
        campaign_count_expr(campaign_channels),
        pl.len().cast(pl.Int64).alias("crm_activity_count"),
    ]


def campaign_count_expr(campaign_channels: Iterable[str]) -> pl.Expr:
    """Count activities sent on a campaign channel."""
    channels = sorted(campaign_channels)
    if not channels:
        return pl.lit(0, dtype=pl.Int64).alias("crm_campaign_count")
    return pl.col("channel").is_in(channels).sum().cast(pl.Int64).alias("crm_campaign_count")


def media_daily_totals_expr() -> list[pl.Expr]:
    """Expressions summing paid-media rows for one date."""
    return [
        pl.col("spend").sum().alias("media_spend"),
        pl.col("impressions").sum().alias("media_impressions"),
        pl.col("clicks").sum().alias("media_clicks"),
        pl.col("conversions").sum().alias("media_conversions"),
    ]


def media_efficiency_expr() -> list[pl.Expr]:
    """Recomputed paid-media ratios from summed counters."""
    return [
        safe_ratio_expr(pl.col("spend"), pl.col("impressions"), 1000).alias("cpm"),
        safe_ratio_expr(pl.col("spend"), pl.col("clicks")).alias("cpc"),
        safe_ratio_expr(pl.col("clicks"), pl.col("impressions"), 100).alias("ctr"),
        safe_ratio_expr(pl.col("spend"), pl.col("conversions")).alias("cpa"),
    ]


# =============================================================================
# BUCKETING
# =============================================================================


def bucket_key_expr(granularity: str) -> pl.Expr:
    """Bucket start date: the day itself, its Monday, or the 1st of its month."""
    col = pl.col("date")
    if granularity == "weekly":
        return col.dt.truncate("1w").alias("bucket_start")
    if granularity == "monthly":
        return col.dt.truncate("1mo").alias("bucket_start")
    return col.alias("bucket_start")


def bucket_sums_expr() -> list[pl.Expr]:
    """Sum every ledger counter and count the days in the bucket."""
    return [pl.col(c).sum().alias(c) for c in LEDGER_SUM_COLUMNS] + [
        pl.len().cast(pl.Int64).alias("day_count")
    ]


# =============================================================================
# DERIVED METRICS
# =============================================================================


def effective_base_expr() -> pl.Expr:
    """Delivered base when present, else sent base."""
    return (
        pl.when(pl.col("crm_base_delivered") > 0)
        .then(pl.col("crm_base_delivered"))
        .otherwise(pl.col("crm_base_sent"))
        .alias("effective_base")
    )


def ratio_metrics_expr() -> list[pl.Expr]:
    """Share, conversion and CAC from summed counters.

    Requires effective_base to already be present.
    """
    return [
        safe_ratio_expr(pl.col("crm_proposals"), pl.col("total_proposals"), 100).alias(
            "share_proposals"
        ),
        safe_ratio_expr(pl.col("crm_cards"), pl.col("total_cards"), 100).alias("share_cards"),
        safe_ratio_expr(pl.col("crm_cards"), pl.col("effective_base"), 100).alias(
            "conversion_crm"
        ),
        safe_ratio_expr(pl.col("total_cards"), pl.col("total_proposals"), 100).alias(
            "conversion_total"
        ),
        safe_ratio_expr(pl.col("crm_cost"), pl.col("crm_cards")).alias("cac"),
    ]


def performance_index_expr() -> pl.Expr:
    """CRM conversion relative to company conversion (1.0 = parity)."""
    return safe_ratio_expr(pl.col("conversion_crm"), pl.col("conversion_total")).alias(
        "performance_index"
    )


def anomaly_flag_expr(threshold: float, enabled: bool = True) -> pl.Expr:
    """Flag buckets whose card share falls below threshold."""
    if not enabled:
        return pl.lit(False).alias("is_anomaly")
    return (pl.col("share_cards") < threshold).alias("is_anomaly")


def calendar_labels_expr() -> list[pl.Expr]:
    """Day-of-week label, week-of-month ordinal, month and year of bucket_start."""
    start = pl.col("bucket_start")
    return [
        start.dt.weekday()
        .replace_strict(list(range(1, 8)), DAY_OF_WEEK_LABELS, return_dtype=pl.String)
        .alias("day_of_week"),
        ((start.dt.day().cast(pl.Int64) + 6) // 7).alias("week_of_month"),
        start.dt.month().cast(pl.Int64).alias("month"),
        start.dt.year().cast(pl.Int64).alias("year"),
    ]
