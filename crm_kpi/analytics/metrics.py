"""Metrics calculator - derived ratios per bucket and period summaries."""

import logging
from dataclasses import fields

import polars as pl

from .aggregator import Granularity, bucket_ledger
from .expressions import (
    anomaly_flag_expr,
    bucket_sums_expr,
    calendar_labels_expr,
    effective_base_expr,
    performance_index_expr,
    ratio_metrics_expr,
)
from .models import BucketMetrics, PeriodSummary

logger = logging.getLogger(__name__)

BUCKET_FIELDS = [f.name for f in fields(BucketMetrics)]


def with_ratio_metrics(df: pl.DataFrame) -> pl.DataFrame:
    """Add effective base, shares, conversions, CAC and performance index.

    Works on any frame of summed counters (a bucket series or a single
    period-totals row).
    """
    return (
        df.with_columns(effective_base_expr())
        .with_columns(ratio_metrics_expr())
        .with_columns(performance_index_expr())
    )


def with_bucket_metrics(
    buckets: pl.DataFrame,
    anomaly_threshold: float = 10.0,
    anomalies_enabled: bool = True,
) -> pl.DataFrame:
    """Add derived ratios, anomaly flag and calendar labels to a bucket series."""
    return with_ratio_metrics(buckets).with_columns(
        [anomaly_flag_expr(anomaly_threshold, anomalies_enabled), *calendar_labels_expr()]
    )


def bucket_metrics(
    ledger: pl.DataFrame,
    granularity: Granularity | str = Granularity.DAILY,
    anomaly_threshold: float = 10.0,
    anomalies_enabled: bool = True,
) -> list[BucketMetrics]:
    """Bucket the ledger and derive one BucketMetrics row per bucket.

    Returns:
        BucketMetrics sorted by bucket_start.
    """
    df = with_bucket_metrics(
        bucket_ledger(ledger, granularity), anomaly_threshold, anomalies_enabled
    )
    return [BucketMetrics(**row) for row in df.select(BUCKET_FIELDS).to_dicts()]


def summarize_period(
    ledger: pl.DataFrame,
    anomaly_threshold: float = 10.0,
    anomalies_enabled: bool = True,
) -> PeriodSummary | None:
    """Summarize a ledger slice into one PeriodSummary.

    Share, CAC and conversion are recomputed from period totals rather than
    averaged over buckets. Day and anomaly counts are taken at day level so
    the summary does not depend on the bucket size.

    Returns:
        PeriodSummary, or None when the slice holds no dates.
    """
    if ledger.is_empty():
        logger.debug("No ledger dates in range, summary is absent")
        return None

    daily = with_bucket_metrics(
        bucket_ledger(ledger, Granularity.DAILY), anomaly_threshold, anomalies_enabled
    )
    totals = with_ratio_metrics(ledger.select(bucket_sums_expr())).row(0, named=True)

    return PeriodSummary(
        period_start=ledger["date"].min(),
        period_end=ledger["date"].max(),
        day_count=len(daily),
        anomaly_day_count=int(daily["is_anomaly"].sum()),
        crm_proposals_total=totals["crm_proposals"],
        crm_cards_total=totals["crm_cards"],
        crm_cost_total=totals["crm_cost"],
        crm_base_delivered_total=totals["crm_base_delivered"],
        crm_base_sent_total=totals["crm_base_sent"],
        total_proposals=totals["total_proposals"],
        total_cards=totals["total_cards"],
        share_proposals=totals["share_proposals"],
        share_cards=totals["share_cards"],
        cac=totals["cac"],
        conversion_crm=totals["conversion_crm"],
        conversion_total=totals["conversion_total"],
        performance_index=totals["performance_index"],
    )
