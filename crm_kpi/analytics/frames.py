"""Convert input row models into typed Polars DataFrames."""

from collections.abc import Sequence

import polars as pl

from ..models.activity import DispatchActivity
from ..models.origination import OriginationDailyRow
from ..models.paid_media import PaidMediaDailyRow

ACTIVITY_SCHEMA: dict[str, pl.DataType] = {
    "id": pl.String,
    "date": pl.Date,
    "business_unit": pl.String,
    "channel": pl.String,
    "segment": pl.String,
    "partner": pl.String,
    "journey": pl.String,
    "base_sent": pl.Float64,
    "base_delivered": pl.Float64,
    "proposals": pl.Float64,
    "approved": pl.Float64,
    "cards_issued": pl.Float64,
    "total_cost": pl.Float64,
}

ORIGINATION_SCHEMA: dict[str, pl.DataType] = {
    "date": pl.Date,
    "total_proposals": pl.Float64,
    "total_cards": pl.Float64,
}

PAID_MEDIA_SCHEMA: dict[str, pl.DataType] = {
    "date": pl.Date,
    "channel": pl.String,
    "campaign": pl.String,
    "objective": pl.String,
    "spend": pl.Float64,
    "impressions": pl.Float64,
    "clicks": pl.Float64,
    "conversions": pl.Float64,
}


def activities_frame(activities: Sequence[DispatchActivity]) -> pl.DataFrame:
    """One row per activity, KPI bundle flattened beside the dimensions."""
    rows = [
        {
            "id": a.id,
            "date": a.dispatch_date,
            "business_unit": a.business_unit,
            "channel": a.channel,
            "segment": a.segment,
            "partner": a.partner,
            "journey": a.journey,
            **a.kpis.model_dump(),
        }
        for a in activities
    ]
    return pl.DataFrame(rows, schema=ACTIVITY_SCHEMA)


def origination_frame(rows: Sequence[OriginationDailyRow]) -> pl.DataFrame:
    """One row per origination record, in scan order."""
    return pl.DataFrame(
        [
            {
                "date": r.date,
                "total_proposals": r.total_proposals,
                "total_cards": r.total_cards,
            }
            for r in rows
        ],
        schema=ORIGINATION_SCHEMA,
    )


def paid_media_frame(rows: Sequence[PaidMediaDailyRow]) -> pl.DataFrame:
    """One row per paid-media record (date x campaign)."""
    return pl.DataFrame(
        [r.model_dump(include=set(PAID_MEDIA_SCHEMA)) for r in rows],
        schema=PAID_MEDIA_SCHEMA,
    )
