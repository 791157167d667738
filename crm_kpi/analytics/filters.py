"""Filter engine for dispatch activities and facet helpers for filter controls."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime

import polars as pl

from ..exceptions import InvalidDateRangeError
from ..models.activity import DispatchActivity
from .frames import activities_frame
from .models import SegmentShare

# Filter field -> activity column
DIMENSIONS: dict[str, str] = {
    "business_units": "business_unit",
    "channels": "channel",
    "segments": "segment",
    "partners": "partner",
    "journeys": "journey",
}

UNIDENTIFIED_SEGMENT = "Não Identificado"
OTHER_ORIGINATION = "Outros B2C"


def _as_day(value: date | datetime | None) -> date | None:
    # Bounds compare at day granularity
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class FilterSpec:
    """Inclusion filters applied to activities.

    An empty dimension set or a None date bound means "unrestricted".
    Date bounds are inclusive.
    """

    business_units: frozenset[str] = frozenset()
    channels: frozenset[str] = frozenset()
    segments: frozenset[str] = frozenset()
    partners: frozenset[str] = frozenset()
    journeys: frozenset[str] = frozenset()
    date_start: date | None = None
    date_end: date | None = None

    def __post_init__(self) -> None:
        for name in DIMENSIONS:
            object.__setattr__(self, name, frozenset(getattr(self, name) or ()))
        object.__setattr__(self, "date_start", _as_day(self.date_start))
        object.__setattr__(self, "date_end", _as_day(self.date_end))

        if (
            self.date_start is not None
            and self.date_end is not None
            and self.date_end < self.date_start
        ):
            raise InvalidDateRangeError(self.date_start, self.date_end)

    def with_dates(self, start: date | None, end: date | None) -> "FilterSpec":
        """Copy with date bounds replaced, dimensions kept."""
        return replace(self, date_start=start, date_end=end)

    def to_expr(self) -> pl.Expr:
        """Conjunction of every active dimension over an activities frame."""
        expr = pl.lit(True)
        for name, column in DIMENSIONS.items():
            allowed = getattr(self, name)
            if allowed:
                expr = expr & pl.col(column).is_in(sorted(allowed))
        if self.date_start is not None:
            expr = expr & (pl.col("date") >= self.date_start)
        if self.date_end is not None:
            expr = expr & (pl.col("date") <= self.date_end)
        return expr


def filter_activities(
    activities: Sequence[DispatchActivity],
    spec: FilterSpec,
) -> list[DispatchActivity]:
    """Return activities matching every active filter, in original order."""
    if not activities:
        return []

    kept = (
        activities_frame(activities)
        .with_row_index("row_nr")
        .filter(spec.to_expr())["row_nr"]
        .to_list()
    )
    return [activities[i] for i in kept]


def facet_values(activities: Sequence[DispatchActivity]) -> dict[str, list[str]]:
    """Sorted distinct non-empty values per dimension.

    Computed over the collection given (normally the unfiltered universe).
    """
    df = activities_frame(activities)
    return {
        column: df.filter(pl.col(column) != "")[column].unique().sort().to_list()
        for column in DIMENSIONS.values()
    }


def facet_counts(
    activities: Sequence[DispatchActivity],
    dimension: str,
) -> dict[str, int]:
    """Activity count per value of one dimension.

    Pass the already-filtered collection so counts reflect the other active
    filters. Values with no surviving activity are absent (no zero entries).

    Raises:
        ValueError: If dimension is not a filterable column.
    """
    columns = set(DIMENSIONS.values())
    if dimension not in columns:
        raise ValueError(f"Unknown dimension: {dimension!r}. Expected one of {sorted(columns)}")

    df = activities_frame(activities).filter(pl.col(dimension) != "")
    counts = df.group_by(dimension).agg(pl.len().alias("count")).sort(dimension)
    return {row[dimension]: row["count"] for row in counts.to_dicts()}


def all_facet_counts(activities: Sequence[DispatchActivity]) -> dict[str, dict[str, int]]:
    """facet_counts for every dimension."""
    return {column: facet_counts(activities, column) for column in DIMENSIONS.values()}


def segment_share(
    activities: Iterable[DispatchActivity],
    total_cards: float,
) -> list[SegmentShare]:
    """Cards issued per segment, largest first.

    A trailing "Outros B2C" entry carries company cards not attributed to
    CRM when that remainder is positive.
    """
    df = activities_frame(list(activities))
    by_segment = (
        df.with_columns(
            pl.when(pl.col("segment") == "")
            .then(pl.lit(UNIDENTIFIED_SEGMENT))
            .otherwise(pl.col("segment"))
            .alias("segment")
        )
        .group_by("segment")
        .agg(pl.col("cards_issued").sum().alias("cards"))
        .sort(["cards", "segment"], descending=[True, False])
    )

    result = [
        SegmentShare(name=row["segment"], cards=row["cards"]) for row in by_segment.to_dicts()
    ]

    remainder = max(0.0, total_cards - df["cards_issued"].sum())
    if remainder > 0:
        result.append(SegmentShare(name=OTHER_ORIGINATION, cards=remainder))
    return result
