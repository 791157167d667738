"""KPIPack - consolidated dashboard snapshot."""

import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any


@dataclass
class KPIPack:
    """Consolidated engine output for one filter selection.

    All data is pre-computed and JSON-serializable.
    """

    # Metadata
    generated_at: datetime
    date_range: tuple[date, date]
    granularity: str
    as_of: date

    # Period analysis
    buckets: list[dict[str, Any]]
    summary: dict[str, Any] | None
    previous_summary: dict[str, Any] | None
    deltas: list[dict[str, Any]]

    # Month-end projections keyed by metric
    projections: dict[str, dict[str, Any]]

    # Breakdown
    segment_share: list[dict[str, Any]]
    facets: dict[str, Any]

    # Paid media vs origination
    media_correlation: dict[str, Any] | None
    correlations: dict[str, float | None]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "meta": {
                "generated_at": self.generated_at.isoformat(),
                "date_range": {
                    "start": self.date_range[0].isoformat(),
                    "end": self.date_range[1].isoformat(),
                },
                "granularity": self.granularity,
                "as_of": self.as_of.isoformat(),
            },
            "period": {
                "buckets": self.buckets,
                "summary": self.summary,
                "previous_summary": self.previous_summary,
                "deltas": self.deltas,
            },
            "projections": self.projections,
            "breakdown": {
                "segments": self.segment_share,
                "facets": self.facets,
            },
            "media": {
                "correlation": self.media_correlation,
                "correlations": {
                    k: round(v, 4) if v is not None else None
                    for k, v in self.correlations.items()
                },
            },
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def get_executive_summary(self) -> dict[str, Any]:
        """Headline figures for report headers."""
        summary = self.summary or {}
        deltas = {d["metric"]: d for d in self.deltas}
        share_delta = deltas.get("share_cards")
        return {
            "date_range": [d.isoformat() for d in self.date_range],
            "has_data": self.summary is not None,
            "crm_cards_total": summary.get("crm_cards_total"),
            "share_cards_pct": (
                round(summary["share_cards"], 2) if "share_cards" in summary else None
            ),
            "share_cards_points_change": (
                round(share_delta["change"], 2) if share_delta else None
            ),
            "cac": round(summary["cac"], 2) if "cac" in summary else None,
            "anomaly_days": summary.get("anomaly_day_count"),
            "projected_spend": self.projections.get("spend", {}).get("projected"),
        }
