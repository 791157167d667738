"""Pydantic model for paid-media daily performance rows."""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from .fields import to_date, to_number, to_text


class PaidMediaDailyRow(BaseModel):
    """One day x campaign record of ad spend and delivery.

    Several rows may share a date (one per campaign); they are summed
    downstream.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    channel: str = ""  # meta | google | tiktok | unknown
    campaign: str = ""
    objective: str = ""  # marca | b2c | brand | conversion | unknown
    spend: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    conversions: float = 0.0

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> dt.date:
        return to_date(value)

    @field_validator("spend", "impressions", "clicks", "conversions", mode="before")
    @classmethod
    def _degrade_to_zero(cls, value: Any) -> float:
        return to_number(value)

    @field_validator("channel", "objective", mode="before")
    @classmethod
    def _normalize_tag(cls, value: Any) -> str:
        return to_text(value).lower()

    @field_validator("campaign", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return to_text(value)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "PaidMediaDailyRow":
        return cls.model_validate(record)
