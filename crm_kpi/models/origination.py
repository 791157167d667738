"""Pydantic model for total-company daily origination."""

import datetime as dt
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .fields import to_date, to_number, to_text


class OriginationDailyRow(BaseModel):
    """Company-wide B2C proposals and cards issued for one calendar day.

    conversion_pct is informational; the engine recomputes conversion from
    the totals.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date = Field(validation_alias=AliasChoices("date", "data"))
    total_proposals: float = Field(
        default=0.0, validation_alias=AliasChoices("total_proposals", "propostas_b2c_total")
    )
    total_cards: float = Field(
        default=0.0, validation_alias=AliasChoices("total_cards", "emissoes_b2c_total")
    )
    conversion_pct: float = Field(
        default=0.0, validation_alias=AliasChoices("conversion_pct", "percentual_conversao_b2c")
    )
    notes: str = Field(default="", validation_alias=AliasChoices("notes", "observacoes"))

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> dt.date:
        return to_date(value)

    @field_validator("total_proposals", "total_cards", "conversion_pct", mode="before")
    @classmethod
    def _degrade_to_zero(cls, value: Any) -> float:
        return to_number(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return to_text(value)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "OriginationDailyRow":
        return cls.model_validate(record)
