"""Pydantic model for CRM dispatch activities."""

from datetime import date
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .fields import to_date, to_number, to_text

# Source column label -> KPI field
KPI_SOURCE_COLUMNS: dict[str, tuple[str, ...]] = {
    "base_sent": ("base_sent", "baseEnviada", "Base Total"),
    "base_delivered": ("base_delivered", "baseEntregue", "Base Acionável"),
    "proposals": ("proposals", "propostas", "Propostas"),
    "approved": ("approved", "aprovados", "Aprovados"),
    "cards_issued": ("cards_issued", "cartoes", "Cartões Gerados"),
    "total_cost": ("total_cost", "custoTotal", "Custo Total Campanha"),
}


class ActivityKPIs(BaseModel):
    """Funnel counts and cost for one dispatch.

    Missing or malformed values are stored as 0.
    """

    model_config = ConfigDict(frozen=True)

    base_sent: float = 0.0
    base_delivered: float = 0.0
    proposals: float = 0.0
    approved: float = 0.0
    cards_issued: float = 0.0
    total_cost: float = 0.0

    @field_validator("*", mode="before")
    @classmethod
    def _degrade_to_zero(cls, value: Any) -> float:
        return to_number(value)


class DispatchActivity(BaseModel):
    """One CRM campaign send and its resulting KPIs."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default="", validation_alias=AliasChoices("id", "ID"))
    dispatch_date: date = Field(
        validation_alias=AliasChoices("dispatch_date", "dataDisparo", "Data de Disparo")
    )
    business_unit: str = Field(
        default="", validation_alias=AliasChoices("business_unit", "bu", "BU")
    )
    channel: str = Field(default="", validation_alias=AliasChoices("channel", "canal", "Canal"))
    segment: str = Field(
        default="", validation_alias=AliasChoices("segment", "segmento", "Segmento")
    )
    partner: str = Field(
        default="", validation_alias=AliasChoices("partner", "parceiro", "Parceiro")
    )
    journey: str = Field(default="", validation_alias=AliasChoices("journey", "jornada"))
    kpis: ActivityKPIs = Field(default_factory=ActivityKPIs)

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_kpis(cls, data: Any) -> Any:
        """Accept source rows where KPI columns sit beside the dimensions."""
        if not isinstance(data, dict) or "kpis" in data:
            return data
        kpis: dict[str, Any] = {}
        for field_name, labels in KPI_SOURCE_COLUMNS.items():
            for label in labels:
                if label in data:
                    kpis[field_name] = data[label]
                    break
        return {**data, "kpis": kpis}

    @field_validator("dispatch_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> date:
        return to_date(value)

    @field_validator(
        "id", "business_unit", "channel", "segment", "partner", "journey", mode="before"
    )
    @classmethod
    def _strip(cls, value: Any) -> str:
        return to_text(value)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "DispatchActivity":
        """Build from a parsed upload row (English or source column labels)."""
        return cls.model_validate(record)
