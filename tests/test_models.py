"""Tests for input row models and field coercion."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from crm_kpi.models import ActivityKPIs, DispatchActivity, OriginationDailyRow, PaidMediaDailyRow
from crm_kpi.models.fields import to_date, to_number


# =============================================================================
# FIELD COERCION
# =============================================================================


class TestToNumber:
    """Tests for lenient numeric coercion."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (12, 12.0),
            (3.5, 3.5),
            ("1.200", 1200.0),
            ("12,5", 12.5),
            ("1.234,56", 1234.56),
            ("R$ 1.234,56", 1234.56),
            ("1.234.567,89", 1234567.89),
            ("-15,5", -15.5),
            ("12,5%", 12.5),
            ("3.5", 3.5),
            ("#DIV/0!", 0.0),
            ("#N/A", 0.0),
            (" 42 ", 42.0),
            ("", 0.0),
            (None, 0.0),
            ("n/a", 0.0),
            (float("nan"), 0.0),
            (float("inf"), 0.0),
            (True, 0.0),
        ],
    )
    def test_coercion(self, raw, expected: float) -> None:
        assert to_number(raw) == expected


class TestToDate:
    """Tests for date normalization."""

    def test_iso_string(self) -> None:
        assert to_date("2024-03-01") == date(2024, 3, 1)

    def test_iso_timestamp_drops_time(self) -> None:
        assert to_date("2024-03-01T18:45:00") == date(2024, 3, 1)

    def test_day_first_string(self) -> None:
        assert to_date("05/03/2024") == date(2024, 3, 5)

    def test_excel_serial(self) -> None:
        assert to_date(45352) == date(2024, 3, 1)
        assert to_date("45352") == date(2024, 3, 1)

    def test_datetime_truncated(self) -> None:
        assert to_date(datetime(2024, 3, 1, 23, 59)) == date(2024, 3, 1)

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_date("")


# =============================================================================
# ROW MODELS
# =============================================================================


class TestDispatchActivity:
    """Tests for DispatchActivity parsing."""

    def test_from_source_labels(self) -> None:
        activity = DispatchActivity.from_record(
            {
                "ID": 17,
                "Data de Disparo": "01/03/2024",
                "BU": "B2C",
                "Canal": " Email ",
                "Segmento": "Base Ativa",
                "Parceiro": "",
                "Cartões Gerados": "1.200",
                "Propostas": "abc",
                "Custo Total Campanha": None,
                "Base Acionável": 50000,
            }
        )

        assert activity.id == "17"
        assert activity.dispatch_date == date(2024, 3, 1)
        assert activity.channel == "Email"
        assert activity.segment == "Base Ativa"
        assert activity.kpis.cards_issued == 1200.0
        assert activity.kpis.proposals == 0.0
        assert activity.kpis.total_cost == 0.0
        assert activity.kpis.base_delivered == 50000.0

    def test_brazilian_currency_cost(self) -> None:
        activity = DispatchActivity.from_record(
            {"Data de Disparo": "2024-03-01", "Custo Total Campanha": "R$ 2.500,75"}
        )
        assert activity.kpis.total_cost == pytest.approx(2500.75)

    def test_from_english_fields(self) -> None:
        activity = DispatchActivity.from_record(
            {
                "dispatch_date": "2024-03-02",
                "channel": "SMS",
                "kpis": {"cards_issued": 3, "total_cost": "150"},
            }
        )

        assert activity.channel == "SMS"
        assert activity.kpis == ActivityKPIs(cards_issued=3, total_cost=150)

    def test_missing_date_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DispatchActivity.from_record({"channel": "Email"})

    def test_frozen(self) -> None:
        activity = DispatchActivity(dispatch_date=date(2024, 3, 1))
        with pytest.raises(ValidationError):
            activity.channel = "SMS"


class TestOriginationDailyRow:
    """Tests for OriginationDailyRow parsing."""

    def test_from_source_columns(self) -> None:
        row = OriginationDailyRow.from_record(
            {
                "data": "2024-03-01",
                "propostas_b2c_total": None,
                "emissoes_b2c_total": "40",
                "observacoes": "  feriado ",
            }
        )

        assert row.date == date(2024, 3, 1)
        assert row.total_proposals == 0.0
        assert row.total_cards == 40.0
        assert row.notes == "feriado"

    def test_unreadable_date_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OriginationDailyRow.from_record({"data": "not a date"})


class TestPaidMediaDailyRow:
    """Tests for PaidMediaDailyRow parsing."""

    def test_tags_lowercased(self) -> None:
        row = PaidMediaDailyRow.from_record(
            {
                "date": "2024-03-01",
                "channel": "Meta",
                "objective": " B2C ",
                "campaign": "Cartão Pré",
                "spend": "250.5",
                "clicks": "",
            }
        )

        assert row.channel == "meta"
        assert row.objective == "b2c"
        assert row.campaign == "Cartão Pré"
        assert row.spend == 250.5
        assert row.clicks == 0.0
