"""Lenient field coercion shared by the input row models.

Numeric fields degrade to 0 instead of failing; dates accept the formats
produced by the upload layer (ISO, DD/MM/YYYY, Excel serials).
"""

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

EXCEL_EPOCH = date(1899, 12, 30)

# Brazilian notation: "." groups thousands, "," marks decimals (R$ 1.234,56)
NON_NUMERIC = re.compile(r"[^0-9.,-]")
THOUSANDS_DOT = re.compile(r"\.(?=\d{3}(\D|$))")


def to_number(value: Any) -> float:
    """Coerce a raw cell to float, defaulting to 0.0.

    Strings are read in Brazilian notation after stripping currency and
    percent symbols: "1.234,56" -> 1234.56, "12,5" -> 12.5. A dot not
    followed by exactly three digits stays a decimal point ("3.5" -> 3.5).
    None, empty strings, spreadsheet error values and NaN/inf become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = NON_NUMERIC.sub("", str(value).replace("R$", ""))
        text = THOUSANDS_DOT.sub("", text).replace(",", ".", 1)
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_text(value: Any) -> str:
    """Strip whitespace; None becomes empty string."""
    if value is None:
        return ""
    return str(value).strip()


def to_date(value: Any) -> date:
    """Normalize a raw date cell to a calendar date (time-of-day dropped).

    Raises:
        ValueError: If the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return EXCEL_EPOCH + timedelta(days=int(value))

    text = to_text(value)
    if not text:
        raise ValueError("date is required")

    if "/" in text:
        parts = text.split(" ")[0].split("/")
        if len(parts) == 3:
            day, month, year = (int(p) for p in parts)
            return date(year, month, day)
        raise ValueError(f"unrecognized date: {text!r}")

    if text.replace(".", "", 1).isdigit():
        return EXCEL_EPOCH + timedelta(days=int(float(text)))

    return date.fromisoformat(text[:10])
