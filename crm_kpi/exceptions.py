"""Custom exceptions for the KPI engine."""

from datetime import date


class KPIEngineError(Exception):
    """Base exception for engine errors."""

    pass


class ConfigLoadError(KPIEngineError):
    """Failed to load engine configuration."""

    pass


class InvalidDateRangeError(KPIEngineError, ValueError):
    """Date range ends before it starts."""

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(
            f"Invalid date range: end {end.isoformat()} is before start {start.isoformat()}"
        )


class UnknownMetricError(KPIEngineError, KeyError):
    """Requested metric column is not present in the series."""

    def __init__(self, metric: str, available: list[str]):
        self.metric = metric
        self.available = available
        super().__init__(f"Unknown metric: {metric!r}. Available: {available}")
