"""Marketing KPI engine: CRM share of origination, period comparison and pacing."""

from .analytics import FilterSpec, Granularity, KPIEngine
from .exceptions import ConfigLoadError, InvalidDateRangeError, KPIEngineError, UnknownMetricError
from .models import DispatchActivity, OriginationDailyRow, PaidMediaDailyRow
from .settings import DuplicatePolicy, EngineConfig, load_config

__all__ = [
    "ConfigLoadError",
    "DispatchActivity",
    "DuplicatePolicy",
    "EngineConfig",
    "FilterSpec",
    "Granularity",
    "InvalidDateRangeError",
    "KPIEngine",
    "KPIEngineError",
    "OriginationDailyRow",
    "PaidMediaDailyRow",
    "UnknownMetricError",
    "load_config",
]
