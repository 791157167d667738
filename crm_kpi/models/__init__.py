"""Input row models and consolidated output."""

from .activity import ActivityKPIs, DispatchActivity
from .kpi_pack import KPIPack
from .origination import OriginationDailyRow
from .paid_media import PaidMediaDailyRow

__all__ = [
    "ActivityKPIs",
    "DispatchActivity",
    "KPIPack",
    "OriginationDailyRow",
    "PaidMediaDailyRow",
]
