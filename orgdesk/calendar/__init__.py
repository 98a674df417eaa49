"""Calendar visibility rules and event aggregation."""

from .aggregation import (
    HourLogEntry,
    OptimisticHourLedger,
    format_hours,
    hour_log_to_event,
    merge_calendar,
    optimistic_to_event,
)
from .visibility import can_see_hour_logs, can_view_sls, is_event_visible

__all__ = [
    "HourLogEntry",
    "OptimisticHourLedger",
    "can_see_hour_logs",
    "can_view_sls",
    "format_hours",
    "hour_log_to_event",
    "is_event_visible",
    "merge_calendar",
    "optimistic_to_event",
]
