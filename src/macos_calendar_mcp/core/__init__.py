"""Script generation, bounded execution, error classification and aggregation."""

from .batch import fan_out, run_batch
from .classifier import classify, refine
from .errors import CalendarError, OperationError, ValidationError
from .runner import DEFAULT_COMMAND, ProcessRunner
from .script_builder import (
    build_create_event,
    build_delete_events,
    build_fix_event_time,
    build_list_calendars,
    build_list_today_events,
    build_list_week_events,
    build_script,
    build_search_events,
    parse_request,
    week_bounds,
)

__all__ = [
    "CalendarError",
    "DEFAULT_COMMAND",
    "OperationError",
    "ProcessRunner",
    "ValidationError",
    "build_create_event",
    "build_delete_events",
    "build_fix_event_time",
    "build_list_calendars",
    "build_list_today_events",
    "build_list_week_events",
    "build_script",
    "build_search_events",
    "classify",
    "fan_out",
    "parse_request",
    "refine",
    "run_batch",
    "week_bounds",
]
