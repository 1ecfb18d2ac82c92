"""Domain types for calendar script execution."""

from __future__ import annotations

from .enums import ErrorKind, RunState
from .models import (
    BatchItemResult,
    BatchReport,
    BatchRun,
    CalendarEvent,
    CreatedEvent,
    DateParts,
    DeletionResult,
    EventListing,
    EventSearchResult,
    ExecutionOutcome,
    Failure,
    FanOutResult,
    ScriptSpec,
    Success,
)

__all__ = [
    "BatchItemResult",
    "BatchReport",
    "BatchRun",
    "CalendarEvent",
    "CreatedEvent",
    "DateParts",
    "DeletionResult",
    "ErrorKind",
    "EventListing",
    "EventSearchResult",
    "ExecutionOutcome",
    "Failure",
    "FanOutResult",
    "RunState",
    "ScriptSpec",
    "Success",
]
