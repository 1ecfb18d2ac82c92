"""Typed request variants, one per calendar operation.

Tool parameters arrive as loosely typed mappings. Each operation validates them
into its own model so that required fields are explicit and unknown keys are
rejected at the boundary. Field names are snake_case; the camelCase names used
by MCP clients (``startDate``, ``weekStart`` ...) are accepted as aliases.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_CALENDAR = "Personal"
DEFAULT_WORK_CALENDAR = "Work"


class OperationRequest(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    operation: ClassVar[str] = ""
    # Operations that read calendars fall back to the personal calendar, the
    # bulk/destructive ones to the work calendar.
    default_calendar: ClassVar[str] = DEFAULT_CALENDAR


def _require_text(value: str, name: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"Missing required parameter '{name}'")
    return value


class ListCalendarsRequest(OperationRequest):
    operation: ClassVar[str] = "list-calendars"


class EventInput(OperationRequest):
    title: str
    start_date: str
    end_date: str
    description: str = ""
    location: str = ""

    @field_validator("title")
    @classmethod
    def _title_present(cls, value: str) -> str:
        return _require_text(value, "title")

    @field_validator("start_date", "end_date")
    @classmethod
    def _dates_present(cls, value: str, info: ValidationInfo) -> str:
        return _require_text(value, to_camel(info.field_name))


class CreateEventRequest(EventInput):
    operation: ClassVar[str] = "create-event"

    calendar: str = DEFAULT_CALENDAR


class BatchEventsRequest(OperationRequest):
    operation: ClassVar[str] = "create-batch-events"
    default_calendar: ClassVar[str] = DEFAULT_WORK_CALENDAR

    events: List[Any]
    calendar: str = DEFAULT_WORK_CALENDAR

    @field_validator("events")
    @classmethod
    def _events_present(cls, value: List[Any]) -> List[Any]:
        if not value:
            raise ValueError("Events array is empty; provide at least one event")
        return value


class DeleteEventsRequest(OperationRequest):
    operation: ClassVar[str] = "delete-events-by-keyword"
    default_calendar: ClassVar[str] = DEFAULT_WORK_CALENDAR

    keyword: str
    calendar: str = DEFAULT_WORK_CALENDAR
    confirm: bool = False

    @field_validator("keyword")
    @classmethod
    def _keyword_present(cls, value: str) -> str:
        return _require_text(value, "keyword")


class ListTodayEventsRequest(OperationRequest):
    operation: ClassVar[str] = "list-today-events"

    calendar: str = DEFAULT_CALENDAR


class ListWeekEventsRequest(OperationRequest):
    operation: ClassVar[str] = "list-week-events"
    default_calendar: ClassVar[str] = DEFAULT_WORK_CALENDAR

    week_start: str
    calendar: str = DEFAULT_WORK_CALENDAR

    @field_validator("week_start")
    @classmethod
    def _week_start_present(cls, value: str) -> str:
        return _require_text(value, "weekStart")


class SearchEventsRequest(OperationRequest):
    """Search one calendar, or every calendar when ``calendar`` is omitted."""

    operation: ClassVar[str] = "search-events"

    query: str
    calendar: Optional[str] = None

    @field_validator("query")
    @classmethod
    def _query_present(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Missing required parameter 'query' or query string is empty")
        return value


class TimeCorrection(OperationRequest):
    keyword: str
    new_start_time: str
    new_end_time: str

    @field_validator("keyword")
    @classmethod
    def _keyword_present(cls, value: str) -> str:
        return _require_text(value, "keyword")

    @field_validator("new_start_time", "new_end_time")
    @classmethod
    def _times_present(cls, value: str, info: ValidationInfo) -> str:
        return _require_text(value, to_camel(info.field_name))


class FixEventTimesRequest(OperationRequest):
    operation: ClassVar[str] = "fix-event-times"
    default_calendar: ClassVar[str] = DEFAULT_WORK_CALENDAR

    date_pattern: str
    corrections: List[Any]
    calendar: str = DEFAULT_WORK_CALENDAR

    @field_validator("date_pattern")
    @classmethod
    def _date_pattern_present(cls, value: str) -> str:
        return _require_text(value, "datePattern")

    @field_validator("corrections")
    @classmethod
    def _corrections_present(cls, value: List[Any]) -> List[Any]:
        if not value:
            raise ValueError("Missing required parameter 'corrections' or corrections array is empty")
        return value


REQUEST_TYPES: Dict[str, type[OperationRequest]] = {
    request_type.operation: request_type
    for request_type in (
        ListCalendarsRequest,
        CreateEventRequest,
        BatchEventsRequest,
        DeleteEventsRequest,
        ListTodayEventsRequest,
        ListWeekEventsRequest,
        SearchEventsRequest,
        FixEventTimesRequest,
    )
}
