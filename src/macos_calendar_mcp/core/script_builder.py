"""Turn validated calendar requests into AppleScript programs.

Every builder is pure: the same request always yields the same
:class:`ScriptSpec`, and no builder touches the filesystem, the network or a
process. Untrusted strings are embedded only through :func:`applescript.quote`.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Callable, Dict, Mapping, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..domain import DateParts, ScriptSpec
from ..domain.requests import (
    DEFAULT_CALENDAR,
    REQUEST_TYPES,
    CreateEventRequest,
    DeleteEventsRequest,
    EventInput,
    FixEventTimesRequest,
    ListCalendarsRequest,
    ListTodayEventsRequest,
    ListWeekEventsRequest,
    OperationRequest,
    SearchEventsRequest,
    TimeCorrection,
)
from .applescript import EVENT_HANDLERS, date_assignment, parse_clock, parse_date, parse_datetime, quote
from .errors import ValidationError

RequestT = TypeVar("RequestT", bound=OperationRequest)


def _describe_error(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "request"
    error_type = error.get("type")
    if error_type == "missing":
        return f"Missing required parameter '{location}'"
    if error_type == "extra_forbidden":
        return f"Unknown parameter '{location}'"
    if error_type == "value_error":
        context = error.get("ctx") or {}
        return str(context.get("error", error.get("msg", "")))
    return f"Invalid parameter '{location}': {error.get('msg', '')}"


def parse_request(request_type: Type[RequestT], params: Mapping[str, Any]) -> RequestT:
    """Validate ``params`` into ``request_type`` or raise :class:`ValidationError`."""

    if not isinstance(params, Mapping):
        raise ValidationError(f"Parameters must be an object, got {type(params).__name__}")
    try:
        return request_type.model_validate(dict(params))
    except PydanticValidationError as exc:
        message = "; ".join(_describe_error(error) for error in exc.errors())
        raise ValidationError(message) from None


def _events_block(calendar: str, body: str, handlers: str = "") -> str:
    return f'tell application "Calendar"\nset theCalendar to calendar {quote(calendar)}\n{body}end tell\n{handlers}'


def build_list_calendars(request: ListCalendarsRequest) -> ScriptSpec:
    source = (
        'tell application "Calendar"\n'
        "set calendarNames to name of calendars\n"
        "end tell\n"
        "set AppleScript's text item delimiters to character id 30\n"
        "set joined to calendarNames as text\n"
        "set AppleScript's text item delimiters to \"\"\n"
        "return joined\n"
    )
    return ScriptSpec(operation=request.operation, source=source)


def build_create_event(request: EventInput, calendar: str, *, operation: str = CreateEventRequest.operation) -> ScriptSpec:
    start = parse_datetime(request.start_date)
    end = parse_datetime(request.end_date)
    body = (
        date_assignment(start, "startTime")
        + date_assignment(end, "endTime")
        + "set newEvent to make new event at end of events of theCalendar with properties "
        + f"{{summary:{quote(request.title)}, start date:startTime, end date:endTime, "
        + f"description:{quote(request.description)}, location:{quote(request.location)}}}\n"
        + "return uid of newEvent\n"
    )
    return ScriptSpec(operation=operation, source=_events_block(calendar, body))


def build_delete_events(request: DeleteEventsRequest) -> ScriptSpec:
    body = (
        "set deletedCount to 0\n"
        f"set matchingEvents to (every event of theCalendar whose summary contains {quote(request.keyword)})\n"
        "repeat with anEvent in reverse of matchingEvents\n"
        "delete anEvent\n"
        "set deletedCount to deletedCount + 1\n"
        "end repeat\n"
        "return deletedCount\n"
    )
    return ScriptSpec(operation=request.operation, source=_events_block(request.calendar, body))


def _event_list_body(selection: str) -> str:
    return (
        f"set selectedEvents to {selection}\n"
        "set eventList to {}\n"
        "repeat with anEvent in selectedEvents\n"
        "set end of eventList to my eventRecord(anEvent)\n"
        "end repeat\n"
        "return my joinRecords(eventList)\n"
    )


def build_list_today_events(request: ListTodayEventsRequest) -> ScriptSpec:
    body = (
        "set todayStart to (current date) - (time of (current date))\n"
        "set todayEnd to todayStart + (24 * hours)\n"
        + _event_list_body("(every event of theCalendar whose start date >= todayStart and start date < todayEnd)")
    )
    return ScriptSpec(operation=request.operation, source=_events_block(request.calendar, body, EVENT_HANDLERS))


def week_bounds(week_start: str) -> tuple[DateParts, DateParts]:
    """Return the inclusive start and exclusive end (start + 7 days) of a week."""

    start = parse_date(week_start)
    try:
        first_day = date(start.year, start.month, start.day)
    except ValueError:
        raise ValidationError(
            f"Date format error: weekStart '{week_start}' is not a calendar date. Expected YYYY-MM-DD"
        ) from None
    last = first_day + timedelta(days=7)
    return start, DateParts(year=last.year, month=last.month, day=last.day)


def build_list_week_events(request: ListWeekEventsRequest) -> ScriptSpec:
    start, end = week_bounds(request.week_start)
    body = (
        date_assignment(start, "weekStart")
        + date_assignment(end, "weekEnd")
        + _event_list_body("(every event of theCalendar whose start date >= weekStart and start date < weekEnd)")
    )
    return ScriptSpec(operation=request.operation, source=_events_block(request.calendar, body, EVENT_HANDLERS))


def build_search_events(request: SearchEventsRequest, calendar: str) -> ScriptSpec:
    needle = quote(request.query)
    body = _event_list_body(
        f"(every event of theCalendar whose summary contains {needle} or description contains {needle})"
    )
    return ScriptSpec(operation=request.operation, source=_events_block(calendar, body, EVENT_HANDLERS))


def build_fix_event_time(request: FixEventTimesRequest, correction: TimeCorrection) -> ScriptSpec:
    """Move events on ``request.date_pattern`` whose title contains the keyword."""

    day = parse_date(request.date_pattern)
    start_hour, start_minute = parse_clock(correction.new_start_time)
    end_hour, end_minute = parse_clock(correction.new_end_time)
    new_start = DateParts(day.year, day.month, day.day, start_hour, start_minute)
    new_end = DateParts(day.year, day.month, day.day, end_hour, end_minute)
    body = (
        date_assignment(day, "dayStart")
        + "set dayEnd to dayStart + (24 * hours)\n"
        + date_assignment(new_start, "newStartTime")
        + date_assignment(new_end, "newEndTime")
        + "set fixedCount to 0\n"
        + "set matchingEvents to (every event of theCalendar whose start date >= dayStart and start date < dayEnd "
        + f"and summary contains {quote(correction.keyword)})\n"
        + "repeat with anEvent in matchingEvents\n"
        # Setting the end on both sides of the start keeps start <= end whichever way the event moves.
        + "set end date of anEvent to newEndTime\n"
        + "set start date of anEvent to newStartTime\n"
        + "set end date of anEvent to newEndTime\n"
        + "set fixedCount to fixedCount + 1\n"
        + "end repeat\n"
        + "return fixedCount\n"
    )
    return ScriptSpec(operation=request.operation, source=_events_block(request.calendar, body))


def _build_create(request: CreateEventRequest) -> ScriptSpec:
    return build_create_event(request, request.calendar)


def _build_search(request: SearchEventsRequest) -> ScriptSpec:
    return build_search_events(request, request.calendar or DEFAULT_CALENDAR)


_BUILDERS: Dict[str, Callable[[Any], ScriptSpec]] = {
    ListCalendarsRequest.operation: build_list_calendars,
    CreateEventRequest.operation: _build_create,
    DeleteEventsRequest.operation: build_delete_events,
    ListTodayEventsRequest.operation: build_list_today_events,
    ListWeekEventsRequest.operation: build_list_week_events,
    SearchEventsRequest.operation: _build_search,
}


def build_script(operation: str, params: Mapping[str, Any]) -> ScriptSpec:
    """Build the single script for ``operation``.

    Batch operations (``create-batch-events``, ``fix-event-times``) produce one
    script per item and are built item by item through
    :func:`build_create_event` and :func:`build_fix_event_time`.
    """

    request_type = REQUEST_TYPES.get(operation)
    if request_type is None:
        raise ValidationError(f"Unknown operation '{operation}'")
    builder = _BUILDERS.get(operation)
    if builder is None:
        raise ValidationError(f"Operation '{operation}' runs one script per item")
    return builder(parse_request(request_type, params))


__all__ = [
    "build_create_event",
    "build_delete_events",
    "build_fix_event_time",
    "build_list_calendars",
    "build_list_today_events",
    "build_list_week_events",
    "build_script",
    "build_search_events",
    "parse_request",
    "week_bounds",
]
