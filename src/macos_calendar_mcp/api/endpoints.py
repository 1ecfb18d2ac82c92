from __future__ import annotations

from typing import Any, Dict, List, Optional

from .registry import register_api
from .serializers import (
    serialize_batch_events,
    serialize_calendars,
    serialize_created_event,
    serialize_deletion,
    serialize_fix_results,
    serialize_listing,
    serialize_search,
)
from .state import api_state


def _params(**values: Any) -> Dict[str, Any]:
    # Omitted optional arguments stay unset so configured calendar defaults apply.
    return {name: value for name, value in values.items() if value is not None}


@register_api(
    "list-calendars",
    description="List the names of all calendars in the macOS Calendar app.",
    category="calendar",
    tags=("read",),
)
async def list_calendars() -> Dict[str, Any]:
    names = await api_state.calendar.list_calendars()
    return serialize_calendars(names)


@register_api(
    "create-event",
    description=(
        "Create a calendar event. Dates use 'YYYY-MM-DD HH:MM' (24-hour), e.g. '2025-01-15 14:30'. "
        "Defaults to the personal calendar."
    ),
    category="calendar",
    tags=("write",),
)
async def create_event(
    title: str,
    start_date: str,
    end_date: str,
    calendar: Optional[str] = None,
    description: str = "",
    location: str = "",
) -> Dict[str, Any]:
    created = await api_state.calendar.create_event(
        _params(
            title=title,
            start_date=start_date,
            end_date=end_date,
            calendar=calendar,
            description=description,
            location=location,
        )
    )
    return serialize_created_event(created)


@register_api(
    "create-batch-events",
    description=(
        "Create several events in one calendar. Each event needs title, startDate and endDate "
        "('YYYY-MM-DD HH:MM'); description and location are optional. Failures are reported per event. "
        "Defaults to the work calendar."
    ),
    category="calendar",
    tags=("write", "batch"),
)
async def create_batch_events(events: List[Any], calendar: Optional[str] = None) -> Dict[str, Any]:
    run = await api_state.calendar.create_batch_events(_params(events=events, calendar=calendar))
    return serialize_batch_events(run)


@register_api(
    "delete-events-by-keyword",
    description=(
        "Delete every event whose title contains the keyword. Nothing is deleted unless confirm is true. "
        "Defaults to the work calendar."
    ),
    category="calendar",
    tags=("write", "destructive"),
)
async def delete_events_by_keyword(
    keyword: str,
    calendar: Optional[str] = None,
    confirm: bool = False,
) -> Dict[str, Any]:
    service = api_state.calendar
    result = await service.delete_events_by_keyword(_params(keyword=keyword, calendar=calendar, confirm=confirm))
    message = service.confirmation_message(result) if result.requires_confirmation else ""
    return serialize_deletion(result, message=message)


@register_api(
    "list-today-events",
    description="List events starting today. Defaults to the personal calendar.",
    category="calendar",
    tags=("read",),
)
async def list_today_events(calendar: Optional[str] = None) -> Dict[str, Any]:
    listing = await api_state.calendar.list_today_events(_params(calendar=calendar))
    return serialize_listing(listing)


@register_api(
    "list-week-events",
    description=(
        "List events starting in the seven days from week_start ('YYYY-MM-DD'). "
        "Defaults to the work calendar."
    ),
    category="calendar",
    tags=("read",),
)
async def list_week_events(week_start: str, calendar: Optional[str] = None) -> Dict[str, Any]:
    listing = await api_state.calendar.list_week_events(_params(week_start=week_start, calendar=calendar))
    return serialize_listing(listing)


@register_api(
    "search-events",
    description=(
        "Search event titles and descriptions for a query. Without a calendar every calendar is searched; "
        "calendars that cannot be read are skipped and results are capped."
    ),
    category="calendar",
    tags=("read", "search"),
)
async def search_events(query: str, calendar: Optional[str] = None) -> Dict[str, Any]:
    result = await api_state.calendar.search_events(_params(query=query, calendar=calendar))
    return serialize_search(result, report_skipped=api_state.context.settings.calendar.report_skipped)


@register_api(
    "fix-event-times",
    description=(
        "Move events on date_pattern ('YYYY-MM-DD') whose title contains a keyword to new times. "
        "Each correction needs keyword, newStartTime and newEndTime ('HH:MM'). "
        "Failures are reported per correction; a correction that matches no event counts as a failure "
        "(targetNotFound) in failCount. Defaults to the work calendar."
    ),
    category="calendar",
    tags=("write", "batch"),
)
async def fix_event_times(
    date_pattern: str,
    corrections: List[Any],
    calendar: Optional[str] = None,
) -> Dict[str, Any]:
    run = await api_state.calendar.fix_event_times(
        _params(date_pattern=date_pattern, corrections=corrections, calendar=calendar)
    )
    return serialize_fix_results(run)
