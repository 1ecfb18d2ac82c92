from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ..core import CalendarError
from ..domain import BatchItemResult, BatchRun, CreatedEvent, DeletionResult, EventListing, EventSearchResult
from ..i18n import suggestion_for
from .models import (
    BatchEventsResponse,
    BatchItemPayload,
    CalendarListPayload,
    CreatedEventPayload,
    CreateEventResponse,
    DeleteConfirmationPayload,
    DeletedEventsPayload,
    ErrorPayload,
    EventListPayload,
    EventPayload,
    FixEventTimesResponse,
    SearchEventsPayload,
    SkippedCalendarPayload,
)


def serialize_error(exc: CalendarError) -> Dict[str, Any]:
    """Error envelope: ``{"error", "suggestion"?, "<kindFlag>": true}``."""

    suggestion = exc.suggestion or suggestion_for(exc.kind, calendar=exc.calendar)
    payload = ErrorPayload(error=exc.message, suggestion=suggestion).dump()
    payload[exc.kind.flag] = True
    return payload


def serialize_calendars(names: List[str]) -> Dict[str, Any]:
    return CalendarListPayload(calendars=list(names), count=len(names)).dump()


def serialize_created_event(event: CreatedEvent) -> Dict[str, Any]:
    return CreateEventResponse(event=CreatedEventPayload.from_domain(event)).dump()


def _field(item: Any, *names: str) -> Optional[Any]:
    if not isinstance(item, Mapping):
        return None
    for name in names:
        value = item.get(name)
        if value is not None:
            return value
    return None


def _as_text(value: Optional[Any]) -> Optional[str]:
    return None if value is None else str(value)


def _batch_item(result: BatchItemResult[Any], **fields: Any) -> Dict[str, Any]:
    outcome = result.outcome
    if outcome.ok:
        return BatchItemPayload(index=result.index, success=True, **fields).dump()
    payload = BatchItemPayload(
        index=result.index,
        success=False,
        error=outcome.message,
        suggestion=outcome.suggestion,
        **{name: value for name, value in fields.items() if name in ("title", "keyword")},
    ).dump()
    payload[outcome.kind.flag] = True
    return payload


def serialize_batch_events(run: BatchRun[Any]) -> Dict[str, Any]:
    results = [
        _batch_item(
            item,
            title=_as_text(_field(item.input, "title")),
            start_date=_as_text(_field(item.input, "startDate", "start_date")),
        )
        for item in run.report.items
    ]
    return BatchEventsResponse(
        calendar=run.calendar,
        success_count=run.report.success_count,
        fail_count=run.report.fail_count,
        results=results,
    ).dump()


def serialize_fix_results(run: BatchRun[Any]) -> Dict[str, Any]:
    results = []
    fixed_events = 0
    for item in run.report.items:
        fixed_count = None
        if item.outcome.ok:
            fixed_count = int(item.outcome.stdout)
            fixed_events += fixed_count
        results.append(
            _batch_item(item, keyword=_as_text(_field(item.input, "keyword")), fixed_count=fixed_count)
        )
    return FixEventTimesResponse(
        calendar=run.calendar,
        date_pattern=run.date_pattern or "",
        success_count=run.report.success_count,
        fail_count=run.report.fail_count,
        fixed_events=fixed_events,
        results=results,
    ).dump()


def serialize_deletion(result: DeletionResult, *, message: str = "") -> Dict[str, Any]:
    if result.requires_confirmation:
        return DeleteConfirmationPayload(message=message).dump()
    return DeletedEventsPayload.from_domain(result).dump()


def serialize_listing(listing: EventListing) -> Dict[str, Any]:
    return EventListPayload.from_domain(listing).dump()


def serialize_search(result: EventSearchResult, *, report_skipped: bool = False) -> Dict[str, Any]:
    skipped = None
    if report_skipped and result.skipped:
        skipped = [SkippedCalendarPayload.from_domain(name, failure) for name, failure in result.skipped]
    return SearchEventsPayload(
        query=result.query,
        calendars=result.calendars,
        events=[EventPayload.from_domain(event) for event in result.events],
        count=len(result.events),
        truncated=result.truncated,
        skipped_calendars=skipped,
    ).dump()
