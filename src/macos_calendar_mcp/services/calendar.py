from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, TypeVar

from ..core import (
    OperationError,
    build_create_event,
    build_delete_events,
    build_fix_event_time,
    build_list_calendars,
    build_list_today_events,
    build_list_week_events,
    build_search_events,
    fan_out,
    parse_request,
    refine,
    run_batch,
    week_bounds,
)
from ..core.applescript import parse_count, parse_date, parse_events, parse_names
from ..domain import (
    BatchRun,
    CalendarEvent,
    CreatedEvent,
    DeletionResult,
    ErrorKind,
    EventListing,
    EventSearchResult,
    ExecutionOutcome,
    Failure,
    ScriptSpec,
    Success,
)
from ..domain.requests import (
    DEFAULT_WORK_CALENDAR,
    BatchEventsRequest,
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
from ..i18n import suggestion_for, translate
from .context import ServiceContext

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=OperationRequest)


@dataclass(slots=True)
class CalendarService:
    """Run calendar operations as AppleScript through the shared process runner.

    Single operations raise :class:`OperationError` when their script fails;
    batch operations report per-item outcomes instead.
    """

    context: ServiceContext

    def _with_calendar(self, request: RequestT) -> RequestT:
        if "calendar" in request.model_fields_set and request.calendar:
            return request
        settings = self.context.settings.calendar
        if request.default_calendar == DEFAULT_WORK_CALENDAR:
            fallback = settings.work_calendar
        else:
            fallback = settings.default_calendar
        return request.model_copy(update={"calendar": fallback})

    async def _execute(self, spec: ScriptSpec) -> ExecutionOutcome:
        outcome = refine(await self.context.runner.run(spec, self.context.timeout))
        if not outcome.ok:
            logger.info("%s failed (%s): %s", spec.operation, outcome.kind.value, outcome.message)
        return outcome

    async def _require(self, spec: ScriptSpec, *, calendar: Optional[str] = None) -> str:
        outcome = await self._execute(spec)
        if isinstance(outcome, Failure):
            raise OperationError.from_failure(
                outcome,
                calendar=calendar,
                suggestion=suggestion_for(outcome.kind, calendar=calendar),
            )
        return outcome.stdout

    async def list_calendars(self) -> List[str]:
        stdout = await self._require(build_list_calendars(ListCalendarsRequest()))
        names = parse_names(stdout)
        logger.debug("Found %d calendars", len(names))
        return names

    async def create_event(self, params: Mapping[str, Any]) -> CreatedEvent:
        request = self._with_calendar(parse_request(CreateEventRequest, params))
        uid = await self._require(build_create_event(request, request.calendar), calendar=request.calendar)
        logger.info("Created event %r in %s", request.title, request.calendar)
        return CreatedEvent(
            calendar=request.calendar,
            title=request.title,
            start_date=request.start_date,
            end_date=request.end_date,
            description=request.description,
            location=request.location,
            uid=uid.strip() or None,
        )

    async def create_batch_events(self, params: Mapping[str, Any]) -> BatchRun[Any]:
        request = self._with_calendar(parse_request(BatchEventsRequest, params))
        calendar = request.calendar

        async def _create(item: Any) -> ExecutionOutcome:
            event = parse_request(EventInput, item)
            spec = build_create_event(event, calendar, operation=request.operation)
            outcome = await self._execute(spec)
            if isinstance(outcome, Failure):
                return Failure(outcome.kind, outcome.message, suggestion_for(outcome.kind, calendar=calendar))
            return outcome

        report = await run_batch(
            request.events,
            _create,
            max_concurrency=self.context.settings.calendar.batch_concurrency,
        )
        return BatchRun(calendar=calendar, report=report)

    async def delete_events_by_keyword(self, params: Mapping[str, Any]) -> DeletionResult:
        request = self._with_calendar(parse_request(DeleteEventsRequest, params))
        if not request.confirm:
            return DeletionResult(calendar=request.calendar, keyword=request.keyword)
        stdout = await self._require(build_delete_events(request), calendar=request.calendar)
        deleted = parse_count(stdout)
        logger.info("Deleted %d events matching %r from %s", deleted, request.keyword, request.calendar)
        return DeletionResult(calendar=request.calendar, keyword=request.keyword, deleted_count=deleted)

    def confirmation_message(self, result: DeletionResult) -> str:
        return translate("delete.confirm", calendar=result.calendar, keyword=result.keyword)

    async def list_today_events(self, params: Mapping[str, Any]) -> EventListing:
        request = self._with_calendar(parse_request(ListTodayEventsRequest, params))
        stdout = await self._require(build_list_today_events(request), calendar=request.calendar)
        return EventListing(calendar=request.calendar, events=parse_events(stdout))

    async def list_week_events(self, params: Mapping[str, Any]) -> EventListing:
        request = self._with_calendar(parse_request(ListWeekEventsRequest, params))
        start, end = week_bounds(request.week_start)
        stdout = await self._require(build_list_week_events(request), calendar=request.calendar)
        return EventListing(
            calendar=request.calendar,
            events=parse_events(stdout),
            week_start=start.as_text()[:10],
            week_end=end.as_text()[:10],
        )

    async def search_events(self, params: Mapping[str, Any]) -> EventSearchResult:
        """Search one calendar, or fan out across every calendar when none is named."""

        request = parse_request(SearchEventsRequest, params)
        cap = self.context.settings.calendar.search_result_cap
        if request.calendar:
            stdout = await self._require(build_search_events(request, request.calendar), calendar=request.calendar)
            events = parse_events(stdout, calendar=request.calendar)
            return EventSearchResult(
                query=request.query,
                calendars=[request.calendar],
                events=events[:cap],
                truncated=len(events) > cap,
            )

        names = await self.list_calendars()

        async def _search(name: str) -> ExecutionOutcome:
            return await self._execute(build_search_events(request, name))

        def _collect(name: str, stdout: str) -> List[CalendarEvent]:
            return parse_events(stdout, calendar=name)

        merged = await fan_out(
            names,
            _search,
            _collect,
            max_concurrency=self.context.settings.calendar.fanout_concurrency,
            result_cap=cap,
        )
        logger.info(
            "Search %r matched %d events across %d calendars (%d skipped)",
            request.query,
            len(merged.matches),
            len(merged.searched),
            len(merged.skipped),
        )
        return EventSearchResult(
            query=request.query,
            calendars=list(merged.searched),
            events=list(merged.matches),
            truncated=merged.truncated,
            skipped=list(merged.skipped),
        )

    async def fix_event_times(self, params: Mapping[str, Any]) -> BatchRun[Any]:
        request = self._with_calendar(parse_request(FixEventTimesRequest, params))
        parse_date(request.date_pattern)
        calendar = request.calendar

        async def _fix(item: Any) -> ExecutionOutcome:
            correction = parse_request(TimeCorrection, item)
            outcome = await self._execute(build_fix_event_time(request, correction))
            if isinstance(outcome, Failure):
                return Failure(outcome.kind, outcome.message, suggestion_for(outcome.kind, calendar=calendar))
            if parse_count(outcome.stdout) == 0:
                return Failure(
                    ErrorKind.TARGET_NOT_FOUND,
                    f"No matching events for keyword '{correction.keyword}' on {request.date_pattern}",
                    translate("suggestion.no_matching_events"),
                )
            return Success(outcome.stdout.strip())

        report = await run_batch(
            request.corrections,
            _fix,
            max_concurrency=self.context.settings.calendar.batch_concurrency,
        )
        return BatchRun(calendar=calendar, report=report, date_pattern=request.date_pattern)
