from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain import CalendarEvent, CreatedEvent, DeletionResult, EventListing, Failure


class Payload(BaseModel):
    """Response model serialized with camelCase keys; ``None`` fields are omitted."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class EventPayload(Payload):
    title: str
    start: str
    end: str
    description: str = Field(default="")
    location: str = Field(default="")
    calendar: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, event: CalendarEvent) -> "EventPayload":
        return cls(
            title=event.title,
            start=event.start,
            end=event.end,
            description=event.description,
            location=event.location,
            calendar=event.calendar,
        )


class CalendarListPayload(Payload):
    calendars: List[str]
    count: int


class CreatedEventPayload(Payload):
    title: str
    start_date: str
    end_date: str
    calendar: str
    description: str = Field(default="")
    location: str = Field(default="")
    uid: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, event: CreatedEvent) -> "CreatedEventPayload":
        return cls(
            title=event.title,
            start_date=event.start_date,
            end_date=event.end_date,
            calendar=event.calendar,
            description=event.description,
            location=event.location,
            uid=event.uid,
        )


class CreateEventResponse(Payload):
    success: bool = True
    event: CreatedEventPayload


class ErrorPayload(Payload):
    error: str
    suggestion: Optional[str] = Field(default=None)


class BatchItemPayload(Payload):
    index: int
    success: bool
    title: Optional[str] = Field(default=None)
    keyword: Optional[str] = Field(default=None)
    start_date: Optional[str] = Field(default=None)
    fixed_count: Optional[int] = Field(default=None)
    error: Optional[str] = Field(default=None)
    suggestion: Optional[str] = Field(default=None)


class BatchEventsResponse(Payload):
    calendar: str
    success_count: int
    fail_count: int
    results: List[Dict[str, Any]]


class FixEventTimesResponse(Payload):
    calendar: str
    date_pattern: str
    success_count: int
    fail_count: int
    fixed_events: int
    results: List[Dict[str, Any]]


class DeleteConfirmationPayload(Payload):
    requires_confirmation: bool = True
    message: str


class DeletedEventsPayload(Payload):
    deleted_count: int
    keyword: str
    calendar: str

    @classmethod
    def from_domain(cls, result: DeletionResult) -> "DeletedEventsPayload":
        return cls(deleted_count=result.deleted_count or 0, keyword=result.keyword, calendar=result.calendar)


class EventListPayload(Payload):
    calendar: str
    week_start: Optional[str] = Field(default=None)
    week_end: Optional[str] = Field(default=None)
    events: List[EventPayload]

    @classmethod
    def from_domain(cls, listing: EventListing) -> "EventListPayload":
        return cls(
            calendar=listing.calendar,
            week_start=listing.week_start,
            week_end=listing.week_end,
            events=[EventPayload.from_domain(event) for event in listing.events],
        )


class SkippedCalendarPayload(Payload):
    calendar: str
    error: str
    kind: str

    @classmethod
    def from_domain(cls, calendar: str, failure: Failure) -> "SkippedCalendarPayload":
        return cls(calendar=calendar, error=failure.message, kind=failure.kind.value)


class SearchEventsPayload(Payload):
    query: str
    calendars: List[str]
    events: List[EventPayload]
    count: int
    truncated: bool = False
    skipped_calendars: Optional[List[SkippedCalendarPayload]] = Field(default=None)
