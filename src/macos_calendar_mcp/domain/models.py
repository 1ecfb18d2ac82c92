from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, Tuple, TypeVar, Union

from .enums import ErrorKind

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class ScriptSpec:
    """An AppleScript program plus the logical operation it implements."""

    operation: str
    source: str


@dataclass(frozen=True, slots=True)
class Success:
    stdout: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure:
    kind: ErrorKind
    message: str
    suggestion: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False


ExecutionOutcome = Union[Success, Failure]


@dataclass(frozen=True, slots=True)
class BatchItemResult(Generic[T]):
    index: int
    input: T
    outcome: ExecutionOutcome

    @property
    def ok(self) -> bool:
        return self.outcome.ok


@dataclass(frozen=True, slots=True)
class BatchReport(Generic[T]):
    items: Tuple[BatchItemResult[T], ...] = ()

    @property
    def success_count(self) -> int:
        return sum(1 for item in self.items if item.ok)

    @property
    def fail_count(self) -> int:
        return sum(1 for item in self.items if not item.ok)


@dataclass(frozen=True, slots=True)
class FanOutResult(Generic[T, R]):
    matches: Tuple[R, ...] = ()
    searched: Tuple[T, ...] = ()
    skipped: Tuple[Tuple[T, Failure], ...] = ()
    truncated: bool = False


@dataclass(frozen=True, slots=True)
class DateParts:
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0

    def as_text(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d} {self.hour:02d}:{self.minute:02d}"


@dataclass(slots=True)
class CalendarEvent:
    title: str
    start: str
    end: str
    description: str = ""
    location: str = ""
    calendar: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: List[str], *, calendar: Optional[str] = None) -> "CalendarEvent":
        padded = list(fields) + [""] * (5 - len(fields))
        title, start, end, description, location = padded[:5]
        return cls(
            title=title,
            start=start,
            end=end,
            description=description,
            location=location,
            calendar=calendar,
        )

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "title": self.title,
            "start": self.start,
            "end": self.end,
            "description": self.description,
            "location": self.location,
        }
        if self.calendar is not None:
            record["calendar"] = self.calendar
        return record


@dataclass(slots=True)
class CreatedEvent:
    calendar: str
    title: str
    start_date: str
    end_date: str
    description: str = ""
    location: str = ""
    uid: Optional[str] = None


@dataclass(slots=True)
class EventSearchResult:
    query: str
    calendars: List[str] = field(default_factory=list)
    events: List[CalendarEvent] = field(default_factory=list)
    truncated: bool = False
    skipped: List[Tuple[str, Failure]] = field(default_factory=list)


@dataclass(slots=True)
class BatchRun(Generic[T]):
    """A finished batch together with the calendar it ran against."""

    calendar: str
    report: BatchReport[T]
    date_pattern: Optional[str] = None


@dataclass(slots=True)
class DeletionResult:
    calendar: str
    keyword: str
    deleted_count: Optional[int] = None

    @property
    def requires_confirmation(self) -> bool:
        return self.deleted_count is None


@dataclass(slots=True)
class EventListing:
    calendar: str
    events: List[CalendarEvent] = field(default_factory=list)
    week_start: Optional[str] = None
    week_end: Optional[str] = None
