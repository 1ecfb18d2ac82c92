"""AppleScript helpers shared by the script builders.

Nothing here performs I/O: these are string transformations between Python
values and AppleScript source text or ``osascript`` output.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..domain import CalendarEvent, DateParts
from .errors import ValidationError

RECORD_SEPARATOR = "\x1e"
FIELD_SEPARATOR = "\x1f"

_DIGITS = re.compile(r"[0-9]+")
_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Handlers appended to every script that returns event records. They must live
# at the top level of the script, so callers inside ``tell`` blocks use ``my``.
EVENT_HANDLERS = """
on pad(n)
    return text -2 thru -1 of ("0" & (n as integer as text))
end pad

on formatDate(d)
    return ((year of d) as text) & "-" & my pad(month of d as integer) & "-" & my pad(day of d) & " " & my pad(hours of d) & ":" & my pad(minutes of d)
end formatDate

on textOf(v)
    if v is missing value then return ""
    return v as text
end textOf

on eventRecord(anEvent)
    set fs to character id 31
    return my textOf(summary of anEvent) & fs & my formatDate(start date of anEvent) & fs & my formatDate(end date of anEvent) & fs & my textOf(description of anEvent) & fs & my textOf(location of anEvent)
end eventRecord

on joinRecords(theList)
    set AppleScript's text item delimiters to character id 30
    set joined to theList as text
    set AppleScript's text item delimiters to ""
    return joined
end joinRecords
"""


def escape(value: str) -> str:
    """Neutralize ``value`` for embedding inside a double-quoted AppleScript string."""

    text = str(value)
    text = text.replace("\\", "\\\\").replace('"', '\\"')
    text = text.replace("\r\n", "\\n").replace("\r", "\\n").replace("\n", "\\n").replace("\t", "\\t")
    return _CONTROL.sub(" ", text)


def quote(value: str) -> str:
    return f'"{escape(value)}"'


def _number(part: str) -> int:
    if not _DIGITS.fullmatch(part):
        raise ValueError(part)
    return int(part)


def parse_datetime(value: str) -> DateParts:
    """Parse ``YYYY-MM-DD HH:MM`` into its five integer components.

    Year, month and day must be non-zero; hour and minute may be zero. No
    timezone is accepted.
    """

    try:
        if not isinstance(value, str):
            raise ValueError(value)
        date_part, time_part = value.split(" ")
        year, month, day = (_number(part) for part in _split_exact(date_part, "-", 3))
        hour, minute = (_number(part) for part in _split_exact(time_part, ":", 2))
    except ValueError:
        raise ValidationError(
            f"Date format error: '{value}' is invalid. Expected YYYY-MM-DD HH:MM (24-hour), e.g. '2025-01-15 14:30'"
        ) from None
    if not (year and month and day):
        raise ValidationError(
            f"Date format error: '{value}' is invalid. Year, month and day must be non-zero"
        )
    return DateParts(year=year, month=month, day=day, hour=hour, minute=minute)


def parse_date(value: str) -> DateParts:
    """Parse ``YYYY-MM-DD`` (midnight)."""

    if not isinstance(value, str) or " " in value:
        raise ValidationError(f"Date format error: '{value}' is invalid. Expected YYYY-MM-DD, e.g. '2025-01-15'")
    try:
        return parse_datetime(f"{value} 00:00")
    except ValidationError:
        raise ValidationError(
            f"Date format error: '{value}' is invalid. Expected YYYY-MM-DD, e.g. '2025-01-15'"
        ) from None


def parse_clock(value: str) -> tuple[int, int]:
    """Parse ``HH:MM``."""

    try:
        if not isinstance(value, str):
            raise ValueError(value)
        hour, minute = (_number(part) for part in _split_exact(value, ":", 2))
    except ValueError:
        raise ValidationError(
            f"Date format error: time '{value}' is invalid. Expected HH:MM (24-hour), e.g. '14:00'"
        ) from None
    return hour, minute


def _split_exact(text: str, separator: str, count: int) -> List[str]:
    parts = text.split(separator)
    if len(parts) != count:
        raise ValueError(text)
    return parts


def date_assignment(parts: DateParts, variable: str) -> str:
    """AppleScript that sets ``variable`` to the date described by ``parts``.

    The day is reset to 1 before the month changes so that e.g. running on the
    31st cannot roll February into March.
    """

    return (
        f"set {variable} to current date\n"
        f"set day of {variable} to 1\n"
        f"set year of {variable} to {parts.year}\n"
        f"set month of {variable} to {parts.month}\n"
        f"set day of {variable} to {parts.day}\n"
        f"set time of {variable} to ({parts.hour} * hours + {parts.minute} * minutes)\n"
    )


def parse_names(stdout: str) -> List[str]:
    text = stdout.strip("\r\n")
    if not text:
        return []
    return [name for name in text.split(RECORD_SEPARATOR) if name]


def parse_events(stdout: str, *, calendar: Optional[str] = None) -> List[CalendarEvent]:
    text = stdout.strip("\r\n")
    if not text or text == '""':
        return []
    events = []
    for record in text.split(RECORD_SEPARATOR):
        if not record:
            continue
        events.append(CalendarEvent.from_fields(record.split(FIELD_SEPARATOR), calendar=calendar))
    return events


def parse_count(stdout: str) -> int:
    try:
        return int(stdout.strip())
    except ValueError:
        return 0
