from __future__ import annotations

from typing import Optional

from ..domain import ErrorKind, Failure


class CalendarError(Exception):
    """Base error carrying the :class:`ErrorKind` it is reported under."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[ErrorKind] = None,
        calendar: Optional[str] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        self.calendar = calendar
        self.suggestion = suggestion


class ValidationError(CalendarError):
    kind = ErrorKind.VALIDATION_ERROR


class OperationError(CalendarError):
    @classmethod
    def from_failure(
        cls,
        failure: Failure,
        *,
        calendar: Optional[str] = None,
        suggestion: Optional[str] = None,
    ) -> "OperationError":
        return cls(
            failure.message,
            kind=failure.kind,
            calendar=calendar,
            suggestion=suggestion or failure.suggestion,
        )
