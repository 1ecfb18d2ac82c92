"""Map raw interpreter failures onto :class:`ErrorKind`."""

from __future__ import annotations

from typing import Any, Tuple

from ..domain import ErrorKind, ExecutionOutcome, Failure
from .runner import TIMEOUT_MARKER

# Checked in order: the first group with a matching phrase decides the kind.
PERMISSION_PHRASES: Tuple[str, ...] = (
    "not allowed",
    "not authorized",
    "not authorised",
    "not permitted",
    "permission",
    "-1743",
)
TARGET_PHRASES: Tuple[str, ...] = (
    'doesn\'t understand the "calendar" message',
    "doesn’t understand the “calendar” message",
    "can't get calendar",
    "can’t get calendar",
    "not found",
    "-1728",
)
TIMEOUT_PHRASES: Tuple[str, ...] = (TIMEOUT_MARKER,)

_RULES: Tuple[Tuple[Tuple[str, ...], ErrorKind], ...] = (
    (PERMISSION_PHRASES, ErrorKind.PERMISSION_DENIED),
    (TARGET_PHRASES, ErrorKind.TARGET_NOT_FOUND),
    (TIMEOUT_PHRASES, ErrorKind.TIMEOUT),
)


def classify(message: Any) -> ErrorKind:
    """Classify a raw failure message. Never raises."""

    try:
        text = message if isinstance(message, str) else str(message)
    except Exception:  # noqa: BLE001
        return ErrorKind.UNKNOWN
    lowered = text.lower()
    for phrases, kind in _RULES:
        if any(phrase in lowered for phrase in phrases):
            return kind
    return ErrorKind.UNKNOWN


def refine(outcome: ExecutionOutcome) -> ExecutionOutcome:
    """Re-classify a runner failure; successes and timeouts pass through."""

    if outcome.ok or outcome.kind is ErrorKind.TIMEOUT:
        return outcome
    return Failure(classify(outcome.message), outcome.message)
