from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    TARGET_NOT_FOUND = "target_not_found"
    TIMEOUT = "timeout"
    VALIDATION_ERROR = "validation_error"
    UNKNOWN = "unknown"

    @property
    def flag(self) -> str:
        """Key used to mark this kind in an error envelope, e.g. ``permissionDenied``."""

        head, *rest = self.value.split("_")
        return head + "".join(part.capitalize() for part in rest)


class RunState(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
