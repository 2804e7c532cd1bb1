"""Fatal reflow failures.

Every error carries a :class:`ReflowErrorKind` tag plus a ``context`` dict
with the offending identifiers or timestamps, so callers can branch on
``err.kind`` instead of on the concrete class.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ReflowErrorKind(Enum):
    UNKNOWN_DEPENDENCY = "UnknownDependency"
    CIRCULAR_DEPENDENCY = "CircularDependency"
    MISSING_WORK_CENTER = "MissingWorkCenter"
    NO_AVAILABLE_SHIFT = "NoAvailableShift"
    NO_SHIFTS_DEFINED = "NoShiftsDefined"
    EXCEEDED_SEARCH_ITERATIONS = "ExceededSearchIterations"
    EXCEEDED_CLOCK_ITERATIONS = "ExceededClockIterations"
    INCONSISTENT_SCHEDULE = "InconsistentSchedule"
    INVALID_DOCUMENT = "InvalidDocument"


class ReflowError(Exception):
    kind: ReflowErrorKind

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context


class UnknownDependencyError(ReflowError):
    kind = ReflowErrorKind.UNKNOWN_DEPENDENCY


class CircularDependencyError(ReflowError):
    kind = ReflowErrorKind.CIRCULAR_DEPENDENCY


class MissingWorkCenterError(ReflowError):
    kind = ReflowErrorKind.MISSING_WORK_CENTER


class NoAvailableShiftError(ReflowError):
    kind = ReflowErrorKind.NO_AVAILABLE_SHIFT


class NoShiftsDefinedError(ReflowError):
    kind = ReflowErrorKind.NO_SHIFTS_DEFINED


class SearchIterationsExceededError(ReflowError):
    kind = ReflowErrorKind.EXCEEDED_SEARCH_ITERATIONS


class ClockIterationsExceededError(ReflowError):
    kind = ReflowErrorKind.EXCEEDED_CLOCK_ITERATIONS


class InconsistentScheduleError(ReflowError):
    kind = ReflowErrorKind.INCONSISTENT_SCHEDULE


class InvalidDocumentError(ReflowError):
    kind = ReflowErrorKind.INVALID_DOCUMENT
