"""Working-time arithmetic: only in-shift, non-maintenance minutes count."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from reflow.shared.errors import (
    ClockIterationsExceededError,
    NoAvailableShiftError,
    NoShiftsDefinedError,
)
from reflow.shared.models import TimeWindow, WorkCenter

from .constants import DEFAULT_LIMITS, ReflowLimits
from .shift_calendar import find_next_shift_window, split_by_maintenance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkingClockResult:
    end: datetime
    consumed_minutes: float


def add_working_minutes(
    start: datetime,
    duration_minutes: float,
    work_center: WorkCenter,
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> WorkingClockResult:
    """Advance *start* by *duration_minutes* of available time.

    Rolls across shift boundaries, days and maintenance windows. A start
    outside working time begins counting at the next shift.
    """
    if duration_minutes <= 0:
        return WorkingClockResult(end=start, consumed_minutes=0)

    if not work_center.shifts:
        raise NoShiftsDefinedError(
            f"No shifts defined for work center {work_center.id}",
            work_center_id=work_center.id,
        )

    cursor = start
    remaining = duration_minutes
    for _ in range(limits.clock_iterations):
        window = find_next_shift_window(cursor, work_center, limits=limits)
        if window is None:
            raise NoAvailableShiftError(
                f"No shift for work center {work_center.id} within "
                f"{limits.lookahead_days} days of {cursor.isoformat()}",
                work_center_id=work_center.id,
                after=cursor.isoformat(),
            )

        for segment in split_by_maintenance(window, work_center):
            available = segment.minutes
            if remaining <= available:
                return WorkingClockResult(
                    end=segment.start + timedelta(minutes=remaining),
                    consumed_minutes=duration_minutes,
                )
            remaining -= available

        cursor = window.end

    raise ClockIterationsExceededError(
        f"Working clock exceeded {limits.clock_iterations} iterations for "
        f"work center {work_center.id} starting {start.isoformat()}",
        work_center_id=work_center.id,
        start=start.isoformat(),
        duration_minutes=duration_minutes,
    )


def working_segments(
    start: datetime,
    end: datetime,
    work_center: WorkCenter,
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> list[TimeWindow]:
    """Available sub-windows of ``[start, end)``, in chronological order."""
    segments: list[TimeWindow] = []
    cursor = start
    for _ in range(limits.clock_iterations):
        if cursor >= end:
            break
        window = find_next_shift_window(cursor, work_center, limits=limits)
        if window is None or window.start >= end:
            break
        clipped = TimeWindow(window.start, min(window.end, end))
        segments.extend(split_by_maintenance(clipped, work_center))
        cursor = window.end
    return segments
