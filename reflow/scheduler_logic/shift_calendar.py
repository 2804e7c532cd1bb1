"""Weekly shift and maintenance-window queries for a single work center.

Shifts recur weekly on a UTC weekday (0 = Sunday) between whole hours.
Maintenance windows are absolute blackouts and may be unsorted,
overlapping or span several days.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from reflow.shared.errors import NoAvailableShiftError
from reflow.shared.models import MaintenanceWindow, Shift, TimeWindow, WorkCenter

from .constants import DEFAULT_LIMITS, ReflowLimits

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def shift_day(dt: datetime) -> int:
    """Python weekday (Mon=0) -> shift weekday (Sun=0)."""
    return (dt.weekday() + 1) % 7


def _midnight(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _shift_bounds(day: datetime, shift: Shift) -> tuple[datetime, datetime]:
    base = _midnight(day)
    return base + timedelta(hours=shift.start_hour), base + timedelta(hours=shift.end_hour)


def _maintenance_blocks(work_center: WorkCenter, window: TimeWindow) -> list[TimeWindow]:
    """Valid maintenance windows overlapping *window*, ascending by start."""
    blocks = [
        TimeWindow(mw.start, mw.end)
        for mw in work_center.maintenance_windows
        if mw.start < mw.end
    ]
    return sorted((b for b in blocks if b.overlaps(window)), key=lambda b: b.start)


# ------------------------------------------------------------------
# Membership
# ------------------------------------------------------------------

def is_within_shift(dt: datetime, shift: Shift) -> bool:
    if shift_day(dt) != shift.day_of_week:
        return False
    start, end = _shift_bounds(dt, shift)
    return start <= dt < end


def get_shifts_for_day(work_center: WorkCenter, day: int) -> list[Shift]:
    return sorted(
        (s for s in work_center.shifts if s.day_of_week == day),
        key=lambda s: s.start_hour,
    )


def is_during_maintenance(dt: datetime, window: MaintenanceWindow) -> bool:
    return window.start <= dt < window.end


# ------------------------------------------------------------------
# Search
# ------------------------------------------------------------------

def find_next_shift_window(
    dt: datetime,
    work_center: WorkCenter,
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> TimeWindow | None:
    """Earliest shift window ending after *dt*, clipped to start at *dt*.

    Ignores maintenance. Returns ``None`` when nothing is found within the
    lookahead horizon.
    """
    base = _midnight(dt)
    for offset in range(limits.lookahead_days + 1):
        day = base + timedelta(days=offset)
        for shift in get_shifts_for_day(work_center, shift_day(day)):
            shift_start, shift_end = _shift_bounds(day, shift)
            start = max(dt, shift_start)
            if shift_end <= start:
                continue
            return TimeWindow(start, shift_end)
    return None


def split_by_maintenance(window: TimeWindow, work_center: WorkCenter) -> list[TimeWindow]:
    """Remove every overlapping maintenance window from *window*."""
    if window.end <= window.start:
        return []

    segments: list[TimeWindow] = []
    cursor = window.start
    for block in _maintenance_blocks(work_center, window):
        if block.start > cursor:
            segments.append(TimeWindow(cursor, block.start))
        if block.end > cursor:
            cursor = block.end
    if cursor < window.end:
        segments.append(TimeWindow(cursor, window.end))

    return [seg for seg in segments if seg.end > seg.start]


def next_shift_start(
    dt: datetime,
    work_center: WorkCenter,
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> datetime:
    """Earliest instant >= *dt* inside a shift and outside all maintenance.

    Raises :class:`NoAvailableShiftError` if the lookahead is exhausted.
    """
    base = _midnight(dt)
    for offset in range(limits.lookahead_days + 1):
        day = base + timedelta(days=offset)
        for shift in get_shifts_for_day(work_center, shift_day(day)):
            shift_start, shift_end = _shift_bounds(day, shift)
            if shift_end <= dt:
                continue
            start = dt if shift_start <= dt else shift_start
            segments = split_by_maintenance(TimeWindow(start, shift_end), work_center)
            if segments and segments[0].start >= dt:
                return segments[0].start

    raise NoAvailableShiftError(
        f"No available shift for work center {work_center.id} within "
        f"{limits.lookahead_days} days of {dt.isoformat()}",
        work_center_id=work_center.id,
        after=dt.isoformat(),
    )
