"""Greedy first-fit placement of work orders onto their work centers.

All mutable bookkeeping lives in an explicit :class:`SchedulingState`
owned by a single reflow invocation and threaded through every step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from reflow.shared.errors import (
    InconsistentScheduleError,
    SearchIterationsExceededError,
)
from reflow.shared.models import ScheduledInterval, TimeWindow, WorkCenter, WorkOrder

from .constants import (
    DEFAULT_LIMITS,
    REASON_ALIGNMENT,
    REASON_CONFLICT,
    REASON_DEPENDENCIES,
    ReflowLimits,
)
from .shift_calendar import next_shift_start
from .working_clock import add_working_minutes, working_segments

logger = logging.getLogger(__name__)


@dataclass
class SchedulingState:
    """Per-invocation registry: intervals per work center + lookup by order id."""
    intervals_by_center: dict[str, list[ScheduledInterval]] = field(default_factory=dict)
    completed: dict[str, ScheduledInterval] = field(default_factory=dict)

    def intervals_for(self, work_center_id: str) -> list[ScheduledInterval]:
        return self.intervals_by_center.setdefault(work_center_id, [])


@dataclass
class Placement:
    interval: ScheduledInterval
    reasons: list[str]


# ------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------

def insert_interval(state: SchedulingState, interval: ScheduledInterval,
                    work_center_id: str) -> SchedulingState:
    """Insert keeping the work-center list sorted by start (stable)."""
    intervals = state.intervals_for(work_center_id)
    index = len(intervals)
    for i, existing in enumerate(intervals):
        if existing.start > interval.start:
            index = i
            break
    intervals.insert(index, interval)
    state.completed[interval.work_order_id] = interval
    return state


def record_maintenance(state: SchedulingState, order: WorkOrder) -> SchedulingState:
    """Maintenance orders keep their original interval."""
    interval = ScheduledInterval(
        work_order_id=order.id,
        start=order.start,
        end=order.end,
        is_maintenance=True,
        original_start=order.start,
        original_end=order.end,
    )
    return insert_interval(state, interval, order.work_center_id)


# ------------------------------------------------------------------
# Placement
# ------------------------------------------------------------------

def earliest_from_dependencies(order: WorkOrder, state: SchedulingState) -> datetime:
    if not order.depends_on:
        return order.start
    ends = []
    for dep in order.depends_on:
        interval = state.completed.get(dep)
        if interval is None:
            raise InconsistentScheduleError(
                f"Dependency {dep} of {order.id} has not been scheduled yet",
                work_order_id=order.id, dependency=dep,
            )
        ends.append(interval.end)
    return max(ends)


def conflicts_with(
    candidate: TimeWindow,
    other: ScheduledInterval,
    work_center: WorkCenter,
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> bool:
    """Whether a production placement at *candidate* collides with *other*.

    A production order only occupies its working segments, so against a
    maintenance order only those segments are compared.
    """
    if not candidate.overlaps(other.window):
        return False
    if not other.is_maintenance:
        return True
    return any(
        segment.overlaps(other.window)
        for segment in working_segments(candidate.start, candidate.end, work_center, limits=limits)
    )


def find_slot(
    order: WorkOrder,
    candidate_start: datetime,
    work_center: WorkCenter,
    state: SchedulingState,
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> tuple[TimeWindow, list[str]]:
    """Earliest calendar-valid, conflict-free window at or after *candidate_start*."""
    reasons: list[str] = []
    cursor = candidate_start
    existing = state.intervals_for(work_center.id)

    for _ in range(limits.search_iterations):
        aligned = next_shift_start(cursor, work_center, limits=limits)
        if aligned != cursor:
            logger.debug("%s: aligned %s -> %s", order.id, cursor, aligned)
            _add_reason(reasons, REASON_ALIGNMENT)
            cursor = aligned

        end = add_working_minutes(cursor, order.duration_minutes, work_center, limits=limits).end
        candidate = TimeWindow(cursor, end)

        conflict = next(
            (other for other in existing
             if conflicts_with(candidate, other, work_center, limits=limits)),
            None,
        )
        if conflict is None:
            return candidate, reasons

        logger.debug(
            "%s: conflict with %s on %s, retrying from %s",
            order.id, conflict.work_order_id, work_center.id, conflict.end,
        )
        _add_reason(reasons, REASON_CONFLICT)
        cursor = conflict.end

    raise SearchIterationsExceededError(
        f"Slot search for {order.id} on work center {work_center.id} exceeded "
        f"{limits.search_iterations} iterations",
        work_order_id=order.id,
        work_center_id=work_center.id,
    )


def place_production_order(
    order: WorkOrder,
    work_center: WorkCenter,
    state: SchedulingState,
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> Placement:
    reasons: list[str] = []
    earliest = earliest_from_dependencies(order, state)
    if earliest > order.start:
        reasons.append(REASON_DEPENDENCIES)
    candidate_start = max(earliest, order.start)

    window, slot_reasons = find_slot(order, candidate_start, work_center, state, limits=limits)
    for reason in slot_reasons:
        _add_reason(reasons, reason)

    interval = ScheduledInterval(
        work_order_id=order.id,
        start=window.start,
        end=window.end,
        is_maintenance=False,
        original_start=order.start,
        original_end=order.end,
    )
    insert_interval(state, interval, order.work_center_id)
    return Placement(interval=interval, reasons=reasons)


def _add_reason(reasons: list[str], reason: str) -> None:
    if reason not in reasons:
        reasons.append(reason)
