"""Independent re-verification of a finished schedule.

Nothing from the scheduler's bookkeeping is trusted: every check is
recomputed from the output orders and the work-center calendars, and all
violations are collected rather than stopping at the first.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Sequence

from reflow.shared.documents import format_utc, to_output_precision
from reflow.shared.errors import ReflowError
from reflow.shared.models import ReflowValidation, TimeWindow, WorkCenter, WorkOrder

from .constants import DEFAULT_LIMITS, ReflowLimits
from .working_clock import add_working_minutes, working_segments

logger = logging.getLogger(__name__)


def _check_dependencies(orders: Sequence[WorkOrder], errors: list[str]) -> None:
    by_id = {wo.id: wo for wo in orders}
    for wo in orders:
        for dep_id in wo.depends_on:
            dep = by_id.get(dep_id)
            if dep is None:
                errors.append(f"Missing dependency: {wo.id} depends on unknown work order {dep_id}")
            elif wo.start < dep.end:
                errors.append(
                    f"Dependency violation: {wo.id} starts {format_utc(wo.start)} "
                    f"before {dep_id} ends {format_utc(dep.end)}"
                )


def _check_intervals(orders: Sequence[WorkOrder], errors: list[str]) -> None:
    for wo in orders:
        if wo.end <= wo.start:
            errors.append(
                f"Invalid interval: {wo.id} ends {format_utc(wo.end)} "
                f"not after start {format_utc(wo.start)}"
            )


def _pair_overlaps(
    previous: WorkOrder,
    current: WorkOrder,
    work_center: WorkCenter | None,
    limits: ReflowLimits,
) -> bool:
    if current.start >= previous.end:
        return False
    if not (previous.is_maintenance or current.is_maintenance) or work_center is None:
        return True
    maint, prod = (previous, current) if previous.is_maintenance else (current, previous)
    blocked = TimeWindow(maint.start, maint.end)
    return any(
        segment.overlaps(blocked)
        for segment in working_segments(prod.start, prod.end, work_center, limits=limits)
    )


def _check_overlaps(
    orders: Sequence[WorkOrder],
    centers: dict[str, WorkCenter],
    errors: list[str],
    limits: ReflowLimits,
) -> None:
    grouped: dict[str, list[WorkOrder]] = defaultdict(list)
    for wo in orders:
        grouped[wo.work_center_id].append(wo)

    for wc_id, group in grouped.items():
        ordered = sorted(group, key=lambda wo: wo.start)
        # Only neighbours after sorting are compared.
        for previous, current in zip(ordered, ordered[1:]):
            if previous.is_maintenance and current.is_maintenance:
                continue
            if _pair_overlaps(previous, current, centers.get(wc_id), limits):
                errors.append(
                    f"Overlap on work center {wc_id}: {previous.id} "
                    f"({format_utc(previous.start)}-{format_utc(previous.end)}) and "
                    f"{current.id} ({format_utc(current.start)}-{format_utc(current.end)})"
                )


def _check_alignment(
    orders: Sequence[WorkOrder],
    centers: dict[str, WorkCenter],
    errors: list[str],
    limits: ReflowLimits,
) -> None:
    for wo in orders:
        if wo.is_maintenance:
            elapsed = round((wo.end - wo.start).total_seconds() / 60)
            if elapsed != wo.duration_minutes:
                errors.append(
                    f"Duration mismatch: maintenance {wo.id} spans {elapsed} min "
                    f"but declares {wo.duration_minutes} min"
                )
            continue

        wc = centers.get(wo.work_center_id)
        if wc is None:
            errors.append(f"Work order {wo.id} references unknown work center {wo.work_center_id}")
            continue
        try:
            expected = add_working_minutes(wo.start, wo.duration_minutes, wc, limits=limits).end
        except ReflowError as exc:
            errors.append(f"Work order {wo.id} not aligned to shifts/maintenance: {exc}")
            continue
        if to_output_precision(expected) != to_output_precision(wo.end):
            errors.append(
                f"Work order {wo.id} not aligned to shifts/maintenance: expected end "
                f"{format_utc(expected)}, recorded {format_utc(wo.end)}"
            )


def validate_schedule(
    work_orders: Sequence[WorkOrder],
    work_centers: Sequence[WorkCenter],
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> ReflowValidation:
    centers = {wc.id: wc for wc in work_centers}
    errors: list[str] = []

    _check_dependencies(work_orders, errors)
    _check_intervals(work_orders, errors)
    _check_overlaps(work_orders, centers, errors, limits)
    _check_alignment(work_orders, centers, errors, limits)

    if errors:
        logger.debug("Schedule validation found %d errors", len(errors))
        return ReflowValidation(is_valid=False, errors=errors)
    return ReflowValidation(is_valid=True)
