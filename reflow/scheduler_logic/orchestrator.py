"""Top-level reflow pipeline.

``reflow`` is the single entry-point used by the CLI: it splits the
document set, orders production work by dependencies, pins maintenance
orders, greedily places everything else and validates the result.
``try_reflow`` wraps it and returns a ``ReflowFailure`` value instead of
raising.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from reflow.shared.documents import format_utc, split_documents, to_output_precision
from reflow.shared.errors import MissingWorkCenterError, ReflowError
from reflow.shared.models import (
    ReflowChange,
    ReflowFailure,
    ReflowResult,
    WorkCenter,
    WorkOrder,
)

from .constants import DEFAULT_LIMITS, REASON_MAINTENANCE_FIXED, ReflowLimits
from .dependency_graph import topological_sort
from .scheduling import SchedulingState, place_production_order, record_maintenance
from .validation import validate_schedule

logger = logging.getLogger(__name__)


def _check_work_centers(
    work_orders: list[WorkOrder], work_centers: dict[str, WorkCenter],
) -> None:
    missing = sorted({wo.work_center_id for wo in work_orders} - set(work_centers))
    if missing:
        offenders = [wo.id for wo in work_orders if wo.work_center_id in missing]
        raise MissingWorkCenterError(
            f"Work orders {', '.join(offenders)} reference unknown work centers: "
            f"{', '.join(missing)}",
            work_center_ids=missing,
            work_order_ids=offenders,
        )


def _delta_minutes(new, old) -> int:
    return round((new - old).total_seconds() / 60)


def _explain_move(change: ReflowChange) -> str:
    reasons = ", ".join(change.reasons) if change.reasons else "end recomputed from working calendar"
    return (
        f"{change.work_order_id} moved from {format_utc(change.from_start)}-"
        f"{format_utc(change.from_end)} to {format_utc(change.to_start)}-"
        f"{format_utc(change.to_end)} ({change.delta_minutes:+d} min): {reasons}"
    )


def reflow(
    documents: Iterable[dict],
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> ReflowResult:
    """Recompute start/end for every work order in *documents*.

    Raises a :class:`ReflowError` subclass on any fatal condition; no
    partial schedule is returned.
    """
    work_orders, work_centers = split_documents(documents)
    _check_work_centers(work_orders, work_centers)

    by_id = {wo.id: wo for wo in work_orders}
    order = topological_sort(work_orders)
    maintenance = [wo for wo in work_orders if wo.is_maintenance]
    production = [by_id[wo_id] for wo_id in order if not by_id[wo_id].is_maintenance]

    logger.info(
        "Reflowing %d work orders (%d maintenance) across %d work centers",
        len(work_orders), len(maintenance), len(work_centers),
    )

    state = SchedulingState()
    changes: list[ReflowChange] = []
    explanation: list[str] = []
    updated: dict[str, WorkOrder] = {}

    for wo in maintenance:
        record_maintenance(state, wo)
        updated[wo.id] = wo
        changes.append(ReflowChange(
            work_order_id=wo.id,
            from_start=wo.start,
            from_end=wo.end,
            to_start=wo.start,
            to_end=wo.end,
            delta_minutes=0,
            reasons=[REASON_MAINTENANCE_FIXED],
        ))
        explanation.append(
            f"{wo.id} is a maintenance work order; kept at "
            f"{format_utc(wo.start)}-{format_utc(wo.end)}"
        )

    for wo in production:
        placement = place_production_order(
            wo, work_centers[wo.work_center_id], state, limits=limits,
        )
        interval = placement.interval
        updated[wo.id] = replace(wo, start=interval.start, end=interval.end)

        delta = _delta_minutes(interval.end, wo.end)
        if interval.start == wo.start and delta == 0:
            continue
        change = ReflowChange(
            work_order_id=wo.id,
            from_start=wo.start,
            from_end=wo.end,
            to_start=interval.start,
            to_end=interval.end,
            delta_minutes=delta,
            reasons=placement.reasons,
        )
        changes.append(change)
        explanation.append(_explain_move(change))

    # Output timestamps carry no sub-second precision.
    updated_orders = [
        replace(
            updated[wo.id],
            start=to_output_precision(updated[wo.id].start),
            end=to_output_precision(updated[wo.id].end),
        )
        for wo in work_orders
    ]

    validation = validate_schedule(updated_orders, list(work_centers.values()), limits=limits)
    if validation.is_valid:
        logger.info("Reflow complete: %d change records, schedule valid", len(changes))
    else:
        logger.warning(
            "Reflow complete with %d validation errors", len(validation.errors or []),
        )

    return ReflowResult(
        updated_work_orders=updated_orders,
        changes=changes,
        explanation=explanation,
        validation=validation,
    )


def try_reflow(
    documents: Iterable[dict],
    *,
    limits: ReflowLimits = DEFAULT_LIMITS,
) -> ReflowResult | ReflowFailure:
    try:
        return reflow(documents, limits=limits)
    except ReflowError as exc:
        logger.debug("Reflow failed with %s", exc.kind.value, exc_info=True)
        return ReflowFailure(kind=exc.kind, message=exc.message, context=exc.context)


# ------------------------------------------------------------------
# Text summary
# ------------------------------------------------------------------

def build_text_summary(result: ReflowResult) -> str:
    lines = ["Production Reflow\n"]

    by_id = {c.work_order_id: c for c in result.changes}
    for i, wo in enumerate(result.updated_work_orders, 1):
        change = by_id.get(wo.id)
        if wo.is_maintenance:
            status = "MAINTENANCE"
        elif change:
            status = f"MOVED {change.delta_minutes:+d} min"
        else:
            status = "UNCHANGED"
        lines.append(
            f"{i:02d}. {wo.id} | {wo.work_center_id} | "
            f"{wo.start.strftime('%b %d %H:%M')} -> {wo.end.strftime('%b %d %H:%M')} | "
            f"{wo.duration_minutes} min | {status}"
        )

    lines.append(f"\nMoved: {result.moved_count}/{len(result.updated_work_orders)}")
    if result.validation.is_valid:
        lines.append("Validation: OK")
    else:
        lines.append(f"Validation: {len(result.validation.errors or [])} error(s)")
        for error in result.validation.errors or []:
            lines.append(f"  - {error}")

    return "\n".join(lines)
