"""Synthetic scenario generator.

Produces a seeded, reproducible document array: work centers with weekday
shifts and a few maintenance windows, fixed maintenance work orders, and
production orders whose dependencies always point at earlier orders (so
the graph is a DAG). Production orders are initially packed back to back
per work center with the working clock, ignoring dependencies and
maintenance orders, which gives the reflow engine real conflicts to fix.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta

from reflow.scheduler_logic.shift_calendar import next_shift_start
from reflow.scheduler_logic.working_clock import add_working_minutes
from reflow.shared.documents import (
    parse_utc,
    work_center_to_document,
    work_order_to_document,
)
from reflow.shared.models import MaintenanceWindow, Shift, WorkCenter, WorkOrder

logger = logging.getLogger(__name__)

WORK_CENTERS = [
    ("WC-001", "Milling A"),
    ("WC-002", "Milling B"),
    ("WC-003", "Lathe A"),
    ("WC-004", "Lathe B"),
    ("WC-005", "Assembly/QA"),
]

SHIFT_DAYS = [1, 2, 3, 4, 5]  # Monday..Friday, Sunday = 0
SHIFT_START_HOUR = 8
SHIFT_END_HOUR = 17

BASE_START_ISO = "2026-02-02T08:00:00Z"
MANUFACTURING_ORDER_ID = "MO-0001"

MAINTENANCE_WINDOWS = [
    ("WC-001", "2026-02-02T08:00:00Z", "2026-02-02T12:00:00Z", "Planned PM"),
    ("WC-003", "2026-02-05T08:00:00Z", "2026-02-05T17:00:00Z", "Planned PM"),
    ("WC-005", "2026-02-06T12:00:00Z", "2026-02-06T16:00:00Z", "Calibration"),
]

DEPENDENCY_WEIGHTS = [0.6, 0.25, 0.1, 0.05]  # P(0..3 dependencies)
DEPENDENCY_LOOKBACK = 50
MAINTENANCE_ORDER_RATE = 0.01


def build_work_centers() -> list[WorkCenter]:
    shifts = [Shift(day, SHIFT_START_HOUR, SHIFT_END_HOUR) for day in SHIFT_DAYS]
    windows: dict[str, list[MaintenanceWindow]] = {wc_id: [] for wc_id, _ in WORK_CENTERS}
    for wc_id, start, end, reason in MAINTENANCE_WINDOWS:
        windows[wc_id].append(MaintenanceWindow(parse_utc(start), parse_utc(end), reason))
    return [
        WorkCenter(id=wc_id, name=name, shifts=list(shifts), maintenance_windows=windows[wc_id])
        for wc_id, name in WORK_CENTERS
    ]


def _maintenance_orders(rng: random.Random, count: int, base: datetime) -> list[WorkOrder]:
    orders = []
    for i in range(count):
        wc_id, _ = rng.choice(WORK_CENTERS)
        # Monday..Friday of the first two weeks, at the top of a shift hour
        start = base + timedelta(days=rng.choice([0, 1, 2, 3, 4, 7, 8, 9, 10, 11]),
                                 hours=rng.randint(0, 6))
        duration = rng.choice([30, 60, 90, 120])
        wo_id = f"WO-MNT-{i + 1:03d}"
        orders.append(WorkOrder(
            id=wo_id,
            work_order_number=wo_id,
            manufacturing_order_id=MANUFACTURING_ORDER_ID,
            work_center_id=wc_id,
            start=start,
            end=start + timedelta(minutes=duration),
            duration_minutes=duration,
            is_maintenance=True,
        ))
    return orders


def _production_orders(
    rng: random.Random,
    count: int,
    base: datetime,
    centers: dict[str, WorkCenter],
) -> list[WorkOrder]:
    next_free = {wc_id: base for wc_id in centers}
    orders = []
    for i in range(1, count + 1):
        wo_id = f"WO-{i:04d}"
        num_deps = rng.choices(range(len(DEPENDENCY_WEIGHTS)), weights=DEPENDENCY_WEIGHTS)[0]
        pool = [f"WO-{j:04d}" for j in range(max(1, i - DEPENDENCY_LOOKBACK), i)]
        deps = sorted(rng.sample(pool, min(num_deps, len(pool))))

        wc = centers[rng.choice(WORK_CENTERS)[0]]
        duration = rng.randint(30, 240)
        start = next_shift_start(next_free[wc.id], wc)
        end = add_working_minutes(start, duration, wc).end
        next_free[wc.id] = end

        orders.append(WorkOrder(
            id=wo_id,
            work_order_number=wo_id,
            manufacturing_order_id=MANUFACTURING_ORDER_ID,
            work_center_id=wc.id,
            start=start,
            end=end,
            duration_minutes=duration,
            depends_on=tuple(deps),
        ))
    return orders


def generate_scenario(num_orders: int = 100, seed: int = 42) -> list[dict]:
    """Return a document array ready for ``reflow``."""
    rng = random.Random(seed)
    base = parse_utc(BASE_START_ISO)

    work_centers = build_work_centers()
    centers = {wc.id: wc for wc in work_centers}

    maintenance = _maintenance_orders(rng, max(1, int(num_orders * MAINTENANCE_ORDER_RATE)), base)
    production = _production_orders(rng, num_orders, base, centers)

    documents = [work_center_to_document(wc) for wc in work_centers]
    documents += [work_order_to_document(wo) for wo in maintenance + production]
    documents.append({
        "docId": MANUFACTURING_ORDER_ID,
        "docType": "manufacturingOrder",
        "data": {
            "manufacturingOrderNumber": MANUFACTURING_ORDER_ID,
            "itemId": "PIPE-001",
            "quantity": 1000,
            "dueDate": "2026-02-28T17:00:00Z",
        },
    })

    logger.info(
        "Generated %d work centers, %d maintenance and %d production orders (seed %d)",
        len(work_centers), len(maintenance), len(production), seed,
    )
    return documents
