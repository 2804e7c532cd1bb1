"""Search bounds, reason tags and chart colours for the reflow engine.

The bounds turn contradictory calendars into explicit failures instead of
endless loops; ``reflow.settings`` can override them from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReflowLimits:
    lookahead_days: int = 14
    clock_iterations: int = 1000
    search_iterations: int = 200


DEFAULT_LIMITS = ReflowLimits()

REASON_DEPENDENCIES = "dependencies"
REASON_ALIGNMENT = "shift/maintenance alignment"
REASON_CONFLICT = "work center conflict"
REASON_MAINTENANCE_FIXED = "maintenance not rescheduled"

PRODUCTION_COLOR = "#4fc3f7"
MOVED_COLOR = "#ffb74d"
MAINTENANCE_ORDER_COLOR = "#f06292"
MAINTENANCE_WINDOW_COLOR = "#30363d"
