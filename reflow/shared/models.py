"""Domain dataclasses shared across scheduler_logic, the CLI and exporters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from .errors import ReflowErrorKind


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class DocType(Enum):
    WORK_ORDER = "workOrder"
    WORK_CENTER = "workCenter"
    MANUFACTURING_ORDER = "manufacturingOrder"


# ---------------------------------------------------------------------------
# Calendar dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TimeWindow:
    """Half-open ``[start, end)`` span of absolute UTC time."""
    start: datetime
    end: datetime

    @property
    def minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60

    def overlaps(self, other: TimeWindow) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class Shift:
    day_of_week: int  # 0 = Sunday .. 6 = Saturday
    start_hour: int
    end_hour: int


@dataclass(frozen=True)
class MaintenanceWindow:
    start: datetime
    end: datetime
    reason: str = ""


@dataclass
class WorkCenter:
    id: str
    name: str
    shifts: list[Shift] = field(default_factory=list)
    maintenance_windows: list[MaintenanceWindow] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Work orders
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WorkOrder:
    id: str
    work_order_number: str
    manufacturing_order_id: str
    work_center_id: str
    start: datetime
    end: datetime
    duration_minutes: int
    is_maintenance: bool = False
    depends_on: tuple[str, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class ScheduledInterval:
    work_order_id: str
    start: datetime
    end: datetime
    is_maintenance: bool
    original_start: datetime
    original_end: datetime

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start, self.end)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class ReflowChange:
    work_order_id: str
    from_start: datetime
    from_end: datetime
    to_start: datetime
    to_end: datetime
    delta_minutes: int
    reasons: list[str] = field(default_factory=list)


@dataclass
class ReflowValidation:
    is_valid: bool
    errors: Optional[list[str]] = None


@dataclass
class ReflowResult:
    updated_work_orders: list[WorkOrder] = field(default_factory=list)
    changes: list[ReflowChange] = field(default_factory=list)
    explanation: list[str] = field(default_factory=list)
    validation: ReflowValidation = field(default_factory=lambda: ReflowValidation(True))

    @property
    def moved_count(self) -> int:
        return sum(1 for c in self.changes if c.from_start != c.to_start or c.delta_minutes)


@dataclass
class ReflowFailure:
    """Returned by ``try_reflow`` instead of raising."""
    kind: ReflowErrorKind
    message: str
    context: dict[str, Any] = field(default_factory=dict)
