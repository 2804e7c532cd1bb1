"""Tests for working-time arithmetic."""

from datetime import datetime, timezone

import pytest

from reflow.scheduler_logic.constants import ReflowLimits
from reflow.scheduler_logic.working_clock import add_working_minutes, working_segments
from reflow.shared.errors import (
    ClockIterationsExceededError,
    NoAvailableShiftError,
    NoShiftsDefinedError,
    ReflowErrorKind,
)
from reflow.shared.models import TimeWindow


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestAddWorkingMinutes:

    def test_within_single_shift(self, morning_center):
        result = add_working_minutes(utc(2024, 1, 1, 8), 120, morning_center)
        assert result.end == utc(2024, 1, 1, 10)
        assert result.consumed_minutes == 120

    def test_rolls_over_to_next_shift(self, morning_center):
        # 11-12 on Monday, then 08-09 on Tuesday
        result = add_working_minutes(utc(2024, 1, 1, 11), 120, morning_center)
        assert result.end == utc(2024, 1, 2, 9)

    def test_fills_shift_exactly(self, morning_center):
        result = add_working_minutes(utc(2024, 1, 1, 8), 240, morning_center)
        assert result.end == utc(2024, 1, 1, 12)

    def test_skips_maintenance_inside_shift(self, make_work_center):
        wc = make_work_center(maintenanceWindows=[
            {"startDate": "2024-01-01T09:00:00Z", "endDate": "2024-01-01T10:00:00Z"},
        ])
        result = add_working_minutes(utc(2024, 1, 1, 8), 180, wc)
        assert result.end == utc(2024, 1, 1, 12)

    def test_start_outside_shift_counts_from_next_shift(self, morning_center):
        result = add_working_minutes(utc(2024, 1, 1, 6), 30, morning_center)
        assert result.end == utc(2024, 1, 1, 8, 30)

    def test_zero_duration_returns_start(self, make_work_center):
        wc = make_work_center(shifts=[])
        start = utc(2024, 1, 1, 3)
        result = add_working_minutes(start, 0, wc)
        assert result.end == start
        assert result.consumed_minutes == 0

    def test_no_shifts_raises(self, make_work_center):
        wc = make_work_center(shifts=[])
        with pytest.raises(NoShiftsDefinedError, match="No shifts defined"):
            add_working_minutes(utc(2024, 1, 1, 8), 60, wc)

    def test_no_shift_within_lookahead_raises(self, morning_center):
        limits = ReflowLimits(lookahead_days=3)
        # Tuesday noon; next Monday is six days away
        with pytest.raises(NoAvailableShiftError) as exc_info:
            add_working_minutes(utc(2024, 1, 2, 12), 60, morning_center, limits=limits)
        assert exc_info.value.kind is ReflowErrorKind.NO_AVAILABLE_SHIFT

    def test_iteration_bound(self, morning_center):
        limits = ReflowLimits(clock_iterations=2)
        with pytest.raises(ClockIterationsExceededError):
            add_working_minutes(utc(2024, 1, 1, 8), 60 * 40, morning_center, limits=limits)


class TestWorkingSegments:

    def test_segments_span_days(self, morning_center):
        segments = working_segments(utc(2024, 1, 1, 11), utc(2024, 1, 2, 10), morning_center)
        assert segments == [
            TimeWindow(utc(2024, 1, 1, 11), utc(2024, 1, 1, 12)),
            TimeWindow(utc(2024, 1, 2, 8), utc(2024, 1, 2, 10)),
        ]

    def test_maintenance_removed(self, make_work_center):
        wc = make_work_center(maintenanceWindows=[
            {"startDate": "2024-01-01T09:00:00Z", "endDate": "2024-01-01T10:00:00Z"},
        ])
        segments = working_segments(utc(2024, 1, 1, 8), utc(2024, 1, 1, 12), wc)
        assert [s.minutes for s in segments] == [60, 120]

    def test_empty_outside_shifts(self, morning_center):
        assert working_segments(utc(2024, 1, 1, 12), utc(2024, 1, 1, 20), morning_center) == []
