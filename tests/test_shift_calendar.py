"""Tests for shift and maintenance-window calendar queries."""

from datetime import datetime, timezone

import pytest

from reflow.scheduler_logic.constants import ReflowLimits
from reflow.scheduler_logic.shift_calendar import (
    find_next_shift_window,
    get_shifts_for_day,
    is_during_maintenance,
    is_within_shift,
    next_shift_start,
    shift_day,
    split_by_maintenance,
)
from reflow.shared.errors import NoAvailableShiftError
from reflow.shared.models import MaintenanceWindow, TimeWindow


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestMembership:

    def test_shift_day_counts_from_sunday(self):
        assert shift_day(utc(2024, 1, 7)) == 0  # Sunday
        assert shift_day(utc(2024, 1, 1)) == 1  # Monday
        assert shift_day(utc(2024, 1, 6)) == 6  # Saturday

    def test_within_shift_only_on_matching_day_and_time(self, weekday_center):
        monday_shift = weekday_center.shifts[0]
        assert is_within_shift(utc(2024, 1, 1, 10), monday_shift) is True
        assert is_within_shift(utc(2024, 1, 7, 10), monday_shift) is False
        assert is_within_shift(utc(2024, 1, 1, 18), monday_shift) is False

    def test_shift_end_is_exclusive(self, weekday_center):
        monday_shift = weekday_center.shifts[0]
        assert is_within_shift(utc(2024, 1, 1, 8), monday_shift) is True
        assert is_within_shift(utc(2024, 1, 1, 16), monday_shift) is False

    def test_during_maintenance_is_half_open(self):
        mw = MaintenanceWindow(utc(2024, 1, 1, 9), utc(2024, 1, 1, 10))
        assert is_during_maintenance(utc(2024, 1, 1, 9, 30), mw) is True
        assert is_during_maintenance(utc(2024, 1, 1, 10), mw) is False

    def test_shifts_for_day_sorted_by_start(self, make_work_center):
        wc = make_work_center(shifts=[
            {"dayOfWeek": 1, "startHour": 14, "endHour": 18},
            {"dayOfWeek": 1, "startHour": 8, "endHour": 12},
            {"dayOfWeek": 3, "startHour": 6, "endHour": 9},
        ])
        shifts = get_shifts_for_day(wc, 1)
        assert [s.start_hour for s in shifts] == [8, 14]
        assert get_shifts_for_day(wc, 2) == []


class TestFindNextShiftWindow:

    def test_clips_to_instant_inside_shift(self, weekday_center):
        window = find_next_shift_window(utc(2024, 1, 1, 10, 15), weekday_center)
        assert window == TimeWindow(utc(2024, 1, 1, 10, 15), utc(2024, 1, 1, 16))

    def test_rolls_to_next_day(self, weekday_center):
        window = find_next_shift_window(utc(2024, 1, 1, 18), weekday_center)
        assert window.start == utc(2024, 1, 2, 8)

    def test_rolls_over_weekend(self, weekday_center):
        # Wednesday evening -> next Monday
        window = find_next_shift_window(utc(2024, 1, 3, 18), weekday_center)
        assert window.start == utc(2024, 1, 8, 8)

    def test_none_beyond_lookahead(self, weekday_center):
        limits = ReflowLimits(lookahead_days=2)
        assert find_next_shift_window(utc(2024, 1, 3, 18), weekday_center, limits=limits) is None

    def test_inverted_shift_never_available(self, make_work_center):
        wc = make_work_center(shifts=[{"dayOfWeek": 1, "startHour": 22, "endHour": 6}])
        assert find_next_shift_window(utc(2024, 1, 1), wc) is None


class TestSplitByMaintenance:

    def test_splits_into_segments(self, make_work_center):
        wc = make_work_center(maintenanceWindows=[
            {"startDate": "2024-01-01T12:00:00Z", "endDate": "2024-01-01T12:30:00Z"},
            {"startDate": "2024-01-01T09:00:00Z", "endDate": "2024-01-01T10:00:00Z"},
        ])
        segments = split_by_maintenance(TimeWindow(utc(2024, 1, 1, 8), utc(2024, 1, 1, 13)), wc)
        assert [s.minutes for s in segments] == [60, 120, 30]

    def test_overlapping_windows_merge(self, make_work_center):
        wc = make_work_center(maintenanceWindows=[
            {"startDate": "2024-01-01T09:00:00Z", "endDate": "2024-01-01T10:30:00Z"},
            {"startDate": "2024-01-01T10:00:00Z", "endDate": "2024-01-01T11:00:00Z"},
        ])
        segments = split_by_maintenance(TimeWindow(utc(2024, 1, 1, 8), utc(2024, 1, 1, 12)), wc)
        assert segments == [
            TimeWindow(utc(2024, 1, 1, 8), utc(2024, 1, 1, 9)),
            TimeWindow(utc(2024, 1, 1, 11), utc(2024, 1, 1, 12)),
        ]

    def test_fully_covered_window_is_empty(self, make_work_center):
        wc = make_work_center(maintenanceWindows=[
            {"startDate": "2024-01-01T00:00:00Z", "endDate": "2024-01-02T00:00:00Z"},
        ])
        assert split_by_maintenance(TimeWindow(utc(2024, 1, 1, 8), utc(2024, 1, 1, 12)), wc) == []

    def test_invalid_window_ignored(self, make_work_center):
        wc = make_work_center(maintenanceWindows=[
            {"startDate": "2024-01-01T10:00:00Z", "endDate": "2024-01-01T09:00:00Z"},
        ])
        window = TimeWindow(utc(2024, 1, 1, 8), utc(2024, 1, 1, 12))
        assert split_by_maintenance(window, wc) == [window]


class TestNextShiftStart:

    def test_already_available(self, weekday_center):
        assert next_shift_start(utc(2024, 1, 1, 9), weekday_center) == utc(2024, 1, 1, 9)

    def test_skips_maintenance_when_starting_inside_block(self, make_work_center):
        wc = make_work_center(
            shifts=[
                {"dayOfWeek": 1, "startHour": 8, "endHour": 16},
                {"dayOfWeek": 2, "startHour": 8, "endHour": 16},
            ],
            maintenanceWindows=[
                {"startDate": "2024-01-01T09:00:00Z", "endDate": "2024-01-01T10:00:00Z"},
            ],
        )
        assert next_shift_start(utc(2024, 1, 1, 9, 30), wc) == utc(2024, 1, 1, 10)

    def test_outside_shift_moves_to_next_shift(self, weekday_center):
        assert next_shift_start(utc(2024, 1, 1, 6), weekday_center) == utc(2024, 1, 1, 8)
        assert next_shift_start(utc(2024, 1, 1, 16), weekday_center) == utc(2024, 1, 2, 8)

    def test_shift_fully_under_maintenance_is_skipped(self, make_work_center):
        wc = make_work_center(
            shifts=[
                {"dayOfWeek": 1, "startHour": 8, "endHour": 12},
                {"dayOfWeek": 2, "startHour": 8, "endHour": 12},
            ],
            maintenanceWindows=[
                {"startDate": "2024-01-01T07:00:00Z", "endDate": "2024-01-01T13:00:00Z"},
            ],
        )
        assert next_shift_start(utc(2024, 1, 1, 8), wc) == utc(2024, 1, 2, 8)

    def test_raises_when_lookahead_exhausted(self, make_work_center):
        wc = make_work_center(shifts=[])
        with pytest.raises(NoAvailableShiftError) as exc_info:
            next_shift_start(utc(2024, 1, 1, 8), wc)
        assert exc_info.value.context["work_center_id"] == "wc-123"
