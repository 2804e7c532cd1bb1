"""Shared test fixtures for reflow tests.

2024-01-01 is a Monday; most scenarios are anchored there.
"""

import pytest

from reflow.shared.documents import parse_work_center, parse_work_order


def _work_order_doc(doc_id="wo-123", **overrides):
    data = {
        "workOrderNumber": doc_id,
        "manufacturingOrderId": "MO-001",
        "workCenterId": "wc-123",
        "startDate": "2024-01-01T08:00:00Z",
        "endDate": "2024-01-01T09:00:00Z",
        "durationMinutes": 60,
        "isMaintenance": False,
        "dependsOnWorkOrderIds": [],
    }
    data.update(overrides)
    return {"docId": doc_id, "docType": "workOrder", "data": data}


def _work_center_doc(doc_id="wc-123", **overrides):
    data = {
        "name": doc_id,
        "shifts": [{"dayOfWeek": 1, "startHour": 8, "endHour": 12}],
        "maintenanceWindows": [],
    }
    data.update(overrides)
    return {"docId": doc_id, "docType": "workCenter", "data": data}


@pytest.fixture
def work_order_doc():
    """Factory for raw work-order documents."""
    return _work_order_doc


@pytest.fixture
def work_center_doc():
    """Factory for raw work-center documents."""
    return _work_center_doc


@pytest.fixture
def make_work_order():
    def _make(doc_id="wo-123", **overrides):
        return parse_work_order(_work_order_doc(doc_id, **overrides))
    return _make


@pytest.fixture
def make_work_center():
    def _make(doc_id="wc-123", **overrides):
        return parse_work_center(_work_center_doc(doc_id, **overrides))
    return _make


MON_TUE_8_16 = [
    {"dayOfWeek": 1, "startHour": 8, "endHour": 16},
    {"dayOfWeek": 2, "startHour": 8, "endHour": 16},
]

MON_TUE_8_12 = [
    {"dayOfWeek": 1, "startHour": 8, "endHour": 12},
    {"dayOfWeek": 2, "startHour": 8, "endHour": 12},
]


@pytest.fixture
def weekday_center(make_work_center):
    """Monday and Tuesday 08:00-16:00."""
    return make_work_center(shifts=MON_TUE_8_16)


@pytest.fixture
def morning_center(make_work_center):
    """Monday and Tuesday 08:00-12:00."""
    return make_work_center(shifts=MON_TUE_8_12)
