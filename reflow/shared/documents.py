"""Document codec: ``{docId, docType, data}`` dicts <-> domain dataclasses.

All timestamps are ISO-8601 UTC on the wire and timezone-aware UTC
``datetime`` objects in memory. Output timestamps drop sub-second
precision.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from .errors import InvalidDocumentError
from .models import (
    DocType,
    MaintenanceWindow,
    ReflowChange,
    ReflowResult,
    ReflowValidation,
    Shift,
    WorkCenter,
    WorkOrder,
)

logger = logging.getLogger(__name__)

_DT_FMT = "%Y-%m-%dT%H:%M:%SZ"

_WORK_ORDER_KEYS = {
    "workOrderNumber",
    "manufacturingOrderId",
    "workCenterId",
    "startDate",
    "endDate",
    "durationMinutes",
    "isMaintenance",
    "dependsOnWorkOrderIds",
}


# ------------------------------------------------------------------
# Timestamps
# ------------------------------------------------------------------

def parse_utc(value: str, *, doc_id: str = "", field_name: str = "") -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime."""
    if not isinstance(value, str) or not value:
        raise InvalidDocumentError(
            f"Document {doc_id!r}: missing timestamp {field_name!r}",
            doc_id=doc_id, field=field_name,
        )
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidDocumentError(
            f"Document {doc_id!r}: invalid timestamp {field_name}={value!r}",
            doc_id=doc_id, field=field_name, value=value,
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime(_DT_FMT)


def to_output_precision(dt: datetime) -> datetime:
    """Drop sub-second precision, matching what ``format_utc`` writes."""
    return dt.replace(microsecond=0)


# ------------------------------------------------------------------
# Parsing
# ------------------------------------------------------------------

def doc_type_of(doc: dict) -> DocType | None:
    try:
        return DocType(doc.get("docType"))
    except ValueError:
        return None


def _require(data: dict, key: str, doc_id: str) -> Any:
    if key not in data or data[key] is None:
        raise InvalidDocumentError(
            f"Document {doc_id!r}: missing required field {key!r}",
            doc_id=doc_id, field=key,
        )
    return data[key]


def _parse_shift(d: dict, doc_id: str) -> Shift:
    try:
        return Shift(
            day_of_week=int(_require(d, "dayOfWeek", doc_id)),
            start_hour=int(_require(d, "startHour", doc_id)),
            end_hour=int(_require(d, "endHour", doc_id)),
        )
    except (TypeError, ValueError):
        raise InvalidDocumentError(
            f"Document {doc_id!r}: malformed shift {d!r}", doc_id=doc_id,
        ) from None


def _parse_maintenance_window(d: dict, doc_id: str) -> MaintenanceWindow:
    if not isinstance(d, dict):
        raise InvalidDocumentError(
            f"Document {doc_id!r}: malformed maintenance window {d!r}", doc_id=doc_id,
        )
    return MaintenanceWindow(
        start=parse_utc(d.get("startDate"), doc_id=doc_id, field_name="maintenanceWindows.startDate"),
        end=parse_utc(d.get("endDate"), doc_id=doc_id, field_name="maintenanceWindows.endDate"),
        reason=d.get("reason") or "",
    )


def parse_work_center(doc: dict) -> WorkCenter:
    doc_id = doc.get("docId", "")
    data = doc.get("data") or {}
    return WorkCenter(
        id=doc_id,
        name=data.get("name") or doc_id,
        shifts=[_parse_shift(s, doc_id) for s in data.get("shifts") or []],
        maintenance_windows=[
            _parse_maintenance_window(mw, doc_id)
            for mw in data.get("maintenanceWindows") or []
        ],
    )


def parse_work_order(doc: dict) -> WorkOrder:
    doc_id = doc.get("docId", "")
    data = doc.get("data") or {}
    try:
        duration = int(_require(data, "durationMinutes", doc_id))
    except (TypeError, ValueError):
        raise InvalidDocumentError(
            f"Document {doc_id!r}: durationMinutes must be an integer",
            doc_id=doc_id, field="durationMinutes",
        ) from None
    is_maintenance = data.get("isMaintenance")
    if is_maintenance is None:
        is_maintenance = False
    elif not isinstance(is_maintenance, bool):
        raise InvalidDocumentError(
            f"Document {doc_id!r}: isMaintenance must be a boolean, got {is_maintenance!r}",
            doc_id=doc_id, field="isMaintenance",
        )
    return WorkOrder(
        id=doc_id,
        work_order_number=data.get("workOrderNumber") or doc_id,
        manufacturing_order_id=data.get("manufacturingOrderId", ""),
        work_center_id=_require(data, "workCenterId", doc_id),
        start=parse_utc(data.get("startDate"), doc_id=doc_id, field_name="startDate"),
        end=parse_utc(data.get("endDate"), doc_id=doc_id, field_name="endDate"),
        duration_minutes=duration,
        is_maintenance=is_maintenance,
        depends_on=tuple(data.get("dependsOnWorkOrderIds") or ()),
        extra={k: v for k, v in data.items() if k not in _WORK_ORDER_KEYS},
    )


def split_documents(
    documents: Iterable[dict],
) -> tuple[list[WorkOrder], dict[str, WorkCenter]]:
    """Partition documents into work orders and a work-center index.

    Manufacturing orders and unknown kinds are ignored.
    """
    work_orders: list[WorkOrder] = []
    work_centers: dict[str, WorkCenter] = {}
    seen: set[str] = set()

    for doc in documents:
        kind = doc_type_of(doc)
        if kind is DocType.WORK_ORDER:
            wo = parse_work_order(doc)
            if wo.id in seen:
                raise InvalidDocumentError(
                    f"Duplicate work order id {wo.id!r}", doc_id=wo.id,
                )
            seen.add(wo.id)
            work_orders.append(wo)
        elif kind is DocType.WORK_CENTER:
            wc = parse_work_center(doc)
            work_centers[wc.id] = wc
        elif kind is None:
            logger.warning(
                "Ignoring document %s with unknown docType %r",
                doc.get("docId"), doc.get("docType"),
            )

    return work_orders, work_centers


# ------------------------------------------------------------------
# Serialisation
# ------------------------------------------------------------------

def work_order_to_document(wo: WorkOrder) -> dict:
    data = dict(wo.extra)
    data.update({
        "workOrderNumber": wo.work_order_number,
        "manufacturingOrderId": wo.manufacturing_order_id,
        "workCenterId": wo.work_center_id,
        "startDate": format_utc(wo.start),
        "endDate": format_utc(wo.end),
        "durationMinutes": wo.duration_minutes,
        "isMaintenance": wo.is_maintenance,
        "dependsOnWorkOrderIds": list(wo.depends_on),
    })
    return {"docId": wo.id, "docType": DocType.WORK_ORDER.value, "data": data}


def work_center_to_document(wc: WorkCenter) -> dict:
    return {
        "docId": wc.id,
        "docType": DocType.WORK_CENTER.value,
        "data": {
            "name": wc.name,
            "shifts": [
                {"dayOfWeek": s.day_of_week, "startHour": s.start_hour, "endHour": s.end_hour}
                for s in wc.shifts
            ],
            "maintenanceWindows": [
                {"startDate": format_utc(mw.start), "endDate": format_utc(mw.end), "reason": mw.reason}
                for mw in wc.maintenance_windows
            ],
        },
    }


def change_to_dict(change: ReflowChange) -> dict:
    return {
        "workOrderId": change.work_order_id,
        "fromStart": format_utc(change.from_start),
        "fromEnd": format_utc(change.from_end),
        "toStart": format_utc(change.to_start),
        "toEnd": format_utc(change.to_end),
        "deltaMinutes": change.delta_minutes,
        "reasons": list(change.reasons),
    }


def validation_to_dict(validation: ReflowValidation) -> dict:
    out: dict[str, Any] = {"isValid": validation.is_valid}
    if validation.errors:
        out["errors"] = list(validation.errors)
    return out


def result_to_dict(result: ReflowResult) -> dict:
    return {
        "updatedWorkOrders": [work_order_to_document(wo) for wo in result.updated_work_orders],
        "changes": [change_to_dict(c) for c in result.changes],
        "explanation": list(result.explanation),
        "validation": validation_to_dict(result.validation),
    }
