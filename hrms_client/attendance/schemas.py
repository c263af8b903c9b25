"""Attendance Pydantic v2 schemas — view models and the list adapter.

Naming conventions:
  - *Request  → request bodies (write)
  - *Record   → read representations
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from hrms_client.common.models import EmployeeBrief, WireModel, id_field
from hrms_client.common.pagination import Page, to_page


# ═════════════════════════════════════════════════════════════════════
# Clock in / out
# ═════════════════════════════════════════════════════════════════════


class ClockInRequest(BaseModel):
    """Payload for clocking in."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    marked_by: str = Field(default="user", serialization_alias="markedBy")


class ClockOutRequest(BaseModel):
    """Payload for clocking out."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


# ═════════════════════════════════════════════════════════════════════
# Attendance record
# ═════════════════════════════════════════════════════════════════════


_STATUS_LABELS: dict[str, str] = {
    "present": "Present",
    "absent": "Absent",
    "halfday": "Half Day",
    "half day": "Half Day",
    "half-day": "Half Day",
    "late": "Late",
}


class AttendanceRecord(WireModel):
    """One day of attendance for one employee."""

    id: Optional[str] = id_field()
    employee: Optional[EmployeeBrief] = None
    employee_id: Any = None
    status: Optional[str] = None
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
    total_working_hours: Optional[Union[float, str]] = None
    date: Optional[str] = None

    @property
    def has_clocked_in(self) -> bool:
        return bool(self.clock_in)

    @property
    def has_clocked_out(self) -> bool:
        return bool(self.clock_out)

    @property
    def status_label(self) -> str:
        if not self.status:
            return "-"
        return _STATUS_LABELS.get(self.status.lower(), self.status)


def format_time(value: Optional[str]) -> str:
    """``HH:MM`` of an ISO timestamp, or ``-``."""
    if not value:
        return "-"
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%H:%M")
    except ValueError:
        return "-"


def normalize_attendance(
    payload: Any,
    *,
    fallback_employee: EmployeeBrief,
    page: int = 1,
    limit: int = 10,
) -> Page[AttendanceRecord]:
    """
    Adapt either attendance response shape into a ``Page``.

    * ``{page, limit, total, totalPages, items}`` — the list contract
    * ``{attendance: {...}}`` — a single record, served as a one-item page

    Records without an embedded employee get *fallback_employee* (the
    employee whose attendance was requested).
    """
    result = to_page(payload, AttendanceRecord.model_validate, page=page, limit=limit)
    if result is None:
        single = payload.get("attendance") if isinstance(payload, dict) else None
        if not isinstance(single, dict):
            raise ValueError("Unexpected attendance response shape")
        result = Page(
            page=1,
            limit=limit,
            total=1,
            total_pages=1,
            items=[AttendanceRecord.model_validate(single)],
        )

    for record in result.items:
        if record.employee is None:
            record.employee = fallback_employee.model_copy(
                update={"id": _employee_id(record.employee_id) or fallback_employee.id},
            )
    return result


def _employee_id(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return str(value) if value else None


# ═════════════════════════════════════════════════════════════════════
# Regularization
# ═════════════════════════════════════════════════════════════════════


class Regularization(WireModel):
    """A correction request for a missing or incorrect attendance entry."""

    id: Optional[str] = id_field()
    employee_id: Any = None
    date: Optional[str] = None
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
    reason: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class RegularizationRequest(BaseModel):
    """Payload for submitting a regularization."""

    employee_id: str
    day: date
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
    reason: str = Field(..., min_length=3, max_length=1000)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "employeeId": self.employee_id,
            "date": self.day.isoformat(),
            "reason": self.reason,
        }
        if self.clock_in:
            payload["clockIn"] = self.clock_in
        if self.clock_out:
            payload["clockOut"] = self.clock_out
        return payload

