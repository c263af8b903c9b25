"""Leave Pydantic v2 schemas — requests, policies and balances.

Naming conventions:
  - *Create            → request bodies (write)
  - everything else    → read representations of backend JSON
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field, model_validator

from hrms_client.common.constants import (
    CANCELLABLE_LEAVE_STATUSES,
    LEAVE_TYPE_LABELS,
    LEAVE_TYPES,
)
from hrms_client.common.models import (
    EmployeeBrief,
    WireModel,
    coerce_numbers,
    employee_ref,
    id_field,
)

# Types selectable when applying; tracking also accepts legacy "sick"
APPLICABLE_LEAVE_TYPES: tuple[str, ...] = (
    "casual",
    "medical",
    "earned",
    "maternity",
    "paternity",
    "other",
)
TRACKABLE_LEAVE_TYPES: tuple[str, ...] = APPLICABLE_LEAVE_TYPES + ("sick",)


def inclusive_days(start: Optional[date], end: Optional[date]) -> int:
    """Calendar days from *start* to *end*, both included (0 if unset or reversed)."""
    if start is None or end is None:
        return 0
    return max(0, (end - start).days + 1)


def list_payload(payload: Any) -> list[Any]:
    """The list carried by a response: bare, or under ``data`` / ``items``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", "items"):
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


# ═════════════════════════════════════════════════════════════════════
# Leave policy
# ═════════════════════════════════════════════════════════════════════


class LeaveTypeAllocation(WireModel):
    id: Optional[str] = id_field()
    type: str = ""
    allocation: Optional[float] = None

    @property
    def label(self) -> str:
        return LEAVE_TYPE_LABELS.get(self.type.lower(), self.type)


class LeavePolicy(WireModel):
    """A named set of leave types and their yearly allocations."""

    id: Optional[str] = id_field()
    name: Optional[str] = None
    leave_types: list[LeaveTypeAllocation] = Field(default_factory=list)


@dataclass(frozen=True)
class LeaveTypeItem:
    """One selectable leave type together with the policy it belongs to."""

    id: str
    type: str
    policy_id: str


def parse_policies(payload: Any) -> list[LeavePolicy]:
    return [LeavePolicy.model_validate(raw) for raw in list_payload(payload) if isinstance(raw, dict)]


def leave_type_items(policies: Iterable[LeavePolicy]) -> list[LeaveTypeItem]:
    """Selectable leave types: allowed types that carry an id, per policy."""
    items: list[LeaveTypeItem] = []
    for policy in policies:
        for leave_type in policy.leave_types:
            if leave_type.id and policy.id and leave_type.type.lower() in APPLICABLE_LEAVE_TYPES:
                items.append(LeaveTypeItem(id=leave_type.id, type=leave_type.type, policy_id=policy.id))
    return items


def leave_type_names(policies: Iterable[LeavePolicy], allowed: Optional[Iterable[str]] = None) -> list[str]:
    """Distinct leave type names across *policies*, in first-seen order."""
    allowed_set = {t.lower() for t in allowed} if allowed is not None else None
    names: list[str] = []
    for policy in policies:
        for leave_type in policy.leave_types:
            if not leave_type.type or leave_type.type in names:
                continue
            if allowed_set is not None and leave_type.type.lower() not in allowed_set:
                continue
            names.append(leave_type.type)
    return names


# ═════════════════════════════════════════════════════════════════════
# Leave request
# ═════════════════════════════════════════════════════════════════════


class LeaveRequest(WireModel):
    """A leave application as served by ``GET /leaves``."""

    id: Optional[str] = id_field()
    employee_id: Any = None
    leave_type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    days: Optional[float] = None
    reason: Optional[str] = None
    status: Optional[str] = None
    document_url: Optional[str] = None
    document_urls: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None

    @property
    def employee(self) -> Optional[EmployeeBrief]:
        if isinstance(self.employee_id, dict):
            return EmployeeBrief.model_validate(self.employee_id)
        return None

    @property
    def employee_ref(self) -> Optional[str]:
        return employee_ref(self.employee_id)

    @property
    def can_cancel(self) -> bool:
        return (self.status or "").lower() in CANCELLABLE_LEAVE_STATUSES

    @property
    def documents(self) -> list[str]:
        if self.document_urls:
            return list(self.document_urls)
        return [self.document_url] if self.document_url else []


class LeaveRequestCreate(BaseModel):
    """Body of ``POST /leaves``."""

    employee_id: str
    leave_policy_id: str
    leave_type_id: str
    leave_type: str
    start_date: date
    end_date: date
    days: float = Field(..., gt=0)
    reason: str = ""
    document_urls: list[str] = Field(default_factory=list, max_length=5)

    @model_validator(mode="after")
    def _check_range(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "reason": self.reason,
            "leavePolicyId": self.leave_policy_id,
            "leaveTypeId": self.leave_type_id,
            "leaveType": self.leave_type,
            "days": int(self.days) if float(self.days).is_integer() else self.days,
            "employeeId": self.employee_id,
        }
        if self.document_urls:
            payload["documentUrl"] = self.document_urls[0]
            payload["documentUrls"] = list(self.document_urls)
        return payload


# ═════════════════════════════════════════════════════════════════════
# Balance
# ═════════════════════════════════════════════════════════════════════


class BalanceHistoryEntry(WireModel):
    year: Optional[int] = None
    action: Optional[str] = None
    days: Optional[float] = None
    remarks: Optional[str] = None
    date: Optional[str] = None


class LeaveBalanceHistoryItem(WireModel):
    """Allocation, usage and history of one leave type for one employee."""

    id: Optional[str] = id_field()
    employee_id: Any = None
    leave_type: Optional[str] = "other"
    allocated: float = 0
    used: float = 0
    balance: float = 0
    history: list[BalanceHistoryEntry] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _numbers(cls, data: Any) -> Any:
        return coerce_numbers(data, ("allocated", "used", "balance"))


@dataclass(frozen=True)
class BalanceRow:
    leave_type: str
    label: str
    allocated: float
    used: float
    balance: float


def parse_balances(payload: Any) -> list[LeaveBalanceHistoryItem]:
    return [
        LeaveBalanceHistoryItem.model_validate(raw)
        for raw in list_payload(payload)
        if isinstance(raw, dict)
    ]


def balance_rows(items: Iterable[LeaveBalanceHistoryItem]) -> list[BalanceRow]:
    """One row per leave type in fixed display order; missing types are zero."""
    by_type: dict[str, LeaveBalanceHistoryItem] = {}
    for item in items:
        by_type[(item.leave_type or "other").lower()] = item
    rows: list[BalanceRow] = []
    for leave_type in LEAVE_TYPES:
        item = by_type.get(leave_type)
        rows.append(
            BalanceRow(
                leave_type=leave_type,
                label=LEAVE_TYPE_LABELS[leave_type],
                allocated=item.allocated if item else 0,
                used=item.used if item else 0,
                balance=item.balance if item else 0,
            )
        )
    return rows
