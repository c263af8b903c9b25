"""Payroll Pydantic v2 schemas — monthly pay records and the edit payload."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import model_validator

from hrms_client.common.constants import PAYROLL_DEDUCTION_FIELDS
from hrms_client.common.models import (
    EmployeeBrief,
    WireModel,
    as_number,
    coerce_numbers,
    employee_ref,
    id_field,
)

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Wire keys of every numeric payroll field, in edit-form order
PAYROLL_NUMERIC_KEYS: tuple[str, ...] = (
    "grossEarnings",
    "basic",
    "hra",
    "conveyance",
    "specialAllowance",
    "pf",
    "esi",
    "tds",
    "professionalTax",
    "otherDeductions",
    "lossOfPayDays",
    "leaveDeductions",
    "netPayable",
    "totalWorkedDays",
)


class PayrollRecord(WireModel):
    """One employee's computed pay for one month."""

    id: Optional[str] = id_field()
    employee_id: Any = None
    month: Optional[int] = None
    year: Optional[int] = None
    status: Optional[str] = None

    basic: float = 0
    hra: float = 0
    conveyance: float = 0
    special_allowance: float = 0
    gross_earnings: float = 0

    pf: float = 0
    esi: float = 0
    tds: float = 0
    professional_tax: float = 0
    other_deductions: float = 0
    leave_deductions: float = 0

    loss_of_pay_days: float = 0
    total_worked_days: float = 0
    net_payable: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def _numbers(cls, data: Any) -> Any:
        keys = [k for k in PAYROLL_NUMERIC_KEYS if k != "netPayable"]
        data = coerce_numbers(data, keys)
        if isinstance(data, dict) and "netPayable" in data:
            value = data["netPayable"]
            data["netPayable"] = None if value in (None, "") else as_number(value)
        return data

    @property
    def employee(self) -> Optional[EmployeeBrief]:
        if isinstance(self.employee_id, dict):
            return EmployeeBrief.model_validate(self.employee_id)
        return None

    @property
    def employee_ref(self) -> Optional[str]:
        return employee_ref(self.employee_id)

    @property
    def period_label(self) -> str:
        if self.month and 1 <= self.month <= 12:
            return f"{MONTH_NAMES[self.month - 1]} {self.year or ''}".strip()
        return str(self.year or "-")

    @property
    def total_deductions(self) -> float:
        return sum(getattr(self, name) for name in PAYROLL_DEDUCTION_FIELDS)

    @property
    def paid_days(self) -> float:
        return max(0.0, self.total_worked_days - self.loss_of_pay_days)


def net_payable(record: PayrollRecord) -> float:
    """Gross earnings minus every deduction, including leave deductions."""
    return record.gross_earnings - record.total_deductions


def edit_form(record: PayrollRecord) -> dict[str, Any]:
    """Editable values of *record*, keyed by wire name."""
    data = record.model_dump(by_alias=True)
    form = {key: data.get(key) for key in PAYROLL_NUMERIC_KEYS}
    form.update(month=record.month, year=record.year, status=record.status)
    return form


def update_payload(form: Mapping[str, Any], *, month: Optional[int], year: Optional[int]) -> dict[str, Any]:
    """``PUT /payroll/{id}`` body: status plus every numeric field that parses.

    Blank values are left out so the backend keeps what it has.
    """
    payload: dict[str, Any] = {"status": form.get("status")}
    for key in PAYROLL_NUMERIC_KEYS:
        value = form.get(key)
        if value is None or value == "":
            continue
        try:
            payload[key] = float(value)
        except (TypeError, ValueError):
            continue
        if payload[key].is_integer():
            payload[key] = int(payload[key])
    payload["month"] = month
    payload["year"] = year
    return payload
