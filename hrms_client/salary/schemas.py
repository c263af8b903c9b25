"""Salary structure Pydantic v2 schemas and the create/edit forms."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import model_validator

from hrms_client.common.constants import SALARY_DEDUCTION_FIELDS, SALARY_EARNING_FIELDS
from hrms_client.common.models import (
    EmployeeBrief,
    WireModel,
    as_number,
    coerce_numbers,
    employee_ref,
    id_field,
)

# Wire keys, in form order
SALARY_NUMERIC_KEYS: tuple[str, ...] = (
    "ctc",
    "gross",
    "basic",
    "hra",
    "conveyance",
    "specialAllowance",
    "pf",
    "esi",
    "tds",
    "professionalTax",
    "otherDeductions",
)
EARNING_KEYS: tuple[str, ...] = ("basic", "hra", "conveyance", "specialAllowance")


class SalaryStructure(WireModel):
    """Monthly salary breakdown of one employee."""

    id: Optional[str] = id_field()
    employee_id: Any = None
    ctc: float = 0
    gross: float = 0
    basic: float = 0
    hra: float = 0
    conveyance: float = 0
    special_allowance: float = 0
    pf: float = 0
    esi: float = 0
    tds: float = 0
    professional_tax: float = 0
    other_deductions: float = 0

    @model_validator(mode="before")
    @classmethod
    def _numbers(cls, data: Any) -> Any:
        return coerce_numbers(data, SALARY_NUMERIC_KEYS)

    @property
    def employee(self) -> Optional[EmployeeBrief]:
        if isinstance(self.employee_id, dict):
            return EmployeeBrief.model_validate(self.employee_id)
        return None

    @property
    def employee_ref(self) -> Optional[str]:
        return employee_ref(self.employee_id)

    @property
    def total_earnings(self) -> float:
        return sum(getattr(self, name) for name in SALARY_EARNING_FIELDS)

    @property
    def total_deductions(self) -> float:
        return sum(getattr(self, name) for name in SALARY_DEDUCTION_FIELDS)

    @property
    def net_pay(self) -> float:
        """Gross minus deductions; negative when deductions exceed gross."""
        return self.gross - self.total_deductions


def numeric_update(form: Mapping[str, Any]) -> dict[str, Any]:
    """``PUT`` body: only the numeric fields that were filled in and parse."""
    payload: dict[str, Any] = {}
    for key in SALARY_NUMERIC_KEYS:
        value = form.get(key)
        if value is None or value == "":
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        payload[key] = int(number) if number.is_integer() else number
    return payload


class SalaryStructureForm:
    """Create form. ``gross`` follows the sum of earnings until edited by hand."""

    def __init__(self) -> None:
        self.employee_id = ""
        self.employee_label = ""
        self.values: dict[str, Any] = {key: "" for key in SALARY_NUMERIC_KEYS}
        self.gross_edited = False
        self.values["gross"] = self.computed_gross()

    def computed_gross(self) -> float:
        return sum(as_number(self.values.get(key)) for key in EARNING_KEYS)

    def set(self, field: str, value: Any) -> None:
        if field not in self.values:
            raise KeyError(field)
        self.values[field] = value
        if field == "gross":
            self.gross_edited = True
        elif not self.gross_edited:
            self.values["gross"] = self.computed_gross()

    def select_employee(self, employee: EmployeeBrief) -> None:
        self.employee_id = employee.id or ""
        code = f" ({employee.employee_code})" if employee.employee_code else ""
        self.employee_label = f"{employee.display_name}{code}"

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"employeeId": self.employee_id}
        for key in SALARY_NUMERIC_KEYS:
            number = as_number(self.values.get(key))
            payload[key] = int(number) if number.is_integer() else number
        return payload
