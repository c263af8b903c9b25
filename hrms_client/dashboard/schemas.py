"""Dashboard Pydantic v2 schemas — employee summary cards and holiday calendar."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from hrms_client.common.models import WireModel
from hrms_client.leave.schemas import LeavePolicy


class AttendanceSummary(WireModel):
    total_days: float = 0
    total_attendance: float = 0
    present: float = 0
    absent: float = 0


class LeaveBalanceSummary(WireModel):
    total: float = 0
    casual: float = 0
    earned: float = 0
    medical: float = 0


class LeavePolicySummary(WireModel):
    active_policy_count: int = 0
    policies: list[LeavePolicy] = Field(default_factory=list)


class PayrollSummary(WireModel):
    net_salary: Optional[float] = None
    payment_date: Optional[str] = None


class EmployeeDashboard(WireModel):
    """``GET /dashboard/employee/{id}``: this month's figures for one employee."""

    attendance: AttendanceSummary = Field(default_factory=AttendanceSummary)
    leave_balance: LeaveBalanceSummary = Field(default_factory=LeaveBalanceSummary)
    leave_policy: LeavePolicySummary = Field(default_factory=LeavePolicySummary)
    payroll: PayrollSummary = Field(default_factory=PayrollSummary)
    month_start: Optional[str] = None
    month_end: Optional[str] = None


class HolidayCalendar(WireModel):
    """The organization's holiday calendar image."""

    calendar_file: Optional[str] = None
    calendar_file_name: Optional[str] = None

    @property
    def url(self) -> Optional[str]:
        return self.calendar_file or self.calendar_file_name
