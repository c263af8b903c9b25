"""Enums and constants for the HRMS client — matching the backend's wire values."""

from __future__ import annotations

import enum
from typing import Optional


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    super_admin = "superAdmin"
    company_admin = "companyAdmin"
    hr = "hr"
    employee = "employee"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["UserRole"]:
        """Return the role for *value*, or ``None`` when missing/unknown."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


ADMIN_ROLES: frozenset[UserRole] = frozenset({UserRole.company_admin, UserRole.hr})
STAFF_ROLES: frozenset[UserRole] = frozenset(
    {UserRole.company_admin, UserRole.hr, UserRole.employee},
)
SUPER_ADMIN_ROLES: frozenset[UserRole] = frozenset({UserRole.super_admin})


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    present = "present"
    absent = "absent"
    half_day = "halfDay"
    late = "late"


class RegularizationStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    applied = "applied"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


CANCELLABLE_LEAVE_STATUSES: frozenset[str] = frozenset(
    {LeaveStatus.pending.value, LeaveStatus.applied.value},
)

# Leave types an employee may apply for, in display order
LEAVE_TYPES: tuple[str, ...] = (
    "casual",
    "earned",
    "medical",
    "maternity",
    "paternity",
    "other",
)

LEAVE_TYPE_LABELS: dict[str, str] = {
    "casual": "Casual leave",
    "earned": "Earned leave",
    "medical": "Medical leave",
    "maternity": "Maternity",
    "paternity": "Paternity",
    "other": "Others",
}


# ── Payroll ─────────────────────────────────────────────────────────

PAYROLL_DEDUCTION_FIELDS: tuple[str, ...] = (
    "pf",
    "esi",
    "tds",
    "professional_tax",
    "other_deductions",
    "leave_deductions",
)

SALARY_EARNING_FIELDS: tuple[str, ...] = (
    "basic",
    "hra",
    "conveyance",
    "special_allowance",
)

SALARY_DEDUCTION_FIELDS: tuple[str, ...] = (
    "pf",
    "esi",
    "tds",
    "professional_tax",
    "other_deductions",
)


# ── Session storage keys ────────────────────────────────────────────

TOKEN_KEY = "token"
USER_KEY = "user"
ROLE_KEY = "role"
SESSION_KEYS: tuple[str, ...] = (TOKEN_KEY, USER_KEY, ROLE_KEY)


# ── Paths ───────────────────────────────────────────────────────────

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"
TRACK_LEAVE_PATH = "/leaves/track"


# ── Misc constants ──────────────────────────────────────────────────

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_PAGE_SIZE = 10
