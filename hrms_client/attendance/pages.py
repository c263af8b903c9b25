"""Attendance page controllers — attendance list, regularization list and form."""

from __future__ import annotations

import calendar
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

import pydantic

from hrms_client.attendance.api import AttendanceApi
from hrms_client.attendance.schemas import (
    AttendanceRecord,
    Regularization,
    RegularizationRequest,
    format_time,
    normalize_attendance,
)
from hrms_client.auth.session import SessionService
from hrms_client.common.constants import DEFAULT_PAGE_SIZE
from hrms_client.common.downloads import save_download
from hrms_client.common.exceptions import ApiError, error_message
from hrms_client.common.list_state import ListController
from hrms_client.common.models import EmployeeBrief
from hrms_client.common.notifications import Notifier
from hrms_client.common.pagination import Page, to_page

logger = logging.getLogger(__name__)

EXPORT_FALLBACK_NAME = "attendance-report.xlsx"


def month_bounds(today: date) -> tuple[date, date]:
    """First and last day of *today*'s month."""
    last = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last)


# ═════════════════════════════════════════════════════════════════════
# Attendance list
# ═════════════════════════════════════════════════════════════════════


class AttendancePage:
    """Paginated attendance of one employee with status/date/search filters.

    Without *employee_id* (the ``/attendance`` route) the list shows the
    signed-in user; admins reach other employees via
    ``/attendance/employee/:id``.
    """

    empty_message = "No attendance records found"

    def __init__(
        self,
        api: AttendanceApi,
        session: SessionService,
        notifier: Notifier,
        *,
        download_dir: Path,
        employee_id: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        today: Optional[date] = None,
    ) -> None:
        self.api = api
        self.session = session
        self.notifier = notifier
        self.download_dir = Path(download_dir)
        self.route_employee_id = employee_id
        self.today = today or date.today()
        self.listing: ListController[AttendanceRecord] = ListController(
            self._fetch,
            error_message="Failed to load attendance data",
            limit=page_size,
            filters=self._default_filters(),
        )

    # ── State ───────────────────────────────────────────────────────

    @property
    def records(self) -> list[AttendanceRecord]:
        return self.listing.items

    @property
    def error(self) -> Optional[str]:
        return self.listing.error

    @property
    def employee_id(self) -> Optional[str]:
        return self.listing.filters.get("employee_id") or self.route_employee_id or self.session.employee_id

    def rows(self) -> list[dict[str, str]]:
        """Display rows: date, employee, status and formatted times."""
        return [
            {
                "date": (record.date or "")[:10],
                "employee": record.employee.display_name if record.employee else "Employee",
                "status": record.status_label,
                "clock_in": format_time(record.clock_in),
                "clock_out": format_time(record.clock_out),
                "hours": "-" if record.total_working_hours is None else str(record.total_working_hours),
            }
            for record in self.records
        ]

    # ── Actions ─────────────────────────────────────────────────────

    async def load(self) -> bool:
        return await self.listing.reload()

    async def set_status(self, status: Optional[str]) -> bool:
        return await self.listing.set_filters(status=None if status in (None, "", "all") else status)

    async def set_date_range(self, start: Optional[date], end: Optional[date]) -> bool:
        return await self.listing.set_filters(start_date=start, end_date=end)

    async def set_search(self, search: str) -> bool:
        return await self.listing.set_filters(search=search.strip() or None)

    async def set_employee(self, employee_id: Optional[str]) -> bool:
        return await self.listing.set_filters(employee_id=employee_id or None)

    async def clear_filters(self) -> bool:
        return await self.listing.reset(self._default_filters())

    async def export(self) -> Optional[Path]:
        """Download the report for the current filters into ``download_dir``."""
        filters = self.listing.filters
        try:
            employee_id = self._require_employee()
            download = await self.api.download_report(
                employee_id=employee_id,
                start_date=filters.get("start_date"),
                end_date=filters.get("end_date"),
                status=filters.get("status"),
            )
        except (ApiError, ValueError) as exc:
            logger.error("Export error: %r", exc)
            self.notifier.alert("Failed to export attendance report")
            return None
        try:
            return save_download(download, self.download_dir, EXPORT_FALLBACK_NAME)
        except OSError as exc:
            logger.error("Saving attendance report failed: %r", exc)
            self.notifier.alert("Failed to save attendance report")
            return None

    # ── Internal ────────────────────────────────────────────────────

    def _default_filters(self) -> dict[str, Any]:
        start, end = month_bounds(self.today)
        return {
            "status": None,
            "start_date": start,
            "end_date": end,
            "search": None,
            "employee_id": None,
        }

    def _require_employee(self, filters: Optional[dict[str, Any]] = None) -> str:
        if filters is None:
            employee_id = self.employee_id
        else:
            employee_id = filters.get("employee_id") or self.route_employee_id or self.session.employee_id
        if not employee_id:
            raise ValueError("Missing employeeId")
        return employee_id

    def _fallback_employee(self, employee_id: str) -> EmployeeBrief:
        user = self.session.user
        if user is None or user.id != employee_id:
            return EmployeeBrief(id=employee_id)
        return EmployeeBrief(
            id=employee_id,
            name=user.display_name,
            employee_code=user.employee_code,
            designation=user.designation,
            profile_photo_url=user.avatar_url,
        )

    async def _fetch(self, filters: dict[str, Any], page: int, limit: int) -> Page[AttendanceRecord]:
        employee_id = self._require_employee(filters)
        if self.route_employee_id and not filters.get("employee_id"):
            payload = await self.api.list_for_employee(
                employee_id,
                page=page,
                limit=limit,
                status=filters.get("status"),
                start_date=filters.get("start_date"),
                end_date=filters.get("end_date"),
            )
        else:
            payload = await self.api.list(
                page=page,
                limit=limit,
                status=filters.get("status"),
                employee_id=employee_id,
                start_date=filters.get("start_date"),
                end_date=filters.get("end_date"),
                search=filters.get("search"),
            )
        return normalize_attendance(
            payload,
            fallback_employee=self._fallback_employee(employee_id),
            page=page,
            limit=limit,
        )


# ═════════════════════════════════════════════════════════════════════
# Regularization
# ═════════════════════════════════════════════════════════════════════


class RegularizationPage:
    """The signed-in user's regularization requests."""

    empty_message = "No regularization requests found"

    def __init__(
        self,
        api: AttendanceApi,
        session: SessionService,
        notifier: Notifier,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.api = api
        self.session = session
        self.notifier = notifier
        self.listing: ListController[Regularization] = ListController(
            self._fetch,
            error_message="Failed to load regularization requests",
            limit=page_size,
        )

    @property
    def requests(self) -> list[Regularization]:
        return self.listing.items

    async def load(self) -> bool:
        return await self.listing.reload()

    async def set_status(self, status: Optional[str]) -> bool:
        return await self.listing.set_filters(status=None if status in (None, "", "all") else status)

    async def _fetch(self, filters: dict[str, Any], page: int, limit: int) -> Page[Regularization]:
        payload = await self.api.list_regularizations(
            employee_id=self.session.employee_id,
            status=filters.get("status"),
            page=page,
            limit=limit,
        )
        if isinstance(payload, list):
            payload = {"items": payload}
        result = to_page(payload, Regularization.model_validate, page=page, limit=limit)
        if result is None:
            raise ValueError("Unexpected regularization response shape")
        return result


class SubmitRegularizationPage:
    """Form for correcting a missing or wrong attendance entry."""

    def __init__(self, api: AttendanceApi, session: SessionService, notifier: Notifier) -> None:
        self.api = api
        self.session = session
        self.notifier = notifier
        self.date: Optional[date] = None
        self.clock_in: Optional[str] = None
        self.clock_out: Optional[str] = None
        self.reason = ""
        self.submitting = False
        self.submitted: Optional[Regularization] = None

    async def load(self) -> bool:
        return True

    async def submit(self) -> bool:
        employee_id = self.session.employee_id
        if not employee_id or self.date is None or not self.reason.strip():
            self.notifier.toast(
                "Missing information",
                "Please select a date and give a reason",
                variant="destructive",
            )
            return False
        try:
            request = RegularizationRequest(
                employee_id=employee_id,
                day=self.date,
                clock_in=self.clock_in or None,
                clock_out=self.clock_out or None,
                reason=self.reason.strip(),
            )
        except pydantic.ValidationError as exc:
            logger.info("Rejected regularization form: %s", exc)
            self.notifier.toast("Invalid request", "Please check the form values", variant="destructive")
            return False

        self.submitting = True
        try:
            payload = await self.api.submit_regularization(request)
        except ApiError as exc:
            self.notifier.toast(
                "Error",
                error_message(exc, "Failed to submit regularization"),
                variant="destructive",
            )
            return False
        finally:
            self.submitting = False

        raw = (payload.get("data") or payload.get("regularization")) if isinstance(payload, dict) else None
        self.submitted = Regularization.model_validate(raw) if isinstance(raw, dict) else None
        self.notifier.toast("Success", "Regularization request submitted")
        return True
