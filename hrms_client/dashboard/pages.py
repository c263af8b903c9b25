"""Dashboard page — summary cards, holiday calendar and the clock in/out banner."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

from hrms_client.attendance.api import AttendanceApi
from hrms_client.attendance.schemas import AttendanceRecord
from hrms_client.auth.policy import is_authorized
from hrms_client.auth.session import SessionService
from hrms_client.common.constants import ADMIN_ROLES, SUPER_ADMIN_ROLES
from hrms_client.common.exceptions import ApiError, UploadError, error_message
from hrms_client.common.geolocation import Geolocator
from hrms_client.common.models import unwrap
from hrms_client.common.notifications import Notifier
from hrms_client.dashboard.api import DashboardApi
from hrms_client.dashboard.schemas import EmployeeDashboard, HolidayCalendar
from hrms_client.employees.api import EmployeeApi
from hrms_client.employees.schemas import EmployeeProfile
from hrms_client.uploads.api import UploadApi

logger = logging.getLogger(__name__)

STATS_ROLES = ADMIN_ROLES | SUPER_ADMIN_ROLES


class DashboardPage:
    """Landing page for every authenticated role.

    ``load()`` fetches the employee dashboard, the organization's holiday
    calendar, the profile and today's attendance concurrently; each part
    fails on its own without blocking the others.
    """

    def __init__(
        self,
        dashboard_api: DashboardApi,
        attendance_api: AttendanceApi,
        employee_api: EmployeeApi,
        upload_api: UploadApi,
        session: SessionService,
        notifier: Notifier,
        geolocator: Geolocator,
        *,
        state: Optional[dict[str, Any]] = None,
        today: Optional[date] = None,
    ) -> None:
        self.dashboard_api = dashboard_api
        self.attendance_api = attendance_api
        self.employee_api = employee_api
        self.upload_api = upload_api
        self.session = session
        self.notifier = notifier
        self.geolocator = geolocator
        self.state = dict(state or {})
        self.today = today or date.today()

        self.dashboard: Optional[EmployeeDashboard] = None
        self.dashboard_error = ""
        self.stats: Optional[dict[str, Any]] = None
        self.calendar: Optional[HolidayCalendar] = None
        self.calendar_loading = False
        self.profile: Optional[EmployeeProfile] = None
        self.attendance_today: Optional[AttendanceRecord] = None
        self.clocking_in = False
        self.clocking_out = False

    # ── Clock state ─────────────────────────────────────────────────

    @property
    def busy(self) -> bool:
        return self.clocking_in or self.clocking_out

    @property
    def can_clock_in(self) -> bool:
        record = self.attendance_today
        return not self.busy and not (record is not None and record.has_clocked_in)

    @property
    def can_clock_out(self) -> bool:
        record = self.attendance_today
        return (
            not self.busy
            and record is not None
            and record.has_clocked_in
            and not record.has_clocked_out
        )

    # ── Load ────────────────────────────────────────────────────────

    async def load(self) -> bool:
        if self.state.get("accessDenied") and self.state.get("from"):
            self.notifier.toast(
                "Access denied",
                f"You don't have access to {self.state['from']}. Redirected to dashboard.",
                variant="destructive",
            )
        await asyncio.gather(
            self._load_dashboard(),
            self._load_calendar(),
            self._load_profile(),
            self._load_today(),
            self._load_stats(),
        )
        return not self.dashboard_error

    async def _load_dashboard(self) -> None:
        employee_id = self.session.employee_id
        if not employee_id:
            return
        try:
            payload = await self.dashboard_api.for_employee(employee_id)
        except ApiError:
            self.dashboard_error = "Failed to load dashboard"
            return
        self.dashboard = EmployeeDashboard.model_validate(unwrap(payload))
        self.dashboard_error = ""

    async def _load_calendar(self) -> None:
        user = self.session.user
        organization_id = user.organization_id if user is not None else None
        if not organization_id:
            logger.warning("Missing organizationId for holiday calendar")
            return
        self.calendar_loading = True
        try:
            payload = await self.dashboard_api.holiday_calendar(organization_id)
        except ApiError as exc:
            logger.error("Error fetching holiday calendar: %r", exc)
            self.calendar = None
            return
        finally:
            self.calendar_loading = False
        data = payload.get("data") if isinstance(payload, dict) else None
        self.calendar = HolidayCalendar.model_validate(data) if isinstance(data, dict) else None

    async def _load_profile(self) -> None:
        employee_id = self.session.employee_id
        if not employee_id:
            return
        try:
            payload = await self.employee_api.get(employee_id)
        except ApiError:
            self.profile = None
            return
        self.profile = EmployeeProfile.model_validate(unwrap(payload))

    async def _load_today(self) -> None:
        employee_id = self.session.employee_id
        if not employee_id:
            return
        try:
            payload = await self.attendance_api.list(
                page=1,
                limit=1,
                start_date=self.today,
                end_date=self.today,
                employee_id=employee_id,
            )
        except ApiError:
            self.attendance_today = None
            return
        items = payload.get("items") if isinstance(payload, dict) else None
        first = items[0] if isinstance(items, list) and items else None
        self.attendance_today = AttendanceRecord.model_validate(first) if isinstance(first, dict) else None

    async def _load_stats(self) -> None:
        if not is_authorized(self.session.role, STATS_ROLES):
            return
        try:
            payload = await self.dashboard_api.stats()
        except ApiError as exc:
            logger.error("Error fetching dashboard stats: %r", exc)
            return
        self.stats = unwrap(payload) if isinstance(payload, dict) else None

    # ── Actions ─────────────────────────────────────────────────────

    async def clock_in(self) -> bool:
        employee_id = self.session.employee_id
        if not employee_id or not self.can_clock_in:
            return False
        self.clocking_in = True
        try:
            position = await self.geolocator.locate()
            response = await self.attendance_api.clock_in(
                employee_id,
                latitude=position.latitude,
                longitude=position.longitude,
            )
        except ApiError as exc:
            self.notifier.toast(
                "Clock in failed",
                error_message(exc, "Please try again."),
                variant="destructive",
            )
            return False
        finally:
            self.clocking_in = False
        self._record_clock(response)
        self.notifier.toast("Clock in recorded", _message(response) or "You have clocked in.")
        return True

    async def clock_out(self) -> bool:
        employee_id = self.session.employee_id
        if not employee_id or not self.can_clock_out:
            return False
        self.clocking_out = True
        try:
            position = await self.geolocator.locate()
            response = await self.attendance_api.clock_out(
                employee_id,
                latitude=position.latitude,
                longitude=position.longitude,
            )
        except ApiError as exc:
            self.notifier.toast(
                "Clock out failed",
                error_message(exc, "Please try again."),
                variant="destructive",
            )
            return False
        finally:
            self.clocking_out = False
        self._record_clock(response)
        self.notifier.toast("Clock out recorded", _message(response) or "You have clocked out.")
        return True

    async def upload_holiday_calendar(
        self,
        file: Union[Path, str, bytes],
        filename: Optional[str] = None,
    ) -> bool:
        user = self.session.user
        organization_id = user.organization_id if user is not None else None
        if not organization_id:
            logger.warning("No organizationId; holiday calendar not uploaded")
            return False
        self.calendar_loading = True
        try:
            url = await self.upload_api.upload(file, filename)
            await self.dashboard_api.save_holiday_calendar(organization_id, url)
        except (ApiError, UploadError, OSError) as exc:
            logger.error("Calendar upload error: %r", exc)
            self.notifier.alert(f"Upload failed: {exc}")
            return False
        finally:
            self.calendar_loading = False
        current = self.calendar.model_dump(by_alias=True) if self.calendar else {}
        current.update(calendarFile=url, calendarFileName=url)
        self.calendar = HolidayCalendar.model_validate(current)
        return True

    # ── Internal ────────────────────────────────────────────────────

    def _record_clock(self, response: Any) -> None:
        """Replace today's record with the one the backend returned, if any."""
        record = response.get("attendance") if isinstance(response, dict) else None
        if isinstance(record, dict):
            self.attendance_today = AttendanceRecord.model_validate(record)


def _message(response: Any) -> Optional[str]:
    return response.get("message") if isinstance(response, dict) else None

