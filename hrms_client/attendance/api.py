"""Attendance endpoints — list, per-employee list, edit, clock in/out, export."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from hrms_client.attendance.schemas import ClockInRequest, ClockOutRequest, RegularizationRequest
from hrms_client.common.constants import DEFAULT_PAGE_SIZE
from hrms_client.common.http import Download, ResourceApi


class AttendanceApi(ResourceApi):
    """Async wrapper around ``/attendance``."""

    # ── Reads ───────────────────────────────────────────────────────

    async def list(
        self,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[str] = None,
        date: Optional[date] = None,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
    ) -> Any:
        return await self._request(
            "GET",
            "/attendance",
            params={
                "page": page,
                "limit": limit,
                "status": status,
                "date": date,
                "employeeId": employee_id,
                "startDate": start_date,
                "endDate": end_date,
                "search": search,
            },
            action="fetching attendance",
        )

    async def list_for_employee(
        self,
        employee_id: str,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Any:
        params = {
            "page": page,
            "limit": limit,
            "status": status,
            "startDate": start_date,
            "endDate": end_date,
        }
        if all(value is None for value in params.values()):
            params.update(page=1, limit=DEFAULT_PAGE_SIZE)
        return await self._request(
            "GET",
            f"/attendance/list-by-id/{employee_id}",
            params=params,
            action="fetching employee attendance",
        )

    # ── Writes ──────────────────────────────────────────────────────

    async def update(
        self,
        employee_id: str,
        attendance_id: str,
        *,
        clock_in: str,
        clock_out: str,
        date: str,
    ) -> Any:
        return await self._request(
            "PATCH",
            f"/attendance/{employee_id}/{attendance_id}",
            json={"clockIn": clock_in, "clockOut": clock_out, "date": date},
            action="updating attendance",
        )

    async def clock_in(
        self,
        employee_id: str,
        *,
        latitude: float,
        longitude: float,
        marked_by: str = "user",
    ) -> Any:
        body = ClockInRequest(latitude=latitude, longitude=longitude, marked_by=marked_by)
        return await self._request(
            "POST",
            f"/attendance/clock-in/{employee_id}",
            json=body.model_dump(by_alias=True),
            action="clocking in",
        )

    async def clock_out(self, employee_id: str, *, latitude: float, longitude: float) -> Any:
        body = ClockOutRequest(latitude=latitude, longitude=longitude)
        return await self._request(
            "POST",
            f"/attendance/clock-out/{employee_id}",
            json=body.model_dump(),
            action="clocking out",
        )

    async def download_report(
        self,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
    ) -> Download:
        return await self._download(
            "/attendance/download",
            params={
                "employeeId": employee_id,
                "startDate": start_date,
                "endDate": end_date,
                "status": status,
            },
            action="downloading attendance report",
        )

    # ── Regularization ──────────────────────────────────────────────

    async def submit_regularization(self, request: RegularizationRequest) -> Any:
        return await self._request(
            "POST",
            "/attendance/regularization",
            json=request.to_payload(),
            action="submitting regularization",
        )

    async def list_regularizations(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Any:
        return await self._request(
            "GET",
            "/attendance/regularization",
            params={"employeeId": employee_id, "status": status, "page": page, "limit": limit},
            action="fetching regularizations",
        )
