"""Dashboard and holiday-calendar endpoints."""

from __future__ import annotations

from typing import Any

from hrms_client.common.http import ResourceApi


class DashboardApi(ResourceApi):

    async def stats(self) -> Any:
        return await self._request("GET", "/dashboard", action="fetching dashboard stats")

    async def for_employee(self, employee_id: str) -> Any:
        return await self._request(
            "GET",
            f"/dashboard/employee/{employee_id}",
            action="fetching employee dashboard",
        )

    async def holiday_calendar(self, organization_id: str) -> Any:
        return await self._request(
            "GET",
            f"/holiday-calendar/{organization_id}",
            action="fetching holiday calendar",
        )

    async def save_holiday_calendar(self, organization_id: str, url: str) -> Any:
        """Store *url* (an uploaded image) as the organization's calendar."""
        return await self._request(
            "POST",
            f"/holiday-calendar/{organization_id}",
            json={"calendarFile": url, "calendarFileName": url},
            action="saving holiday calendar",
        )
