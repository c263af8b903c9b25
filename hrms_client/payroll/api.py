"""Payroll endpoints — lists, per-employee detail, edits, payslips."""

from __future__ import annotations

from typing import Any, Optional

from hrms_client.common.http import Download, ResourceApi


class PayrollApi(ResourceApi):
    """Async wrapper around ``/payroll``."""

    # ── Reads ───────────────────────────────────────────────────────

    async def list(
        self,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Any:
        return await self._request(
            "GET",
            "/payroll",
            params={"page": page, "limit": limit, "month": month, "year": year, "search": search},
            action="fetching payroll",
        )

    async def list_for_employee(
        self,
        employee_id: str,
        *,
        skip: Optional[int] = None,
        limit: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Any:
        return await self._request(
            "GET",
            f"/payroll/employee/{employee_id}/list",
            params={"skip": skip, "limit": limit, "month": month, "year": year},
            action="fetching employee payroll list",
        )

    async def get_for_employee(self, employee_id: str, *, month: int, year: int) -> Any:
        return await self._request(
            "GET",
            f"/payroll/employee/{employee_id}",
            params={"month": month, "year": year},
            action="fetching payroll details",
        )

    # ── Writes ──────────────────────────────────────────────────────

    async def create(self, *, employee_id: str, month: int, year: int) -> Any:
        return await self._request(
            "POST",
            "/payroll",
            json={"employeeId": employee_id, "month": month, "year": year},
            action="creating payroll",
        )

    async def update(
        self,
        payroll_id: str,
        payload: dict[str, Any],
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Any:
        return await self._request(
            "PUT",
            f"/payroll/{payroll_id}",
            params={"month": month, "year": year},
            json=payload,
            action="updating payroll",
        )

    async def delete(self, payroll_id: str) -> Any:
        return await self._request("DELETE", f"/payroll/{payroll_id}", action="deleting payroll")

    async def send_payslip(self, employee_id: str, *, month: int, year: int) -> Any:
        return await self._request(
            "POST",
            f"/payroll/send-payslip/{employee_id}",
            json={"month": month, "year": year},
            action="sending payslip",
        )

    async def download(self, employee_id: str, *, month: int, year: int) -> Download:
        return await self._download(
            f"/payroll/download/{employee_id}",
            params={"month": month, "year": year},
            action="downloading payroll",
        )
