"""Employee endpoints (served under ``/auth/employees``)."""

from __future__ import annotations

from typing import Any, Optional

from hrms_client.common.http import ResourceApi


class EmployeeApi(ResourceApi):

    async def list(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            "/auth/employees",
            params={"page": page, "limit": limit, "search": search},
            action="fetching employees",
        )

    async def get(self, employee_id: str) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/auth/employees/{employee_id}",
            action="fetching employee",
        )

    async def update(self, employee_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"/auth/employees/{employee_id}",
            json=payload,
            action="updating employee",
        )
