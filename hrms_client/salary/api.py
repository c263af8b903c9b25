"""Salary structure endpoints (``/salary-structures``)."""

from __future__ import annotations

from typing import Any, Optional

from hrms_client.common.http import ResourceApi


class SalaryStructureApi(ResourceApi):

    async def list(
        self,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
    ) -> Any:
        return await self._request(
            "GET",
            "/salary-structures",
            params={"page": page, "limit": limit, "search": search},
            action="fetching salary structures",
        )

    async def get_for_employee(self, employee_id: str) -> Any:
        return await self._request(
            "GET",
            f"/salary-structures/employee/{employee_id}",
            action="fetching salary structure",
        )

    async def create(self, payload: dict[str, Any]) -> Any:
        return await self._request(
            "POST",
            "/salary-structures",
            json=payload,
            action="creating salary structure",
        )

    async def update(self, structure_id: str, payload: dict[str, Any]) -> Any:
        return await self._request(
            "PUT",
            f"/salary-structures/{structure_id}",
            json=payload,
            action="updating salary structure",
        )

    async def delete(self, structure_id: str) -> Any:
        return await self._request(
            "DELETE",
            f"/salary-structures/{structure_id}",
            action="deleting salary structure",
        )
