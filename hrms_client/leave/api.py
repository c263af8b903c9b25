"""Leave endpoints — requests, cancellation, balance history, policies."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from hrms_client.common.http import ResourceApi


class LeaveApi(ResourceApi):
    """Async wrapper around ``/leaves`` and ``/leave-policies``."""

    async def list_requests(
        self,
        *,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[str] = None,
        employee_ids: Optional[Sequence[str]] = None,
        leave_type: Optional[str] = None,
    ) -> Any:
        return await self._request(
            "GET",
            "/leaves",
            params={
                "page": page,
                "limit": limit,
                "status": status,
                "employeeIds": list(employee_ids) if employee_ids else None,
                "leaveType": leave_type,
            },
            action="fetching leave requests",
        )

    async def create_request(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "/leaves", json=payload, action="creating leave request")

    async def cancel_request(self, leave_id: str) -> Any:
        return await self._request(
            "PATCH",
            f"/leaves/{leave_id}/cancel",
            action="cancelling leave request",
        )

    async def balance_history(self, employee_id: str, leave_type: Optional[str] = None) -> Any:
        """``leaveType`` is left out of the query for ``None`` and ``"all"``."""
        if leave_type and leave_type.lower() == "all":
            leave_type = None
        return await self._request(
            "GET",
            f"/leaves/balance/{employee_id}/history",
            params={"leaveType": leave_type},
            action="fetching leave balance history",
        )

    async def list_policies(self) -> Any:
        return await self._request("GET", "/leave-policies", action="fetching leave policies")
