"""Leave page controllers — apply, track, balance and policy views.

Role gating happens in the router; these controllers only decide *what* to
show for the role they are opened with (e.g. employee vs admin balance).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import pydantic

from hrms_client.auth.policy import is_authorized
from hrms_client.auth.session import SessionService
from hrms_client.common.constants import (
    ADMIN_ROLES,
    DEFAULT_PAGE_SIZE,
    TRACK_LEAVE_PATH,
    LeaveStatus,
)
from hrms_client.common.exceptions import ApiError, UploadError, error_message
from hrms_client.common.list_state import ListController
from hrms_client.common.notifications import Notifier
from hrms_client.common.pagination import Page, to_page
from hrms_client.leave.api import LeaveApi
from hrms_client.leave.schemas import (
    TRACKABLE_LEAVE_TYPES,
    BalanceRow,
    LeaveBalanceHistoryItem,
    LeavePolicy,
    LeaveRequest,
    LeaveRequestCreate,
    LeaveTypeItem,
    balance_rows,
    inclusive_days,
    leave_type_items,
    leave_type_names,
    parse_balances,
    parse_policies,
)
from hrms_client.router import Navigator
from hrms_client.uploads.api import UploadApi

logger = logging.getLogger(__name__)

UploadSource = Union[Path, str, bytes]


async def _load_policies(api: LeaveApi) -> list[LeavePolicy]:
    """Policies for leave-type pickers; failures leave the picker empty."""
    try:
        return parse_policies(await api.list_policies())
    except ApiError as exc:
        logger.error("Failed to load leave policies: %r", exc)
        return []


# ═════════════════════════════════════════════════════════════════════
# Apply
# ═════════════════════════════════════════════════════════════════════


class ApplyLeavePage:
    """Leave application form with document attachments."""

    def __init__(
        self,
        leave_api: LeaveApi,
        upload_api: UploadApi,
        session: SessionService,
        notifier: Notifier,
        navigator: Optional[Navigator] = None,
        *,
        max_documents: int = 5,
    ) -> None:
        self.leave_api = leave_api
        self.upload_api = upload_api
        self.session = session
        self.notifier = notifier
        self.navigator = navigator
        self.max_documents = max_documents

        self.policies: list[LeavePolicy] = []
        self.leave_type: Optional[LeaveTypeItem] = None
        self.start_date: Optional[date] = None
        self.end_date: Optional[date] = None
        self.reason = ""
        self.document_urls: list[str] = []
        self.uploading = False
        self.submitting = False
        self.submitted = False
        self._days_override: Optional[float] = None

    # ── Derived ─────────────────────────────────────────────────────

    @property
    def leave_types(self) -> list[LeaveTypeItem]:
        return leave_type_items(self.policies)

    @property
    def days(self) -> float:
        if self._days_override is not None:
            return self._days_override
        return inclusive_days(self.start_date, self.end_date)

    @property
    def document_url(self) -> Optional[str]:
        return self.document_urls[0] if self.document_urls else None

    # ── Form ────────────────────────────────────────────────────────

    async def load(self) -> bool:
        self.policies = await _load_policies(self.leave_api)
        return True

    def select_leave_type(self, item_id: str) -> bool:
        for item in self.leave_types:
            if item.id == item_id or item.type.lower() == item_id.lower():
                self.leave_type = item
                return True
        return False

    def set_dates(self, start: Optional[date], end: Optional[date]) -> None:
        self.start_date = start
        self.end_date = end

    def set_days(self, days: Optional[float]) -> None:
        """Override the computed day count (``None`` goes back to computing it)."""
        self._days_override = days

    async def attach(self, files: Sequence[UploadSource]) -> list[str]:
        """Upload *files* (up to the free slots) and attach their URLs.

        A failed upload attaches nothing from this batch.
        """
        files = list(files)
        if not files:
            return []
        slots = max(0, self.max_documents - len(self.document_urls))
        batch = files[:slots]
        if not batch:
            self.notifier.alert(f"You can upload up to {self.max_documents} images.")
            return []

        self.uploading = True
        uploaded: list[str] = []
        try:
            for source in batch:
                uploaded.append(await self.upload_api.upload(source))
        except (ApiError, UploadError, OSError) as exc:
            logger.error("File upload failed: %r", exc)
            self.notifier.alert("File upload failed")
            return []
        finally:
            self.uploading = False

        self.document_urls = (self.document_urls + uploaded)[: self.max_documents]
        return uploaded

    def remove_document(self, index: int) -> None:
        if 0 <= index < len(self.document_urls):
            del self.document_urls[index]

    async def submit(self) -> bool:
        employee_id = self.session.employee_id
        if not employee_id or not self.start_date or not self.end_date or self.leave_type is None:
            self.notifier.alert("Please complete all fields")
            return False
        try:
            request = LeaveRequestCreate(
                employee_id=employee_id,
                leave_policy_id=self.leave_type.policy_id,
                leave_type_id=self.leave_type.id,
                leave_type=self.leave_type.type,
                start_date=self.start_date,
                end_date=self.end_date,
                days=self.days,
                reason=self.reason,
                document_urls=self.document_urls,
            )
        except pydantic.ValidationError as exc:
            logger.info("Rejected leave form: %s", exc)
            self.notifier.alert("Please complete all fields")
            return False

        self.submitting = True
        try:
            await self.leave_api.create_request(request.to_payload())
        except ApiError as exc:
            self.notifier.alert(error_message(exc, "Submit failed"))
            return False
        finally:
            self.submitting = False

        self.submitted = True
        self.notifier.toast("Leave applied", "Your leave request has been submitted")
        if self.navigator is not None:
            self.navigator.navigate(TRACK_LEAVE_PATH)
        return True


# ═════════════════════════════════════════════════════════════════════
# Track
# ═════════════════════════════════════════════════════════════════════


STATUS_OPTIONS: tuple[tuple[str, str], ...] = (
    ("Applied", LeaveStatus.applied.value),
    ("Approved", LeaveStatus.approved.value),
    ("Rejected", LeaveStatus.rejected.value),
    ("Cancelled", LeaveStatus.cancelled.value),
)


class TrackLeavePage:
    """The signed-in user's leave requests, filterable, with cancellation."""

    empty_message = "No leave requests found"
    status_options = STATUS_OPTIONS

    def __init__(
        self,
        leave_api: LeaveApi,
        session: SessionService,
        notifier: Notifier,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.leave_api = leave_api
        self.session = session
        self.notifier = notifier
        self.policies: list[LeavePolicy] = []
        self.cancelling: Optional[str] = None
        self.listing: ListController[LeaveRequest] = ListController(
            self._fetch,
            error_message="Failed to load leave requests",
            limit=page_size,
            filters={"status": None, "leave_type": None},
        )

    @property
    def requests(self) -> list[LeaveRequest]:
        return self.listing.items

    @property
    def leave_types(self) -> list[str]:
        return leave_type_names(self.policies, TRACKABLE_LEAVE_TYPES)

    @staticmethod
    def can_cancel(item: LeaveRequest) -> bool:
        return item.can_cancel

    async def load(self) -> bool:
        loaded, self.policies = await asyncio.gather(
            self.listing.reload(),
            _load_policies(self.leave_api),
        )
        return loaded

    async def set_status(self, status: Optional[str]) -> bool:
        return await self.listing.set_filters(status=status or None)

    async def set_leave_type(self, leave_type: Optional[str]) -> bool:
        return await self.listing.set_filters(leave_type=(leave_type or "").lower() or None)

    async def cancel(self, leave_id: str) -> bool:
        """Cancel *leave_id*, refresh the current page and report the outcome."""
        item = next((r for r in self.requests if r.id == leave_id), None)
        if item is not None and not item.can_cancel:
            self.notifier.toast(
                "Cancel failed",
                f"A {item.status} request can no longer be cancelled",
                variant="destructive",
            )
            return False

        self.cancelling = leave_id
        try:
            response = await self.leave_api.cancel_request(leave_id)
        except ApiError as exc:
            self.notifier.toast(
                "Cancel failed",
                error_message(exc, "Could not cancel the request"),
                variant="destructive",
            )
            return False
        finally:
            self.cancelling = None

        await self.listing.reload()
        message = response.get("message") if isinstance(response, dict) else None
        self.notifier.toast("Cancelled", message or "Request cancelled successfully")
        return True

    async def _fetch(self, filters: dict[str, Any], page: int, limit: int) -> Page[LeaveRequest]:
        employee_id = self.session.employee_id
        if not employee_id:
            raise ValueError("Missing employeeId")
        leave_type = filters.get("leave_type")
        payload = await self.leave_api.list_requests(
            page=page,
            limit=limit,
            status=filters.get("status"),
            employee_ids=[employee_id],
            leave_type=leave_type,
        )
        result = to_page(payload, LeaveRequest.model_validate, page=page, limit=limit)
        if result is None:
            raise ValueError("Unexpected leave list response shape")
        if leave_type:
            # the backend may ignore leaveType; narrow the page client-side
            result.items = [r for r in result.items if (r.leave_type or "").lower() == leave_type]
        return result


# ═════════════════════════════════════════════════════════════════════
# Balance
# ═════════════════════════════════════════════════════════════════════


class LeaveBalancePage:
    """Leave balance of the signed-in user.

    Employees get one row per leave type in fixed order. Admins get a
    leave-type filter (``all`` by default) and the per-type history cards.
    """

    empty_message = "No leave balance found"

    def __init__(self, leave_api: LeaveApi, session: SessionService, notifier: Notifier) -> None:
        self.leave_api = leave_api
        self.session = session
        self.notifier = notifier
        self.leave_type = "all"
        self.policies: list[LeavePolicy] = []
        self.items: list[LeaveBalanceHistoryItem] = []
        self.loading = False
        self.error: Optional[str] = None

    @property
    def is_admin_view(self) -> bool:
        return is_authorized(self.session.role, ADMIN_ROLES)

    @property
    def rows(self) -> list[BalanceRow]:
        return balance_rows(self.items)

    @property
    def leave_types(self) -> list[str]:
        return leave_type_names(self.policies)

    @property
    def employee_name(self) -> str:
        embedded = self.items[0].employee_id if self.items else None
        if isinstance(embedded, dict):
            name = f"{embedded.get('firstName') or ''} {embedded.get('lastName') or ''}".strip()
            if name:
                return name
        user = self.session.user
        return user.display_name if user is not None else "Employee"

    async def load(self) -> bool:
        if self.is_admin_view:
            loaded, self.policies = await asyncio.gather(
                self._fetch_balance(),
                _load_policies(self.leave_api),
            )
            return loaded
        return await self._fetch_balance()

    async def set_leave_type(self, leave_type: Optional[str]) -> bool:
        self.leave_type = (leave_type or "all").lower()
        return await self._fetch_balance()

    async def _fetch_balance(self) -> bool:
        employee_id = self.session.employee_id
        if not employee_id:
            self.error = "Missing employee id"
            return False
        leave_type = self.leave_type if self.is_admin_view else None
        self.loading = True
        try:
            payload = await self.leave_api.balance_history(employee_id, leave_type)
        except ApiError as exc:
            logger.error("Failed to fetch leave balance: %r", exc)
            self.items = []
            self.error = "Failed to fetch leave balance"
            return False
        finally:
            self.loading = False
        self.items = parse_balances(payload)
        self.error = None
        return True


# ═════════════════════════════════════════════════════════════════════
# Policy
# ═════════════════════════════════════════════════════════════════════


class LeavePolicyPage:
    """Leave policies of the organization and their allocations."""

    empty_message = "No leave policies configured"

    def __init__(self, leave_api: LeaveApi, notifier: Notifier) -> None:
        self.leave_api = leave_api
        self.notifier = notifier
        self.policies: list[LeavePolicy] = []
        self.error: Optional[str] = None

    async def load(self) -> bool:
        try:
            payload = await self.leave_api.list_policies()
        except ApiError as exc:
            logger.error("Failed to load leave policies: %r", exc)
            self.policies = []
            self.error = "Failed to load leave policies"
            return False
        self.policies = parse_policies(payload)
        self.error = None
        return True

    def allocations(self) -> list[tuple[str, str, Optional[float]]]:
        """``(policy name, leave type label, allocation)`` rows."""
        return [
            (policy.name or "-", leave_type.label, leave_type.allocation)
            for policy in self.policies
            for leave_type in policy.leave_types
        ]
