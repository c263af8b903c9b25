"""Payroll page controller — monthly pay records of one employee.

The employee comes from the ``employeeId`` query parameter, else the
signed-in user. Listing uses ``skip``-based pages of ``page_size``.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from hrms_client.auth.policy import is_authorized
from hrms_client.auth.session import SessionService
from hrms_client.common.constants import ADMIN_ROLES, DEFAULT_PAGE_SIZE
from hrms_client.common.downloads import save_download
from hrms_client.common.exceptions import ApiError, error_message
from hrms_client.common.list_state import ListController
from hrms_client.common.models import EmployeeBrief, unwrap
from hrms_client.common.notifications import Notifier
from hrms_client.common.pagination import Page, to_page
from hrms_client.employees.api import EmployeeApi
from hrms_client.employees.pages import search_employees
from hrms_client.payroll.api import PayrollApi
from hrms_client.payroll.schemas import PayrollRecord, edit_form, net_payable, update_payload

logger = logging.getLogger(__name__)


class PayrollPage:
    empty_message = "No payroll records found"

    def __init__(
        self,
        api: PayrollApi,
        employees: EmployeeApi,
        session: SessionService,
        notifier: Notifier,
        *,
        download_dir: Path,
        employee_id: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        today: Optional[date] = None,
    ) -> None:
        self.api = api
        self.employees = employees
        self.session = session
        self.notifier = notifier
        self.download_dir = Path(download_dir)
        self.query_employee_id = (employee_id or "").strip() or None
        self.today = today or date.today()

        self.detail: Optional[PayrollRecord] = None
        self.edit_id: Optional[str] = None
        self.edit_form: Optional[dict[str, Any]] = None
        self.sending_id: Optional[str] = None
        self.listing: ListController[PayrollRecord] = ListController(
            self._fetch,
            error_message="Failed to load payroll",
            limit=page_size,
            filters={"month": None, "year": None},
        )

    # ── State ───────────────────────────────────────────────────────

    @property
    def employee_id(self) -> Optional[str]:
        return self.query_employee_id or self.session.employee_id

    @property
    def records(self) -> list[PayrollRecord]:
        return self.listing.items

    @property
    def error(self) -> Optional[str]:
        return self.listing.error

    @property
    def employee(self) -> Optional[EmployeeBrief]:
        return self.records[0].employee if self.records else None

    @property
    def can_manage(self) -> bool:
        """Create, edit and delete are admin actions."""
        return is_authorized(self.session.role, ADMIN_ROLES)

    @staticmethod
    def net_payable(record: PayrollRecord) -> float:
        return net_payable(record)

    # ── Filters ─────────────────────────────────────────────────────

    async def load(self) -> bool:
        return await self.listing.reload()

    async def set_period(self, month: Optional[int] = None, year: Optional[int] = None) -> bool:
        if month is not None and not 1 <= month <= 12:
            raise ValueError(f"month must be 1-12, got {month}")
        return await self.listing.set_filters(month=month, year=year)

    async def clear_filters(self) -> bool:
        return await self.listing.reset({"month": None, "year": None})

    # ── Record actions ──────────────────────────────────────────────

    async def view(self, record: PayrollRecord) -> Optional[PayrollRecord]:
        detail = await self._load_detail(record, "Failed to load payroll details")
        self.detail = detail
        return detail

    async def open_edit(self, record: PayrollRecord) -> Optional[dict[str, Any]]:
        detail = await self._load_detail(record, "Failed to load payroll for edit")
        if detail is None:
            return None
        self.edit_id = detail.id or record.id
        self.edit_form = edit_form(detail)
        return self.edit_form

    async def save_edit(self) -> bool:
        if not self._check_manage():
            return False
        if not self.edit_id or self.edit_form is None:
            self.notifier.toast("Error", "Missing payroll id", variant="destructive")
            return False
        month = self.listing.filters.get("month") or self.edit_form.get("month")
        year = self.listing.filters.get("year") or self.edit_form.get("year")
        payload = update_payload(self.edit_form, month=month, year=year)
        try:
            response = await self.api.update(self.edit_id, payload, month=month, year=year)
        except ApiError as exc:
            self.notifier.toast(
                "Error",
                error_message(exc, "Failed to update payroll"),
                variant="destructive",
            )
            return False
        self.notifier.toast("Success", _message(response) or "Payroll updated successfully")
        self.edit_id = None
        self.edit_form = None
        await self.listing.reload()
        return True

    async def search_employees(self, query: str) -> list[EmployeeBrief]:
        return await search_employees(self.employees, query)

    async def create(self, employee_id: Optional[str], month: int, year: int) -> bool:
        if not self._check_manage():
            return False
        if not employee_id:
            self.notifier.toast("Validation Error", "Please select an employee.", variant="destructive")
            return False
        try:
            await self.api.create(employee_id=employee_id, month=month, year=year)
        except ApiError as exc:
            self.notifier.toast(
                "Error",
                error_message(exc, "Failed to create payroll"),
                variant="destructive",
            )
            return False
        self.notifier.toast("Success", "Payroll created successfully.")
        await self.listing.set_page(1)
        return True

    async def delete(self, record: PayrollRecord) -> bool:
        if not self._check_manage():
            return False
        if not record.id:
            self.notifier.toast("Error", "Missing payroll id", variant="destructive")
            return False
        try:
            response = await self.api.delete(record.id)
        except ApiError as exc:
            self.notifier.toast(
                "Error",
                error_message(exc, "Failed to delete payroll"),
                variant="destructive",
            )
            return False
        self.notifier.toast("Deleted", _message(response) or "Payroll deleted successfully")
        await self.listing.reload()
        return True

    async def send_payslip(self, record: PayrollRecord) -> bool:
        employee_id = record.employee_ref or self.employee_id
        month, year = self._period(record)
        self.sending_id = record.id
        try:
            response = await self.api.send_payslip(str(employee_id), month=month, year=year)
        except ApiError as exc:
            self.notifier.toast(
                "Error",
                error_message(exc, "Failed to send payslip"),
                variant="destructive",
            )
            return False
        finally:
            self.sending_id = None
        self.notifier.toast("Payslip Sent", _message(response) or f"Payslip sent for {month}/{year}")
        return True

    async def download(self, record: PayrollRecord) -> Optional[Path]:
        employee_id = record.employee_ref or self.employee_id
        month, year = self._period(record)
        try:
            download = await self.api.download(str(employee_id), month=month, year=year)
        except ApiError as exc:
            self.notifier.toast(
                "Download Failed",
                error_message(exc, "Failed to download payroll"),
                variant="destructive",
            )
            return None
        try:
            path = save_download(download, self.download_dir, f"payroll_{employee_id}_{month}_{year}.pdf")
        except OSError as exc:
            logger.error("Saving payslip failed: %r", exc)
            self.notifier.toast(
                "Download Failed",
                "Could not save the payslip",
                variant="destructive",
            )
            return None
        self.notifier.toast("Download Started", f"Payroll for {month}/{year} is being downloaded")
        return path

    # ── Internal ────────────────────────────────────────────────────

    def _check_manage(self) -> bool:
        if self.can_manage:
            return True
        self.notifier.toast(
            "Access denied",
            "Only HR and admins can change payroll",
            variant="destructive",
        )
        return False

    def _period(self, record: PayrollRecord) -> tuple[int, int]:
        """Month/year for a record action: active filter, else record, else today."""
        filters = self.listing.filters
        month = filters.get("month") or record.month or self.today.month
        year = filters.get("year") or record.year or self.today.year
        return int(month), int(year)

    async def _load_detail(self, record: PayrollRecord, failure: str) -> Optional[PayrollRecord]:
        employee_id = record.employee_ref or self.employee_id
        month = record.month or self.listing.filters.get("month") or self.today.month
        year = record.year or self.listing.filters.get("year") or self.today.year
        try:
            payload = await self.api.get_for_employee(str(employee_id), month=month, year=year)
        except ApiError as exc:
            self.notifier.toast("Error", error_message(exc, failure), variant="destructive")
            return None
        return PayrollRecord.model_validate(unwrap(payload))

    async def _fetch(self, filters: dict[str, Any], page: int, limit: int) -> Page[PayrollRecord]:
        employee_id = self.employee_id
        if not employee_id:
            raise ValueError("Missing employeeId")
        payload = await self.api.list_for_employee(
            employee_id,
            skip=(page - 1) * limit,
            limit=limit,
            month=filters.get("month"),
            year=filters.get("year"),
        )
        if isinstance(payload, list):
            payload = {"data": payload}
        result = to_page(payload, PayrollRecord.model_validate, page=page, limit=limit)
        if result is None:
            raise ValueError("Unexpected payroll list response shape")
        result.page = page
        if "total" not in payload and "totalPages" not in payload:
            # No counters: a full page means there may be another one.
            shown = len(result.items)
            result.total = (page - 1) * limit + shown
            result.total_pages = page + 1 if shown >= limit else page
        return result


def _message(response: Any) -> Optional[str]:
    return response.get("message") if isinstance(response, dict) else None
