"""Salary structure page — one employee's structure, plus admin create/edit/delete."""

from __future__ import annotations

from typing import Any, Optional

from hrms_client.auth.policy import is_authorized
from hrms_client.auth.session import SessionService
from hrms_client.common.constants import ADMIN_ROLES
from hrms_client.common.exceptions import ApiError, error_message
from hrms_client.common.models import EmployeeBrief, unwrap
from hrms_client.common.notifications import Notifier
from hrms_client.employees.api import EmployeeApi
from hrms_client.employees.pages import search_employees
from hrms_client.salary.api import SalaryStructureApi
from hrms_client.salary.schemas import (
    SALARY_NUMERIC_KEYS,
    SalaryStructure,
    SalaryStructureForm,
    numeric_update,
)


class SalaryStructurePage:
    """Structure of the ``employeeId`` query parameter, else of the signed-in user."""

    def __init__(
        self,
        api: SalaryStructureApi,
        employees: EmployeeApi,
        session: SessionService,
        notifier: Notifier,
        *,
        employee_id: Optional[str] = None,
    ) -> None:
        self.api = api
        self.employees = employees
        self.session = session
        self.notifier = notifier
        self.query_employee_id = employee_id

        self.structure: Optional[SalaryStructure] = None
        self.loading = False
        self.error: Optional[str] = None
        self.edit_form: Optional[dict[str, Any]] = None
        self.create_form = SalaryStructureForm()

    # ── State ───────────────────────────────────────────────────────

    @property
    def employee_id(self) -> Optional[str]:
        return self.query_employee_id or self.session.employee_id

    @property
    def monthly_gross(self) -> float:
        return self.structure.gross if self.structure else 0.0

    @property
    def total_deductions(self) -> float:
        return self.structure.total_deductions if self.structure else 0.0

    @property
    def net_pay(self) -> float:
        return self.structure.net_pay if self.structure else 0.0

    @property
    def can_manage(self) -> bool:
        return is_authorized(self.session.role, ADMIN_ROLES)

    # ── Load ────────────────────────────────────────────────────────

    async def load(self) -> bool:
        employee_id = self.employee_id
        if not employee_id:
            self.error = "User ID not found"
            return False
        self.loading = True
        try:
            payload = await self.api.get_for_employee(employee_id)
        except ApiError as exc:
            self.structure = None
            self.error = error_message(exc, "Failed to fetch salary structure")
            return False
        finally:
            self.loading = False
        data = unwrap(payload)
        self.structure = SalaryStructure.model_validate(data) if isinstance(data, dict) and data else None
        self.error = None
        return True

    # ── Edit ────────────────────────────────────────────────────────

    def open_edit(self) -> Optional[dict[str, Any]]:
        if self.structure is None:
            return None
        data = self.structure.model_dump(by_alias=True)
        self.edit_form = {key: data.get(key) for key in SALARY_NUMERIC_KEYS}
        return self.edit_form

    def update_field(self, field: str, value: Any) -> None:
        if self.edit_form is None:
            raise RuntimeError("No salary structure is being edited")
        if field not in SALARY_NUMERIC_KEYS:
            raise KeyError(field)
        self.edit_form[field] = value

    async def save_edit(self) -> bool:
        if not self._check_manage():
            return False
        if self.structure is None or not self.structure.id or self.edit_form is None:
            return False
        try:
            await self.api.update(self.structure.id, numeric_update(self.edit_form))
        except ApiError as exc:
            self._fail(exc, "Failed to update salary structure")
            return False
        self.edit_form = None
        self.notifier.toast("Success", "Salary structure updated")
        await self.load()
        return True

    async def delete(self) -> bool:
        if not self._check_manage():
            return False
        if self.structure is None or not self.structure.id:
            return False
        try:
            await self.api.delete(self.structure.id)
        except ApiError as exc:
            self._fail(exc, "Failed to delete salary structure")
            return False
        self.structure = None
        self.notifier.toast("Deleted", "Salary structure deleted")
        return True

    # ── Create ──────────────────────────────────────────────────────

    def start_create(self) -> SalaryStructureForm:
        self.create_form = SalaryStructureForm()
        return self.create_form

    async def search_employees(self, query: str) -> list[EmployeeBrief]:
        return await search_employees(self.employees, query)

    async def create(self) -> bool:
        if not self._check_manage():
            return False
        if not self.create_form.employee_id:
            self.error = "Please select an employee"
            self.notifier.toast(
                "Validation Error",
                "Please select an employee before creating.",
                variant="destructive",
            )
            return False
        try:
            await self.api.create(self.create_form.to_payload())
        except ApiError as exc:
            self._fail(exc, "Failed to create salary structure")
            return False
        self.create_form = SalaryStructureForm()
        self.error = None
        self.notifier.toast("Success", "Salary structure created")
        return True

    # ── Internal ────────────────────────────────────────────────────

    def _check_manage(self) -> bool:
        if self.can_manage:
            return True
        self.notifier.toast(
            "Access denied",
            "Only HR and admins can change salary structures",
            variant="destructive",
        )
        return False

    def _fail(self, exc: ApiError, default: str) -> None:
        self.error = default
        self.notifier.toast("Error", error_message(exc, default), variant="destructive")
