"""Salary structure test suite — derived totals, create form auto-gross,
admin-only writes.
"""

from __future__ import annotations

import random

import pytest

from hrms_client.common.models import EmployeeBrief
from hrms_client.salary.schemas import SalaryStructure, SalaryStructureForm, numeric_update
from tests.fake_backend import BackendState, object_id


def _seed_structure(state: BackendState, employee_id: str, **fields) -> dict:
    structure = {
        "_id": object_id(),
        "employeeId": employee_id,
        "ctc": 720000,
        "gross": 60000,
        "basic": 30000,
        "hra": 15000,
        "conveyance": 1600,
        "specialAllowance": 13400,
        "pf": 1800,
        "esi": 0,
        "tds": 3000,
        "professionalTax": 200,
        "otherDeductions": 0,
        **fields,
    }
    state.salary[employee_id] = structure
    return structure


# ═════════════════════════════════════════════════════════════════════
# Derived totals
# ═════════════════════════════════════════════════════════════════════


class TestSalaryTotals:

    def test_net_is_gross_minus_deductions(self):
        rng = random.Random(20240110)
        for _ in range(200):
            values = {
                key: round(rng.uniform(0, 100000), 2)
                for key in ("gross", "pf", "esi", "tds", "professionalTax", "otherDeductions")
            }
            structure = SalaryStructure.model_validate(values)
            expected = values["gross"] - sum(values[k] for k in ("pf", "esi", "tds", "professionalTax", "otherDeductions"))
            assert structure.net_pay == pytest.approx(expected)

    def test_net_may_go_negative(self):
        structure = SalaryStructure.model_validate({"gross": 1000, "tds": 1500})
        assert structure.net_pay == -500

    def test_string_and_blank_numbers(self):
        structure = SalaryStructure.model_validate({"gross": "50000", "pf": "", "tds": None, "hra": "n/a"})
        assert structure.gross == 50000
        assert structure.total_deductions == 0
        assert structure.hra == 0

    def test_total_earnings(self):
        structure = SalaryStructure.model_validate({"basic": 100, "hra": 50, "conveyance": 10, "specialAllowance": 5})
        assert structure.total_earnings == 165

    def test_numeric_update(self):
        assert numeric_update({"gross": "1200.0", "pf": "", "tds": "x", "hra": 7.5}) == {"gross": 1200, "hra": 7.5}


class TestCreateForm:

    def test_gross_follows_earnings(self):
        form = SalaryStructureForm()
        assert form.values["gross"] == 0

        form.set("basic", "30000")
        form.set("hra", 15000)
        form.set("pf", 1800)

        assert form.values["gross"] == 45000

    def test_manual_gross_sticks(self):
        form = SalaryStructureForm()
        form.set("basic", 100)
        form.set("gross", 500)
        form.set("hra", 50)
        assert form.values["gross"] == 500

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            SalaryStructureForm().set("bonus", 1)

    def test_select_employee_label(self):
        form = SalaryStructureForm()
        form.select_employee(EmployeeBrief(id="e1", name="Jane Doe", employee_code="EMP-001"))
        assert form.employee_id == "e1"
        assert form.employee_label == "Jane Doe (EMP-001)"

    def test_payload_numbers(self):
        form = SalaryStructureForm()
        form.employee_id = "e1"
        form.set("basic", "1000.5")
        payload = form.to_payload()
        assert payload["employeeId"] == "e1"
        assert payload["basic"] == 1000.5
        assert payload["gross"] == 1000.5
        assert payload["tds"] == 0


# ═════════════════════════════════════════════════════════════════════
# Page
# ═════════════════════════════════════════════════════════════════════


class TestSalaryPage:

    async def test_employee_sees_own_structure(self, employee_app, backend_state, employee):
        _seed_structure(backend_state, employee["_id"])

        page = await employee_app.open("/salary-slips")

        assert page.employee_id == employee["_id"]
        assert page.monthly_gross == 60000
        assert page.total_deductions == 5000
        assert page.net_pay == 55000
        assert not page.can_manage

    async def test_missing_structure(self, employee_app):
        page = await employee_app.open("/salary-slips")
        assert page.structure is None
        assert page.error == "Salary structure not found"
        assert page.net_pay == 0

    async def test_employee_writes_refused(self, employee_app, backend_state, employee):
        _seed_structure(backend_state, employee["_id"])
        page = await employee_app.open("/salary-slips")
        page.open_edit()
        page.update_field("tds", 0)

        assert not await page.save_edit()
        assert not await page.delete()
        assert not await page.create()
        assert employee_app.notifier.last.title == "Access denied"
        assert not backend_state.requests_to(f"/api/salary-structures/{backend_state.salary[employee['_id']]['_id']}")

    async def test_admin_edit(self, hr_app, backend_state, employee):
        structure = _seed_structure(backend_state, employee["_id"])
        page = await hr_app.open("/salary-slips", query={"employeeId": employee["_id"]})

        form = page.open_edit()
        assert form["specialAllowance"] == 13400
        page.update_field("tds", "4000")
        page.update_field("esi", "")

        assert await page.save_edit()

        body = backend_state.requests_to(f"/api/salary-structures/{structure['_id']}", "PUT")[-1].body
        assert body["tds"] == 4000
        assert "esi" not in body
        assert page.net_pay == 60000 - (1800 + 4000 + 200)
        assert hr_app.notifier.last.title == "Success"

    async def test_update_field_validation(self, hr_app, backend_state, employee):
        _seed_structure(backend_state, employee["_id"])
        page = await hr_app.open(f"/salary-slips?employeeId={employee['_id']}")

        with pytest.raises(RuntimeError):
            page.update_field("tds", 1)
        page.open_edit()
        with pytest.raises(KeyError):
            page.update_field("bonus", 1)

    async def test_admin_create_from_search(self, hr_app, backend_state, employee):
        page = await hr_app.open("/salary-slips")

        matches = await page.search_employees("jane")
        assert [m.id for m in matches] == [employee["_id"]]

        form = page.start_create()
        form.select_employee(matches[0])
        form.set("basic", 20000)
        form.set("hra", 8000)
        form.set("pf", 1800)

        assert await page.create()

        created = backend_state.salary[employee["_id"]]
        assert created["gross"] == 28000
        assert created["pf"] == 1800
        assert page.create_form.employee_id == ""

    async def test_create_requires_employee(self, hr_app, backend_state):
        page = await hr_app.open("/salary-slips")
        page.start_create()

        assert not await page.create()
        assert page.error == "Please select an employee"
        assert not backend_state.requests_to("/api/salary-structures", "POST")

    async def test_admin_delete(self, hr_app, backend_state, employee):
        _seed_structure(backend_state, employee["_id"])
        page = await hr_app.open("/salary-slips", query={"employeeId": employee["_id"]})

        assert await page.delete()

        assert page.structure is None
        assert employee["_id"] not in backend_state.salary
