"""Attendance module test suite — list filters and paging, latest-result-wins,
clock in/out gating, report export, regularization requests.

Runs against the in-memory backend via the shared conftest.py fixtures.
"""

from __future__ import annotations

import asyncio
from datetime import date, timedelta

import pytest

from hrms_client.attendance.pages import AttendancePage, month_bounds
from hrms_client.attendance.schemas import AttendanceRecord, format_time, normalize_attendance
from hrms_client.common.models import EmployeeBrief
from tests.fake_backend import BackendState, object_id

JAN_START = date(2024, 1, 1)
JAN_END = date(2024, 1, 31)


# ═════════════════════════════════════════════════════════════════════
# Helpers
# ═════════════════════════════════════════════════════════════════════


def _seed_attendance(
    state: BackendState,
    employee_id: str,
    day: date,
    *,
    status: str = "present",
    clock_in: str | None = "09:05:00",
    clock_out: str | None = "18:10:00",
) -> dict:
    record = {
        "_id": object_id(),
        "employeeId": employee_id,
        "date": day.isoformat(),
        "status": status,
        "clockIn": f"{day.isoformat()}T{clock_in}" if clock_in else None,
        "clockOut": f"{day.isoformat()}T{clock_out}" if clock_out else None,
        "totalWorkingHours": 9.1 if clock_out else None,
    }
    state.attendance.append(record)
    return record


def _seed_january(state: BackendState, employee_id: str, *, present: int = 23, absent: int = 5) -> None:
    days = [JAN_START + timedelta(days=i) for i in range(present + absent)]
    for i, day in enumerate(days):
        _seed_attendance(state, employee_id, day, status="present" if i < present else "absent")


def _last_list_query(state: BackendState) -> dict:
    return state.requests_to("/api/attendance", "GET")[-1].query


# ═════════════════════════════════════════════════════════════════════
# Attendance list
# ═════════════════════════════════════════════════════════════════════


class TestAttendanceList:

    async def test_defaults_to_current_month(self, employee_app, backend_state, employee):
        page = await employee_app.open("/attendance")

        start, end = month_bounds(date.today())
        query = _last_list_query(backend_state)
        assert query["startDate"] == start.isoformat()
        assert query["endDate"] == end.isoformat()
        assert query["employeeId"] == employee["_id"]
        assert query["page"] == "1"
        assert query["limit"] == "10"
        assert "status" not in query
        assert page.listing.is_empty
        assert page.empty_message == "No attendance records found"

    async def test_status_filter_and_total_pages(self, employee_app, backend_state, employee):
        _seed_january(backend_state, employee["_id"])
        page = await employee_app.open("/attendance")

        await page.listing.set_filters(status="present", start_date=JAN_START, end_date=JAN_END)

        assert len(page.records) == 10
        assert all(r.status == "present" for r in page.records)
        assert page.listing.total == 23
        assert page.listing.total_pages == 3
        query = _last_list_query(backend_state)
        assert query["status"] == "present"
        assert query["startDate"] == "2024-01-01"
        assert query["endDate"] == "2024-01-31"

    async def test_set_status_all_drops_filter(self, employee_app, backend_state, employee):
        _seed_january(backend_state, employee["_id"])
        page = await employee_app.open("/attendance")
        await page.set_date_range(JAN_START, JAN_END)
        await page.set_status("absent")
        assert page.listing.total == 5

        await page.set_status("all")

        assert "status" not in _last_list_query(backend_state)
        assert page.listing.total == 28

    async def test_filter_change_resets_to_first_page(self, employee_app, backend_state, employee):
        _seed_january(backend_state, employee["_id"])
        page = await employee_app.open("/attendance")
        await page.set_date_range(JAN_START, JAN_END)
        await page.listing.set_page(3)
        assert page.listing.page == 3

        await page.set_status("present")

        assert page.listing.page == 1
        assert _last_list_query(backend_state)["page"] == "1"

    async def test_paging(self, employee_app, backend_state, employee):
        _seed_january(backend_state, employee["_id"])
        page = await employee_app.open("/attendance")
        await page.set_date_range(JAN_START, JAN_END)

        assert await page.listing.next_page()
        assert _last_list_query(backend_state)["page"] == "2"
        assert await page.listing.next_page()
        assert len(page.records) == 8
        assert not await page.listing.next_page()
        assert await page.listing.prev_page()
        assert page.listing.page == 2

    async def test_latest_result_wins(self, employee_app, backend_state, employee):
        _seed_january(backend_state, employee["_id"])
        page = await employee_app.open("/attendance")
        await page.set_date_range(JAN_START, JAN_END)

        entered = asyncio.Event()
        release = asyncio.Event()

        async def gate(query: dict) -> None:
            if query.get("status") == "absent":
                entered.set()
                await release.wait()

        backend_state.attendance_gate = gate
        slow = asyncio.create_task(page.set_status("absent"))
        await entered.wait()

        assert await page.set_status("present")
        release.set()
        assert await slow is False

        assert page.listing.filters["status"] == "present"
        assert page.listing.total == 23
        assert all(r.status == "present" for r in page.records)

    async def test_clear_filters(self, employee_app, backend_state):
        page = await employee_app.open("/attendance")
        await page.set_status("absent")
        await page.set_search("jane")

        await page.clear_filters()

        start, _ = month_bounds(date.today())
        assert page.listing.filters["status"] is None
        assert page.listing.filters["search"] is None
        assert page.listing.filters["start_date"] == start

    async def test_rows(self, employee_app, backend_state, employee):
        _seed_attendance(backend_state, employee["_id"], date(2024, 1, 10), status="halfDay", clock_out=None)
        page = await employee_app.open("/attendance")
        await page.set_date_range(JAN_START, JAN_END)

        row = page.rows()[0]
        assert row == {
            "date": "2024-01-10",
            "employee": "Jane Doe",
            "status": "Half Day",
            "clock_in": "09:05",
            "clock_out": "-",
            "hours": "-",
        }

    async def test_load_failure_sets_error(self, employee_app, backend_state):
        page = await employee_app.open("/attendance")
        backend_state.failing.add("/api/attendance")

        assert not await page.load()
        assert page.error == "Failed to load attendance data"
        assert page.records == []

    async def test_missing_employee_is_an_error(self, employee_app):
        page = AttendancePage(
            employee_app.attendance,
            employee_app.session,
            employee_app.notifier,
            download_dir=employee_app.settings.DOWNLOAD_DIR,
        )
        employee_app.session.logout()

        assert not await page.load()
        assert page.error == "Failed to load attendance data"


class TestAdminAttendance:

    async def test_employee_route_uses_list_by_id(self, hr_app, backend_state, employee):
        _seed_january(backend_state, employee["_id"], present=3, absent=0)
        page = await hr_app.open(f"/attendance/employee/{employee['_id']}")
        await page.set_date_range(JAN_START, JAN_END)

        assert page.employee_id == employee["_id"]
        assert backend_state.requests_to(f"/api/attendance/list-by-id/{employee['_id']}")
        assert page.listing.total == 3
        assert page.records[0].employee.display_name == "Jane Doe"

    async def test_employee_filter_switches_to_list(self, hr_app, backend_state, employee, hr_user):
        page = await hr_app.open("/attendance")
        await page.set_employee(employee["_id"])

        assert page.employee_id == employee["_id"]
        assert _last_list_query(backend_state)["employeeId"] == employee["_id"]

    async def test_employee_cannot_open_other_attendance(self, employee_app, hr_user):
        page = await employee_app.open(f"/attendance/employee/{hr_user['_id']}")
        assert type(page).__name__ == "DashboardPage"
        assert employee_app.location.state["accessDenied"] is True


# ═════════════════════════════════════════════════════════════════════
# Export
# ═════════════════════════════════════════════════════════════════════


class TestExport:

    async def test_export_saves_server_file(self, employee_app, backend_state, employee, settings):
        page = await employee_app.open("/attendance")
        await page.set_status("present")

        path = await page.export()

        assert path == settings.DOWNLOAD_DIR / "attendance_2024-01.xlsx"
        assert path.read_bytes().startswith(b"PK")
        query = backend_state.requests_to("/api/attendance/download")[-1].query
        assert query["employeeId"] == employee["_id"]
        assert query["status"] == "present"

    async def test_export_failure_alerts(self, employee_app, backend_state):
        page = await employee_app.open("/attendance")
        backend_state.failing.add("/api/attendance/download")

        assert await page.export() is None
        assert employee_app.notifier.last.title == "Failed to export attendance report"
        assert employee_app.notifier.last.variant == "alert"

    async def test_export_save_failure_alerts(self, employee_app, tmp_path):
        page = await employee_app.open("/attendance")
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        page.download_dir = blocker

        assert await page.export() is None
        assert employee_app.notifier.last.title == "Failed to save attendance report"
        assert employee_app.notifier.last.variant == "alert"


# ═════════════════════════════════════════════════════════════════════
# Clock in / out
# ═════════════════════════════════════════════════════════════════════


class TestClock:

    async def test_clock_out_disabled_until_clock_in(self, employee_app, backend_state):
        page = await employee_app.open("/dashboard")
        assert page.can_clock_in
        assert not page.can_clock_out
        assert not await page.clock_out()

        assert await page.clock_in()

        assert not page.can_clock_in
        assert page.can_clock_out
        assert employee_app.notifier.last.title == "Clock in recorded"
        assert employee_app.notifier.last.description == "Clocked in successfully"

        assert await page.clock_out()

        assert not page.can_clock_in
        assert not page.can_clock_out
        assert page.attendance_today.has_clocked_out

    async def test_clock_in_sends_fallback_position(self, employee_app, backend_state, employee):
        page = await employee_app.open("/dashboard")
        await page.clock_in()

        body = backend_state.requests_to(f"/api/attendance/clock-in/{employee['_id']}")[-1].body
        assert body == {"latitude": 12.9716, "longitude": 77.5946, "markedBy": "user"}

    async def test_today_record_restored_on_load(self, employee_app, backend_state, employee):
        _seed_attendance(backend_state, employee["_id"], date.today(), clock_out=None)

        page = await employee_app.open("/dashboard")

        assert page.attendance_today is not None
        assert not page.can_clock_in
        assert page.can_clock_out
        query = _last_list_query(backend_state)
        assert query["limit"] == "1"
        assert query["startDate"] == query["endDate"] == date.today().isoformat()

    async def test_clock_in_failure_toasts(self, employee_app, backend_state, employee):
        page = await employee_app.open("/dashboard")
        backend_state.failing.add("/api/attendance/clock-in")

        assert not await page.clock_in()
        assert employee_app.notifier.last.title == "Clock in failed"
        assert employee_app.notifier.last.variant == "destructive"
        assert page.can_clock_in


# ═════════════════════════════════════════════════════════════════════
# Regularization
# ═════════════════════════════════════════════════════════════════════


class TestRegularization:

    async def test_submit(self, employee_app, backend_state, employee):
        page = await employee_app.open("/regularization/submit")
        page.date = date(2024, 1, 10)
        page.clock_in = "09:30"
        page.reason = "  Forgot to clock in  "

        assert await page.submit()

        body = backend_state.requests_to("/api/attendance/regularization", "POST")[-1].body
        assert body == {
            "employeeId": employee["_id"],
            "date": "2024-01-10",
            "reason": "Forgot to clock in",
            "clockIn": "09:30",
        }
        assert page.submitted.status == "pending"
        assert employee_app.notifier.last.title == "Success"

    async def test_submit_requires_date_and_reason(self, employee_app, backend_state):
        page = await employee_app.open("/regularization/submit")
        page.reason = "Forgot"

        assert not await page.submit()
        assert employee_app.notifier.last.title == "Missing information"
        assert not backend_state.requests_to("/api/attendance/regularization", "POST")

    async def test_list_own_requests(self, employee_app, backend_state, employee, hr_user):
        backend_state.regularizations.extend(
            [
                {"_id": "r1", "employeeId": employee["_id"], "date": "2024-01-10", "status": "pending"},
                {"_id": "r2", "employeeId": employee["_id"], "date": "2024-01-11", "status": "approved"},
                {"_id": "r3", "employeeId": hr_user["_id"], "date": "2024-01-11", "status": "pending"},
            ],
        )
        page = await employee_app.open("/regularization")
        assert [r.id for r in page.requests] == ["r1", "r2"]

        await page.set_status("approved")
        assert [r.id for r in page.requests] == ["r2"]


# ═════════════════════════════════════════════════════════════════════
# Response adapter
# ═════════════════════════════════════════════════════════════════════


class TestNormalize:

    def test_fallback_employee_fills_missing(self):
        payload = {"items": [{"_id": "a1", "employeeId": "e1", "status": "present"}], "total": 1}
        result = normalize_attendance(payload, fallback_employee=EmployeeBrief(id="e1", name="Jane Doe"))
        assert result.items[0].employee.name == "Jane Doe"
        assert result.total_pages == 1

    def test_single_record_shape(self):
        payload = {"attendance": {"_id": "a1", "status": "present", "clockIn": "2024-01-10T09:00:00Z"}}
        result = normalize_attendance(payload, fallback_employee=EmployeeBrief(id="e1"), limit=10)
        assert result.total == 1
        assert result.items[0].has_clocked_in
        assert result.items[0].employee.id == "e1"

    def test_unexpected_shape(self):
        with pytest.raises(ValueError):
            normalize_attendance({"message": "ok"}, fallback_employee=EmployeeBrief(id="e1"))

    def test_format_time(self):
        assert format_time("2024-01-10T09:05:00Z") == "09:05"
        assert format_time(None) == "-"
        assert format_time("yesterday") == "-"

    def test_status_label_passthrough(self):
        assert AttendanceRecord(status="onLeave").status_label == "onLeave"
        assert AttendanceRecord().status_label == "-"

    def test_month_bounds(self):
        assert month_bounds(date(2024, 2, 14)) == (date(2024, 2, 1), date(2024, 2, 29))
