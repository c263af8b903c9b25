"""Router test suite — public/auth/role gates, params, navigation."""

from __future__ import annotations

import pytest

from hrms_client.auth.policy import is_authorized
from hrms_client.common.constants import ADMIN_ROLES, STAFF_ROLES, UserRole
from hrms_client.router import Outcome, Router, normalize_path

STAFF_PATHS = [
    "/attendance",
    "/regularization",
    "/regularization/submit",
    "/apply-leave",
    "/leaves/track",
    "/leaves/balance",
    "/leaves/policy",
    "/payroll",
    "/salary-slips",
]


@pytest.fixture
def router() -> Router:
    return Router()


# ═════════════════════════════════════════════════════════════════════
# Policy
# ═════════════════════════════════════════════════════════════════════


class TestIsAuthorized:

    def test_open_resource(self):
        assert is_authorized(UserRole.employee, None)
        assert is_authorized(None, None)

    def test_role_in_set(self):
        assert is_authorized(UserRole.hr, ADMIN_ROLES)
        assert is_authorized("companyAdmin", ADMIN_ROLES)

    def test_role_outside_set(self):
        assert not is_authorized(UserRole.employee, ADMIN_ROLES)
        assert not is_authorized(UserRole.super_admin, STAFF_ROLES)

    def test_missing_or_unknown_role(self):
        assert not is_authorized(None, STAFF_ROLES)
        assert not is_authorized("intern", STAFF_ROLES)
        assert not is_authorized("", STAFF_ROLES)


# ═════════════════════════════════════════════════════════════════════
# Resolution
# ═════════════════════════════════════════════════════════════════════


class TestResolve:

    def test_login_is_public(self, router):
        resolution = router.resolve("/login", None, authenticated=False)
        assert resolution.outcome is Outcome.render
        assert resolution.route.page == "login"

    @pytest.mark.parametrize("path", STAFF_PATHS + ["/dashboard", "/settings", "/nowhere"])
    def test_unauthenticated_goes_to_login(self, router, path):
        resolution = router.resolve(path, UserRole.employee, authenticated=False)
        assert resolution.outcome is Outcome.redirect
        assert resolution.redirect_to == "/login"
        assert resolution.state == {"from": path}

    def test_root_redirects_to_dashboard(self, router):
        resolution = router.resolve("/", UserRole.employee, authenticated=True)
        assert resolution.outcome is Outcome.redirect
        assert resolution.redirect_to == "/dashboard"
        assert resolution.state == {}

    def test_unknown_path_is_not_found(self, router):
        resolution = router.resolve("/reports/annual", UserRole.hr, authenticated=True)
        assert resolution.outcome is Outcome.not_found

    @pytest.mark.parametrize("role", [UserRole.employee, UserRole.hr, UserRole.company_admin])
    @pytest.mark.parametrize("path", STAFF_PATHS)
    def test_staff_pages_render_for_staff(self, router, role, path):
        assert router.resolve(path, role, authenticated=True).outcome is Outcome.render

    @pytest.mark.parametrize("path", STAFF_PATHS)
    def test_super_admin_denied_staff_pages(self, router, path):
        resolution = router.resolve(path, UserRole.super_admin, authenticated=True)
        assert resolution.outcome is Outcome.redirect
        assert resolution.redirect_to == "/dashboard"
        assert resolution.state == {"accessDenied": True, "from": path}

    def test_unknown_role_denied(self, router):
        resolution = router.resolve("/apply-leave", None, authenticated=True)
        assert resolution.redirect_to == "/dashboard"
        assert resolution.state["accessDenied"] is True

    @pytest.mark.parametrize("role", list(UserRole))
    def test_dashboard_and_settings_open_to_every_role(self, router, role):
        for path in ("/dashboard", "/settings", "/profile"):
            assert router.resolve(path, role, authenticated=True).outcome is Outcome.render

    def test_employee_attendance_is_admin_only(self, router):
        allowed = router.resolve("/attendance/employee/abc123", UserRole.hr, authenticated=True)
        assert allowed.outcome is Outcome.render
        assert allowed.params == {"id": "abc123"}

        denied = router.resolve("/attendance/employee/abc123", UserRole.employee, authenticated=True)
        assert denied.outcome is Outcome.redirect
        assert denied.state == {"accessDenied": True, "from": "/attendance/employee/abc123"}

    def test_query_and_trailing_slash_ignored(self, router):
        resolution = router.resolve("/payroll/?employeeId=42", UserRole.hr, authenticated=True)
        assert resolution.outcome is Outcome.render
        assert resolution.path == "/payroll"


class TestNormalizePath:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("", "/"),
            ("payroll", "/payroll"),
            ("/payroll/", "/payroll"),
            ("/payroll?month=1", "/payroll"),
            ("/leaves/track#top", "/leaves/track"),
            ("/", "/"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_path(raw) == expected


# ═════════════════════════════════════════════════════════════════════
# Navigation through the app
# ═════════════════════════════════════════════════════════════════════


class TestNavigation:

    async def test_open_unauthenticated_lands_on_login(self, app):
        assert await app.open("/payroll") is None
        assert app.location.path == "/login"
        assert app.location.state == {"from": "/payroll"}

    async def test_super_admin_bounced_to_dashboard(self, app, super_admin):
        await app.login(super_admin["email"], "secret")

        page = await app.open("/apply-leave")

        assert type(page).__name__ == "DashboardPage"
        assert app.location.path == "/dashboard"
        assert app.location.state == {"accessDenied": True, "from": "/apply-leave"}
        toast = app.notifier.history[0]
        assert toast.title == "Access denied"
        assert toast.description == "You don't have access to /apply-leave. Redirected to dashboard."
        assert toast.variant == "destructive"

    async def test_not_found_returns_none(self, employee_app):
        assert await employee_app.open("/does/not/exist") is None
        assert employee_app.location.not_found

    async def test_root_goes_to_dashboard(self, employee_app):
        page = await employee_app.open("/")
        assert type(page).__name__ == "DashboardPage"

    async def test_query_string_reaches_page(self, hr_app, employee):
        page = await hr_app.open(f"/payroll?employeeId={employee['_id']}")
        assert page.employee_id == employee["_id"]
        assert hr_app.location.query == {"employeeId": employee["_id"]}

    async def test_history_records_each_move(self, employee_app):
        await employee_app.open("/leaves/track")
        await employee_app.open("/leaves/balance")
        paths = [location.path for location in employee_app.navigator.history]
        assert paths[-2:] == ["/leaves/track", "/leaves/balance"]
