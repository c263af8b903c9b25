"""Session test suite — login/logout, restore from storage, forced logout."""

from __future__ import annotations

import json

import pytest
from jose import jwt

from hrms_client.auth.session import token_expired
from hrms_client.common.constants import ROLE_KEY, TOKEN_KEY, USER_KEY, UserRole
from hrms_client.common.exceptions import ValidationError
from hrms_client.common.storage import FileStorage
from hrms_client.main import create_app
from tests.conftest import PASSWORD, seed_session
from tests.fake_backend import create_access_token


# ═════════════════════════════════════════════════════════════════════
# Token expiry
# ═════════════════════════════════════════════════════════════════════


class TestTokenExpired:

    def test_future_exp_is_valid(self):
        assert not token_expired(create_access_token("u1"))

    def test_past_exp_is_expired(self):
        assert token_expired(create_access_token("u1", expired=True))

    def test_explicit_now(self):
        token = jwt.encode({"sub": "u1", "exp": 1_000}, "k", algorithm="HS256")
        assert token_expired(token, now=1_000)
        assert not token_expired(token, now=999)

    def test_opaque_token_never_expires(self):
        assert not token_expired("not-a-jwt")

    def test_token_without_exp(self):
        assert not token_expired(jwt.encode({"sub": "u1"}, "k", algorithm="HS256"))


# ═════════════════════════════════════════════════════════════════════
# Login / logout
# ═════════════════════════════════════════════════════════════════════


class TestLogin:

    async def test_login_persists_token_user_and_role(self, app, employee, settings):
        user = await app.login(employee["email"], PASSWORD)

        assert user.id == employee["_id"]
        assert app.session.is_authenticated
        assert app.session.role is UserRole.employee
        assert app.session.employee_id == employee["_id"]

        stored = json.loads(settings.STORAGE_PATH.read_text())
        assert stored[TOKEN_KEY]
        assert json.loads(stored[USER_KEY])["_id"] == employee["_id"]
        assert stored[ROLE_KEY] == "employee"

    async def test_login_lands_on_dashboard(self, app, employee):
        await app.login(employee["email"], PASSWORD)
        assert app.navigator.path == "/dashboard"

    async def test_login_returns_to_requested_page(self, app, employee):
        await app.open("/leaves/track")
        assert app.navigator.path == "/login"

        await app.login(employee["email"], PASSWORD)
        assert app.navigator.path == "/leaves/track"

    async def test_bad_credentials_store_nothing(self, app, employee, settings):
        with pytest.raises(ValidationError):
            await app.login(employee["email"], "wrong")
        assert not app.session.is_authenticated
        assert app.storage.get(TOKEN_KEY) is None

    async def test_logout_clears_everything(self, employee_app):
        events = []
        employee_app.session.subscribe(lambda event, user: events.append(event))

        employee_app.logout()

        assert not employee_app.session.is_authenticated
        assert employee_app.session.user is None
        assert employee_app.storage.get(TOKEN_KEY) is None
        assert employee_app.storage.get(USER_KEY) is None
        assert employee_app.navigator.path == "/login"
        assert events == ["logout"]

    async def test_set_user_updates_storage(self, employee_app):
        user = employee_app.session.user.model_copy(update={"phone": "+91 98450 00000"})
        employee_app.session.set_user(user)

        stored = json.loads(employee_app.storage.get(USER_KEY))
        assert stored["phone"] == "+91 98450 00000"
        assert employee_app.session.user.phone == "+91 98450 00000"

    async def test_unsubscribe(self, employee_app):
        events = []
        unsubscribe = employee_app.session.subscribe(lambda event, user: events.append(event))
        unsubscribe()
        employee_app.logout()
        assert events == []


# ═════════════════════════════════════════════════════════════════════
# Restore
# ═════════════════════════════════════════════════════════════════════


class TestHydrate:

    async def test_restores_previous_session(self, settings, employee):
        seed_session(settings.STORAGE_PATH, employee)

        app = create_app(settings)
        try:
            assert app.session.is_authenticated
            assert app.session.user.email == employee["email"]
            assert app.session.role is UserRole.employee
        finally:
            await app.aclose()

    async def test_expired_token_is_dropped(self, settings, employee):
        seed_session(settings.STORAGE_PATH, employee, token=create_access_token(employee["_id"], expired=True))

        app = create_app(settings)
        try:
            assert not app.session.is_authenticated
            assert FileStorage(settings.STORAGE_PATH).get(TOKEN_KEY) is None
        finally:
            await app.aclose()

    async def test_token_without_user_is_dropped(self, settings):
        FileStorage(settings.STORAGE_PATH).set(TOKEN_KEY, create_access_token("u1"))

        app = create_app(settings)
        try:
            assert not app.session.is_authenticated
            assert app.storage.get(TOKEN_KEY) is None
        finally:
            await app.aclose()

    async def test_role_key_fills_missing_user_role(self, settings, employee):
        user = {k: v for k, v in employee.items() if k != "role"}
        seed_session(settings.STORAGE_PATH, user, role="hr")

        app = create_app(settings)
        try:
            assert app.session.role is UserRole.hr
        finally:
            await app.aclose()


# ═════════════════════════════════════════════════════════════════════
# Forced logout
# ═════════════════════════════════════════════════════════════════════


class TestInvalidation:

    async def test_401_logs_out_and_redirects(self, employee_app, backend_state):
        page = await employee_app.open("/leaves/track")
        assert page is not None

        backend_state.reject_tokens = True
        await page.load()

        assert not employee_app.session.is_authenticated
        assert employee_app.storage.get(TOKEN_KEY) is None
        assert employee_app.navigator.path == "/login"
        assert page.listing.error is None
        assert page.requests == []

    async def test_invalidated_event_emitted(self, employee_app, backend_state):
        events = []
        employee_app.session.subscribe(lambda event, user: events.append(event))
        backend_state.reject_tokens = True

        page = await employee_app.open("/salary-slips")

        assert "invalidated" in events
        assert page.error
        assert employee_app.navigator.path == "/login"

    async def test_pages_after_logout_redirect_to_login(self, employee_app, backend_state):
        backend_state.reject_tokens = True
        await employee_app.open("/payroll")
        backend_state.reject_tokens = False

        assert await employee_app.open("/payroll") is None
        assert employee_app.location.path == "/login"
        assert employee_app.location.state == {"from": "/payroll"}
