"""Shared test fixtures — fake backend, wired client app, signed-in users.

Reusable across all test modules (session, router, attendance, leave, etc.).
The backend is an in-memory FastAPI app reached through ``ASGITransport``;
session storage lives under ``tmp_path``.
"""

from __future__ import annotations

import json
from typing import Any, AsyncGenerator

import pytest
from httpx import ASGITransport

from hrms_client.common.constants import ROLE_KEY, TOKEN_KEY, USER_KEY
from hrms_client.common.storage import FileStorage
from hrms_client.config import Settings
from hrms_client.main import HrmsApp, create_app
from tests.fake_backend import BackendState, create_access_token, create_backend

BASE_URL = "http://test/api"
PASSWORD = "secret"

STANDARD_POLICY: dict[str, Any] = {
    "_id": "pol-standard",
    "name": "Standard",
    "leaveTypes": [
        {"_id": "lt-casual", "type": "casual", "allocation": 12},
        {"_id": "lt-medical", "type": "medical", "allocation": 8},
        {"_id": "lt-earned", "type": "earned", "allocation": 15},
        {"_id": "lt-sick", "type": "sick", "allocation": 4},
    ],
}


# ── Backend ─────────────────────────────────────────────────────────

@pytest.fixture
def backend_state() -> BackendState:
    state = BackendState()
    state.policies.append(STANDARD_POLICY)
    return state


@pytest.fixture
def employee(backend_state) -> dict:
    return backend_state.add_user("jane.doe@acme.test", PASSWORD, first_name="Jane", last_name="Doe")


@pytest.fixture
def hr_user(backend_state) -> dict:
    return backend_state.add_user("hr@acme.test", PASSWORD, role="hr", first_name="Harriet", last_name="Rao")


@pytest.fixture
def company_admin(backend_state) -> dict:
    return backend_state.add_user("admin@acme.test", PASSWORD, role="companyAdmin", first_name="Ada", last_name="Min")


@pytest.fixture
def super_admin(backend_state) -> dict:
    return backend_state.add_user("root@acme.test", PASSWORD, role="superAdmin", first_name="Sam", last_name="Root")


# ── Client app ──────────────────────────────────────────────────────

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        BACKEND_URL=BASE_URL,
        STORAGE_PATH=tmp_path / "session.json",
        DOWNLOAD_DIR=tmp_path / "downloads",
        GEOLOCATION_TIMEOUT=0.2,
    )


@pytest.fixture
async def app(settings, backend_state) -> AsyncGenerator[HrmsApp, None]:
    """A fresh client app wired to the fake backend; nobody signed in."""
    application = create_app(
        settings,
        transport=ASGITransport(app=create_backend(backend_state)),
    )
    yield application
    await application.aclose()


@pytest.fixture
async def employee_app(app, employee) -> HrmsApp:
    await app.login(employee["email"], PASSWORD)
    return app


@pytest.fixture
async def hr_app(app, hr_user) -> HrmsApp:
    await app.login(hr_user["email"], PASSWORD)
    return app


# ── Storage helpers ─────────────────────────────────────────────────

def seed_session(path, user: dict, *, token: str | None = None, role: str | None = None) -> str:
    """Write a stored session the way a previous run would have left it."""
    token = token or create_access_token(user["_id"], user.get("role", "employee"))
    storage = FileStorage(path)
    storage.set(TOKEN_KEY, token)
    storage.set(USER_KEY, json.dumps(user))
    storage.set(ROLE_KEY, role or user.get("role", ""))
    return token
