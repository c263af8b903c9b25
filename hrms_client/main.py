"""HRMS client — application factory.

``create_app()`` wires storage, the HTTP client, the resource APIs, the
session, the router and the page controllers into one ``HrmsApp``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional
from urllib.parse import parse_qsl, urlsplit

import httpx

from hrms_client.attendance.api import AttendanceApi
from hrms_client.attendance.pages import AttendancePage, RegularizationPage, SubmitRegularizationPage
from hrms_client.auth.api import AuthApi
from hrms_client.auth.schemas import User
from hrms_client.auth.session import SessionService
from hrms_client.common.constants import DASHBOARD_PATH, LOGIN_PATH
from hrms_client.common.geolocation import Coordinates, Geolocator, PositionProvider
from hrms_client.common.http import create_http_client
from hrms_client.common.notifications import Notifier
from hrms_client.common.storage import FileStorage
from hrms_client.config import Settings, settings as default_settings
from hrms_client.dashboard.api import DashboardApi
from hrms_client.dashboard.pages import DashboardPage
from hrms_client.employees.api import EmployeeApi
from hrms_client.employees.pages import SettingsPage
from hrms_client.leave.api import LeaveApi
from hrms_client.leave.pages import ApplyLeavePage, LeaveBalancePage, LeavePolicyPage, TrackLeavePage
from hrms_client.payroll.api import PayrollApi
from hrms_client.payroll.pages import PayrollPage
from hrms_client.router import Location, Navigator, Router
from hrms_client.salary.api import SalaryStructureApi
from hrms_client.salary.pages import SalaryStructurePage
from hrms_client.uploads.api import UploadApi

logger = logging.getLogger(__name__)

PageFactory = Callable[[Location], Any]


class HrmsApp:
    """One signed-in (or signed-out) client session and everything it needs."""

    def __init__(
        self,
        settings: Settings,
        http: httpx.AsyncClient,
        storage: FileStorage,
        session: SessionService,
        navigator: Navigator,
        notifier: Notifier,
        geolocator: Geolocator,
    ) -> None:
        self.settings = settings
        self.http = http
        self.storage = storage
        self.session = session
        self.navigator = navigator
        self.notifier = notifier
        self.geolocator = geolocator
        self.session.subscribe(self._on_session_event)

        self.auth = session.auth_api
        self.attendance = AttendanceApi(http)
        self.leaves = LeaveApi(http)
        self.payroll = PayrollApi(http)
        self.salary = SalaryStructureApi(http)
        self.employees = EmployeeApi(http)
        self.dashboard = DashboardApi(http)
        self.uploads = UploadApi(http)

        self._pages: dict[str, PageFactory] = {
            "dashboard": self._dashboard_page,
            "attendance": self._attendance_page,
            "regularization": lambda loc: RegularizationPage(
                self.attendance, self.session, self.notifier, page_size=self.settings.DEFAULT_PAGE_SIZE,
            ),
            "submit-regularization": lambda loc: SubmitRegularizationPage(
                self.attendance, self.session, self.notifier,
            ),
            "apply-leave": lambda loc: ApplyLeavePage(
                self.leaves,
                self.uploads,
                self.session,
                self.notifier,
                self.navigator,
                max_documents=self.settings.MAX_LEAVE_DOCUMENTS,
            ),
            "track-leave": lambda loc: TrackLeavePage(
                self.leaves, self.session, self.notifier, page_size=self.settings.DEFAULT_PAGE_SIZE,
            ),
            "leave-balance": lambda loc: LeaveBalancePage(self.leaves, self.session, self.notifier),
            "leave-policy": lambda loc: LeavePolicyPage(self.leaves, self.notifier),
            "payroll": lambda loc: PayrollPage(
                self.payroll,
                self.employees,
                self.session,
                self.notifier,
                download_dir=self.settings.DOWNLOAD_DIR,
                employee_id=loc.query.get("employeeId"),
                page_size=self.settings.DEFAULT_PAGE_SIZE,
            ),
            "salary-structure": lambda loc: SalaryStructurePage(
                self.salary,
                self.employees,
                self.session,
                self.notifier,
                employee_id=loc.query.get("employeeId"),
            ),
            "settings": lambda loc: SettingsPage(self.session, self.employees, self.uploads, self.notifier),
        }

    # ── Navigation ──────────────────────────────────────────────────

    @property
    def location(self) -> Optional[Location]:
        return self.navigator.location

    async def open(
        self,
        path: str,
        query: Optional[dict[str, str]] = None,
        state: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Navigate to *path* and return its loaded page controller.

        Returns ``None`` for the login page and for unknown paths.
        """
        split = urlsplit(path)
        merged = dict(parse_qsl(split.query))
        merged.update(query or {})
        location = self.navigator.navigate(split.path or "/", state=state, query=merged)
        page = self.build_page(location)
        if page is not None:
            await page.load()
        return page

    def build_page(self, location: Location) -> Any:
        if location.not_found:
            logger.info("No page for %s", location.path)
            return None
        factory = self._pages.get(location.page or "")
        return factory(location) if factory is not None else None

    # ── Session ─────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> User:
        """Sign in and move to the page that sent us to login (or the dashboard)."""
        destination = DASHBOARD_PATH
        if self.location is not None and self.location.path == LOGIN_PATH:
            destination = self.location.state.get("from") or DASHBOARD_PATH
        user = await self.session.login(email, password)
        self.navigator.navigate(destination)
        return user

    def logout(self) -> None:
        self.session.logout()
        self.navigator.redirect(LOGIN_PATH)

    def handle_invalid_token(self) -> None:
        """Backend rejected the token: drop the session (and so go to login)."""
        self.session.invalidate()

    def _on_session_event(self, event: str, user: Optional[User]) -> None:
        if event == "invalidated" and self.navigator.path != LOGIN_PATH:
            self.navigator.redirect(LOGIN_PATH)

    # ── Lifecycle ───────────────────────────────────────────────────

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "HrmsApp":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── Page factories ──────────────────────────────────────────────

    def _dashboard_page(self, location: Location) -> DashboardPage:
        return DashboardPage(
            self.dashboard,
            self.attendance,
            self.employees,
            self.uploads,
            self.session,
            self.notifier,
            self.geolocator,
            state=location.state,
        )

    def _attendance_page(self, location: Location) -> AttendancePage:
        return AttendancePage(
            self.attendance,
            self.session,
            self.notifier,
            download_dir=self.settings.DOWNLOAD_DIR,
            employee_id=location.params.get("id"),
            page_size=self.settings.DEFAULT_PAGE_SIZE,
        )


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    geolocation_provider: Optional[PositionProvider] = None,
    notifier: Optional[Notifier] = None,
) -> HrmsApp:
    """Create and wire the client application; the stored session is restored."""
    settings = settings or default_settings
    storage = FileStorage(settings.STORAGE_PATH)
    app: Optional[HrmsApp] = None

    def on_invalid_token() -> None:
        if app is not None:
            app.handle_invalid_token()

    http = create_http_client(
        settings,
        storage,
        on_invalid_token=on_invalid_token,
        transport=transport,
    )
    session = SessionService(storage, AuthApi(http))
    session.hydrate()
    navigator = Navigator(Router(), session)
    geolocator = Geolocator(
        geolocation_provider,
        timeout=settings.GEOLOCATION_TIMEOUT,
        fallback=Coordinates(settings.FALLBACK_LATITUDE, settings.FALLBACK_LONGITUDE),
    )
    app = HrmsApp(
        settings,
        http,
        storage,
        session,
        navigator,
        notifier or Notifier(),
        geolocator,
    )
    return app
