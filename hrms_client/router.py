"""Role-gated routing — path → page, with authentication and role gates.

Gate order for a requested path:

  1. public routes (``/login``) always render
  2. unauthenticated → redirect to ``/login`` (state: ``from``)
  3. no matching route → not-found
  4. role outside the route's allowed set → redirect to ``/dashboard``
     (state: ``accessDenied``, ``from``)

Every role decision goes through ``auth.policy.is_authorized``.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from hrms_client.auth.policy import is_authorized
from hrms_client.auth.session import SessionService
from hrms_client.common.constants import (
    ADMIN_ROLES,
    DASHBOARD_PATH,
    LOGIN_PATH,
    STAFF_ROLES,
    UserRole,
)

logger = logging.getLogger(__name__)


# ── Route table ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Route:
    path: str
    page: Optional[str] = None
    allowed_roles: Optional[frozenset[UserRole]] = None
    public: bool = False
    redirect_to: Optional[str] = None

    def match(self, path: str) -> Optional[dict[str, str]]:
        """Return path params if *path* matches this route's pattern."""
        pattern = _segments(self.path)
        actual = _segments(path)
        if len(pattern) != len(actual):
            return None
        params: dict[str, str] = {}
        for want, got in zip(pattern, actual):
            if want.startswith(":"):
                if not got:
                    return None
                params[want[1:]] = got
            elif want != got:
                return None
        return params


ROUTES: tuple[Route, ...] = (
    Route(LOGIN_PATH, page="login", public=True),
    Route("/", redirect_to=DASHBOARD_PATH),
    Route(DASHBOARD_PATH, page="dashboard"),
    Route("/attendance", page="attendance", allowed_roles=STAFF_ROLES),
    Route("/attendance/employee/:id", page="attendance", allowed_roles=ADMIN_ROLES),
    Route("/regularization", page="regularization", allowed_roles=STAFF_ROLES),
    Route("/regularization/submit", page="submit-regularization", allowed_roles=STAFF_ROLES),
    Route("/apply-leave", page="apply-leave", allowed_roles=STAFF_ROLES),
    Route("/leaves/track", page="track-leave", allowed_roles=STAFF_ROLES),
    Route("/leaves/balance", page="leave-balance", allowed_roles=STAFF_ROLES),
    Route("/leaves/policy", page="leave-policy", allowed_roles=STAFF_ROLES),
    Route("/payroll", page="payroll", allowed_roles=STAFF_ROLES),
    Route("/salary-slips", page="salary-structure", allowed_roles=STAFF_ROLES),
    Route("/settings", page="settings"),
    Route("/profile", page="settings"),
)


# ── Resolution ──────────────────────────────────────────────────────

class Outcome(str, enum.Enum):
    render = "render"
    redirect = "redirect"
    not_found = "not_found"


@dataclass
class Resolution:
    outcome: Outcome
    path: str
    route: Optional[Route] = None
    params: dict[str, str] = field(default_factory=dict)
    redirect_to: Optional[str] = None
    state: dict[str, Any] = field(default_factory=dict)


class Router:
    """Pure path resolution; holds no session state of its own."""

    def __init__(self, routes: Sequence[Route] = ROUTES) -> None:
        self.routes = tuple(routes)

    def match(self, path: str) -> Optional[tuple[Route, dict[str, str]]]:
        for route in self.routes:
            params = route.match(path)
            if params is not None:
                return route, params
        return None

    def resolve(
        self,
        path: str,
        role: Optional[UserRole],
        *,
        authenticated: bool,
    ) -> Resolution:
        path = normalize_path(path)
        matched = self.match(path)

        if matched is not None and matched[0].public:
            route, params = matched
            return Resolution(Outcome.render, path, route=route, params=params)

        if not authenticated:
            return Resolution(
                Outcome.redirect, path, redirect_to=LOGIN_PATH, state={"from": path},
            )

        if matched is None:
            return Resolution(Outcome.not_found, path)

        route, params = matched
        if route.redirect_to:
            return Resolution(Outcome.redirect, path, route=route, redirect_to=route.redirect_to)

        if not is_authorized(role, route.allowed_roles):
            logger.info("Access to %s denied for role %s", path, role.value if role else None)
            return Resolution(
                Outcome.redirect,
                path,
                route=route,
                redirect_to=DASHBOARD_PATH,
                state={"accessDenied": True, "from": path},
            )

        return Resolution(Outcome.render, path, route=route, params=params)


# ── Navigation ──────────────────────────────────────────────────────

@dataclass
class Location:
    path: str
    route: Optional[Route] = None
    params: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def page(self) -> Optional[str]:
        return self.route.page if self.route else None

    @property
    def not_found(self) -> bool:
        return self.route is None


class Navigator:
    """Current location of the app; every move goes through the router."""

    MAX_REDIRECTS = 5

    def __init__(self, router: Router, session: SessionService) -> None:
        self.router = router
        self.session = session
        self.location: Optional[Location] = None
        self.history: list[Location] = []

    @property
    def path(self) -> Optional[str]:
        return self.location.path if self.location else None

    def navigate(
        self,
        path: str,
        state: Optional[dict[str, Any]] = None,
        query: Optional[dict[str, str]] = None,
    ) -> Location:
        state = dict(state or {})
        for _ in range(self.MAX_REDIRECTS + 1):
            resolution = self.router.resolve(
                path,
                self.session.role,
                authenticated=self.session.is_authenticated,
            )
            if resolution.outcome is Outcome.redirect:
                path = resolution.redirect_to or DASHBOARD_PATH
                state = resolution.state
                query = None
                continue

            location = Location(
                path=resolution.path,
                route=resolution.route,
                params=resolution.params,
                query=dict(query or {}),
                state=state,
            )
            self.location = location
            self.history.append(location)
            return location
        raise RuntimeError(f"Too many redirects while resolving {path!r}")

    def redirect(self, path: str) -> Location:
        return self.navigate(path)


def normalize_path(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0].strip() or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _segments(path: str) -> list[str]:
    return [s for s in normalize_path(path).split("/") if s]
