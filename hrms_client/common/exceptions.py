"""Client-side exceptions built from backend error responses."""

from __future__ import annotations

from typing import Any, Optional

import httpx


# ── Exception hierarchy ─────────────────────────────────────────────

class ApiError(Exception):
    """Base for all backend error responses."""

    def __init__(
        self,
        status_code: int,
        message: str,
        payload: Optional[Any] = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.payload = payload
        self.session_invalidated = False
        super().__init__(message)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        """Build the matching subclass from an already-read error response."""
        payload = _json_or_none(response)
        message = extract_message(payload) or response.reason_phrase or "Request failed"
        error_cls = _STATUS_MAP.get(response.status_code)
        if error_cls is None:
            error_cls = ServerError if response.status_code >= 500 else ApiError
        return error_cls(response.status_code, message, payload)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.status_code}, {self.message!r})"


class AuthenticationError(ApiError):
    """401 — bad credentials, or an invalid/expired token."""


class ForbiddenError(ApiError):
    """403 — insufficient permissions."""


class NotFoundError(ApiError):
    """404 — resource not found."""


class ValidationError(ApiError):
    """400/422 — the backend rejected the payload."""


class ServerError(ApiError):
    """5xx — backend failure."""


class TransportError(ApiError):
    """The request never produced a response (DNS, connect, timeout)."""

    def __init__(self, exc: httpx.TransportError) -> None:
        super().__init__(status_code=0, message=str(exc) or type(exc).__name__)
        self.__cause__ = exc


class UploadError(Exception):
    """The file-storage endpoint did not return a usable URL."""


_STATUS_MAP: dict[int, type[ApiError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: ForbiddenError,
    404: NotFoundError,
    422: ValidationError,
}


# ── Helpers ─────────────────────────────────────────────────────────

def extract_message(payload: Any) -> Optional[str]:
    """Return the human-readable message of a response body, if any."""
    if not isinstance(payload, dict):
        return None
    for key in ("message", "detail", "title", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def error_message(exc: BaseException, default: str) -> str:
    """Message to show for a failed action: the server's, else *default*."""
    if isinstance(exc, ApiError) and exc.payload is not None:
        return extract_message(exc.payload) or default
    return default


def _json_or_none(response: httpx.Response) -> Optional[Any]:
    try:
        return response.json()
    except ValueError:
        return None
