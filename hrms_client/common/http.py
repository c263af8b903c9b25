"""HTTP client wrapper — base URL, bearer token, auto-logout on invalid token.

Every request goes through one ``httpx.AsyncClient`` configured here:

  - a request hook attaches ``Authorization: Bearer <token>`` from storage
  - a response hook turns error responses into ``ApiError`` and, when the
    backend signals an invalid/expired token, tears the stored session down
    before the error reaches the caller

Pages therefore never handle token expiry themselves.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from hrms_client.common.constants import TOKEN_KEY
from hrms_client.common.exceptions import ApiError, TransportError, extract_message
from hrms_client.common.filters import build_query
from hrms_client.common.storage import FileStorage
from hrms_client.config import Settings

logger = logging.getLogger(__name__)

INVALID_TOKEN_MARKERS: tuple[str, ...] = ("invalid token", "token expired", "jwt")

InvalidTokenHandler = Callable[[], Union[None, Awaitable[None]]]


def is_invalid_token_response(response: httpx.Response) -> bool:
    """True for a 401, or an error body whose message mentions the token."""
    if response.status_code == 401:
        return True
    try:
        payload = response.json()
    except ValueError:
        return False
    message = (extract_message(payload) or "").lower()
    return any(marker in message for marker in INVALID_TOKEN_MARKERS)


# ── Client factory ──────────────────────────────────────────────────

def create_http_client(
    settings: Settings,
    storage: FileStorage,
    *,
    on_invalid_token: Optional[InvalidTokenHandler] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the shared ``AsyncClient`` with auth and error hooks attached."""

    async def attach_token(request: httpx.Request) -> None:
        token = storage.get(TOKEN_KEY)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def intercept_errors(response: httpx.Response) -> None:
        if response.is_success:
            return
        await response.aread()
        error = ApiError.from_response(response)
        if is_invalid_token_response(response):
            error.session_invalidated = True
            logger.warning(
                "Session rejected by backend (%s %s → %s); logging out",
                response.request.method,
                response.request.url.path,
                response.status_code,
            )
            storage.clear_session()
            if on_invalid_token is not None:
                result = on_invalid_token()
                if inspect.isawaitable(result):
                    await result
        raise error

    return httpx.AsyncClient(
        base_url=settings.BACKEND_URL,
        headers={"Accept": "application/json"},
        timeout=settings.REQUEST_TIMEOUT,
        event_hooks={"request": [attach_token], "response": [intercept_errors]},
        transport=transport,
    )


# ── Binary responses ────────────────────────────────────────────────

@dataclass
class Download:
    """A server-generated file (report, payslip)."""

    content: bytes
    content_type: str
    content_disposition: Optional[str] = None


# ── Resource API base ───────────────────────────────────────────────

class ResourceApi:
    """Base for per-resource API classes.

    Subclasses expose one coroutine per backend operation and call
    ``_request``/``_download``; failures are logged and re-raised unchanged.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self.http = http

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
        files: Optional[dict[str, Any]] = None,
        action: str = "",
    ) -> Any:
        """Send one request and return the parsed JSON body (``{}`` if empty)."""
        kwargs: dict[str, Any] = {}
        if params:
            kwargs["params"] = build_query(params)
        if json is not None:
            kwargs["json"] = json
        if files is not None:
            kwargs["files"] = files
        response = await self._send(method, path, action=action, **kwargs)
        if not response.content:
            return {}
        return response.json()

    async def _download(
        self,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        action: str = "",
    ) -> Download:
        response = await self._send(
            "GET",
            path,
            action=action,
            params=build_query(params or {}),
            headers={"Accept": "*/*"},
        )
        return Download(
            content=response.content,
            content_type=response.headers.get("content-type", "application/octet-stream"),
            content_disposition=response.headers.get("content-disposition"),
        )

    async def _send(self, method: str, path: str, *, action: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self.http.request(method, path, **kwargs)
        except ApiError as exc:
            logger.error("Error %s: %r", action or f"{method} {path}", exc)
            raise
        except httpx.TransportError as exc:
            logger.error("Error %s: %s", action or f"{method} {path}", exc)
            raise TransportError(exc) from exc
