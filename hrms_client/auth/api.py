"""Auth endpoints."""

from __future__ import annotations

from typing import Any

from hrms_client.common.http import ResourceApi


class AuthApi(ResourceApi):

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """``POST /auth/login`` — returns ``{"token", "user"}``."""
        return await self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password},
            action="logging in",
        )
