"""Authorization policy — the one place role decisions are made."""

from __future__ import annotations

from typing import Collection, Optional, Union

from hrms_client.common.constants import UserRole

RoleLike = Union[UserRole, str, None]


def is_authorized(role: RoleLike, allowed_roles: Optional[Collection[UserRole]]) -> bool:
    """Return True if *role* may access something gated by *allowed_roles*.

    ``allowed_roles=None`` means "any authenticated user". A missing or
    unknown role is never authorized for a role-gated resource.
    """
    if allowed_roles is None:
        return True
    parsed = role if isinstance(role, UserRole) else UserRole.parse(role)
    if parsed is None:
        return False
    return parsed in allowed_roles
