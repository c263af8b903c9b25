"""Employee Pydantic schemas — profile view model and settings form."""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel

from hrms_client.common.models import WireModel, id_field

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def is_object_id(value: Optional[str]) -> bool:
    return bool(value) and bool(_OBJECT_ID_RE.match(value or ""))


def normalize_manager_id(raw: Any) -> str:
    """Reporting manager id as a 24-hex string, or ``""`` if unusable.

    The backend returns either the bare id or the populated manager object.
    """
    if isinstance(raw, str):
        return raw if is_object_id(raw) else ""
    if isinstance(raw, dict):
        ref = raw.get("_id") or raw.get("id") or ""
        return ref if isinstance(ref, str) else ""
    return ""


class EmployeeProfile(WireModel):
    """Employee detail as served by ``GET /auth/employees/{id}``."""

    id: Optional[str] = id_field()
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    employee_code: Optional[str] = None
    designation: Optional[str] = None
    organization_id: Optional[str] = None
    profile_photo_url: Optional[str] = None
    reporting_manager_id: Any = None

    @property
    def display_name(self) -> str:
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return self.name or full or "Employee"


class ProfileForm(BaseModel):
    """Editable settings form state."""

    first_name: str = ""
    last_name: str = ""
    name: str = ""
    email: str = ""
    phone: str = ""
    password: str = ""
    profile_image: str = ""
    reporting_manager_id: str = ""

    @classmethod
    def from_profile(cls, profile: EmployeeProfile) -> "ProfileForm":
        return cls(
            first_name=profile.first_name or "",
            last_name=profile.last_name or "",
            name=(profile.name or f"{profile.first_name or ''} {profile.last_name or ''}").strip(),
            email=profile.email or "",
            phone=profile.phone or "",
            password="",
            profile_image=profile.profile_photo_url or "",
            reporting_manager_id=normalize_manager_id(profile.reporting_manager_id),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_payload(self) -> dict[str, Any]:
        """Body for ``PUT /auth/employees/{id}``; password only when set."""
        payload: dict[str, Any] = {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "profilePhotoUrl": self.profile_image,
            "reportingManagerId": (
                self.reporting_manager_id if is_object_id(self.reporting_manager_id) else None
            ),
        }
        if self.password:
            payload["password"] = self.password
        return payload
