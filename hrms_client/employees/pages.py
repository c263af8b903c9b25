"""Settings page — view and edit the signed-in employee's profile."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

from hrms_client.auth.session import SessionService
from hrms_client.common.exceptions import ApiError, UploadError, error_message
from hrms_client.common.models import EmployeeBrief, unwrap
from hrms_client.common.notifications import Notifier
from hrms_client.employees.api import EmployeeApi
from hrms_client.employees.schemas import EmployeeProfile, ProfileForm
from hrms_client.uploads.api import UploadApi

logger = logging.getLogger(__name__)


async def search_employees(api: EmployeeApi, query: str, *, limit: int = 10) -> list[EmployeeBrief]:
    """Employee picker results for *query*; empty on failure."""
    try:
        payload = await api.list(page=1, limit=limit, search=query.strip() or None)
    except ApiError as exc:
        logger.error("Employee search failed: %r", exc)
        return []
    raw = (payload.get("items") or payload.get("data") or []) if isinstance(payload, dict) else []
    return [EmployeeBrief.model_validate(item) for item in raw if isinstance(item, dict)]


class SettingsPage:
    """Profile form bound to ``/auth/employees/{id}``."""

    def __init__(
        self,
        session: SessionService,
        employees: EmployeeApi,
        uploads: UploadApi,
        notifier: Notifier,
    ) -> None:
        self.session = session
        self.employees = employees
        self.uploads = uploads
        self.notifier = notifier

        self.profile: Optional[EmployeeProfile] = None
        self.form = ProfileForm()
        self.is_editing = False
        self.loading = False
        self.saving = False
        self.error = ""
        self.success = ""

    async def load(self) -> bool:
        employee_id = self.session.employee_id
        if not employee_id:
            return False
        self.loading = True
        try:
            data = await self.employees.get(employee_id)
            self.profile = EmployeeProfile.model_validate(unwrap(data))
        except (ApiError, ValueError):
            self.error = "Failed to fetch user details"
            return False
        finally:
            self.loading = False
        self.form = ProfileForm.from_profile(self.profile)
        return True

    # ── Form ────────────────────────────────────────────────────────

    def start_editing(self) -> None:
        self.is_editing = True
        self.success = ""

    def cancel_editing(self) -> None:
        self.is_editing = False
        if self.profile is not None:
            self.form = ProfileForm.from_profile(self.profile)

    def update_field(self, name: str, value: Any) -> None:
        if name not in ProfileForm.model_fields:
            raise KeyError(name)
        setattr(self.form, name, "" if value is None else str(value))

    async def change_profile_image(
        self,
        file: Union[Path, str, bytes],
        filename: Optional[str] = None,
    ) -> bool:
        try:
            url = await self.uploads.upload(file, filename)
        except (ApiError, UploadError, OSError) as exc:
            logger.error("Profile image upload failed: %r", exc)
            self.error = "Failed to upload image"
            return False
        self.form.profile_image = url
        return True

    async def save(self) -> bool:
        self.error = ""
        self.success = ""
        user = self.session.user
        if user is None or not user.id:
            self.error = "Failed to update profile"
            return False

        self.saving = True
        try:
            await self.employees.update(user.id, self.form.to_payload())
        except ApiError as exc:
            self.error = error_message(exc, "Failed to update profile")
            return False
        finally:
            self.saving = False

        self.success = "Profile updated successfully!"
        self.is_editing = False
        self.form.password = ""
        self.session.set_user(
            user.model_copy(
                update={
                    "first_name": self.form.first_name,
                    "last_name": self.form.last_name,
                    "name": self.form.full_name,
                    "email": self.form.email,
                    "phone": self.form.phone,
                    "profile_image": self.form.profile_image,
                },
            ),
        )
        return True
