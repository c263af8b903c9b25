"""Auth Pydantic schemas — login exchange and the signed-in user."""


from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hrms_client.common.constants import UserRole


# ── Requests ────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


# ── Embedded / Shared ──────────────────────────────────────────────

class User(BaseModel):
    """The signed-in user as returned by the backend.

    Unknown fields are preserved so a profile update never drops data the
    client does not model.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="_id",
    )
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    organization_id: Optional[str] = None
    employee_code: Optional[str] = None
    designation: Optional[str] = None
    profile_photo_url: Optional[str] = None
    profile_image: Optional[str] = None

    @property
    def user_role(self) -> Optional[UserRole]:
        return UserRole.parse(self.role)

    @property
    def display_name(self) -> str:
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return self.name or full or "Employee"

    @property
    def avatar_url(self) -> Optional[str]:
        return self.profile_photo_url or self.profile_image

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ── Responses ───────────────────────────────────────────────────────

class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token: str = Field(validation_alias=AliasChoices("token", "accessToken", "access_token"))
    user: User
    role: Optional[str] = None
    message: Optional[str] = None

    @property
    def effective_role(self) -> Optional[str]:
        return self.user.role or self.role
