"""Common view-model base and embedded representations."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models mirroring backend JSON (camelCase on the wire).

    Unknown fields are kept; nothing here is validated beyond shape.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def id_field() -> Any:
    """``id`` accepting both ``_id`` and ``id`` from the backend."""
    return Field(
        default=None,
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="_id",
    )


def as_number(value: Any) -> float:
    """Lenient numeric coercion for form/backend values (blank → 0)."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number or number in (float("inf"), float("-inf")):
        return 0.0
    return number


class EmployeeBrief(WireModel):
    """Minimal employee info embedded in list responses."""

    id: Optional[str] = id_field()
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    employee_code: Optional[str] = None
    designation: Optional[str] = None
    profile_photo_url: Optional[str] = None

    @property
    def display_name(self) -> str:
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return self.name or full or "Employee"


def employee_ref(value: Any) -> Optional[str]:
    """Employee id from either a bare id or an embedded employee object."""
    if isinstance(value, dict):
        ref = value.get("_id") or value.get("id")
        return str(ref) if ref else None
    if isinstance(value, EmployeeBrief):
        return value.id
    return str(value) if value else None


def coerce_numbers(data: Any, fields: Iterable[str]) -> Any:
    """Apply ``as_number`` to the *fields* present in a raw dict."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for key in fields:
        if key in data:
            data[key] = as_number(data[key])
    return data


def unwrap(payload: Any, *keys: str) -> Any:
    """Return the object nested under the first present envelope key.

    Detail endpoints answer either with the object itself or wrapped as
    ``{"data": {...}}``; *keys* defaults to ``("data",)``.
    """
    if not isinstance(payload, dict):
        return payload
    for key in keys or ("data",):
        value = payload.get(key)
        if isinstance(value, dict):
            return value
    return payload
