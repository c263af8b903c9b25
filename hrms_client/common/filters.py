"""Query-string building for list endpoints."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional

from hrms_client.common.constants import DATE_FORMAT


def build_query(params: dict[str, Any]) -> dict[str, str]:
    """
    Turn keyword filters into query-string parameters.

    * ``None``, empty strings and empty sequences are dropped.
    * Dates are sent as ``YYYY-MM-DD``; enums as their value.
    * Sequences are comma-joined (``employeeIds=a,b``).
    * Strings are stripped.
    """
    query: dict[str, str] = {}
    for key, value in params.items():
        encoded = _encode(value)
        if encoded is None:
            continue
        query[key] = encoded
    return query


def format_date(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime(DATE_FORMAT)


def _encode(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return format_date(value)
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, (list, tuple, set, frozenset)):
        parts = [p for p in (_encode(v) for v in _iter(value)) if p]
        return ",".join(parts) or None
    return str(value)


def _iter(values: Iterable[Any]) -> Iterable[Any]:
    if isinstance(values, (set, frozenset)):
        return sorted(values, key=str)
    return values
