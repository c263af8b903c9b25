"""Common module — shared utilities for the HRMS client."""

from hrms_client.common.constants import (
    ADMIN_ROLES,
    DATE_FORMAT,
    DEFAULT_PAGE_SIZE,
    LEAVE_TYPES,
    STAFF_ROLES,
    SUPER_ADMIN_ROLES,
    AttendanceStatus,
    LeaveStatus,
    RegularizationStatus,
    UserRole,
)
from hrms_client.common.exceptions import (
    ApiError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    TransportError,
    UploadError,
    ValidationError,
    error_message,
)
from hrms_client.common.filters import build_query, format_date
from hrms_client.common.models import EmployeeBrief, WireModel, unwrap
from hrms_client.common.pagination import Page, to_page, total_pages

__all__ = [
    # Constants / Enums
    "AttendanceStatus",
    "LeaveStatus",
    "RegularizationStatus",
    "UserRole",
    "ADMIN_ROLES",
    "STAFF_ROLES",
    "SUPER_ADMIN_ROLES",
    "LEAVE_TYPES",
    "DATE_FORMAT",
    "DEFAULT_PAGE_SIZE",
    # Exceptions
    "ApiError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "ServerError",
    "TransportError",
    "UploadError",
    "ValidationError",
    "error_message",
    # Filters
    "build_query",
    "format_date",
    # Models
    "EmployeeBrief",
    "WireModel",
    "unwrap",
    # Pagination
    "Page",
    "to_page",
    "total_pages",
]
