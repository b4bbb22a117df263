"""Common module — shared utilities for the ERP HR backend.

The audit trail lives in ``erp_hr.common.audit`` and is imported from there
directly; it pulls in the database engine.
"""

from erp_hr.common.constants import (
    DATE_FORMAT,
    DEFAULT_PAGE_SIZE,
    HR_ROLES,
    MAX_PAGE_SIZE,
    AttendanceFlag,
    AttendancePeriod,
    HolidayType,
    LeaveStatus,
    UserRole,
)
from erp_hr.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
    register_exception_handlers,
)
from erp_hr.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Constants / Enums
    "AttendanceFlag",
    "AttendancePeriod",
    "HolidayType",
    "LeaveStatus",
    "UserRole",
    "HR_ROLES",
    "DATE_FORMAT",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "ValidationException",
    "register_exception_handlers",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
