"""Enums and constants for the ERP HR backend."""

from __future__ import annotations

import enum
from typing import Any, Optional


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    manager = "manager"
    hr_admin = "hr_admin"
    system_admin = "system_admin"


HR_ROLES: frozenset[UserRole] = frozenset({UserRole.hr_admin, UserRole.system_admin})


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"

    @classmethod
    def _missing_(cls, value: Any) -> Optional[LeaveStatus]:
        # Stored documents use "Approved" / "Pending" / "Rejected"
        if isinstance(value, str):
            return cls.__members__.get(value.strip().lower())
        return None


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceFlag(str, enum.Enum):
    """Day classification. Values are the single-letter codes used on
    attendance sheets and reports."""

    present = "P"
    delay = "D"
    leave = "L"
    holiday = "H"
    weekend = "W"
    absent = "A"

    @classmethod
    def parse(cls, raw: Any) -> Optional[AttendanceFlag]:
        """Map a stored flag (code or name, any case) to a member.

        Returns None for unrecognised values (e.g. visit "V" or blanks).
        """
        if not isinstance(raw, str):
            return None
        return _FLAG_ALIASES.get(raw.strip().lower())


_FLAG_ALIASES: dict[str, AttendanceFlag] = {
    "p": AttendanceFlag.present,
    "present": AttendanceFlag.present,
    "d": AttendanceFlag.delay,
    "delay": AttendanceFlag.delay,
    "delayed": AttendanceFlag.delay,
    "l": AttendanceFlag.leave,
    "leave": AttendanceFlag.leave,
    "on leave": AttendanceFlag.leave,
    "h": AttendanceFlag.holiday,
    "holiday": AttendanceFlag.holiday,
    "w": AttendanceFlag.weekend,
    "weekend": AttendanceFlag.weekend,
    "a": AttendanceFlag.absent,
    "absent": AttendanceFlag.absent,
}


class AttendancePeriod(str, enum.Enum):
    weekly = "weekly"
    monthly = "monthly"


class HolidayType(str, enum.Enum):
    public = "public"
    company = "company"


# ── Misc constants ──────────────────────────────────────────────────

DATE_FORMAT = "%d-%m-%Y"
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
MAX_CALENDAR_RANGE_DAYS = 92
