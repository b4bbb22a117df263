"""Attendance Pydantic v2 schemas — aggregator inputs/outputs and API bodies."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from erp_hr.common.constants import AttendanceFlag, AttendancePeriod, HolidayType

DateLike = Union[datetime, date, str, None]


# ═════════════════════════════════════════════════════════════════════
# Aggregator inputs
# ═════════════════════════════════════════════════════════════════════


class AttendanceRecordSnapshot(BaseModel):
    """Read-only view of one stored attendance entry."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    employee_id: uuid.UUID
    date: DateLike = None
    flag: Optional[str] = None


class HolidaySnapshot(BaseModel):
    """Holiday interval; an empty ``to_date`` means a single day."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    name: Optional[str] = None
    from_date: DateLike = None
    to_date: DateLike = None


# ═════════════════════════════════════════════════════════════════════
# Aggregator outputs
# ═════════════════════════════════════════════════════════════════════


class AttendanceBuckets(BaseModel):
    """Per-category counts of (employee, day) pairs.

    ``not_due`` counts days after today that have no other classification.
    """

    present: int = 0
    delay: int = 0
    weekend: int = 0
    holiday: int = 0
    leave: int = 0
    absent: int = 0
    not_due: int = 0

    @property
    def classified(self) -> int:
        return (
            self.present + self.delay + self.weekend
            + self.holiday + self.leave + self.absent
        )

    @property
    def total(self) -> int:
        return self.classified + self.not_due


class EmployeeBriefOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    profile_photo_url: Optional[str] = None


class TeamAttendanceSummaryOut(BaseModel):
    """Response for GET /attendance/team-summary."""

    period: AttendancePeriod
    from_date: date
    to_date: date
    today: date
    employee_count: int
    buckets: AttendanceBuckets
    employees: list[EmployeeBriefOut] = []


class CalendarDayOut(BaseModel):
    date: date
    flag: Optional[AttendanceFlag] = None


class EmployeeCalendarOut(BaseModel):
    """Response for GET /attendance/employees/{id}/calendar."""

    employee: EmployeeBriefOut
    from_date: date
    to_date: date
    days: list[CalendarDayOut]
    buckets: AttendanceBuckets


# ═════════════════════════════════════════════════════════════════════
# Holiday
# ═════════════════════════════════════════════════════════════════════


class HolidayCreate(BaseModel):
    """Body for POST /attendance/holidays."""

    name: str = Field(..., min_length=1, max_length=200)
    holiday_type: HolidayType = HolidayType.public
    from_date: date
    to_date: Optional[date] = None

    @model_validator(mode="after")
    def _check_range(self) -> "HolidayCreate":
        if self.to_date is not None and self.to_date < self.from_date:
            raise ValueError("to_date must be on or after from_date")
        return self


class HolidayOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    holiday_type: HolidayType
    from_date: date
    to_date: Optional[date] = None
    created_at: datetime
