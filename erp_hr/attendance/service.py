"""Attendance service layer — team period summaries, calendars, holidays.

Each call loads a fresh snapshot of records, approved leave and holidays for
the requested window and hands it to ``erp_hr.attendance.aggregator``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Optional, Sequence, Union

from sqlalchemy import and_, extract, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from erp_hr.attendance.aggregator import (
    aggregate_attendance,
    build_period_window,
    classify_employee_days,
    count_flags,
)
from erp_hr.attendance.models import AttendanceRecord, Holiday
from erp_hr.attendance.schemas import (
    AttendanceRecordSnapshot,
    CalendarDayOut,
    EmployeeBriefOut,
    EmployeeCalendarOut,
    HolidayCreate,
    HolidayOut,
    HolidaySnapshot,
    TeamAttendanceSummaryOut,
)
from erp_hr.common.audit import create_audit_entry
from erp_hr.common.constants import (
    MAX_CALENDAR_RANGE_DAYS,
    AttendancePeriod,
    LeaveStatus,
)
from erp_hr.common.dates import each_day
from erp_hr.common.exceptions import ValidationException
from erp_hr.common.pagination import PaginationParams, paginate
from erp_hr.config import settings, today_local
from erp_hr.core_hr.service import EmployeeService
from erp_hr.leave.models import LeaveApplication
from erp_hr.leave.schemas import LeaveApplicationSnapshot

logger = logging.getLogger(__name__)


def _today() -> date:
    return today_local()


class _WindowSnapshot:
    """Records, approved leave and holidays touching one date window."""

    def __init__(
        self,
        records: list[AttendanceRecordSnapshot],
        applications: list[LeaveApplicationSnapshot],
        holidays: list[HolidaySnapshot],
    ) -> None:
        self.records = records
        self.applications = applications
        self.holidays = holidays


# ═════════════════════════════════════════════════════════════════════
# AttendanceService
# ═════════════════════════════════════════════════════════════════════


class AttendanceService:
    """Async attendance reads and holiday management."""

    # ── Snapshot loading ────────────────────────────────────────────

    @staticmethod
    async def _load_window(
        db: AsyncSession,
        employee_ids: Sequence[uuid.UUID],
        start: date,
        end: date,
    ) -> _WindowSnapshot:
        records: list[AttendanceRecordSnapshot] = []
        applications: list[LeaveApplicationSnapshot] = []
        if employee_ids:
            rec_result = await db.execute(
                select(AttendanceRecord).where(
                    AttendanceRecord.employee_id.in_(employee_ids),
                    AttendanceRecord.date >= start,
                    AttendanceRecord.date <= end,
                )
            )
            records = [
                AttendanceRecordSnapshot.model_validate(r)
                for r in rec_result.scalars().all()
            ]

            app_result = await db.execute(
                select(LeaveApplication).where(
                    LeaveApplication.employee_id.in_(employee_ids),
                    LeaveApplication.status == LeaveStatus.approved,
                    LeaveApplication.from_date <= end,
                    LeaveApplication.to_date >= start,
                )
            )
            applications = [
                LeaveApplicationSnapshot.model_validate(a)
                for a in app_result.scalars().all()
            ]

        hol_result = await db.execute(
            select(Holiday).where(
                Holiday.from_date <= end,
                or_(
                    Holiday.to_date >= start,
                    and_(Holiday.to_date.is_(None), Holiday.from_date >= start),
                ),
            )
        )
        holidays = [HolidaySnapshot.model_validate(h) for h in hol_result.scalars().all()]
        return _WindowSnapshot(records, applications, holidays)

    # ── Team summary ────────────────────────────────────────────────

    @staticmethod
    async def get_team_summary(
        db: AsyncSession,
        supervisor_id: uuid.UUID,
        period: Union[AttendancePeriod, str],
        today: Optional[date] = None,
    ) -> TeamAttendanceSummaryOut:
        """Bucket counts for every supervised employee over the trailing period."""
        period = AttendancePeriod(period)
        today = today or _today()
        days = build_period_window(period, today)

        employee_ids = await EmployeeService.get_supervised_employee_ids(db, supervisor_id)
        directory = await EmployeeService.build_directory(db, employee_ids)
        snapshot = await AttendanceService._load_window(db, employee_ids, days[0], days[-1])

        buckets = aggregate_attendance(
            employee_ids,
            days,
            snapshot.records,
            snapshot.applications,
            snapshot.holidays,
            settings.weekly_off_days,
            today,
        )
        logger.debug(
            "Team summary for %s: %d employees × %d days (%s)",
            supervisor_id, len(employee_ids), len(days), period.value,
        )
        return TeamAttendanceSummaryOut(
            period=period,
            from_date=days[0],
            to_date=days[-1],
            today=today,
            employee_count=len(employee_ids),
            buckets=buckets,
            # Keeps the supervised-by-name order
            employees=[
                EmployeeBriefOut.model_validate(directory[eid])
                for eid in employee_ids
                if eid in directory
            ],
        )

    # ── Per-employee calendar ───────────────────────────────────────

    @staticmethod
    async def get_employee_calendar(
        db: AsyncSession,
        employee_id: uuid.UUID,
        from_date: date,
        to_date: date,
        today: Optional[date] = None,
    ) -> EmployeeCalendarOut:
        """Day-by-day classification of one employee; future days stay blank."""
        if to_date < from_date:
            raise ValidationException({"to_date": ["To date must be on or after from date."]})
        if (to_date - from_date).days + 1 > MAX_CALENDAR_RANGE_DAYS:
            raise ValidationException(
                {"to_date": [f"Range may span at most {MAX_CALENDAR_RANGE_DAYS} days."]}
            )

        employee = await EmployeeService.get_employee(db, employee_id)
        today = today or _today()
        days = list(each_day(from_date, to_date))
        snapshot = await AttendanceService._load_window(db, [employee_id], from_date, to_date)

        calendar = classify_employee_days(
            employee_id,
            days,
            snapshot.records,
            snapshot.applications,
            snapshot.holidays,
            settings.weekly_off_days,
            today,
        )
        return EmployeeCalendarOut(
            employee=EmployeeBriefOut.model_validate(employee),
            from_date=from_date,
            to_date=to_date,
            days=[CalendarDayOut(date=d, flag=calendar[d]) for d in days],
            buckets=count_flags(calendar.values()),
        )

    # ── Holidays ────────────────────────────────────────────────────

    @staticmethod
    async def get_holidays(
        db: AsyncSession,
        pagination: PaginationParams,
        *,
        year: Optional[int] = None,
    ) -> dict[str, Any]:
        query = select(Holiday)
        if year is not None:
            query = query.where(extract("year", Holiday.from_date) == year)
        query = query.order_by(Holiday.from_date)
        return await paginate(db, query, pagination, schema=HolidayOut)

    @staticmethod
    async def create_holiday(
        db: AsyncSession,
        data: HolidayCreate,
        actor_id: uuid.UUID,
    ) -> HolidayOut:
        holiday = Holiday(
            name=data.name,
            holiday_type=data.holiday_type,
            from_date=data.from_date,
            to_date=data.to_date,
        )
        db.add(holiday)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Holiday %r created (%s..%s)", holiday.name, holiday.from_date, holiday.end_date)
        return HolidayOut.model_validate(holiday)
