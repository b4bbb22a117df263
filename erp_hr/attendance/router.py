"""Attendance router — team period summary, employee calendar, holidays."""


import uuid
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from erp_hr.attendance.schemas import (
    EmployeeCalendarOut,
    HolidayCreate,
    HolidayOut,
    TeamAttendanceSummaryOut,
)
from erp_hr.attendance.service import AttendanceService
from erp_hr.auth.dependencies import get_current_user, is_hr, require_role
from erp_hr.common.constants import AttendancePeriod, UserRole
from erp_hr.common.exceptions import ForbiddenException
from erp_hr.common.pagination import PaginationParams
from erp_hr.config import today_local
from erp_hr.core_hr.models import Employee
from erp_hr.core_hr.service import EmployeeService
from erp_hr.database import get_db

router = APIRouter(prefix="", tags=["attendance"])


# ── GET /team-summary ───────────────────────────────────────────────

@router.get("/team-summary", response_model=TeamAttendanceSummaryOut)
async def team_summary(
    period: AttendancePeriod = Query(AttendancePeriod.weekly),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Present/delay/weekend/holiday/leave/absent counts for the caller's team."""
    return await AttendanceService.get_team_summary(db, employee.id, period)


# ── GET /employees/{id}/calendar ────────────────────────────────────

@router.get("/employees/{employee_id}/calendar", response_model=EmployeeCalendarOut)
async def employee_calendar(
    employee_id: uuid.UUID,
    request: Request,
    from_date: Optional[date] = Query(None, description="Defaults to the first of this month"),
    to_date: Optional[date] = Query(None, description="Defaults to the end of this month"),
    employee: Employee = Depends(
        require_role(UserRole.manager, UserRole.hr_admin, UserRole.system_admin)
    ),
    db: AsyncSession = Depends(get_db),
):
    """Daily attendance flags of one supervised employee."""
    if employee_id != employee.id and not is_hr(request):
        if not await EmployeeService.is_supervisor_of(db, employee.id, employee_id):
            raise ForbiddenException("You can only view attendance of your team.")

    today = today_local()
    if from_date is None:
        from_date = today.replace(day=1)
    if to_date is None:
        next_month = (from_date.replace(day=28) + timedelta(days=4)).replace(day=1)
        to_date = next_month - timedelta(days=1)
    return await AttendanceService.get_employee_calendar(
        db, employee_id, from_date, to_date, today=today,
    )


# ── Holidays ────────────────────────────────────────────────────────

@router.get("/holidays")
async def list_holidays(
    year: Optional[int] = Query(None, ge=1900, le=2999),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List company holidays, optionally for one year."""
    return await AttendanceService.get_holidays(db, pagination, year=year)


@router.post("/holidays", response_model=HolidayOut, status_code=201)
async def create_holiday(
    body: HolidayCreate,
    employee: Employee = Depends(require_role(UserRole.hr_admin, UserRole.system_admin)),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.create_holiday(db, body, employee.id)
