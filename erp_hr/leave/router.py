"""Leave router — balances, apply, approve/reject/cancel, leave groups.

All endpoints require authentication. Manager/HR-specific endpoints enforce role checks.
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from erp_hr.auth.dependencies import get_current_user, is_hr, require_role
from erp_hr.common.constants import LeaveStatus, UserRole
from erp_hr.common.exceptions import ForbiddenException
from erp_hr.common.pagination import PaginationParams
from erp_hr.core_hr.models import Employee
from erp_hr.core_hr.service import EmployeeService
from erp_hr.database import get_db
from erp_hr.leave.schemas import (
    LeaveApplicationCreate,
    LeaveApplicationOut,
    LeaveApproveRequest,
    LeaveBalanceReport,
    LeaveGroupAssignOut,
    LeaveGroupAssignRequest,
    LeaveGroupCreate,
    LeaveGroupOut,
    LeaveRejectRequest,
)
from erp_hr.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])

_MANAGERS = (UserRole.manager, UserRole.hr_admin, UserRole.system_admin)
_HR = (UserRole.hr_admin, UserRole.system_admin)


# ── GET /balances ───────────────────────────────────────────────────

@router.get("/balances", response_model=LeaveBalanceReport)
async def get_my_balances(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The authenticated user's used / remaining days for the current year."""
    return await LeaveService.get_balance_report(db, employee.id)


# ── GET /balances/{employee_id} ─────────────────────────────────────

@router.get("/balances/{employee_id}", response_model=LeaveBalanceReport)
async def get_employee_balances(
    employee_id: uuid.UUID,
    request: Request,
    employee: Employee = Depends(require_role(*_MANAGERS)),
    db: AsyncSession = Depends(get_db),
):
    """Balances of a supervised employee (any employee for HR)."""
    if employee_id != employee.id and not is_hr(request):
        if not await EmployeeService.is_supervisor_of(db, employee.id, employee_id):
            raise ForbiddenException("You can only view balances of your team.")
    return await LeaveService.get_balance_report(db, employee_id)


# ── POST /apply ─────────────────────────────────────────────────────

@router.post("/apply", response_model=LeaveApplicationOut, status_code=201)
async def apply_leave(
    body: LeaveApplicationCreate,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Apply for leave. The application starts as Pending."""
    return await LeaveService.apply_leave(db, employee.id, body)


# ── GET /my-applications ────────────────────────────────────────────

@router.get("/my-applications")
async def my_applications(
    status: Optional[LeaveStatus] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The authenticated user's leave applications with pagination."""
    return await LeaveService.get_leave_applications(
        db, employee.id, pagination, scope="my", status=status,
    )


# ── GET /team-applications ──────────────────────────────────────────

@router.get("/team-applications")
async def team_applications(
    request: Request,
    status: Optional[LeaveStatus] = Query(None),
    employee_id: Optional[uuid.UUID] = Query(None),
    pagination: PaginationParams = Depends(),
    employee: Employee = Depends(require_role(*_MANAGERS)),
    db: AsyncSession = Depends(get_db),
):
    """Leave applications of the caller's supervised employees (team view)."""
    return await LeaveService.get_leave_applications(
        db,
        employee.id,
        pagination,
        scope="team",
        status=status,
        employee_id=employee_id,
        is_hr=is_hr(request),
    )


# ── Leave groups (HR) ───────────────────────────────────────────────

@router.get("/groups", response_model=list[LeaveGroupOut])
async def list_leave_groups(
    employee: Employee = Depends(require_role(*_HR)),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.get_leave_groups(db)


@router.post("/groups", response_model=LeaveGroupOut, status_code=201)
async def create_leave_group(
    body: LeaveGroupCreate,
    employee: Employee = Depends(require_role(*_HR)),
    db: AsyncSession = Depends(get_db),
):
    """Create a leave group with its per-type yearly allowances."""
    return await LeaveService.create_leave_group(db, body, employee.id)


@router.put("/groups/{group_id}/assign", response_model=LeaveGroupAssignOut)
async def assign_leave_group(
    group_id: uuid.UUID,
    body: LeaveGroupAssignRequest,
    employee: Employee = Depends(require_role(*_HR)),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.assign_leave_group(
        db, group_id, body.employee_ids, employee.id,
    )


# ── PUT /{id}/approve ───────────────────────────────────────────────

@router.put("/{application_id}/approve", response_model=LeaveApplicationOut)
async def approve_leave(
    application_id: uuid.UUID,
    request: Request,
    body: Optional[LeaveApproveRequest] = None,
    employee: Employee = Depends(require_role(*_MANAGERS)),
    db: AsyncSession = Depends(get_db),
):
    """Approve a pending leave application."""
    return await LeaveService.approve_leave(
        db,
        application_id,
        employee.id,
        is_hr=is_hr(request),
        remarks=body.remarks if body else None,
    )


# ── PUT /{id}/reject ────────────────────────────────────────────────

@router.put("/{application_id}/reject", response_model=LeaveApplicationOut)
async def reject_leave(
    application_id: uuid.UUID,
    body: LeaveRejectRequest,
    request: Request,
    employee: Employee = Depends(require_role(*_MANAGERS)),
    db: AsyncSession = Depends(get_db),
):
    """Reject a pending leave application."""
    return await LeaveService.reject_leave(
        db, application_id, employee.id, body.reason, is_hr=is_hr(request),
    )


# ── PUT /{id}/cancel ────────────────────────────────────────────────

@router.put("/{application_id}/cancel", response_model=LeaveApplicationOut)
async def cancel_leave(
    application_id: uuid.UUID,
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Withdraw one of your own pending applications."""
    return await LeaveService.cancel_leave(db, application_id, employee.id)
