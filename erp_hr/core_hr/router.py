"""Core HR router — the caller's reporting-line information."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from erp_hr.auth.dependencies import get_current_user
from erp_hr.core_hr.models import Employee
from erp_hr.core_hr.schemas import SupervisorInfoOut
from erp_hr.core_hr.service import EmployeeService
from erp_hr.database import get_db

employees_router = APIRouter(tags=["employees"])


# ── GET /me/supervisor-info ─────────────────────────────────────────

@employees_router.get("/me/supervisor-info", response_model=SupervisorInfoOut)
async def get_supervisor_info(
    employee: Employee = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Whether the caller supervises anyone, with the supervised employees."""
    return await EmployeeService.get_supervisor_info(db, employee.id)
