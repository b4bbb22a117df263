"""Leave service layer — balances, applications, approvals, leave groups.

Business logic:
  - Balance report: snapshot of the employee's policies and applications fed
    to the pure calculator in ``erp_hr.leave.balance``
  - Application lifecycle: Pending → Approved / Rejected, or Cancelled by owner
  - Approval authority: the employee's supervisors / leave approvers, or HR
  - Leave groups: creation, listing and assignment to employees (HR)
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp_hr.common.audit import create_audit_entry
from erp_hr.common.constants import LeaveStatus
from erp_hr.common.dates import year_bounds
from erp_hr.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from erp_hr.common.pagination import PaginationParams, paginate
from erp_hr.config import today_local
from erp_hr.core_hr.models import Employee
from erp_hr.core_hr.service import EmployeeService
from erp_hr.leave.balance import summarize_leave_balances
from erp_hr.leave.models import LeaveApplication, LeaveGroup, LeavePolicy
from erp_hr.leave.schemas import (
    LeaveApplicationCreate,
    LeaveApplicationOut,
    LeaveApplicationSnapshot,
    LeaveBalanceReport,
    LeaveGroupAssignOut,
    LeaveGroupCreate,
    LeaveGroupOut,
    LeavePolicyRule,
)

logger = logging.getLogger(__name__)


_AUDIT_ACTIONS: dict[LeaveStatus, str] = {
    LeaveStatus.approved: "approve",
    LeaveStatus.rejected: "reject",
    LeaveStatus.cancelled: "cancel",
}


def _today() -> date:
    return today_local()


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations: balances, applications, approvals, groups."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_group(
        db: AsyncSession,
        group_id: Optional[uuid.UUID],
    ) -> Optional[LeaveGroup]:
        if group_id is None:
            return None
        result = await db.execute(
            select(LeaveGroup)
            .where(LeaveGroup.id == group_id)
            .options(selectinload(LeaveGroup.policies))
        )
        return result.scalars().first()

    @staticmethod
    async def _load_application(
        db: AsyncSession,
        application_id: uuid.UUID,
    ) -> LeaveApplication:
        result = await db.execute(
            select(LeaveApplication)
            .where(LeaveApplication.id == application_id)
            .options(selectinload(LeaveApplication.employee))
            .execution_options(populate_existing=True)
        )
        application = result.scalars().first()
        if application is None:
            raise NotFoundException("LeaveApplication", application_id)
        return application

    @staticmethod
    def _require_pending(application: LeaveApplication, action: str) -> None:
        if application.status != LeaveStatus.pending:
            raise ValidationException(
                {"status": [
                    f"Only pending applications can be {action}; "
                    f"this one is {application.status.value}."
                ]}
            )

    @staticmethod
    async def _ensure_reviewer(
        db: AsyncSession,
        application: LeaveApplication,
        reviewer_id: uuid.UUID,
        is_hr: bool,
    ) -> None:
        if application.employee_id == reviewer_id:
            raise ForbiddenException("You cannot review your own leave application.")
        if is_hr:
            return
        if not await EmployeeService.is_supervisor_of(db, reviewer_id, application.employee_id):
            raise ForbiddenException(
                "You are not authorized to review this leave application."
            )

    # ─────────────────────────────────────────────────────────────────
    # Balances
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_balance_report(
        db: AsyncSession,
        employee_id: uuid.UUID,
        now: Optional[Union[date, datetime]] = None,
    ) -> LeaveBalanceReport:
        """Used / remaining days per leave type for the current year."""
        employee = await EmployeeService.get_employee(db, employee_id)
        reference = now or _today()
        year_start, year_end = year_bounds(reference)

        group = await LeaveService._get_group(db, employee.leave_group_id)
        if group is None:
            if employee.leave_group_id is not None:
                logger.warning(
                    "Employee %s references missing leave group %s",
                    employee_id, employee.leave_group_id,
                )
            return summarize_leave_balances([], [], reference, employee_id=employee_id)

        result = await db.execute(
            select(LeaveApplication).where(
                LeaveApplication.employee_id == employee_id,
                LeaveApplication.status == LeaveStatus.approved,
                LeaveApplication.from_date <= year_end,
                LeaveApplication.to_date >= year_start,
            )
        )
        applications = [
            LeaveApplicationSnapshot.model_validate(a) for a in result.scalars().all()
        ]
        policies = [LeavePolicyRule.model_validate(p) for p in group.policies]
        return summarize_leave_balances(
            policies, applications, reference, employee_id=employee_id,
        )

    # ─────────────────────────────────────────────────────────────────
    # Apply
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        db: AsyncSession,
        employee_id: uuid.UUID,
        data: LeaveApplicationCreate,
    ) -> LeaveApplicationOut:
        """Create a Pending application for one of the employee's leave types."""
        if data.to_date < data.from_date:
            raise ValidationException(
                {"to_date": ["To date must be on or after from date."]}
            )

        employee = await EmployeeService.get_employee(db, employee_id)
        group = await LeaveService._get_group(db, employee.leave_group_id)
        if group is None:
            raise ValidationException(
                {"leave_type": ["No leave group is assigned to this employee."]}
            )
        allowed_types = {p.leave_type_name for p in group.policies}
        if data.leave_type not in allowed_types:
            raise ValidationException(
                {"leave_type": [
                    f"'{data.leave_type}' is not available. "
                    f"Choose one of: {', '.join(sorted(allowed_types))}."
                ]}
            )

        application = LeaveApplication(
            employee_id=employee_id,
            leave_type=data.leave_type,
            from_date=data.from_date,
            to_date=data.to_date,
            reason=data.reason,
            status=LeaveStatus.pending,
        )
        db.add(application)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="leave_application",
            entity_id=application.id,
            actor_id=employee_id,
            new_values={
                "leave_type": data.leave_type,
                "from_date": data.from_date.isoformat(),
                "to_date": data.to_date.isoformat(),
                "status": LeaveStatus.pending.value,
            },
        )
        logger.info(
            "Leave application %s created by %s (%s %s..%s)",
            application.id, employee_id, data.leave_type, data.from_date, data.to_date,
        )

        application = await LeaveService._load_application(db, application.id)
        return LeaveApplicationOut.model_validate(application)

    # ─────────────────────────────────────────────────────────────────
    # Review / cancel
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _transition(
        db: AsyncSession,
        application: LeaveApplication,
        new_status: LeaveStatus,
        actor_id: uuid.UUID,
        *,
        remarks: Optional[str] = None,
        reviewed: bool = True,
    ) -> LeaveApplicationOut:
        now = datetime.now(timezone.utc)
        old_status = application.status.value

        application.status = new_status
        if reviewed:
            application.reviewed_by = actor_id
            application.reviewed_at = now
            application.reviewer_remarks = remarks
        application.updated_at = now
        await db.flush()

        await create_audit_entry(
            db,
            action=_AUDIT_ACTIONS[new_status],
            entity_type="leave_application",
            entity_id=application.id,
            actor_id=actor_id,
            old_values={"status": old_status},
            new_values={"status": new_status.value, "remarks": remarks},
        )
        logger.info(
            "Leave application %s %s → %s by %s",
            application.id, old_status, new_status.value, actor_id,
        )

        application = await LeaveService._load_application(db, application.id)
        return LeaveApplicationOut.model_validate(application)

    @staticmethod
    async def approve_leave(
        db: AsyncSession,
        application_id: uuid.UUID,
        approver_id: uuid.UUID,
        *,
        is_hr: bool = False,
        remarks: Optional[str] = None,
    ) -> LeaveApplicationOut:
        """Approve a pending application. Approver must supervise the employee or be HR."""
        application = await LeaveService._load_application(db, application_id)
        LeaveService._require_pending(application, "approved")
        await LeaveService._ensure_reviewer(db, application, approver_id, is_hr)
        return await LeaveService._transition(
            db, application, LeaveStatus.approved, approver_id, remarks=remarks,
        )

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        application_id: uuid.UUID,
        approver_id: uuid.UUID,
        reason: str,
        *,
        is_hr: bool = False,
    ) -> LeaveApplicationOut:
        """Reject a pending application with a reason."""
        application = await LeaveService._load_application(db, application_id)
        LeaveService._require_pending(application, "rejected")
        await LeaveService._ensure_reviewer(db, application, approver_id, is_hr)
        return await LeaveService._transition(
            db, application, LeaveStatus.rejected, approver_id, remarks=reason,
        )

    @staticmethod
    async def cancel_leave(
        db: AsyncSession,
        application_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> LeaveApplicationOut:
        """Owner withdraws their own pending application."""
        application = await LeaveService._load_application(db, application_id)
        if application.employee_id != employee_id:
            raise ForbiddenException("You can only cancel your own leave applications.")
        LeaveService._require_pending(application, "cancelled")
        return await LeaveService._transition(
            db, application, LeaveStatus.cancelled, employee_id, reviewed=False,
        )

    # ─────────────────────────────────────────────────────────────────
    # Listing
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_leave_applications(
        db: AsyncSession,
        requestor_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        scope: str = "my",
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[uuid.UUID] = None,
        is_hr: bool = False,
    ) -> dict[str, Any]:
        """Paginated applications, newest first.

        ``scope="my"`` lists the requestor's own; ``scope="team"`` lists the
        supervised employees' (all employees for HR), optionally narrowed to
        one ``employee_id``.
        """
        query = select(LeaveApplication).options(selectinload(LeaveApplication.employee))

        if scope == "my":
            query = query.where(LeaveApplication.employee_id == requestor_id)
        else:
            if is_hr:
                if employee_id is not None:
                    query = query.where(LeaveApplication.employee_id == employee_id)
            else:
                team_ids = await EmployeeService.get_supervised_employee_ids(db, requestor_id)
                if employee_id is not None:
                    if employee_id not in team_ids:
                        raise ForbiddenException(
                            "You can only view leave applications of your team."
                        )
                    team_ids = [employee_id]
                query = query.where(LeaveApplication.employee_id.in_(team_ids))

        if status is not None:
            query = query.where(LeaveApplication.status == status)

        query = query.order_by(
            LeaveApplication.from_date.desc(), LeaveApplication.created_at.desc(),
        )
        return await paginate(db, query, pagination, schema=LeaveApplicationOut)

    # ─────────────────────────────────────────────────────────────────
    # Leave groups
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def create_leave_group(
        db: AsyncSession,
        data: LeaveGroupCreate,
        actor_id: uuid.UUID,
    ) -> LeaveGroupOut:
        existing = await db.execute(
            select(LeaveGroup.id).where(func.lower(LeaveGroup.name) == data.name.lower())
        )
        if existing.first() is not None:
            raise ConflictError("name", data.name)

        group = LeaveGroup(
            name=data.name,
            description=data.description,
            policies=[
                LeavePolicy(
                    leave_type_name=p.leave_type_name,
                    allowed_balance=p.allowed_balance,
                    position=i,
                )
                for i, p in enumerate(data.policies)
            ],
        )
        db.add(group)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="leave_group",
            entity_id=group.id,
            actor_id=actor_id,
            new_values=data.model_dump(),
        )
        logger.info("Leave group %r created with %d policies", group.name, len(data.policies))

        group = await LeaveService._get_group(db, group.id)
        return LeaveGroupOut.model_validate(group)

    @staticmethod
    async def get_leave_groups(db: AsyncSession) -> list[LeaveGroupOut]:
        result = await db.execute(
            select(LeaveGroup)
            .options(selectinload(LeaveGroup.policies))
            .order_by(LeaveGroup.name)
        )
        return [LeaveGroupOut.model_validate(g) for g in result.scalars().all()]

    @staticmethod
    async def assign_leave_group(
        db: AsyncSession,
        group_id: uuid.UUID,
        employee_ids: list[uuid.UUID],
        actor_id: uuid.UUID,
    ) -> LeaveGroupAssignOut:
        """Point every listed employee at the leave group."""
        group = await LeaveService._get_group(db, group_id)
        if group is None:
            raise NotFoundException("LeaveGroup", group_id)

        unique_ids = list(dict.fromkeys(employee_ids))
        result = await db.execute(select(Employee).where(Employee.id.in_(unique_ids)))
        employees = {e.id: e for e in result.scalars().all()}
        for emp_id in unique_ids:
            if emp_id not in employees:
                raise NotFoundException("Employee", emp_id)

        for emp_id in unique_ids:
            employee = employees[emp_id]
            old_group = employee.leave_group_id
            employee.leave_group_id = group.id
            await create_audit_entry(
                db,
                action="assign",
                entity_type="employee",
                entity_id=emp_id,
                actor_id=actor_id,
                old_values={"leave_group_id": str(old_group) if old_group else None},
                new_values={"leave_group_id": str(group.id)},
            )
        await db.flush()
        logger.info("Leave group %r assigned to %d employee(s)", group.name, len(unique_ids))

        return LeaveGroupAssignOut(leave_group_id=group.id, assigned=len(unique_ids))
