"""Core HR service layer — employee lookups and reporting-line resolution.

An employee is supervised by X when any of these hold:
  - ``Employee.supervisor_id == X``
  - ``Employee.leave_approver_id == X``
  - an ``EmployeeSupervisor`` row links them to X with a supervisor,
    leave-approver or direct-supervisor flag set
"""

from __future__ import annotations

import logging
import uuid
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from erp_hr.common.exceptions import NotFoundException
from erp_hr.core_hr.models import Employee, EmployeeSupervisor
from erp_hr.core_hr.schemas import EmployeeBrief, SupervisorInfoOut

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# EmployeeDirectory
# ═════════════════════════════════════════════════════════════════════


class EmployeeDirectory(Mapping[uuid.UUID, EmployeeBrief]):
    """Read-only id → brief lookup, built once per request."""

    def __init__(self, entries: Iterable[EmployeeBrief]) -> None:
        self._entries = MappingProxyType({e.id: e for e in entries})

    def __getitem__(self, key: uuid.UUID) -> EmployeeBrief:
        return self._entries[key]

    def __iter__(self) -> Iterator[uuid.UUID]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def name_of(self, employee_id: uuid.UUID, default: str = "Unknown") -> str:
        entry = self._entries.get(employee_id)
        return entry.full_name if entry else default

    def photo_of(self, employee_id: uuid.UUID) -> Optional[str]:
        entry = self._entries.get(employee_id)
        return entry.profile_photo_url if entry else None


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


def _supervised_filter(supervisor_id: uuid.UUID):
    linked = select(EmployeeSupervisor.employee_id).where(
        EmployeeSupervisor.supervisor_id == supervisor_id,
        or_(
            EmployeeSupervisor.is_supervisor.is_(True),
            EmployeeSupervisor.is_leave_approver.is_(True),
            EmployeeSupervisor.is_direct_supervisor.is_(True),
        ),
    )
    return or_(
        Employee.supervisor_id == supervisor_id,
        Employee.leave_approver_id == supervisor_id,
        Employee.id.in_(linked),
    )


class EmployeeService:
    """Async employee lookups used by the leave and attendance modules."""

    @staticmethod
    async def get_employee(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
        """Load an employee or raise 404."""
        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", employee_id)
        return employee

    @staticmethod
    def _supervised_query(supervisor_id: uuid.UUID) -> Select:
        return (
            select(Employee)
            .where(
                Employee.is_active.is_(True),
                Employee.id != supervisor_id,
                _supervised_filter(supervisor_id),
            )
            .order_by(Employee.first_name, Employee.last_name, Employee.employee_code)
        )

    @staticmethod
    async def get_supervised_employees(
        db: AsyncSession,
        supervisor_id: uuid.UUID,
    ) -> Sequence[Employee]:
        """Active employees supervised by *supervisor_id*, each listed once."""
        result = await db.execute(EmployeeService._supervised_query(supervisor_id))
        return result.scalars().unique().all()

    @staticmethod
    async def get_supervised_employee_ids(
        db: AsyncSession,
        supervisor_id: uuid.UUID,
    ) -> list[uuid.UUID]:
        employees = await EmployeeService.get_supervised_employees(db, supervisor_id)
        return [e.id for e in employees]

    @staticmethod
    async def is_supervisor_of(
        db: AsyncSession,
        supervisor_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> bool:
        """True when *supervisor_id* supervises or approves leave for *employee_id*."""
        if supervisor_id == employee_id:
            return False
        result = await db.execute(
            select(Employee.id).where(
                Employee.id == employee_id,
                _supervised_filter(supervisor_id),
            )
        )
        return result.first() is not None

    @staticmethod
    async def get_supervisor_info(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> SupervisorInfoOut:
        employees = await EmployeeService.get_supervised_employees(db, employee_id)
        return SupervisorInfoOut(
            employee_id=employee_id,
            is_supervisor=bool(employees),
            supervised=[EmployeeBrief.model_validate(e) for e in employees],
        )

    @staticmethod
    async def build_directory(
        db: AsyncSession,
        employee_ids: Iterable[uuid.UUID],
    ) -> EmployeeDirectory:
        """Snapshot names and photos of the given employees."""
        ids = set(employee_ids)
        if not ids:
            return EmployeeDirectory([])
        result = await db.execute(select(Employee).where(Employee.id.in_(ids)))
        employees = result.scalars().all()
        missing = ids - {e.id for e in employees}
        if missing:
            logger.warning("Directory lookup missed %d employee id(s)", len(missing))
        return EmployeeDirectory(EmployeeBrief.model_validate(e) for e in employees)
