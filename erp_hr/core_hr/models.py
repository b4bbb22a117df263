"""Core HR ORM models: Employee and the supervisor link table.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_hr.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    """Employee master record with reporting lines and leave-group assignment."""

    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_code: Mapped[str] = mapped_column(sa.String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[Optional[str]] = mapped_column(sa.String(100))
    display_name: Mapped[Optional[str]] = mapped_column(sa.String(200))
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    designation: Mapped[Optional[str]] = mapped_column(sa.String(150))
    profile_photo_url: Mapped[Optional[str]] = mapped_column(sa.Text)

    # Reporting lines
    supervisor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id", name="fk_emp_supervisor"),
    )
    leave_approver_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id", name="fk_emp_leave_approver"),
    )
    leave_group_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("leave_groups.id", name="fk_emp_leave_group", ondelete="SET NULL"),
    )

    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
    )

    # ── Relationships ───────────────────────────────────────────────
    supervisor_links: Mapped[list[EmployeeSupervisor]] = relationship(
        back_populates="employee",
        foreign_keys="EmployeeSupervisor.employee_id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        sa.Index("ix_employees_supervisor_id", "supervisor_id"),
        sa.Index("ix_employees_leave_approver_id", "leave_approver_id"),
    )

    @property
    def full_name(self) -> str:
        if self.display_name:
            return self.display_name
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def __repr__(self) -> str:
        return f"<Employee {self.employee_code} {self.full_name!r}>"


# ═════════════════════════════════════════════════════════════════════
# EmployeeSupervisor (additional reporting lines)
# ═════════════════════════════════════════════════════════════════════


class EmployeeSupervisor(Base):
    """Extra supervisor entry for an employee beyond the primary reporting line."""

    __tablename__ = "employee_supervisors"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "supervisor_id", name="uq_emp_supervisor"),
        sa.Index("ix_employee_supervisors_supervisor_id", "supervisor_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    supervisor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_supervisor: Mapped[bool] = mapped_column(sa.Boolean, default=False, nullable=False)
    is_leave_approver: Mapped[bool] = mapped_column(sa.Boolean, default=False, nullable=False)
    is_direct_supervisor: Mapped[bool] = mapped_column(sa.Boolean, default=False, nullable=False)

    employee: Mapped[Employee] = relationship(
        back_populates="supervisor_links", foreign_keys=[employee_id],
    )

    @property
    def grants_authority(self) -> bool:
        return self.is_supervisor or self.is_leave_approver or self.is_direct_supervisor

    def __repr__(self) -> str:
        return f"<EmployeeSupervisor {self.supervisor_id} → {self.employee_id}>"
