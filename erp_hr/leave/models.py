"""Leave ORM models: LeaveGroup, LeavePolicy, LeaveApplication."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp_hr.common.constants import LeaveStatus
from erp_hr.core_hr.models import Employee
from erp_hr.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═════════════════════════════════════════════════════════════════════
# LeaveGroup
# ═════════════════════════════════════════════════════════════════════


class LeaveGroup(Base):
    """Named bundle of leave policies assigned to employees."""

    __tablename__ = "leave_groups"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow,
    )

    # Policy order is the order shown on the balance screen
    policies: Mapped[list[LeavePolicy]] = relationship(
        back_populates="leave_group",
        cascade="all, delete-orphan",
        order_by="LeavePolicy.position",
    )

    def __repr__(self) -> str:
        return f"<LeaveGroup {self.name!r}>"


# ═════════════════════════════════════════════════════════════════════
# LeavePolicy
# ═════════════════════════════════════════════════════════════════════


class LeavePolicy(Base):
    """Yearly entitlement of one leave type within a group."""

    __tablename__ = "leave_policies"
    __table_args__ = (
        sa.UniqueConstraint("leave_group_id", "leave_type_name", name="uq_policy_group_type"),
        sa.CheckConstraint("allowed_balance >= 0", name="ck_policy_allowed_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    leave_group_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("leave_groups.id", ondelete="CASCADE"),
        nullable=False,
    )
    leave_type_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    allowed_balance: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    position: Mapped[int] = mapped_column(sa.Integer, default=0, nullable=False)

    leave_group: Mapped[LeaveGroup] = relationship(back_populates="policies")

    def __repr__(self) -> str:
        return f"<LeavePolicy {self.leave_type_name!r} {self.allowed_balance}d>"


# ═════════════════════════════════════════════════════════════════════
# LeaveApplication
# ═════════════════════════════════════════════════════════════════════


class LeaveApplication(Base):
    """A leave request covering an inclusive calendar-day interval."""

    __tablename__ = "leave_applications"
    __table_args__ = (
        sa.Index("ix_leave_applications_employee_status", "employee_id", "status"),
        sa.Index("ix_leave_applications_dates", "from_date", "to_date"),
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
    leave_type: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    from_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    to_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        default=LeaveStatus.pending,
        nullable=False,
    )
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)

    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"),
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    reviewer_remarks: Mapped[Optional[str]] = mapped_column(sa.Text)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
    )

    employee: Mapped[Employee] = relationship(foreign_keys=[employee_id])
    reviewer: Mapped[Optional[Employee]] = relationship(foreign_keys=[reviewed_by])

    def __repr__(self) -> str:
        return (
            f"<LeaveApplication {self.leave_type} {self.from_date}..{self.to_date}"
            f" {self.status.value}>"
        )
