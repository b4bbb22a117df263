"""Attendance ORM models: daily AttendanceRecord and company Holiday."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from erp_hr.common.constants import HolidayType
from erp_hr.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttendanceRecord(Base):
    """One attendance entry per employee per day.

    ``flag`` keeps the raw value from the attendance source (``"P"``,
    ``"Delay"``, ``"V"`` …); it is interpreted with ``AttendanceFlag.parse``.
    """

    __tablename__ = "attendance_records"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_emp_date"),
        sa.Index("ix_attendance_records_date", "date"),
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
    date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    flag: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    in_time: Mapped[Optional[time]] = mapped_column(sa.Time)
    out_time: Mapped[Optional[time]] = mapped_column(sa.Time)
    remarks: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow,
    )

    def __repr__(self) -> str:
        return f"<AttendanceRecord {self.employee_id} {self.date} {self.flag!r}>"


class Holiday(Base):
    """Company-wide holiday; ``to_date`` NULL means a single day."""

    __tablename__ = "holidays"
    __table_args__ = (
        sa.Index("ix_holidays_from_date", "from_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    holiday_type: Mapped[HolidayType] = mapped_column(
        sa.Enum(HolidayType, name="holiday_type"),
        default=HolidayType.public,
        nullable=False,
    )
    from_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    to_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=_utcnow,
    )

    @property
    def end_date(self) -> date:
        return self.to_date or self.from_date

    def __repr__(self) -> str:
        return f"<Holiday {self.name!r} {self.from_date}..{self.end_date}>"
