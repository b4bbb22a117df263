"""Leave Pydantic v2 schemas — calculator inputs/outputs and API bodies.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out                → response bodies (read)
  - *Snapshot / *Rule   → read-only inputs to the balance calculator
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from erp_hr.common.constants import LeaveStatus

# Stored dates may arrive as ``date`` or as ISO strings of varying quality
DateLike = Union[datetime, date, str, None]


# ═════════════════════════════════════════════════════════════════════
# Calculator inputs / outputs
# ═════════════════════════════════════════════════════════════════════


class LeavePolicyRule(BaseModel):
    """One leave type and its yearly allowance."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    name: str = Field(validation_alias=AliasChoices("name", "leave_type_name"))
    allowed: int = Field(
        ge=0, validation_alias=AliasChoices("allowed", "allowed_balance"),
    )


class LeaveApplicationSnapshot(BaseModel):
    """Read-only view of a leave application as seen by the calculators."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    employee_id: Optional[uuid.UUID] = None
    leave_type: str = ""
    from_date: DateLike = None
    to_date: DateLike = None
    status: Union[LeaveStatus, str, None] = None

    @property
    def leave_status(self) -> Optional[LeaveStatus]:
        if isinstance(self.status, LeaveStatus):
            return self.status
        if self.status is None:
            return None
        try:
            return LeaveStatus(self.status)
        except ValueError:
            return None

    @property
    def is_approved(self) -> bool:
        return self.leave_status is LeaveStatus.approved


class LeaveBalanceSummary(BaseModel):
    """Used / remaining days of one leave type in the current year."""

    name: str
    allowed: int
    used: int
    remaining: int


class LeaveBalanceReport(BaseModel):
    """All balances of an employee plus the totals for the year."""

    employee_id: Optional[uuid.UUID] = None
    year: int
    balances: list[LeaveBalanceSummary]
    total_allowed: int
    total_used: int
    total_remaining: int


# ═════════════════════════════════════════════════════════════════════
# Leave Application
# ═════════════════════════════════════════════════════════════════════


class LeaveApplicationCreate(BaseModel):
    """Body for POST /leave/apply."""

    leave_type: str = Field(..., min_length=1, max_length=100)
    from_date: date
    to_date: date
    reason: Optional[str] = Field(None, max_length=2000)

    @model_validator(mode="after")
    def _check_range(self) -> "LeaveApplicationCreate":
        if self.to_date < self.from_date:
            raise ValueError("to_date must be on or after from_date")
        return self


class LeaveApproveRequest(BaseModel):
    remarks: Optional[str] = Field(None, max_length=2000)


class LeaveRejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)


class EmployeeBrief(BaseModel):
    """Minimal employee info embedded in leave responses."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_code: str
    full_name: str
    designation: Optional[str] = None
    profile_photo_url: Optional[str] = None


class LeaveApplicationOut(BaseModel):
    """Full leave application representation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: str
    from_date: date
    to_date: date
    total_days: int = 0
    status: LeaveStatus
    reason: Optional[str] = None
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    reviewer_remarks: Optional[str] = None
    created_at: datetime
    employee: Optional[EmployeeBrief] = None

    @model_validator(mode="after")
    def _fill_total_days(self) -> "LeaveApplicationOut":
        if not self.total_days:
            self.total_days = (self.to_date - self.from_date).days + 1
        return self


# ═════════════════════════════════════════════════════════════════════
# Leave Group
# ═════════════════════════════════════════════════════════════════════


class LeavePolicyCreate(BaseModel):
    leave_type_name: str = Field(..., min_length=1, max_length=100)
    allowed_balance: int = Field(..., ge=0, le=366)


class LeaveGroupCreate(BaseModel):
    """Body for POST /leave/groups."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    policies: list[LeavePolicyCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_types(self) -> "LeaveGroupCreate":
        names = [p.leave_type_name.strip().lower() for p in self.policies]
        if len(names) != len(set(names)):
            raise ValueError("leave types within a group must be unique")
        return self


class LeavePolicyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    leave_type_name: str
    allowed_balance: int


class LeaveGroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    policies: list[LeavePolicyOut] = []
    created_at: datetime


class LeaveGroupAssignRequest(BaseModel):
    """Body for PUT /leave/groups/{id}/assign."""

    employee_ids: list[uuid.UUID] = Field(..., min_length=1)


class LeaveGroupAssignOut(BaseModel):
    leave_group_id: uuid.UUID
    assigned: int
