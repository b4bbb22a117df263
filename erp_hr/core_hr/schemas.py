"""Core HR Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict


class EmployeeBrief(BaseModel):
    """Minimal employee info for lists, avatars and lookups."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    employee_code: str
    full_name: str
    designation: Optional[str] = None
    profile_photo_url: Optional[str] = None


class SupervisorInfoOut(BaseModel):
    """Whether the caller supervises anyone, and whom."""

    employee_id: uuid.UUID
    is_supervisor: bool
    supervised: list[EmployeeBrief] = []
