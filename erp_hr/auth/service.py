"""Access-token issuing.

Tokens are issued by the identity provider in front of this service; the
helper here mints compatible tokens for internal tooling and tests.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt

from erp_hr.common.constants import UserRole
from erp_hr.config import settings


def create_access_token(
    employee_id: uuid.UUID,
    role: UserRole = UserRole.employee,
    *,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Return an encoded access JWT (``sub``, ``role``, ``type``, ``exp``)."""
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(employee_id),
        "role": role.value,
        "type": "access",
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
