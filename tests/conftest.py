"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from erp_hr.auth.service import create_access_token as _issue_token
from erp_hr.common.constants import LeaveStatus, UserRole
from erp_hr.database import Base, get_db
from erp_hr.main import create_app

# Import ALL model modules so every table is registered on Base.metadata
import erp_hr.common.audit  # noqa: F401
import erp_hr.core_hr.models  # noqa: F401
import erp_hr.leave.models  # noqa: F401
import erp_hr.attendance.models  # noqa: F401

from erp_hr.attendance.models import AttendanceRecord, Holiday
from erp_hr.core_hr.models import Employee, EmployeeSupervisor
from erp_hr.leave.models import LeaveApplication, LeaveGroup, LeavePolicy

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from erp_hr.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_employee(
    *,
    email: Optional[str] = None,
    first_name: str = "Test",
    last_name: str = "User",
    supervisor_id: Optional[uuid.UUID] = None,
    leave_approver_id: Optional[uuid.UUID] = None,
    leave_group_id: Optional[uuid.UUID] = None,
    is_active: bool = True,
) -> dict:
    code = uuid.uuid4().hex[:6].upper()
    return dict(
        id=uuid.uuid4(),
        employee_code=f"EMP-{code}",
        first_name=first_name,
        last_name=last_name,
        email=email or f"{first_name.lower()}.{code.lower()}@example.com",
        designation="Officer",
        supervisor_id=supervisor_id,
        leave_approver_id=leave_approver_id,
        leave_group_id=leave_group_id,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def seed_employee(db: AsyncSession, **kwargs) -> Employee:
    emp = Employee(**_make_employee(**kwargs))
    db.add(emp)
    await db.flush()
    return emp


async def seed_supervisor_link(
    db: AsyncSession,
    employee_id: uuid.UUID,
    supervisor_id: uuid.UUID,
    *,
    is_supervisor: bool = False,
    is_leave_approver: bool = False,
    is_direct_supervisor: bool = False,
) -> EmployeeSupervisor:
    link = EmployeeSupervisor(
        employee_id=employee_id,
        supervisor_id=supervisor_id,
        is_supervisor=is_supervisor,
        is_leave_approver=is_leave_approver,
        is_direct_supervisor=is_direct_supervisor,
    )
    db.add(link)
    await db.flush()
    return link


async def seed_leave_group(
    db: AsyncSession,
    policies: Optional[list[tuple[str, int]]] = None,
    *,
    name: str = "Standard",
) -> LeaveGroup:
    if policies is None:
        policies = [("Annual", 14), ("Sick", 10)]
    group = LeaveGroup(
        name=name,
        policies=[
            LeavePolicy(leave_type_name=t, allowed_balance=n, position=i)
            for i, (t, n) in enumerate(policies)
        ],
    )
    db.add(group)
    await db.flush()
    return group


async def seed_application(
    db: AsyncSession,
    employee_id: uuid.UUID,
    from_date: date,
    to_date: date,
    *,
    leave_type: str = "Annual",
    status: LeaveStatus = LeaveStatus.approved,
) -> LeaveApplication:
    app_ = LeaveApplication(
        employee_id=employee_id,
        leave_type=leave_type,
        from_date=from_date,
        to_date=to_date,
        status=status,
    )
    db.add(app_)
    await db.flush()
    return app_


async def seed_attendance(
    db: AsyncSession,
    employee_id: uuid.UUID,
    day: date,
    flag: str,
) -> AttendanceRecord:
    rec = AttendanceRecord(employee_id=employee_id, date=day, flag=flag)
    db.add(rec)
    await db.flush()
    return rec


async def seed_holiday(
    db: AsyncSession,
    from_date: date,
    to_date: Optional[date] = None,
    *,
    name: str = "Holiday",
) -> Holiday:
    hol = Holiday(name=name, from_date=from_date, to_date=to_date)
    db.add(hol)
    await db.flush()
    return hol


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    employee_id: uuid.UUID,
    role: UserRole = UserRole.employee,
    expired: bool = False,
) -> str:
    """Generate a JWT access token for testing."""
    delta = timedelta(hours=-1) if expired else None
    return _issue_token(employee_id, role, expires_delta=delta)


def make_auth_headers(
    employee_id: uuid.UUID,
    role: UserRole = UserRole.employee,
) -> dict[str, str]:
    """Bearer auth headers for a given employee/role."""
    return {"Authorization": f"Bearer {create_access_token(employee_id, role)}"}
