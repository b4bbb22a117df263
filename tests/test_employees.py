"""Core HR tests — supervision resolution, supervisor info, the read-only
employee directory, and the supervisor-info endpoint.
"""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from erp_hr.common.exceptions import NotFoundException
from erp_hr.core_hr.service import EmployeeDirectory, EmployeeService
from tests.conftest import (
    make_auth_headers,
    seed_employee,
    seed_supervisor_link,
)


class TestSupervisedEmployees:
    """EmployeeService.get_supervised_employee_ids()."""

    async def test_union_of_all_reporting_lines(self, db: AsyncSession):
        boss = await seed_employee(db, first_name="Boss")
        direct = await seed_employee(db, first_name="Direct", supervisor_id=boss.id)
        approvee = await seed_employee(db, first_name="Approvee", leave_approver_id=boss.id)
        linked_sup = await seed_employee(db, first_name="LinkSup")
        linked_appr = await seed_employee(db, first_name="LinkAppr")
        linked_direct = await seed_employee(db, first_name="LinkDirect")
        unrelated = await seed_employee(db, first_name="Unrelated")

        await seed_supervisor_link(db, linked_sup.id, boss.id, is_supervisor=True)
        await seed_supervisor_link(db, linked_appr.id, boss.id, is_leave_approver=True)
        await seed_supervisor_link(db, linked_direct.id, boss.id, is_direct_supervisor=True)
        await seed_supervisor_link(db, unrelated.id, boss.id)

        ids = await EmployeeService.get_supervised_employee_ids(db, boss.id)

        assert set(ids) == {
            direct.id, approvee.id, linked_sup.id, linked_appr.id, linked_direct.id,
        }

    async def test_employee_reachable_through_several_lines_listed_once(self, db: AsyncSession):
        boss = await seed_employee(db, first_name="Boss")
        emp = await seed_employee(
            db, first_name="Both", supervisor_id=boss.id, leave_approver_id=boss.id,
        )
        await seed_supervisor_link(db, emp.id, boss.id, is_supervisor=True, is_leave_approver=True)

        assert await EmployeeService.get_supervised_employee_ids(db, boss.id) == [emp.id]

    async def test_self_is_never_supervised(self, db: AsyncSession):
        boss = await seed_employee(db, first_name="Boss")
        boss.supervisor_id = boss.id
        await db.flush()

        assert await EmployeeService.get_supervised_employee_ids(db, boss.id) == []
        assert await EmployeeService.is_supervisor_of(db, boss.id, boss.id) is False

    async def test_results_sorted_by_name(self, db: AsyncSession):
        boss = await seed_employee(db, first_name="Boss")
        for name in ("Zed", "Amy", "Kim"):
            await seed_employee(db, first_name=name, supervisor_id=boss.id)

        employees = await EmployeeService.get_supervised_employees(db, boss.id)
        assert [e.first_name for e in employees] == ["Amy", "Kim", "Zed"]

    async def test_is_supervisor_of(self, db: AsyncSession):
        boss = await seed_employee(db, first_name="Boss")
        emp = await seed_employee(db, supervisor_id=boss.id)

        assert await EmployeeService.is_supervisor_of(db, boss.id, emp.id) is True
        assert await EmployeeService.is_supervisor_of(db, emp.id, boss.id) is False


class TestSupervisorInfo:

    async def test_supervisor(self, db: AsyncSession):
        boss = await seed_employee(db, first_name="Boss")
        emp = await seed_employee(db, first_name="Emp", supervisor_id=boss.id)

        info = await EmployeeService.get_supervisor_info(db, boss.id)
        assert info.is_supervisor is True
        assert [(e.id, e.full_name) for e in info.supervised] == [(emp.id, "Emp User")]

    async def test_non_supervisor(self, db: AsyncSession):
        emp = await seed_employee(db)
        info = await EmployeeService.get_supervisor_info(db, emp.id)
        assert info.is_supervisor is False
        assert info.supervised == []


class TestEmployeeDirectory:

    async def test_lookup(self, db: AsyncSession):
        a = await seed_employee(db, first_name="Ana")
        b = await seed_employee(db, first_name="Ben")
        b.profile_photo_url = "https://cdn.example.com/ben.png"
        await db.flush()

        directory = await EmployeeService.build_directory(db, [a.id, b.id, uuid.uuid4()])

        assert len(directory) == 2
        assert directory.name_of(a.id) == "Ana User"
        assert directory.photo_of(b.id) == "https://cdn.example.com/ben.png"
        assert directory.name_of(uuid.uuid4()) == "Unknown"
        assert directory.photo_of(uuid.uuid4()) is None

    async def test_directory_is_read_only(self, db: AsyncSession):
        a = await seed_employee(db)
        directory = await EmployeeService.build_directory(db, [a.id])
        with pytest.raises(TypeError):
            directory[uuid.uuid4()] = directory[a.id]  # type: ignore[index]

    async def test_empty(self, db: AsyncSession):
        directory = await EmployeeService.build_directory(db, [])
        assert isinstance(directory, EmployeeDirectory)
        assert len(directory) == 0

    async def test_display_name_preferred(self, db: AsyncSession):
        a = await seed_employee(db, first_name="Mohammad", last_name="Rahman")
        a.display_name = "Rahman M."
        await db.flush()
        directory = await EmployeeService.build_directory(db, [a.id])
        assert directory.name_of(a.id) == "Rahman M."

    async def test_get_employee_not_found(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await EmployeeService.get_employee(db, uuid.uuid4())


class TestEmployeeAPI:
    """HTTP API tests for employee endpoints."""

    async def test_supervisor_info_endpoint(self, client, db: AsyncSession):
        boss = await seed_employee(db, first_name="Boss")
        emp = await seed_employee(db, first_name="Emp", supervisor_id=boss.id)
        await db.commit()

        resp = await client.get(
            "/api/v1/employees/me/supervisor-info", headers=make_auth_headers(boss.id),
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["is_supervisor"] is True
        assert body["supervised"][0]["id"] == str(emp.id)

    async def test_inactive_user_rejected(self, client, db: AsyncSession):
        emp = await seed_employee(db, is_active=False)
        await db.commit()

        resp = await client.get(
            "/api/v1/employees/me/supervisor-info", headers=make_auth_headers(emp.id),
        )
        assert resp.status_code == 401

    async def test_unauthorized(self, client):
        resp = await client.get("/api/v1/employees/me/supervisor-info")
        assert resp.status_code == 401
