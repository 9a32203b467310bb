"""
CampusLog Backend — Directory Service Tests
=============================================

What:  Tests for departments, employees and students.
Why:   Updates merge into rows that staff also edit by hand; a merge that
       blanks a column or moves CreatedAt loses data nobody can recover.
"""

import asyncio
import uuid

import pytest

from campuslog.exceptions import NotFoundError, ValidationError
from campuslog.services.directory_service import DepartmentService


class TestDepartments:

    @pytest.mark.asyncio
    async def test_create_update_list(self, container):
        departments = container.departments

        created = await departments.create(
            {"departmentName": "Physics", "description": "Labs", "location": "Block A"}
        )
        department_id = created["departmentId"]
        assert created == {"departmentId": department_id, "departmentName": "Physics"}

        updated = await departments.update(department_id, {"description": "Labs and library"})
        assert updated == {"departmentId": department_id, "description": "Labs and library"}

        [record] = await departments.list()
        assert record == {
            "DepartmentID": department_id,
            "DepartmentName": "Physics",
            "Description": "Labs and library",
            "Location": "Block A",
            "InChargeEmployeeID": "",
            "CreatedAt": "2024-01-15T12:00:00.000Z",
            "UpdatedAt": "2024-01-15T12:00:01.000Z",
        }

    @pytest.mark.asyncio
    async def test_simultaneous_creates_all_succeed(self, container):
        created = await asyncio.gather(
            *(
                container.departments.create({"departmentName": f"Dept {i}", "location": "Main"})
                for i in range(4)
            )
        )

        records = await container.departments.list()
        assert len(records) == 4
        assert {r["DepartmentID"] for r in records} == {c["departmentId"] for c in created}

    @pytest.mark.asyncio
    async def test_in_charge_is_ignored_on_create(self, container):
        created = await container.departments.create(
            {"departmentName": "Physics", "location": "Block A", "inChargeEmployeeId": "e-1"}
        )
        [record] = await container.departments.list()
        assert record["InChargeEmployeeID"] == ""

        await container.departments.update(created["departmentId"], {"inChargeEmployeeId": "e-1"})
        [record] = await container.departments.list()
        assert record["InChargeEmployeeID"] == "e-1"

    @pytest.mark.asyncio
    async def test_ids_are_distinct_uuid4(self, container):
        first = await container.departments.create({"departmentName": "A", "location": "X"})
        second = await container.departments.create({"departmentName": "B", "location": "Y"})

        assert first["departmentId"] != second["departmentId"]
        assert uuid.UUID(first["departmentId"]).version == 4

    @pytest.mark.asyncio
    async def test_required_fields(self, container):
        with pytest.raises(ValidationError, match="Department Name and Location are required."):
            await container.departments.create({"departmentName": "Physics"})
        assert await container.departments.list() == []

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, container):
        await container.departments.create({"departmentName": "Physics", "location": "Block A"})
        before = await container.departments.list()

        with pytest.raises(NotFoundError, match="Department not found."):
            await container.departments.update("missing", {"description": "x"})

        assert await container.departments.list() == before

    @pytest.mark.asyncio
    async def test_list_by_in_charge_employee(self, container):
        physics = await container.departments.create({"departmentName": "Physics", "location": "A"})
        await container.departments.create({"departmentName": "Chemistry", "location": "B"})
        await container.departments.update(physics["departmentId"], {"inChargeEmployeeId": "e-1"})

        found = await container.departments.list_by_foreign_key("e-1")

        assert [r["DepartmentName"] for r in found] == ["Physics"]

    @pytest.mark.asyncio
    async def test_injected_id_factory(self, table_store, clock):
        service = DepartmentService(table_store, "directory", clock=clock, id_factory=lambda: "d-fixed")
        await table_store.ensure_header(service.table)

        created = await service.create({"departmentName": "Physics", "location": "A"})

        assert created["departmentId"] == "d-fixed"


class TestEmployees:

    @pytest.mark.asyncio
    async def test_create_and_filter_by_department(self, container):
        alice = await container.employees.create(
            {"employeeName": "Alice", "departmentId": "d-1", "role": "Clerk", "email": "a@x.org"}
        )
        await container.employees.create({"employeeName": "Bob", "departmentId": "d-2", "role": "Driver"})
        assert alice == {"employeeId": alice["employeeId"], "employeeName": "Alice"}

        found = await container.employees.list_by_foreign_key("d-1")

        assert len(found) == 1
        assert found[0]["EmployeeName"] == "Alice"
        assert found[0]["Email"] == "a@x.org"
        assert found[0]["Phone"] == ""

    @pytest.mark.asyncio
    async def test_required_fields(self, container):
        with pytest.raises(ValidationError) as exc_info:
            await container.employees.create({"employeeName": "Alice", "role": ""})

        assert exc_info.value.message == "Employee Name, Department ID, and Role are required."
        assert exc_info.value.context["missing"] == ["departmentId", "role"]

    @pytest.mark.asyncio
    async def test_update_keeps_unsent_fields(self, container):
        created = await container.employees.create(
            {"employeeName": "Alice", "departmentId": "d-1", "role": "Clerk", "phone": "555"}
        )

        await container.employees.update(created["employeeId"], {"role": "Head Clerk", "phone": ""})

        [record] = await container.employees.list()
        assert record["Role"] == "Head Clerk"
        assert record["Phone"] == "555"

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, container):
        with pytest.raises(NotFoundError, match="Employee not found."):
            await container.employees.update("missing", {"role": "x"})


class TestStudents:

    @pytest.mark.asyncio
    async def test_create_returns_name_and_roll_number(self, container):
        created = await container.students.create(
            {
                "studentName": "Chitra",
                "rollNumber": "R-17",
                "departmentId": "d-1",
                "course": "BSc",
                "yearOfStudy": "2",
            }
        )

        assert set(created) == {"studentId", "studentName", "rollNumber"}
        [record] = await container.students.list_by_foreign_key("d-1")
        assert record["YearOfStudy"] == "2"
        assert record["CreatedAt"] == record["UpdatedAt"]

    @pytest.mark.asyncio
    async def test_required_fields(self, container):
        with pytest.raises(
            ValidationError,
            match="Student Name, Roll Number, Department, Course, and Year of Study are required.",
        ):
            await container.students.create({"studentName": "Chitra", "rollNumber": "R-17"})

    @pytest.mark.asyncio
    async def test_filter_with_no_matches(self, container):
        await container.students.create(
            {"studentName": "C", "rollNumber": "1", "departmentId": "d-1", "course": "BSc", "yearOfStudy": "1"}
        )
        assert await container.students.list_by_foreign_key("d-9") == []

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, container):
        with pytest.raises(NotFoundError, match="Student not found."):
            await container.students.update("missing", {"course": "MSc"})
