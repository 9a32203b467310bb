"""
CampusLog Backend — Directory Services (Departments, Employees, Students)
===========================================================================

What:  Create / update / list for the three master-data tables that share the
       directory spreadsheet.
Why:   The three tables differ only in their columns and required fields;
       DirectoryService holds the workflow and each subclass declares its layout.
How:   create → append a full row with a fresh UUID4 and equal created/updated
       timestamps. update → TableStore.merge_update. list → list_all.
       list_by_foreign_key → list_filtered on the subclass's foreign-key column.

Payloads:
    Services take and return the camelCase keys used on the wire
    (e.g. "departmentName"). FIELD_COLUMNS maps each key to its sheet column.
    Optional fields missing from a create payload are written as "".
"""

import logging
import uuid
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from campuslog.exceptions import NotFoundError
from campuslog.services.table_base import Record, Table, TableStore, utc_timestamp
from campuslog.services.validation import is_blank, require_fields

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


class DirectoryService:
    """Shared workflow for one directory table."""

    table_name = ""
    header: Tuple[str, ...] = ()
    # camelCase payload key → sheet column
    field_columns: Dict[str, str] = {}
    id_key = "id"
    resource_label = "Record"
    required_fields: Tuple[str, ...] = ()
    required_message = ""
    # Keys accepted by update but always written blank on create
    create_ignores: Tuple[str, ...] = ()
    # Keys echoed back from create (besides the new id)
    summary_fields: Tuple[str, ...] = ()
    foreign_key_column = "DepartmentID"

    def __init__(
        self,
        store: TableStore,
        location: str,
        clock: Callable[[], str] = utc_timestamp,
        id_factory: Callable[[], str] = new_id,
    ):
        self.store = store
        self.table = Table(
            location=location,
            name=self.table_name,
            header=self.header,
            created_column="CreatedAt",
            updated_column="UpdatedAt",
        )
        self.clock = clock
        self.id_factory = id_factory

    def build_row(self, record_id: str, payload: Mapping[str, Optional[str]], timestamp: str) -> List[str]:
        """Full row for a new record in header order."""
        columns_to_keys = {column: key for key, column in self.field_columns.items()}
        row = [record_id]
        for column in self.header[1:]:
            if column in (self.table.created_column, self.table.updated_column):
                row.append(timestamp)
                continue
            key = columns_to_keys.get(column)
            value = payload.get(key) if key and key not in self.create_ignores else None
            row.append("" if is_blank(value) else str(value))
        return row

    async def create(self, payload: Mapping[str, Optional[str]]) -> Dict[str, str]:
        require_fields(
            self.required_message, **{key: payload.get(key) for key in self.required_fields}
        )
        record_id = self.id_factory()
        await self.store.append_row(self.table, self.build_row(record_id, payload, self.clock()))
        logger.info("Created %s %s", self.resource_label.lower(), record_id)
        return {self.id_key: record_id, **{key: payload.get(key) for key in self.summary_fields}}

    async def update(self, record_id: str, payload: Mapping[str, Optional[str]]) -> Dict[str, Optional[str]]:
        """
        Merge `payload` into the record. Empty values keep the stored value.

        Raises:
            NotFoundError: no record has this id (nothing is written)
        """
        changes = {
            self.field_columns[key]: value
            for key, value in payload.items()
            if key in self.field_columns
        }
        try:
            await self.store.merge_update(self.table, record_id, changes, self.clock())
        except NotFoundError:
            raise NotFoundError(
                resource=self.resource_label.lower(),
                resource_id=record_id,
                message=f"{self.resource_label} not found.",
            )
        return {self.id_key: record_id, **payload}

    async def list(self) -> List[Record]:
        return await self.store.list_all(self.table)

    async def list_by_foreign_key(self, foreign_key: str) -> List[Record]:
        return await self.store.list_filtered(self.table, self.foreign_key_column, foreign_key)


class DepartmentService(DirectoryService):
    """Departments. The person in charge can only be set by update."""

    table_name = "Departments"
    header = (
        "DepartmentID", "DepartmentName", "Description", "Location",
        "InChargeEmployeeID", "CreatedAt", "UpdatedAt",
    )
    field_columns = {
        "departmentName": "DepartmentName",
        "description": "Description",
        "location": "Location",
        "inChargeEmployeeId": "InChargeEmployeeID",
    }
    id_key = "departmentId"
    resource_label = "Department"
    required_fields = ("departmentName", "location")
    required_message = "Department Name and Location are required."
    create_ignores = ("inChargeEmployeeId",)
    summary_fields = ("departmentName",)
    foreign_key_column = "InChargeEmployeeID"


class EmployeeService(DirectoryService):
    table_name = "Employees"
    header = (
        "EmployeeID", "EmployeeName", "DepartmentID", "Email", "Phone", "Role",
        "Responsibilities", "CreatedAt", "UpdatedAt",
    )
    field_columns = {
        "employeeName": "EmployeeName",
        "departmentId": "DepartmentID",
        "email": "Email",
        "phone": "Phone",
        "role": "Role",
        "responsibilities": "Responsibilities",
    }
    id_key = "employeeId"
    resource_label = "Employee"
    required_fields = ("employeeName", "departmentId", "role")
    required_message = "Employee Name, Department ID, and Role are required."
    summary_fields = ("employeeName",)


class StudentService(DirectoryService):
    table_name = "Students"
    header = (
        "StudentID", "StudentName", "RollNumber", "DepartmentID", "Course",
        "YearOfStudy", "Email", "Phone", "CreatedAt", "UpdatedAt",
    )
    field_columns = {
        "studentName": "StudentName",
        "rollNumber": "RollNumber",
        "departmentId": "DepartmentID",
        "course": "Course",
        "yearOfStudy": "YearOfStudy",
        "email": "Email",
        "phone": "Phone",
    }
    id_key = "studentId"
    resource_label = "Student"
    required_fields = ("studentName", "rollNumber", "departmentId", "course", "yearOfStudy")
    required_message = (
        "Student Name, Roll Number, Department, Course, and Year of Study are required."
    )
    summary_fields = ("studentName", "rollNumber")
