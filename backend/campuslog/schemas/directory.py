"""
Request bodies for the department, employee and student endpoints.

The same model serves create and update: create checks the required fields,
update merges whatever non-empty fields were sent.
"""

from typing import Optional

from campuslog.schemas.common import CamelModel


class DepartmentPayload(CamelModel):
    department_name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    # Ignored by create; set with update
    in_charge_employee_id: Optional[str] = None


class EmployeePayload(CamelModel):
    employee_name: Optional[str] = None
    department_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    responsibilities: Optional[str] = None


class StudentPayload(CamelModel):
    student_name: Optional[str] = None
    roll_number: Optional[str] = None
    department_id: Optional[str] = None
    course: Optional[str] = None
    year_of_study: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
