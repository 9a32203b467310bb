"""
CampusLog Backend — Employee Routes
=====================================

Route Inventory:
    POST /api/employees/create                 → 201
    POST /api/employees/update/{employee_id}   → 200 | 404
    GET  /api/employees/list                   → 200
    GET  /api/employees/list/{department_id}   → employees of one department
"""

from fastapi import APIRouter, Depends

from campuslog.routes.deps import get_employees
from campuslog.schemas.common import ApiResponse, ErrorResponse
from campuslog.schemas.directory import EmployeePayload
from campuslog.services.directory_service import EmployeeService

router = APIRouter(prefix="/api/employees", tags=["Employees"])


@router.post(
    "/create",
    status_code=201,
    response_model=ApiResponse,
    responses={400: {"description": "Missing required field", "model": ErrorResponse}},
)
async def create_employee(
    body: EmployeePayload,
    employees: EmployeeService = Depends(get_employees),
) -> ApiResponse:
    data = await employees.create(body.payload())
    return ApiResponse(msg="Employee created successfully!", data=data)


@router.post(
    "/update/{employee_id}",
    response_model=ApiResponse,
    responses={404: {"description": "Employee not found", "model": ErrorResponse}},
)
async def update_employee(
    employee_id: str,
    body: EmployeePayload,
    employees: EmployeeService = Depends(get_employees),
) -> ApiResponse:
    data = await employees.update(employee_id, body.payload())
    return ApiResponse(msg="Employee updated successfully!", data=data)


@router.get("/list", response_model=ApiResponse)
async def list_employees(
    employees: EmployeeService = Depends(get_employees),
) -> ApiResponse:
    records = await employees.list()
    if not records:
        return ApiResponse(msg="No employees found.", data=[])
    return ApiResponse(msg="Employees retrieved successfully.", data=records)


@router.get("/list/{department_id}", response_model=ApiResponse)
async def list_employees_by_department(
    department_id: str,
    employees: EmployeeService = Depends(get_employees),
) -> ApiResponse:
    records = await employees.list_by_foreign_key(department_id)
    return ApiResponse(
        msg=f"Found {len(records)} employees for the specified department.", data=records
    )
