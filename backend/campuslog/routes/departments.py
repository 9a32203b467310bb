"""
CampusLog Backend — Department Routes
=======================================

Route Inventory:
    POST /api/departments/create                → 201
    POST /api/departments/update/{department_id} → 200 | 404
    GET  /api/departments/list                  → 200
    GET  /api/departments/list/{employee_id}    → departments this employee is in charge of
"""

from fastapi import APIRouter, Depends

from campuslog.routes.deps import get_departments
from campuslog.schemas.common import ApiResponse, ErrorResponse
from campuslog.schemas.directory import DepartmentPayload
from campuslog.services.directory_service import DepartmentService

router = APIRouter(prefix="/api/departments", tags=["Departments"])


@router.post(
    "/create",
    status_code=201,
    response_model=ApiResponse,
    responses={400: {"description": "Missing required field", "model": ErrorResponse}},
)
async def create_department(
    body: DepartmentPayload,
    departments: DepartmentService = Depends(get_departments),
) -> ApiResponse:
    data = await departments.create(body.payload())
    return ApiResponse(msg="Department created successfully!", data=data)


@router.post(
    "/update/{department_id}",
    response_model=ApiResponse,
    responses={404: {"description": "Department not found", "model": ErrorResponse}},
)
async def update_department(
    department_id: str,
    body: DepartmentPayload,
    departments: DepartmentService = Depends(get_departments),
) -> ApiResponse:
    data = await departments.update(department_id, body.payload())
    return ApiResponse(msg="Department updated successfully!", data=data)


@router.get("/list", response_model=ApiResponse)
async def list_departments(
    departments: DepartmentService = Depends(get_departments),
) -> ApiResponse:
    records = await departments.list()
    if not records:
        return ApiResponse(msg="No departments found.", data=[])
    return ApiResponse(msg="Departments retrieved successfully.", data=records)


@router.get("/list/{employee_id}", response_model=ApiResponse)
async def list_departments_in_charge(
    employee_id: str,
    departments: DepartmentService = Depends(get_departments),
) -> ApiResponse:
    records = await departments.list_by_foreign_key(employee_id)
    return ApiResponse(
        msg=f"Found {len(records)} departments for the specified employee.", data=records
    )
