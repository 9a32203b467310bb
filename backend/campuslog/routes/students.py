"""
CampusLog Backend — Student Routes
====================================

Route Inventory:
    POST /api/students/create                 → 201
    POST /api/students/update/{student_id}    → 200 | 404
    GET  /api/students/list                   → 200
    GET  /api/students/list/{department_id}   → students of one department
"""

from fastapi import APIRouter, Depends

from campuslog.routes.deps import get_students
from campuslog.schemas.common import ApiResponse, ErrorResponse
from campuslog.schemas.directory import StudentPayload
from campuslog.services.directory_service import StudentService

router = APIRouter(prefix="/api/students", tags=["Students"])


@router.post(
    "/create",
    status_code=201,
    response_model=ApiResponse,
    responses={400: {"description": "Missing required field", "model": ErrorResponse}},
)
async def create_student(
    body: StudentPayload,
    students: StudentService = Depends(get_students),
) -> ApiResponse:
    data = await students.create(body.payload())
    return ApiResponse(msg="Student created successfully!", data=data)


@router.post(
    "/update/{student_id}",
    response_model=ApiResponse,
    responses={404: {"description": "Student not found", "model": ErrorResponse}},
)
async def update_student(
    student_id: str,
    body: StudentPayload,
    students: StudentService = Depends(get_students),
) -> ApiResponse:
    data = await students.update(student_id, body.payload())
    return ApiResponse(msg="Student updated successfully!", data=data)


@router.get("/list", response_model=ApiResponse)
async def list_students(
    students: StudentService = Depends(get_students),
) -> ApiResponse:
    records = await students.list()
    if not records:
        return ApiResponse(msg="No students found.", data=[])
    return ApiResponse(msg="Students retrieved successfully.", data=records)


@router.get("/list/{department_id}", response_model=ApiResponse)
async def list_students_by_department(
    department_id: str,
    students: StudentService = Depends(get_students),
) -> ApiResponse:
    records = await students.list_by_foreign_key(department_id)
    return ApiResponse(
        msg=f"Found {len(records)} students for the specified department.", data=records
    )
