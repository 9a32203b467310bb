"""
FastAPI dependencies that hand route handlers their services.

The ServiceContainer is built at startup and stored on app.state; handlers
never construct clients themselves.
"""

from typing import Optional

from fastapi import Request, UploadFile

from campuslog.container import ServiceContainer
from campuslog.services.blob_base import Attachment
from campuslog.services.directory_service import (
    DepartmentService,
    EmployeeService,
    StudentService,
)
from campuslog.services.event_log_service import GeneratorLogService, TripLogService
from campuslog.services.file_movement_service import FileMovementService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_trip_log(request: Request) -> TripLogService:
    return get_container(request).trip_log


def get_generator_log(request: Request) -> GeneratorLogService:
    return get_container(request).generator_log


def get_file_log(request: Request) -> FileMovementService:
    return get_container(request).file_log


def get_departments(request: Request) -> DepartmentService:
    return get_container(request).departments


def get_employees(request: Request) -> EmployeeService:
    return get_container(request).employees


def get_students(request: Request) -> StudentService:
    return get_container(request).students


async def read_attachment(upload: Optional[UploadFile]) -> Optional[Attachment]:
    """Read a multipart file part into memory; None when no part was sent."""
    if upload is None:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return Attachment(
        content=content,
        filename=upload.filename or "upload",
        mime_type=upload.content_type or "application/octet-stream",
    )
