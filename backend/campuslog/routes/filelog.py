"""
CampusLog Backend — File Movement Routes
==========================================

What:  Register a paper file, forward it, receive it, look up its status.
Who:   The office front-end; the QR code on the file encodes its id for the
       status lookup.

Route Inventory:
    POST /api/filelog/register            → 201, file record with qrCodeUrl
    POST /api/filelog/forward             → 200
    POST /api/filelog/receive             → 200
    GET  /api/filelog/status/{file_id}    → 200, details + history | 404
"""

import logging

from fastapi import APIRouter, Depends

from campuslog.routes.deps import get_file_log
from campuslog.schemas.common import ApiResponse, ErrorResponse
from campuslog.schemas.filelog import (
    ForwardFileRequest,
    ReceiveFileRequest,
    RegisterFileRequest,
)
from campuslog.services.file_movement_service import FileMovementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/filelog", tags=["File Log"])


@router.post(
    "/register",
    status_code=201,
    response_model=ApiResponse,
    responses={
        400: {"description": "Missing required field", "model": ErrorResponse},
        500: {"description": "QR upload or spreadsheet failure", "model": ErrorResponse},
    },
)
async def register_file(
    body: RegisterFileRequest,
    file_log: FileMovementService = Depends(get_file_log),
) -> ApiResponse:
    record = await file_log.register(
        body.file_name, body.description, body.originating_department, body.created_by
    )
    return ApiResponse(
        msg="File registered successfully! A QR code has been generated and saved to Google Drive.",
        data=record,
    )


@router.post("/forward", response_model=ApiResponse)
async def forward_file(
    body: ForwardFileRequest,
    file_log: FileMovementService = Depends(get_file_log),
) -> ApiResponse:
    await file_log.forward(
        body.file_id,
        body.from_department,
        body.to_department,
        body.forwarded_by,
        body.work_done,
        body.work_to_be_done,
        body.remarks,
    )
    return ApiResponse(msg=f"File forwarded to {body.to_department}. Awaiting receipt.")


@router.post("/receive", response_model=ApiResponse)
async def receive_file(
    body: ReceiveFileRequest,
    file_log: FileMovementService = Depends(get_file_log),
) -> ApiResponse:
    await file_log.receive(
        body.file_id, body.receiving_department, body.received_by, body.remarks
    )
    return ApiResponse(msg=f"File successfully received by {body.receiving_department}.")


@router.get(
    "/status/{file_id}",
    response_model=ApiResponse,
    responses={404: {"description": "No movements for this file", "model": ErrorResponse}},
)
async def file_status(
    file_id: str,
    file_log: FileMovementService = Depends(get_file_log),
) -> ApiResponse:
    data = await file_log.status(file_id)
    return ApiResponse(msg="File history retrieved successfully.", data=data)
