"""
CampusLog Backend — Generator Run Log Routes
==============================================

What:  POST /api/generatorlog/start-run, /end-run, /create-log.
How:   Same shape as the bus log: multipart start/end with a control panel
       photo, JSON create. GeneratorLogService does the work.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from campuslog.routes.deps import get_generator_log, read_attachment
from campuslog.schemas.common import ApiResponse, ErrorResponse
from campuslog.schemas.logs import CreateGeneratorLogRequest
from campuslog.services.event_log_service import GeneratorLogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/generatorlog", tags=["Generator Log"])

ERRORS = {
    400: {"description": "Missing required field or photo", "model": ErrorResponse},
    500: {"description": "Upload or spreadsheet failure", "model": ErrorResponse},
}


@router.post("/start-run", status_code=201, response_model=ApiResponse, responses=ERRORS)
async def start_run(
    starting_fuel_level: Optional[str] = Form(None, alias="startingFuelLevel"),
    run_id: Optional[str] = Form(None, alias="runId"),
    control_panel_photo: Optional[UploadFile] = File(None, alias="controlPanelPhoto"),
    generator_log: GeneratorLogService = Depends(get_generator_log),
) -> ApiResponse:
    photo = await read_attachment(control_panel_photo)
    data = await generator_log.start_run(run_id, starting_fuel_level, photo)
    return ApiResponse(msg="Generator run started successfully!", data=data)


@router.post("/end-run", response_model=ApiResponse, responses=ERRORS)
async def end_run(
    ending_fuel_level: Optional[str] = Form(None, alias="endingFuelLevel"),
    run_id: Optional[str] = Form(None, alias="runId"),
    remarks: Optional[str] = Form(None),
    control_panel_photo: Optional[UploadFile] = File(None, alias="controlPanelPhoto"),
    generator_log: GeneratorLogService = Depends(get_generator_log),
) -> ApiResponse:
    photo = await read_attachment(control_panel_photo)
    data = await generator_log.end_run(run_id, ending_fuel_level, photo, remarks)
    return ApiResponse(msg="Generator run ended successfully!", data=data)


@router.post("/create-log", status_code=201, response_model=ApiResponse, responses=ERRORS)
async def create_log(
    body: CreateGeneratorLogRequest,
    generator_log: GeneratorLogService = Depends(get_generator_log),
) -> ApiResponse:
    data = await generator_log.create_log(
        body.run_id,
        body.location,
        body.operator_id,
        body.scheduled_start_time,
        body.scheduled_end_time,
    )
    return ApiResponse(msg="Generator log created successfully!", data=data)
