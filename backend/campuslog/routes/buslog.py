"""
CampusLog Backend — Bus Trip Log Routes
=========================================

What:  POST /api/buslog/start-trip, /end-trip, /create-trip.
How:   start/end are multipart forms carrying the odometer reading and a
       dashboard photo; create is a JSON body with the planned trip.
       Validation, upload and the sheet append happen in TripLogService.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from campuslog.routes.deps import get_trip_log, read_attachment
from campuslog.schemas.common import ApiResponse, ErrorResponse
from campuslog.schemas.logs import CreateTripRequest
from campuslog.services.event_log_service import TripLogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/buslog", tags=["Bus Log"])

ERRORS = {
    400: {"description": "Missing required field or photo", "model": ErrorResponse},
    500: {"description": "Upload or spreadsheet failure", "model": ErrorResponse},
}


@router.post(
    "/start-trip",
    status_code=201,
    response_model=ApiResponse,
    responses=ERRORS,
    summary="Record the start of a trip",
)
async def start_trip(
    starting_km: Optional[str] = Form(None, alias="startingKm"),
    trip_id: Optional[str] = Form(None, alias="tripId"),
    dashboard_photo: Optional[UploadFile] = File(None, alias="dashboardPhoto"),
    trip_log: TripLogService = Depends(get_trip_log),
) -> ApiResponse:
    photo = await read_attachment(dashboard_photo)
    data = await trip_log.start_trip(trip_id, starting_km, photo)
    return ApiResponse(msg="Trip started successfully!", data=data)


@router.post(
    "/end-trip",
    response_model=ApiResponse,
    responses=ERRORS,
    summary="Record the end of a trip",
)
async def end_trip(
    ending_km: Optional[str] = Form(None, alias="endingKm"),
    trip_id: Optional[str] = Form(None, alias="tripId"),
    remarks: Optional[str] = Form(None),
    dashboard_photo: Optional[UploadFile] = File(None, alias="dashboardPhoto"),
    trip_log: TripLogService = Depends(get_trip_log),
) -> ApiResponse:
    photo = await read_attachment(dashboard_photo)
    data = await trip_log.end_trip(trip_id, ending_km, photo, remarks)
    return ApiResponse(msg="Trip ended successfully!", data=data)


@router.post(
    "/create-trip",
    status_code=201,
    response_model=ApiResponse,
    responses=ERRORS,
    summary="Plan a trip (no photo)",
)
async def create_trip(
    body: CreateTripRequest,
    trip_log: TripLogService = Depends(get_trip_log),
) -> ApiResponse:
    data = await trip_log.create_trip(
        body.trip_id,
        body.start_location,
        body.end_location,
        body.driver_id,
        body.start_time,
        body.end_time,
    )
    return ApiResponse(msg="Trip created successfully!", data=data)
