"""
CampusLog Backend — Event Log Services (Trips, Generator Runs)
================================================================

What:  Append-only logs where each START/END event carries a meter reading and
       a photo of the meter, and a CREATE event carries the planned details.
Why:   The bus trip log and the generator run log are the same workflow with
       different column names; EventLogService holds it once.
How:   validate → upload photo → append row. Rows are never updated.

Row Layouts (one spreadsheet tab, "Sheet1"):
    START   [timestamp, "START",  id, reading, photo_url]
    END     [timestamp, "END",    id, reading, photo_url, "" ..., remarks]
    CREATE  [timestamp, "CREATE", id, "", "", detail_1, ..., detail_n]

Inconsistency Window:
    The photo upload and the row append are two remote calls. If the append
    fails, the photo stays in the folder and nothing points at it.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from campuslog.services.blob_base import Attachment, BlobStore
from campuslog.services.table_base import Table, TableStore, utc_timestamp
from campuslog.services.validation import (
    check_attachment_size,
    require_attachment,
    require_fields,
)

logger = logging.getLogger(__name__)

TRIP_LOG_HEADER = (
    "Timestamp", "Action", "TripID", "Km", "PhotoURL", "StartLocation",
    "EndLocation", "DriverID", "StartTime", "EndTime", "Remarks",
)

GENERATOR_LOG_HEADER = (
    "Timestamp", "Action", "RunID", "FuelLevel", "PhotoURL", "Location",
    "OperatorID", "ScheduledStartTime", "ScheduledEndTime", "Remarks",
)


class EventLogService:
    """
    Shared START / END / CREATE workflow.

    Subclasses set the header, the camelCase names used in responses, and the
    validation messages.
    """

    header: Tuple[str, ...] = ()
    id_key = "id"
    photo_field = "photo"
    photo_required_message = "Photo is required."
    create_required_message = "Please provide all required details."

    def __init__(
        self,
        store: TableStore,
        blobs: BlobStore,
        location: str,
        clock: Callable[[], str] = utc_timestamp,
        max_attachment_size: Optional[int] = None,
    ):
        self.store = store
        self.blobs = blobs
        self.table = Table(location=location, name="Sheet1", header=self.header)
        self.clock = clock
        self.max_attachment_size = max_attachment_size

    async def _upload_photo(self, photo: Optional[Attachment]) -> str:
        photo = require_attachment(photo, self.photo_required_message, self.photo_field)
        if self.max_attachment_size is not None:
            check_attachment_size(photo, self.max_attachment_size, self.photo_field)
        reference = await self.blobs.upload(photo)
        return reference.public_url

    async def _record_start(
        self,
        record_id: str,
        reading: str,
        photo: Optional[Attachment],
    ) -> str:
        photo_url = await self._upload_photo(photo)
        await self.store.append_row(
            self.table, [self.clock(), "START", record_id, reading, photo_url]
        )
        logger.info("%s %s started", self.table.header[2], record_id)
        return photo_url

    async def _record_end(
        self,
        record_id: str,
        reading: str,
        photo: Optional[Attachment],
        remarks: Optional[str],
    ) -> str:
        photo_url = await self._upload_photo(photo)
        padding = [""] * (self.table.width - 6)
        row = [self.clock(), "END", record_id, reading, photo_url, *padding, remarks or ""]
        await self.store.append_row(self.table, row)
        logger.info("%s %s ended", self.table.header[2], record_id)
        return photo_url

    async def _record_create(self, record_id: Optional[str], details: Dict[str, Optional[str]]) -> Dict[str, str]:
        require_fields(self.create_required_message, **{self.id_key: record_id}, **details)
        row: List[str] = [self.clock(), "CREATE", record_id, "", "", *details.values()]
        await self.store.append_row(self.table, row)
        logger.info("%s %s created", self.table.header[2], record_id)
        return {self.id_key: record_id, **details}


class TripLogService(EventLogService):
    """Bus trips: odometer readings with a dashboard photo."""

    header = TRIP_LOG_HEADER
    id_key = "tripId"
    photo_field = "dashboardPhoto"
    photo_required_message = "Dashboard photo is required."
    create_required_message = "Please provide all required trip details."

    async def start_trip(
        self,
        trip_id: Optional[str],
        starting_km: Optional[str],
        photo: Optional[Attachment],
    ) -> Dict[str, str]:
        require_fields(
            "Starting KM and Trip ID are required.", startingKm=starting_km, tripId=trip_id
        )
        photo_url = await self._record_start(trip_id, starting_km, photo)
        return {"tripId": trip_id, "startingKm": starting_km, "photoUrl": photo_url}

    async def end_trip(
        self,
        trip_id: Optional[str],
        ending_km: Optional[str],
        photo: Optional[Attachment],
        remarks: Optional[str] = None,
    ) -> Dict[str, str]:
        require_fields(
            "Ending KM and Trip ID are required.", endingKm=ending_km, tripId=trip_id
        )
        photo_url = await self._record_end(trip_id, ending_km, photo, remarks)
        return {"tripId": trip_id, "endingKm": ending_km, "photoUrl": photo_url}

    async def create_trip(
        self,
        trip_id: Optional[str],
        start_location: Optional[str],
        end_location: Optional[str],
        driver_id: Optional[str],
        start_time: Optional[str],
        end_time: Optional[str],
    ) -> Dict[str, str]:
        return await self._record_create(
            trip_id,
            {
                "startLocation": start_location,
                "endLocation": end_location,
                "driverId": driver_id,
                "startTime": start_time,
                "endTime": end_time,
            },
        )


class GeneratorLogService(EventLogService):
    """Generator runs: fuel level readings with a control panel photo."""

    header = GENERATOR_LOG_HEADER
    id_key = "runId"
    photo_field = "controlPanelPhoto"
    photo_required_message = "Control panel photo is required."
    create_required_message = "Please provide all required log details."

    async def start_run(
        self,
        run_id: Optional[str],
        starting_fuel_level: Optional[str],
        photo: Optional[Attachment],
    ) -> Dict[str, str]:
        require_fields(
            "Starting Fuel Level and Run ID are required.",
            startingFuelLevel=starting_fuel_level,
            runId=run_id,
        )
        photo_url = await self._record_start(run_id, starting_fuel_level, photo)
        return {"runId": run_id, "startingFuelLevel": starting_fuel_level, "photoUrl": photo_url}

    async def end_run(
        self,
        run_id: Optional[str],
        ending_fuel_level: Optional[str],
        photo: Optional[Attachment],
        remarks: Optional[str] = None,
    ) -> Dict[str, str]:
        require_fields(
            "Ending Fuel Level and Run ID are required.",
            endingFuelLevel=ending_fuel_level,
            runId=run_id,
        )
        photo_url = await self._record_end(run_id, ending_fuel_level, photo, remarks)
        return {"runId": run_id, "endingFuelLevel": ending_fuel_level, "photoUrl": photo_url}

    async def create_log(
        self,
        run_id: Optional[str],
        location: Optional[str],
        operator_id: Optional[str],
        scheduled_start_time: Optional[str],
        scheduled_end_time: Optional[str],
    ) -> Dict[str, str]:
        return await self._record_create(
            run_id,
            {
                "location": location,
                "operatorId": operator_id,
                "scheduledStartTime": scheduled_start_time,
                "scheduledEndTime": scheduled_end_time,
            },
        )
