"""
CampusLog Backend — File Movement Service
===========================================

What:  Tracks physical paper files as they move between departments.
Why:   Every hand-over is appended to the Movements tab, so the tab is both
       the audit trail and the source of a file's current location.
How:   register() creates the master record and a QR code; forward() and
       receive() append movements; status() replays the movements of one file.

Tables (FILELOG spreadsheet):
    Files      FileID, FileName, Description, OriginatingDepartment,
               CreatedBy, CreatedAt, QRCodeURL
    Movements  Timestamp, FileID, Action, FromDepartment, ToDepartment,
               User, WorkDone, WorkToBeDone, Remarks

Known Gaps:
    - register() makes three remote writes (QR upload, Files row,
      Movements row). A failure part-way leaves the earlier writes in place.
    - forward() and receive() do not check that the file id was registered;
      a typo creates an orphan history.
"""

import logging
import uuid
from typing import Callable, Dict, List, Optional

from campuslog.exceptions import NotFoundError
from campuslog.services.blob_base import Attachment, BlobStore
from campuslog.services.qr_code import PNG_MIME_TYPE, render_qr_png
from campuslog.services.table_base import Record, Table, TableStore, utc_timestamp
from campuslog.services.validation import require_fields

logger = logging.getLogger(__name__)

FILES_HEADER = (
    "FileID", "FileName", "Description", "OriginatingDepartment",
    "CreatedBy", "CreatedAt", "QRCodeURL",
)

MOVEMENTS_HEADER = (
    "Timestamp", "FileID", "Action", "FromDepartment", "ToDepartment",
    "User", "WorkDone", "WorkToBeDone", "Remarks",
)


class FileMovementService:
    """
    Register, forward, receive and look up paper files.

    Args:
        store:      Table store holding the Files and Movements tabs
        blobs:      Blob store the QR codes are uploaded to
        location:   Spreadsheet id of the file log
        clock:      Returns the timestamp written into new rows
        id_factory: Returns a new file id
    """

    def __init__(
        self,
        store: TableStore,
        blobs: BlobStore,
        location: str,
        clock: Callable[[], str] = utc_timestamp,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.store = store
        self.blobs = blobs
        self.files = Table(location=location, name="Files", header=FILES_HEADER)
        self.movements = Table(location=location, name="Movements", header=MOVEMENTS_HEADER)
        self.clock = clock
        self.id_factory = id_factory

    async def register(
        self,
        file_name: Optional[str],
        description: Optional[str],
        originating_department: Optional[str],
        created_by: Optional[str],
    ) -> Dict[str, str]:
        require_fields(
            "File Name, Originating Department, and Creator are required.",
            fileName=file_name,
            originatingDepartment=originating_department,
            createdBy=created_by,
        )
        file_id = self.id_factory()
        timestamp = self.clock()

        qr_code = Attachment(
            content=render_qr_png(file_id),
            filename=f"{file_id}.png",
            mime_type=PNG_MIME_TYPE,
        )
        reference = await self.blobs.upload(qr_code)

        record = {
            "fileId": file_id,
            "fileName": file_name,
            "description": description or "",
            "originatingDepartment": originating_department,
            "createdBy": created_by,
            "createdAt": timestamp,
            "qrCodeUrl": reference.public_url,
        }
        await self.store.append_row(self.files, list(record.values()))
        await self._append_movement(
            timestamp, file_id, "REGISTERED", "", originating_department, created_by,
            remarks="File created.",
        )
        logger.info("Registered file %s from %s", file_id, originating_department)
        return record

    async def forward(
        self,
        file_id: Optional[str],
        from_department: Optional[str],
        to_department: Optional[str],
        forwarded_by: Optional[str],
        work_done: Optional[str] = None,
        work_to_be_done: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> None:
        require_fields(
            "File ID, From/To Departments, and User are required.",
            fileId=file_id,
            fromDepartment=from_department,
            toDepartment=to_department,
            forwardedBy=forwarded_by,
        )
        await self._append_movement(
            self.clock(), file_id, "FORWARDED", from_department, to_department,
            forwarded_by, work_done, work_to_be_done, remarks,
        )
        logger.info("File %s forwarded %s → %s", file_id, from_department, to_department)

    async def receive(
        self,
        file_id: Optional[str],
        receiving_department: Optional[str],
        received_by: Optional[str],
        remarks: Optional[str] = None,
    ) -> None:
        require_fields(
            "File ID, Receiving Department, and User are required.",
            fileId=file_id,
            receivingDepartment=receiving_department,
            receivedBy=received_by,
        )
        await self._append_movement(
            self.clock(), file_id, "RECEIVED", "", receiving_department, received_by,
            remarks=remarks,
        )
        logger.info("File %s received by %s", file_id, receiving_department)

    async def status(self, file_id: str) -> Dict[str, object]:
        """
        Current state and full movement history of one file.

        The last matching Movements row (in table order) decides the current
        status, location and last-updated time.

        Raises:
            NotFoundError: the file has no movements
        """
        history: List[Record] = await self.store.list_filtered(self.movements, "FileID", file_id)
        if not history:
            raise NotFoundError(
                resource="file",
                resource_id=file_id,
                message="File not found or has no history.",
            )
        latest = history[-1]
        return {
            "details": {
                "fileId": file_id,
                "currentStatus": latest["Action"],
                "currentLocation": latest["ToDepartment"],
                "lastUpdated": latest["Timestamp"],
            },
            "history": history,
        }

    async def _append_movement(
        self,
        timestamp: str,
        file_id: str,
        action: str,
        from_department: Optional[str],
        to_department: Optional[str],
        user: Optional[str],
        work_done: Optional[str] = None,
        work_to_be_done: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> None:
        row = [
            timestamp, file_id, action, from_department, to_department, user,
            work_done, work_to_be_done, remarks,
        ]
        await self.store.append_row(self.movements, ["" if cell is None else cell for cell in row])
