"""
CampusLog Backend — Google Drive Blob Store
=============================================

What:  BlobStore that uploads attachments into a Drive folder and shares them
       with "anyone with the link" as reader.
Why:   Staff open dashboard photos and QR codes straight from the spreadsheet;
       the stored URL must work without a Google login.
How:   Two Drive API v3 calls:
         1. files.create (multipart upload, parents=[folder_id])
         2. permissions.create (role=reader, type=anyone)
       The returned webViewLink becomes the public URL.

Known Gap:
    The two calls are not atomic. If step 2 fails, the file from step 1 stays
    in the folder, private. Nothing deletes it; the id is logged and carried
    in UploadError.context["orphaned_blob_id"].
"""

import io
import logging
from typing import Any, Callable, Optional

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload
from starlette.concurrency import run_in_threadpool

from campuslog.exceptions import UploadError
from campuslog.services.blob_base import Attachment, BlobReference, BlobStore

logger = logging.getLogger(__name__)

REMOTE_ERRORS = (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError)

PUBLIC_READ = {"role": "reader", "type": "anyone"}
UPLOAD_FAILED = "Failed to upload image to Google Drive."


class DriveBlobStore(BlobStore):
    """
    Drive-folder implementation of the blob store.

    Args:
        drive:        Resource returned by build("drive", "v3", ...)
        folder_id:    Folder every upload is placed in
        http_factory: Optional callable returning a new authorised Http per request
    """

    def __init__(
        self,
        drive: Any,
        folder_id: str,
        http_factory: Optional[Callable[[], Any]] = None,
    ):
        self._drive = drive
        self.folder_id = folder_id
        self._http_factory = http_factory

    async def _execute(self, request: Any) -> dict:
        kwargs = {}
        if self._http_factory is not None:
            kwargs["http"] = self._http_factory()
        return await run_in_threadpool(request.execute, **kwargs) or {}

    async def upload(self, attachment: Attachment) -> BlobReference:
        # Why not resumable: photos are a few MB at most, and one request keeps
        # the failure surface to a single call
        media = MediaIoBaseUpload(
            io.BytesIO(attachment.content),
            mimetype=attachment.mime_type,
            resumable=False,
        )
        metadata = {"name": attachment.filename, "parents": [self.folder_id]}

        try:
            created = await self._execute(
                self._drive.files().create(
                    body=metadata, media_body=media, fields="id, webViewLink"
                )
            )
        except REMOTE_ERRORS as e:
            logger.error(
                "Drive upload of %s to folder %s failed: %s",
                attachment.filename,
                self.folder_id,
                e,
            )
            raise UploadError(
                message=UPLOAD_FAILED,
                context={"folder_id": self.folder_id, "error": str(e)},
            )

        file_id = created["id"]
        # Why no delete on publish failure: a cleanup call against the same failing
        # API would usually fail too, so the id is reported instead
        # Alternative: files.delete in a finally block. Rejected: a second failure
        # would hide the first
        try:
            await self._execute(
                self._drive.permissions().create(fileId=file_id, body=dict(PUBLIC_READ))
            )
        except REMOTE_ERRORS as e:
            logger.error(
                "Could not publish Drive file %s; it stays private in folder %s: %s",
                file_id,
                self.folder_id,
                e,
            )
            raise UploadError(
                message=UPLOAD_FAILED,
                context={
                    "folder_id": self.folder_id,
                    "orphaned_blob_id": file_id,
                    "error": str(e),
                }
            )

        logger.info(
            "Uploaded %s (%d bytes) to Drive as %s",
            attachment.filename,
            attachment.size,
            file_id,
        )
        return BlobReference(id=file_id, public_url=created.get("webViewLink", ""))
