"""
CampusLog Backend — Local Disk Blob Store
===========================================

What:  BlobStore that writes attachments under STORAGE_ROOT and returns a URL
       served by GET /files/{path}.
Why:   Development and tests need uploads without a Drive folder.
How:   Date-organized directories with UUID filenames, written with aiofiles.
       Anything under STORAGE_ROOT is served publicly, so "publishing" is a
       no-op here.

Directory Structure:
    storage/
    └── <location>/           (e.g. "buslog")
        └── 2024/01/15/
            └── a1b2c3d4-....jpg

Why UUID filenames:
    The client-supplied filename never reaches the filesystem, which rules out
    path traversal and collisions between concurrent uploads.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Tuple

import aiofiles

from campuslog.exceptions import UploadError
from campuslog.services.blob_base import Attachment, BlobReference, BlobStore

logger = logging.getLogger(__name__)

# ── Stored File Types ─────────────────────────────────────────────────────
# What: Extension written to disk for each declared MIME type
# Why from the MIME type and not the filename: /files derives the served
# Content-Type from the extension, so a client-chosen ".html" would be
# served as a page from the API origin
# Alternative: sniffing the bytes with libmagic. Rejected for the extra
# system dependency; anything off this list is stored as opaque ".bin"
STORED_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/heic": ".heic",
}
FALLBACK_EXTENSION = ".bin"


class LocalBlobStore(BlobStore):
    """
    Local-disk implementation of the blob store.

    Args:
        storage_root:    Directory served by the /files route
        location:        Sub-directory for this store (one per domain)
        public_base_url: Base URL of this API, without trailing slash
    """

    def __init__(self, storage_root: str, location: str, public_base_url: str):
        self.storage_root = Path(storage_root).resolve()
        self.location = location
        self.public_base_url = public_base_url.rstrip("/")
        (self.storage_root / location).mkdir(parents=True, exist_ok=True)
        logger.info(
            "LocalBlobStore initialized at %s", self.storage_root / location
        )

    def _generate_storage_path(self, mime_type: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new object."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        extension = STORED_EXTENSIONS.get(mime_type.lower(), FALLBACK_EXTENSION)
        relative_path = f"{self.location}/{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def upload(self, attachment: Attachment) -> BlobReference:
        absolute_path, relative_path = self._generate_storage_path(attachment.mime_type)
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(attachment.content)
        except OSError as e:
            logger.error("Failed to store %s at %s: %s", attachment.filename, absolute_path, e)
            raise UploadError(context={"path": relative_path, "os_error": str(e)})

        logger.info("File stored: %s (%d bytes)", relative_path, attachment.size)
        return BlobReference(
            id=relative_path,
            public_url=f"{self.public_base_url}/files/{relative_path}",
        )
