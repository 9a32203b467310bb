"""
CampusLog Backend — Local Blob Serving
========================================

What:  GET /files/{file_path} serves attachments stored by LocalBlobStore.
When:  Only useful with BLOB_BACKEND=local; Drive links point at Google.

Security:
    - The resolved path must stay inside STORAGE_ROOT (no ../ escapes)
    - Only files that exist are served; everything else is a 404
    - Only image types are served inline; anything else goes out as
      application/octet-stream, and nosniff stops browsers guessing
"""

import mimetypes
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from campuslog.exceptions import NotFoundError, ValidationError

router = APIRouter(tags=["Files"])

OPAQUE_MEDIA_TYPE = "application/octet-stream"


def served_media_type(path: Path) -> str:
    """The guessed type if it is an image, otherwise opaque bytes."""
    guessed, _ = mimetypes.guess_type(path.name)
    if guessed and guessed.startswith("image/") and guessed != "image/svg+xml":
        return guessed
    return OPAQUE_MEDIA_TYPE


@router.get("/files/{file_path:path}", summary="Serve a locally stored attachment")
async def serve_file(file_path: str, request: Request) -> FileResponse:
    storage_root = Path(request.app.state.settings.storage_root).resolve()
    full_path = (storage_root / file_path).resolve()

    if not full_path.is_relative_to(storage_root):
        raise ValidationError(message="Invalid file path", field="file_path")

    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    return FileResponse(
        path=str(full_path),
        media_type=served_media_type(full_path),
        headers={
            "Cache-Control": "public, max-age=86400",  # 24h cache for images
            "X-Content-Type-Options": "nosniff",
        },
    )
