"""
CampusLog Backend — Abstract Blob Store Interface
===================================================

What:  Contract for storing an uploaded attachment and handing back a public URL.
Why:   Dashboard photos, control panel photos and QR codes all follow the same
       "upload, make public, embed the link in a row" flow; the domain
       services should not care whether the bytes land in Drive or on disk.
How:   Concrete stores inherit from BlobStore and implement upload().

Implementations:
    - DriveBlobStore: Google Drive folder, "anyone with the link" readers
    - LocalBlobStore: Files on local disk, served by GET /files/{path}
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Attachment:
    """A binary file submitted with a request."""

    content: bytes
    filename: str
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class BlobReference:
    """Where an uploaded attachment ended up."""

    id: str
    public_url: str


class BlobStore(ABC):
    """
    Abstract interface for a blob store bound to one location (folder).

    Contract:
        - upload() creates a new object and makes it publicly readable
        - Any failure is raised as UploadError; nothing is retried
        - If the object was created but could not be published, it is left
          in place and its id is reported in UploadError.context
    """

    @abstractmethod
    async def upload(self, attachment: Attachment) -> BlobReference:
        """
        Store `attachment` and return its id and public URL.

        Raises:
            UploadError: the object could not be created or published
        """
        ...
