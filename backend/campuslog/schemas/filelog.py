"""
Request bodies for the file movement endpoints.
"""

from typing import Optional

from campuslog.schemas.common import CamelModel


class RegisterFileRequest(CamelModel):
    file_name: Optional[str] = None
    description: Optional[str] = None
    originating_department: Optional[str] = None
    created_by: Optional[str] = None


class ForwardFileRequest(CamelModel):
    file_id: Optional[str] = None
    from_department: Optional[str] = None
    to_department: Optional[str] = None
    forwarded_by: Optional[str] = None
    work_done: Optional[str] = None
    work_to_be_done: Optional[str] = None
    remarks: Optional[str] = None


class ReceiveFileRequest(CamelModel):
    file_id: Optional[str] = None
    receiving_department: Optional[str] = None
    received_by: Optional[str] = None
    remarks: Optional[str] = None
