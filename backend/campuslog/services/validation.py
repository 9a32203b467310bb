"""
CampusLog Backend — Request Field Checks
==========================================

What:  Required-field and attachment checks shared by every domain service.
Why:   Validation must fail before any remote call is made, with the same
       user-facing message whichever field is missing.
"""

from typing import Optional

from campuslog.exceptions import ValidationError
from campuslog.services.blob_base import Attachment


def is_blank(value: Optional[str]) -> bool:
    return value is None or value == ""


def require_fields(message: str, **fields: Optional[str]) -> None:
    """
    Raise ValidationError(message) if any keyword value is None or "".

    The keyword names (camelCase request keys) are reported under
    details["missing"].
    """
    missing = [name for name, value in fields.items() if is_blank(value)]
    if missing:
        raise ValidationError(message=message, context={"missing": missing})


def require_attachment(attachment: Optional[Attachment], message: str, field: str) -> Attachment:
    """An empty upload is treated the same as no upload."""
    if attachment is None or not attachment.content:
        raise ValidationError(message=message, field=field)
    return attachment


def check_attachment_size(attachment: Attachment, max_size: int, field: str) -> None:
    if attachment.size > max_size:
        max_mb = max_size / (1024 * 1024)
        raise ValidationError(
            message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller image.",
            field=field,
            context={"max_size_mb": max_mb, "actual_size": attachment.size},
        )
