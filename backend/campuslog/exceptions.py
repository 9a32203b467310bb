"""
CampusLog Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every failure the API reports.
Why:   Services raise typed errors; global handlers in main.py turn them into
       JSON responses with the right status code. No route needs try/except.
How:   Each exception carries a user-facing message and an optional context
       dict that is logged but never returned verbatim for server errors.

Exception Hierarchy:
    CampusLogError (base)
    ├── ValidationError          → 400 Bad Request (missing required field)
    ├── NotFoundError            → 404 Not Found (key lookup miss)
    ├── UploadError              → 500 (blob store upload failed)
    ├── RemoteUnavailableError   → 500 (spreadsheet/database call failed)
    └── SchemaMismatchError      → 500 (table header is not what we expect)

Nothing in this hierarchy is retried: a remote failure is logged and reported
to the caller once.
"""

from typing import Any, Dict, Optional


class CampusLogError(Exception):
    """
    Base exception for all CampusLog application errors.

    Attributes:
        message:  User-facing error description
        context:  Additional debug info (logged server-side)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CampusLogError):
    """
    Raised when a request is missing required fields or carries an unusable
    attachment.

    HTTP: 400 Bad Request. Detected locally, before any remote call.

    Example response:
        {
            "msg": "Starting KM and Trip ID are required.",
            "error": "validation_error",
            "details": {"missing": ["startingKm"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(CampusLogError):
    """
    Raised when a key does not resolve to a row.

    HTTP: 404 Not Found. Merge updates raise this before writing anything.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class UploadError(CampusLogError):
    """
    Raised when the blob store could not create or publish an object.

    HTTP: 500 Internal Server Error.

    Known gap:
        Publishing happens after creation. If it fails, the private object
        stays behind; its id is kept in context["orphaned_blob_id"] so it
        shows up in the logs.
    """

    def __init__(
        self,
        message: str = "Failed to upload attachment.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RemoteUnavailableError(CampusLogError):
    """
    Raised when a call to the backing table service fails (network, auth,
    quota, database error).

    HTTP: 500 Internal Server Error. The client sees a generic message; the
    underlying error is logged with the table and operation.
    """

    def __init__(
        self,
        message: str = "The data store is unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SchemaMismatchError(CampusLogError):
    """
    Raised when a table does not have the column an operation relies on.

    HTTP: 500 Internal Server Error. Usually means someone renamed a header
    cell in the spreadsheet.
    """

    def __init__(
        self,
        column: str,
        table: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["column"] = column
        if table:
            ctx["table"] = table
        super().__init__(
            message=message or f'"{column}" header not found in sheet.',
            context=ctx,
        )
        self.column = column
