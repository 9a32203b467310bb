"""
CampusLog Backend — Shared Pydantic Schemas
=============================================

What:  The response envelope, the error body, and the camelCase request base.
Why:   Every endpoint answers with {"msg", "data"}; every failure with the
       same error shape, whichever handler produced it.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Request body base: snake_case attributes, camelCase on the wire.

    Every field is optional at the schema level. Required-field checks are
    done by the services so the API keeps its per-endpoint messages instead
    of a generic 422. Numbers sent in JSON are accepted and kept as strings,
    since every cell is a string anyway.
    """

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "coerce_numbers_to_str": True,
    }

    def payload(self) -> Dict[str, Any]:
        """Fields the client actually sent, keyed by their camelCase names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class ApiResponse(BaseModel):
    """
    Success envelope.

    Example:
        {"msg": "Department created successfully!",
         "data": {"departmentId": "…", "departmentName": "Physics"}}
    """
    msg: str = Field(description="Human-readable outcome")
    data: Optional[Any] = Field(default=None, description="Operation result")


class ErrorResponse(BaseModel):
    """
    Error body returned by every exception handler, 500s included.

    Example:
        {"msg": "Department not found.", "error": "not_found",
         "details": {"resource": "department", "resource_id": "…"},
         "request_id": "a1b2c3d4-…"}
    """
    msg: str = Field(description="Human-readable error description")
    error: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or degraded")
    version: str = Field(description="Application version")
    store_backend: str = Field(description="sheets or database")
    locations: Dict[str, str] = Field(description="Reachability per domain: reachable / unreachable")
