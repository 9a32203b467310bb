"""
JSON request bodies for the trip and generator CREATE events.

START/END events are multipart forms and are declared on the routes.
"""

from typing import Optional

from campuslog.schemas.common import CamelModel


class CreateTripRequest(CamelModel):
    trip_id: Optional[str] = None
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    driver_id: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class CreateGeneratorLogRequest(CamelModel):
    run_id: Optional[str] = None
    location: Optional[str] = None
    operator_id: Optional[str] = None
    scheduled_start_time: Optional[str] = None
    scheduled_end_time: Optional[str] = None
