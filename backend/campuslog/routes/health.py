"""
CampusLog Backend — Liveness and Health Routes
================================================

What:  GET / (plain liveness text) and GET /health (store reachability).
Why:   The hosting platform probes / ; monitoring probes /health, which
       actually reaches every configured spreadsheet.

Status levels:
    healthy:   every location answered (HTTP 200)
    degraded:  at least one location did not (HTTP 503)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from campuslog import __version__
from campuslog.container import ServiceContainer
from campuslog.routes.deps import get_container
from campuslog.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/", response_class=PlainTextResponse, summary="Liveness probe")
async def root() -> str:
    return "API Server is running successfully."


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "A store location is unreachable", "model": HealthResponse}},
    summary="Backend reachability check",
)
async def health_check(container: ServiceContainer = Depends(get_container)):
    """
    Probe each configured spreadsheet location.

    Sheets: one spreadsheets.get per location (fields=spreadsheetId).
    SQL: SELECT 1.
    """
    results = await container.health()
    unreachable = [domain for domain, ok in results.items() if not ok]
    if unreachable:
        logger.warning("Health check: unreachable locations: %s", unreachable)

    body = HealthResponse(
        status="degraded" if unreachable else "healthy",
        version=__version__,
        store_backend=type(container.store).__name__,
        locations={
            domain: "reachable" if ok else "unreachable" for domain, ok in results.items()
        },
    )
    if unreachable:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
