"""
police_records/api/health_controller.py

GET /api/health — unauthenticated status probe.

The body is built from the live registry snapshot on every call, never
cached, so it always reflects whether the database is connected.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from police_records.api.dependencies import get_registry
from police_records.core.constants import API_PREFIX
from police_records.core.state import CapabilityRegistry
from police_records.models.health_models import HealthResponse
from police_records.services.health_service import HealthReporter

router = APIRouter(prefix=API_PREFIX, tags=["Health"])


@router.get("/health", response_model=HealthResponse, summary="Service status")
async def health(registry: CapabilityRegistry = Depends(get_registry)) -> JSONResponse:
    """Returns 200 with the database status, even in degraded mode."""
    report = HealthReporter(registry).report()
    body = HealthResponse(
        **report.model_dump(),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return JSONResponse(status_code=200, content=body.model_dump(mode="json", by_alias=True))
