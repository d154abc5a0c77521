"""
police_records/api/evidence_controller.py

Evidence routes. Always registered — nothing here touches the database.

  POST /api/evidence/geofiles   Upload one geospatial evidence file.
  GET  /api/evidence/geofiles   List geofiles stored on disk.

Responses:
  200  Upload stored.  Body contains the public /uploads URL.
  400  Missing file or extension outside the geofile whitelist.
  413  File larger than the geofile ceiling.
"""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, UploadFile
from fastapi.responses import JSONResponse

from police_records.api.dependencies import get_upload_gate
from police_records.core.constants import API_PREFIX
from police_records.core.exceptions import UploadValidationError
from police_records.core.logger import get_logger
from police_records.models.upload_models import StoredFile, UploadListResponse, UploadResponse
from police_records.services.upload_gate import UploadCategory, UploadGate

logger = get_logger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/evidence", tags=["Evidence"])


# ── Helpers ────────────────────────────────────────────────────────────────────

def _err(message: str, status: int = 400, reason: str | None = None) -> JSONResponse:
    """Return a JSON error response; upload refusals carry a reason code."""
    content = {"error": message}
    if reason:
        content["reason"] = reason
    return JSONResponse(status_code=status, content=content)


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post("/geofiles", response_model=UploadResponse, summary="Upload a geofile")
async def upload_geofile(
    file: Optional[UploadFile] = File(None),
    gate: UploadGate = Depends(get_upload_gate),
) -> JSONResponse:
    if file is None:
        return _err("'file' field is required.")

    try:
        stored = await gate.admit(UploadCategory.GEOFILE, file)
    except UploadValidationError as exc:
        return _err(str(exc), status=exc.status_code, reason=exc.reason)
    finally:
        await file.close()

    logger.info("Evidence geofile stored — %s", stored.url)
    body = UploadResponse(
        message="Geofile uploaded successfully.",
        file=StoredFile(
            original_name=stored.original_name,
            filename=stored.stored_name,
            url=stored.url,
            size=stored.size,
            content_type=stored.content_type,
        ),
    )
    return JSONResponse(status_code=200, content=body.model_dump())


@router.get("/geofiles", response_model=UploadListResponse, summary="List stored geofiles")
async def list_geofiles(gate: UploadGate = Depends(get_upload_gate)) -> UploadListResponse:
    policy = gate.policy(UploadCategory.GEOFILE)
    directory: Path = policy.destination_directory
    if not directory.is_dir():
        return UploadListResponse(files=[])
    names = sorted(
        p.name for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in policy.allowed_extensions
    )
    return UploadListResponse(files=names)


def register_evidence_routes(app: FastAPI) -> None:
    app.include_router(router)
