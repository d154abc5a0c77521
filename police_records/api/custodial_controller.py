"""
police_records/api/custodial_controller.py

Custodial photo upload. Always registered; the photo is stored on disk
and its URL can later be attached to a custodial record.

  POST /api/custodial/photos   Upload one identification photograph.
"""

from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, UploadFile
from fastapi.responses import JSONResponse

from police_records.api.dependencies import get_upload_gate
from police_records.core.constants import API_PREFIX
from police_records.core.exceptions import UploadValidationError
from police_records.core.logger import get_logger
from police_records.models.upload_models import StoredFile, UploadResponse
from police_records.services.upload_gate import UploadCategory, UploadGate

logger = get_logger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/custodial", tags=["Custodial"])


def _err(message: str, status: int = 400, reason: str | None = None) -> JSONResponse:
    content = {"error": message}
    if reason:
        content["reason"] = reason
    return JSONResponse(status_code=status, content=content)


@router.post("/photos", response_model=UploadResponse, summary="Upload an ID photo")
async def upload_photo(
    photo: Optional[UploadFile] = File(None),
    gate: UploadGate = Depends(get_upload_gate),
) -> JSONResponse:
    """Accepts JPG / JPEG / PNG up to 5 MiB in the 'photo' field."""
    if photo is None:
        return _err("'photo' field is required.")

    try:
        stored = await gate.admit(UploadCategory.CUSTODIAL_PHOTO, photo)
    except UploadValidationError as exc:
        return _err(str(exc), status=exc.status_code, reason=exc.reason)
    finally:
        await photo.close()

    logger.info("Custodial photo stored — %s", stored.url)
    body = UploadResponse(
        message="Photo uploaded successfully.",
        file=StoredFile(
            original_name=stored.original_name,
            filename=stored.stored_name,
            url=stored.url,
            size=stored.size,
            content_type=stored.content_type,
        ),
    )
    return JSONResponse(status_code=200, content=body.model_dump())


def register_custodial_routes(app: FastAPI) -> None:
    app.include_router(router)
