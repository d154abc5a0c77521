"""
police_records/api/records_controller.py

Database-backed geofile and custodial record routes. Registered only
when MongoDB is connected; otherwise the same paths answer 503.

  GET    /api/geofiles                 List geofile records.
  POST   /api/geofiles                 Upload a geofile and record it.
  GET    /api/geofiles/{id}            One geofile record.
  DELETE /api/geofiles/{id}            Remove a geofile record.
  GET    /api/custodial-records        List custodial records.
  POST   /api/custodial-records        Create a record, optional 'photo'.
  GET    /api/custodial-records/{id}   One custodial record.

Responses:
  400  Invalid form fields or a file outside the category whitelist.
  404  Unknown record id.
  413  File over the category ceiling.
  500  The record could not be saved; any stored file is removed.
"""

from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from police_records.api.dependencies import get_records_service, get_upload_gate
from police_records.core.constants import API_PREFIX
from police_records.core.exceptions import RecordNotFoundError, UploadValidationError
from police_records.core.logger import get_logger
from police_records.models.records_models import (
    CustodialRecord,
    CustodialRecordIn,
    CustodialRecordListResponse,
    GeofileListResponse,
    GeofileRecord,
)
from police_records.services.records_service import RecordsService
from police_records.services.upload_gate import StoredUpload, UploadCategory, UploadGate

logger = get_logger(__name__)

router = APIRouter(prefix=API_PREFIX, tags=["Records"])


# ── Helpers ────────────────────────────────────────────────────────────────────

def _err(message: str, status: int = 400, reason: str | None = None) -> JSONResponse:
    content = {"error": message}
    if reason:
        content["reason"] = reason
    return JSONResponse(status_code=status, content=content)


def _discard(stored: Optional[StoredUpload]) -> None:
    """Remove a file that was stored for a record that never got saved."""
    if stored is not None:
        stored.path.unlink(missing_ok=True)


# ── Geofiles ───────────────────────────────────────────────────────────────────

@router.get("/geofiles", response_model=GeofileListResponse, summary="List geofiles")
async def list_geofiles(service: RecordsService = Depends(get_records_service)) -> GeofileListResponse:
    docs = await service.list_geofiles()
    return GeofileListResponse(geofiles=[GeofileRecord(**d) for d in docs])


@router.post("/geofiles", response_model=GeofileRecord, summary="Upload and record a geofile")
async def create_geofile(
    file: Optional[UploadFile] = File(None),
    description: str = Form(""),
    uploaded_by: str = Form(""),
    gate: UploadGate = Depends(get_upload_gate),
    service: RecordsService = Depends(get_records_service),
) -> JSONResponse:
    if file is None:
        return _err("'file' field is required.")

    try:
        stored = await gate.admit(UploadCategory.GEOFILE, file)
    except UploadValidationError as exc:
        return _err(str(exc), status=exc.status_code, reason=exc.reason)
    finally:
        await file.close()

    try:
        doc = await service.create_geofile(stored, description=description, uploaded_by=uploaded_by)
    except Exception as exc:
        _discard(stored)
        logger.exception("Geofile record for '%s' could not be saved: %s", stored.original_name, exc)
        return _err("Geofile could not be saved. Please try again.", status=500)
    return JSONResponse(status_code=201, content=GeofileRecord(**doc).model_dump())


@router.get("/geofiles/{record_id}", response_model=GeofileRecord, summary="Get a geofile")
async def get_geofile(
    record_id: str,
    service: RecordsService = Depends(get_records_service),
) -> JSONResponse:
    try:
        doc = await service.get_geofile(record_id)
    except RecordNotFoundError as exc:
        return _err(str(exc), status=404)
    return JSONResponse(status_code=200, content=GeofileRecord(**doc).model_dump())


@router.delete("/geofiles/{record_id}", status_code=204, summary="Delete a geofile")
async def delete_geofile(
    record_id: str,
    service: RecordsService = Depends(get_records_service),
) -> Response:
    try:
        await service.delete_geofile(record_id)
    except RecordNotFoundError as exc:
        return _err(str(exc), status=404)
    return Response(status_code=204)


# ── Custodial records ──────────────────────────────────────────────────────────

@router.get(
    "/custodial-records",
    response_model=CustodialRecordListResponse,
    summary="List custodial records",
)
async def list_custodial_records(
    service: RecordsService = Depends(get_records_service),
) -> CustodialRecordListResponse:
    docs = await service.list_custodial_records()
    return CustodialRecordListResponse(records=[CustodialRecord(**d) for d in docs])


@router.post("/custodial-records", response_model=CustodialRecord, summary="Create a custodial record")
async def create_custodial_record(
    full_name: str = Form(""),
    booking_number: str = Form(""),
    charges: str = Form(""),
    arresting_officer: str = Form(""),
    notes: str = Form(""),
    photo: Optional[UploadFile] = File(None),
    gate: UploadGate = Depends(get_upload_gate),
    service: RecordsService = Depends(get_records_service),
) -> JSONResponse:
    """
    Form fields are validated before the photo is looked at, so an invalid
    record never leaves a stray file in the uploads directory.
    """
    try:
        fields = CustodialRecordIn(
            full_name=full_name,
            booking_number=booking_number,
            charges=charges,
            arresting_officer=arresting_officer,
            notes=notes,
        )
    except ValidationError as exc:
        bad = ", ".join(str(e["loc"][0]) for e in exc.errors())
        logger.warning("Custodial record rejected — invalid fields: %s", bad)
        return _err(f"Invalid custodial record fields: {bad}.")

    stored = None
    if photo is not None and photo.filename:
        try:
            stored = await gate.admit(UploadCategory.CUSTODIAL_PHOTO, photo)
        except UploadValidationError as exc:
            return _err(str(exc), status=exc.status_code, reason=exc.reason)
        finally:
            await photo.close()

    try:
        doc = await service.create_custodial_record(fields.model_dump(), photo=stored)
    except Exception as exc:
        _discard(stored)
        logger.exception("Custodial record %s could not be saved: %s", fields.booking_number, exc)
        return _err("Custodial record could not be saved. Please try again.", status=500)
    return JSONResponse(status_code=201, content=CustodialRecord(**doc).model_dump())


@router.get(
    "/custodial-records/{record_id}",
    response_model=CustodialRecord,
    summary="Get a custodial record",
)
async def get_custodial_record(
    record_id: str,
    service: RecordsService = Depends(get_records_service),
) -> JSONResponse:
    try:
        doc = await service.get_custodial_record(record_id)
    except RecordNotFoundError as exc:
        return _err(str(exc), status=404)
    return JSONResponse(status_code=200, content=CustodialRecord(**doc).model_dump())


def register_records_routes(app: FastAPI) -> None:
    app.include_router(router)
