"""
police_records/services/records_service.py

Database-backed storage for geofile metadata and custodial records.

Handlers stay thin: uploads go through the admission gate first, then
the resulting StoredUpload is recorded here. Documents are returned as
plain dicts with ``_id`` rendered as a string ``id``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from bson import ObjectId
from bson.errors import InvalidId

from police_records.core.exceptions import RecordNotFoundError
from police_records.core.logger import get_logger
from police_records.services.upload_gate import StoredUpload

logger = get_logger(__name__)

GEOFILES = "geofiles"
CUSTODIAL_RECORDS = "custodial_records"


def _object_id(record_id: str) -> ObjectId:
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError) as exc:
        raise RecordNotFoundError(f"No record with id '{record_id}'.") from exc


def _serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: v for k, v in doc.items() if k != "_id"}
    out["id"] = str(doc["_id"])
    for key, value in out.items():
        if isinstance(value, datetime):
            out[key] = value.isoformat()
    return out


class RecordsService:
    """Thin repository over the ``geofiles`` and ``custodial_records`` collections."""

    def __init__(self, db: Any) -> None:
        self._db = db

    # ── Geofiles ───────────────────────────────────────────────────────────────

    async def list_geofiles(self) -> List[Dict[str, Any]]:
        cursor = self._db[GEOFILES].find({}).sort("created_at", -1)
        return [_serialize(doc) for doc in await cursor.to_list(length=None)]

    async def create_geofile(
        self,
        stored: StoredUpload,
        description: str | None = None,
        uploaded_by: str | None = None,
    ) -> Dict[str, Any]:
        doc = {
            "filename": stored.stored_name,
            "original_name": stored.original_name,
            "file_type": Path(stored.original_name).suffix.lower().lstrip("."),
            "size": stored.size,
            "url": stored.url,
            "description": description or "",
            "uploaded_by": uploaded_by or "anonymous",
            "created_at": datetime.now(timezone.utc),
        }
        result = await self._db[GEOFILES].insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Geofile record created — id=%s file=%s", result.inserted_id, stored.stored_name)
        return _serialize(doc)

    async def get_geofile(self, record_id: str) -> Dict[str, Any]:
        doc = await self._db[GEOFILES].find_one({"_id": _object_id(record_id)})
        if doc is None:
            raise RecordNotFoundError(f"No geofile with id '{record_id}'.")
        return _serialize(doc)

    async def delete_geofile(self, record_id: str) -> None:
        result = await self._db[GEOFILES].delete_one({"_id": _object_id(record_id)})
        if result.deleted_count == 0:
            raise RecordNotFoundError(f"No geofile with id '{record_id}'.")
        logger.info("Geofile record deleted — id=%s", record_id)

    # ── Custodial records ──────────────────────────────────────────────────────

    async def list_custodial_records(self) -> List[Dict[str, Any]]:
        cursor = self._db[CUSTODIAL_RECORDS].find({}).sort("created_at", -1)
        return [_serialize(doc) for doc in await cursor.to_list(length=None)]

    async def create_custodial_record(
        self,
        fields: Dict[str, Any],
        photo: StoredUpload | None = None,
    ) -> Dict[str, Any]:
        doc = dict(fields)
        doc["photo_url"] = photo.url if photo else None
        doc["created_at"] = datetime.now(timezone.utc)
        result = await self._db[CUSTODIAL_RECORDS].insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Custodial record created — id=%s", result.inserted_id)
        return _serialize(doc)

    async def get_custodial_record(self, record_id: str) -> Dict[str, Any]:
        doc = await self._db[CUSTODIAL_RECORDS].find_one({"_id": _object_id(record_id)})
        if doc is None:
            raise RecordNotFoundError(f"No custodial record with id '{record_id}'.")
        return _serialize(doc)
