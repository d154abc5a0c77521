"""
police_records/models/records_models.py

Pydantic DTOs for the database-backed geofile and custodial record routes.
"""

from typing import List, Optional

from pydantic import BaseModel, field_validator


class GeofileRecord(BaseModel):
    id: str
    filename: str
    original_name: str
    file_type: str
    size: int = 0
    url: Optional[str] = None
    description: str = ""
    uploaded_by: str = "anonymous"
    created_at: Optional[str] = None


class GeofileListResponse(BaseModel):
    geofiles: List[GeofileRecord]


class CustodialRecordIn(BaseModel):
    """Form fields accepted by POST /api/custodial-records."""

    full_name: str
    booking_number: str
    charges: str = ""
    arresting_officer: str = ""
    notes: str = ""

    @field_validator("full_name", "booking_number")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field cannot be empty.")
        return v.strip()


class CustodialRecord(CustodialRecordIn):
    id: str
    photo_url: Optional[str] = None
    created_at: Optional[str] = None


class CustodialRecordListResponse(BaseModel):
    records: List[CustodialRecord]
