"""
police_records/models/upload_models.py

Pydantic DTOs for the plain upload endpoints.
The request has no DTO — FastAPI handles multipart/form-data natively
in the controller; only the response shape is defined here.
"""

from typing import List, Optional

from pydantic import BaseModel


class StoredFile(BaseModel):
    original_name: str
    filename: str
    url: str
    size: int
    content_type: Optional[str] = None


class UploadResponse(BaseModel):
    """
    Successful response for an upload endpoint.

        {
            "message": "File uploaded successfully.",
            "file": {"original_name": "zones.kml", "filename": "3f2a...kml", ...}
        }
    """

    message: str
    file: StoredFile


class UploadListResponse(BaseModel):
    files: List[str]
