"""
police_records/models/health_models.py

Pydantic DTOs for GET /api/health.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class DatabaseStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class HealthReport(BaseModel):
    """Status derived from service state alone — identical on repeated calls."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: str
    database_status: DatabaseStatus = Field(alias="databaseStatus")
    message: str
    capabilities: List[str] = []


class HealthResponse(HealthReport):
    """
    Response body for GET /api/health.

        {
            "status": "OK",
            "timestamp": "2024-01-01T00:00:00+00:00",
            "databaseStatus": "disconnected",
            "message": "Running in fallback mode - ...",
            "capabilities": ["custodial", "evidence"]
        }
    """

    timestamp: str
