"""
police_records/api/dependencies.py

FastAPI dependencies resolving per-app collaborators from ``app.state``.

The bootstrap sequencer stores the registry, database handle and upload
gate on the app it builds, so tests can run several apps side by side.
"""

from typing import Any

from fastapi import Depends, Request

from police_records.core.state import CapabilityRegistry
from police_records.services.records_service import RecordsService
from police_records.services.upload_gate import UploadGate


def get_registry(request: Request) -> CapabilityRegistry:
    return request.app.state.registry


def get_upload_gate(request: Request) -> UploadGate:
    return request.app.state.upload_gate


def get_database(request: Request) -> Any:
    """Live database handle; raises DatabaseUnavailableError when disconnected."""
    return request.app.state.database.db


def get_records_service(db: Any = Depends(get_database)) -> RecordsService:
    return RecordsService(db)
