"""
police_records/api/unavailable.py

Placeholder routes for database-backed capabilities that could not be
activated. They keep the paths answering with a clear 503 instead of
falling through to the frontend catch-all.
"""

from typing import Iterable

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from police_records.core.exceptions import DatabaseUnavailableError

_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def database_unavailable_response() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "error": "This feature is not available: the database is not connected.",
            "reason": DatabaseUnavailableError.reason,
        },
    )


async def _unavailable() -> JSONResponse:
    return database_unavailable_response()


def register_unavailable_routes(app: FastAPI, paths: Iterable[str]) -> None:
    for path in paths:
        app.add_api_route(path, _unavailable, methods=_METHODS, include_in_schema=False)
        app.add_api_route(f"{path}/{{rest:path}}", _unavailable, methods=_METHODS, include_in_schema=False)
