"""
police_records/main.py

FastAPI application factory and process entry point.

Responsibilities:
  - Create the FastAPI app with metadata from config
  - Attach the upload body ceiling, CORS and session middleware
  - Add global exception handlers for AppBaseException subclasses
  - Expose /api/health and the public /uploads mount
  - Hand over to the bootstrap sequencer, which registers feature routes
    and opens the listener
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from police_records.api.body_limit import UploadBodyLimitMiddleware, upload_body_limits
from police_records.api.health_controller import router as health_router
from police_records.api.unavailable import database_unavailable_response
from police_records.core.config import Settings, settings as default_settings
from police_records.core.constants import UPLOADS_MOUNT
from police_records.core.exceptions import AppBaseException, DatabaseUnavailableError
from police_records.core.logger import get_logger
from police_records.core.state import CapabilityRegistry
from police_records.services.database import MongoDatabase
from police_records.services.upload_gate import UploadGate, default_policies

logger = get_logger(__name__)


def create_app(
    registry: CapabilityRegistry,
    database: MongoDatabase,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the app with everything that does not depend on startup outcome.

    Feature routes and the frontend strategy are added later by the
    bootstrap sequencer.
    """
    settings = settings or default_settings

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Evidence, custodial and geofile records for police departments.",
    )
    app.state.registry = registry
    app.state.database = database
    app.state.upload_gate = UploadGate(default_policies(settings.upload_dir))

    # ── Middleware ─────────────────────────────────────────────────────────────

    app.add_middleware(UploadBodyLimitMiddleware, limits=upload_body_limits(app.state.upload_gate))

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",   # echo any origin back
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if not settings.session_secret:
        logger.warning("SESSION_SECRET is not set — using the insecure built-in default.")
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.effective_session_secret,
        max_age=settings.session_max_age,
        https_only=False,
    )

    # ── Exception handlers ─────────────────────────────────────────────────────

    @app.exception_handler(DatabaseUnavailableError)
    async def database_unavailable_handler(request: Request, exc: DatabaseUnavailableError) -> JSONResponse:
        logger.warning("Database-backed route %s hit without a database.", request.url.path)
        return database_unavailable_response()

    @app.exception_handler(AppBaseException)
    async def app_exception_handler(request: Request, exc: AppBaseException) -> JSONResponse:
        """
        Safety-net for any AppBaseException that escapes controller-level handling.
        Returns the error shape: { "error": "..." }
        """
        logger.exception("Unhandled application error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    # ── Always-on routes ───────────────────────────────────────────────────────

    app.include_router(health_router)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UPLOADS_MOUNT, StaticFiles(directory=upload_dir), name="uploads")

    return app


def main() -> None:
    """Console entry point: run the bootstrap sequence and serve forever."""
    from police_records.bootstrap import start

    start(default_settings)


if __name__ == "__main__":
    main()
