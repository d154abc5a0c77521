"""
police_records/bootstrap/sequencer.py

Runs the startup phases, strictly in order, then opens the listener:

    1. connect    MongoDB connection attempt (failure → degraded mode)
    2. activate   decide which capabilities are on
    3. register   import and register each active route group
    4. frontend   static bundle (production) or dev-server proxy
    5. seed       sample geofiles + admin user (only when connected)
    6. listen     freeze state, serve with uvicorn

Only a failing *required* route group stops the process. Every other
failure is logged in the phase that raised it and startup continues with
less functionality.
"""

from __future__ import annotations

import asyncio
import importlib
import sys
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, NoReturn, Sequence, Tuple

import uvicorn
from fastapi import FastAPI

from police_records.api.frontend import mount_dev_proxy, mount_static_bundle
from police_records.api.unavailable import register_unavailable_routes
from police_records.bootstrap.capabilities import CAPABILITIES, CapabilitySpec
from police_records.core.config import Settings, mask_mongo_uri
from police_records.core.exceptions import (
    DependencyConnectionError,
    OptionalCapabilityLoadError,
    RequiredRouteRegistrationError,
)
from police_records.core.logger import get_logger
from police_records.core.state import CapabilityRegistry, Environment, Mode
from police_records.main import create_app
from police_records.services.database import MongoDatabase
from police_records.services.seed_service import seed_admin_user, seed_geofiles

logger = get_logger(__name__)

Seeder = Tuple[str, Callable[[Any], Awaitable[Any]]]
Server = Callable[[FastAPI, Settings], Awaitable[None]]

DEFAULT_SEEDERS: Tuple[Seeder, ...] = (
    ("sample geofiles", seed_geofiles),
    ("admin user", seed_admin_user),
)


class RegistrationOutcome(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FATAL = "fatal"


async def serve_uvicorn(app: FastAPI, settings: Settings) -> None:
    """Bind HOST:PORT and serve until the process is stopped."""
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
        loop="asyncio",
    )
    server = uvicorn.Server(config)
    await server.serve()


class BootstrapSequencer:
    """
    One-shot startup orchestrator.

    All collaborators are constructor-injected so tests can run the full
    sequence with a fake database and a no-op server.
    """

    def __init__(
        self,
        settings: Settings,
        database: MongoDatabase | None = None,
        capabilities: Sequence[CapabilitySpec] = CAPABILITIES,
        seeders: Iterable[Seeder] = DEFAULT_SEEDERS,
        server: Server = serve_uvicorn,
    ) -> None:
        self.settings = settings
        self.environment = Environment.from_settings(settings)
        self.registry = CapabilityRegistry(self.environment)
        self.database = database or MongoDatabase(
            uri=settings.mongodb_uri,
            db_name=settings.mongodb_db_name,
            timeout_ms=settings.mongodb_timeout_ms,
        )
        self.capabilities = tuple(capabilities)
        self.seeders = tuple(seeders)
        self._server = server
        self.app: FastAPI = create_app(self.registry, self.database, settings)
        self.outcomes: Dict[str, RegistrationOutcome] = {}

    # ── Public API ─────────────────────────────────────────────────────────────

    async def prepare(self) -> FastAPI:
        """
        Run phases 1–5 and return the fully wired app, not yet listening.

        Raises:
            RequiredRouteRegistrationError: A required route group failed.
        """
        logger.info("Starting %s ...", self.settings.app_name)
        logger.info("MONGODB_URI = %s", mask_mongo_uri(self.settings.mongodb_uri))

        await self.connect_dependencies()
        self.activate_capabilities()
        await self.register_routes()
        self.select_static_strategy()
        await self.seed()
        return self.app

    async def run(self) -> None:
        await self.prepare()
        await self.listen()

    async def shutdown(self) -> None:
        """Release the clients opened during startup once the server stops."""
        proxy = getattr(self.app.state, "dev_proxy_client", None)
        if proxy is not None:
            await proxy.aclose()
        await self.database.close()
        logger.info("%s shutdown complete.", self.settings.app_name)

    async def serve_forever(self) -> None:
        try:
            await self.run()
        finally:
            await self.shutdown()

    def start(self) -> NoReturn:
        """Blocking entry point. Exits 1 if a required route group fails."""
        try:
            asyncio.run(self.serve_forever())
        except RequiredRouteRegistrationError as exc:
            logger.error("Failed to start server: %s", exc)
            sys.exit(1)
        sys.exit(0)

    # ── Phases ─────────────────────────────────────────────────────────────────

    async def connect_dependencies(self) -> None:
        try:
            await self.database.connect()
        except DependencyConnectionError as exc:
            logger.warning("MongoDB connection failed: %s", exc)
            logger.info("Starting server in fallback mode without database.")
            return
        self.registry.mark_database_connected()

    def activate_capabilities(self) -> None:
        for spec in self.capabilities:
            if spec.needs_database and not self.registry.database_connected:
                logger.info("Capability '%s' inactive — needs the database.", spec.name.value)
                continue
            self.registry.activate(spec.name)

    async def register_routes(self) -> None:
        for spec in self.capabilities:
            if not self.registry.is_active(spec.name):
                if spec.unavailable_paths:
                    register_unavailable_routes(self.app, spec.unavailable_paths)
                continue

            outcome = await self._register(spec)
            self.outcomes[spec.name.value] = outcome

            if outcome is RegistrationOutcome.SKIPPED:
                self.registry.deactivate(spec.name)
            elif outcome is RegistrationOutcome.FATAL:
                raise RequiredRouteRegistrationError(
                    f"Required route group '{spec.name.value}' could not be registered."
                )

    def select_static_strategy(self) -> None:
        if self.environment.mode is Mode.PRODUCTION:
            mount_static_bundle(self.app, self.settings.static_dist_dir)
        else:
            mount_dev_proxy(self.app, self.settings.frontend_dev_server_url)

    async def seed(self) -> None:
        if not self.registry.database_connected:
            return
        for label, seeder in self.seeders:
            logger.info("Seeding %s ...", label)
            try:
                await seeder(self.database.db)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Failed to seed %s: %s", label, exc)

    async def listen(self) -> None:
        self.registry.freeze()
        state = self.registry.snapshot()
        port = self.environment.port
        logger.info("%s running on port %d", self.settings.app_name, port)
        logger.info("Environment: %s", self.environment.mode.value)
        logger.info(
            "MongoDB Status: %s",
            "Connected" if state.database_connected else "Disconnected (Fallback Mode)",
        )
        logger.info("Active capabilities: %s", ", ".join(sorted(c.value for c in state.active_capabilities)))
        logger.info("Server accessible at: http://%s:%d", self.settings.host, port)
        if not state.database_connected:
            logger.warning("Running without database. Set MONGODB_URI to enable full functionality.")

        await self._server(self.app, self.settings)

    # ── Internals ──────────────────────────────────────────────────────────────

    async def _register(self, spec: CapabilitySpec) -> RegistrationOutcome:
        name = spec.name.value
        logger.info("Registering %s routes ...", name)
        try:
            registrar = await self._load(spec)
            registrar(self.app)
        except Exception as exc:  # noqa: BLE001
            if spec.required:
                logger.error("Required %s routes failed to register: %s", name, exc)
                return RegistrationOutcome.FATAL
            logger.warning("Optional %s routes unavailable — continuing without them: %s", name, exc)
            return RegistrationOutcome.SKIPPED

        logger.info("%s routes registered.", name.capitalize())
        return RegistrationOutcome.OK

    async def _load(self, spec: CapabilitySpec) -> Callable[[FastAPI], None]:
        try:
            module = await asyncio.to_thread(importlib.import_module, spec.module)
            registrar = getattr(module, spec.attribute)
        except (ImportError, AttributeError) as exc:
            raise OptionalCapabilityLoadError(
                f"Cannot load {spec.module}.{spec.attribute}: {exc}"
            ) from exc
        return registrar


def start(settings: Settings) -> NoReturn:
    """Run the whole bootstrap sequence for ``settings``; never returns."""
    BootstrapSequencer(settings).start()
