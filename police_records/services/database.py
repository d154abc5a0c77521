"""
police_records/services/database.py

MongoDB connection wrapper.

All driver-specific details are contained here — the rest of the
application talks to the ``MongoDatabase`` object and never builds a
client itself. The connection attempt is bounded by the driver's
``serverSelectionTimeoutMS``; nothing here adds its own deadline.
"""

from __future__ import annotations

from typing import Any, Callable

from pymongo import AsyncMongoClient

from police_records.core.config import mask_mongo_uri, settings
from police_records.core.exceptions import DatabaseUnavailableError, DependencyConnectionError
from police_records.core.logger import get_logger

logger = get_logger(__name__)


class MongoDatabase:
    """
    Lazily connected handle on one MongoDB database.

    ``connect()`` is awaited once by the bootstrap sequencer. Until it
    succeeds, ``db`` raises DatabaseUnavailableError so route handlers can
    answer "not available" instead of crashing.
    """

    def __init__(
        self,
        uri: str | None = None,
        db_name: str | None = None,
        timeout_ms: int | None = None,
        client_factory: Callable[..., Any] = AsyncMongoClient,
    ) -> None:
        self._uri = uri if uri is not None else settings.mongodb_uri
        self._db_name = db_name or settings.mongodb_db_name
        self._timeout_ms = timeout_ms or settings.mongodb_timeout_ms
        self._client_factory = client_factory
        self._client: Any = None
        self._db: Any = None

    @property
    def connected(self) -> bool:
        return self._db is not None

    @property
    def db(self) -> Any:
        if self._db is None:
            raise DatabaseUnavailableError("Database is not connected.")
        return self._db

    async def connect(self) -> None:
        """
        Open the client and verify the server answers a ``ping``.

        Raises:
            DependencyConnectionError: URI unset, malformed, or server unreachable.
        """
        if not self._uri:
            raise DependencyConnectionError("MONGODB_URI is not set.")

        logger.info("Connecting to MongoDB at %s ...", mask_mongo_uri(self._uri))
        try:
            client = self._client_factory(self._uri, serverSelectionTimeoutMS=self._timeout_ms)
        except Exception as exc:
            raise DependencyConnectionError(f"Invalid MongoDB connection string: {exc}") from exc

        try:
            await client.admin.command("ping")
        except Exception as exc:
            await client.close()
            raise DependencyConnectionError(f"MongoDB did not respond: {exc}") from exc

        self._client = client
        self._db = client[self._db_name]
        logger.info("MongoDB connected — database=%s", self._db_name)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._client = None
        self._db = None
