"""
tests/services/test_database.py

Unit tests for MongoDatabase with a fake client factory — no real server.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import make_fake_client
from police_records.core.exceptions import DatabaseUnavailableError, DependencyConnectionError
from police_records.services.database import MongoDatabase


class TestMongoDatabase:

    @pytest.mark.asyncio
    async def test_connect_pings_and_selects_database(self) -> None:
        db = MagicMock()
        client = make_fake_client(db)
        factory = MagicMock(return_value=client)
        database = MongoDatabase(uri="mongodb://localhost", db_name="pms", timeout_ms=1500, client_factory=factory)

        await database.connect()

        factory.assert_called_once_with("mongodb://localhost", serverSelectionTimeoutMS=1500)
        client.admin.command.assert_awaited_once_with("ping")
        client.__getitem__.assert_called_with("pms")
        assert database.connected
        assert database.db is db

    @pytest.mark.asyncio
    async def test_unset_uri_raises_connection_error(self) -> None:
        factory = MagicMock()
        database = MongoDatabase(uri="", client_factory=factory)

        with pytest.raises(DependencyConnectionError):
            await database.connect()

        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_ping_closes_client(self) -> None:
        client = make_fake_client(ping_error=TimeoutError("server selection timed out"))
        database = MongoDatabase(uri="mongodb://nowhere", client_factory=lambda *a, **kw: client)

        with pytest.raises(DependencyConnectionError):
            await database.connect()

        client.close.assert_awaited_once()
        assert not database.connected

    @pytest.mark.asyncio
    async def test_invalid_uri_raises_connection_error(self) -> None:
        def factory(*args, **kwargs):
            raise ValueError("Invalid URI scheme")

        database = MongoDatabase(uri="postgres://x", client_factory=factory)

        with pytest.raises(DependencyConnectionError):
            await database.connect()

    def test_db_unavailable_before_connect(self) -> None:
        database = MongoDatabase(uri="mongodb://localhost", client_factory=MagicMock())
        with pytest.raises(DatabaseUnavailableError):
            _ = database.db

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        client = make_fake_client()
        database = MongoDatabase(uri="mongodb://localhost", client_factory=lambda *a, **kw: client)
        await database.connect()

        await database.close()

        client.close.assert_awaited_once()
        assert not database.connected
