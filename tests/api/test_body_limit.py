"""
tests/api/test_body_limit.py

Tests for UploadBodyLimitMiddleware.

The middleware is driven directly with ASGI messages around a small app
that records whether it ran, then once end-to-end through the real app.
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from starlette.responses import JSONResponse

from police_records.api.body_limit import UploadBodyLimitMiddleware, upload_body_limits
from police_records.core.constants import MULTIPART_OVERHEAD_BYTES, PHOTO_MAX_BYTES
from police_records.services.upload_gate import UploadGate, default_policies

LIMITS = {"/api/custodial/photos": 10}


# ── Helpers ────────────────────────────────────────────────────────────────────

class BodyReadingApp:
    """Reads the full body, then answers 200 with its length."""

    def __init__(self) -> None:
        self.called = False

    async def __call__(self, scope, receive, send) -> None:
        self.called = True
        body = b""
        while True:
            message = await receive()
            body += message.get("body", b"")
            if not message.get("more_body"):
                break
        await JSONResponse({"size": len(body)})(scope, receive, send)


async def _call(app, path: str, chunks: list, content_length: int | None = None, method: str = "POST") -> list:
    headers = [] if content_length is None else [(b"content-length", str(content_length).encode())]
    scope = {"type": "http", "method": method, "path": path, "headers": headers}
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]
    sent = []

    async def receive():
        return messages.pop(0) if messages else {"type": "http.disconnect"}

    async def send(message):
        sent.append(message)

    await app(scope, receive, send)
    return sent


def _status(sent: list) -> int:
    return next(m["status"] for m in sent if m["type"] == "http.response.start")


def _json(sent: list) -> dict:
    return json.loads(b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body"))


# ── Middleware ─────────────────────────────────────────────────────────────────

class TestUploadBodyLimit:

    @pytest.mark.asyncio
    async def test_declared_length_over_limit_refused_before_app_runs(self) -> None:
        inner = BodyReadingApp()
        sent = await _call(UploadBodyLimitMiddleware(inner, LIMITS), "/api/custodial/photos", [b"x"], content_length=11)

        assert _status(sent) == 413
        assert _json(sent)["reason"] == "PayloadTooLarge"
        assert inner.called is False

    @pytest.mark.asyncio
    async def test_streamed_body_over_limit_is_cut_off(self) -> None:
        inner = BodyReadingApp()
        sent = await _call(UploadBodyLimitMiddleware(inner, LIMITS), "/api/custodial/photos", [b"123456", b"789012", b"never"])

        assert _status(sent) == 413
        assert _json(sent)["reason"] == "PayloadTooLarge"
        assert len([m for m in sent if m["type"] == "http.response.start"]) == 1

    @pytest.mark.asyncio
    async def test_body_within_limit_passes_through(self) -> None:
        sent = await _call(UploadBodyLimitMiddleware(BodyReadingApp(), LIMITS), "/api/custodial/photos/", [b"12345", b"67890"], content_length=10)

        assert _status(sent) == 200
        assert _json(sent) == {"size": 10}

    @pytest.mark.asyncio
    async def test_other_routes_are_not_limited(self) -> None:
        sent = await _call(UploadBodyLimitMiddleware(BodyReadingApp(), LIMITS), "/api/health", [b"x" * 100], content_length=100)

        assert _status(sent) == 200

    @pytest.mark.asyncio
    async def test_methods_without_body_are_ignored(self) -> None:
        inner = BodyReadingApp()
        sent = await _call(UploadBodyLimitMiddleware(inner, LIMITS), "/api/custodial/photos", [b""], content_length=99, method="GET")

        assert _status(sent) == 200
        assert inner.called is True

    def test_limits_follow_upload_policies(self, tmp_path) -> None:
        limits = upload_body_limits(UploadGate(default_policies(tmp_path)))

        assert limits["/api/custodial/photos"] == PHOTO_MAX_BYTES + MULTIPART_OVERHEAD_BYTES
        assert limits["/api/custodial-records"] == PHOTO_MAX_BYTES + MULTIPART_OVERHEAD_BYTES
        assert limits["/api/evidence/geofiles"] > limits["/api/custodial/photos"]


# ── Through the app ────────────────────────────────────────────────────────────

class TestOversizedRequestThroughApp:

    def test_photo_body_past_ceiling_gets_413_and_nothing_stored(self, client: TestClient, degraded_settings) -> None:
        huge = b"\xff" * (PHOTO_MAX_BYTES + MULTIPART_OVERHEAD_BYTES + 1)

        response = client.post("/api/custodial/photos", files=[("photo", ("big.jpg", io.BytesIO(huge), "image/jpeg"))])

        assert response.status_code == 413
        assert response.json()["reason"] == "PayloadTooLarge"
        assert list(Path(degraded_settings.upload_dir).iterdir()) == []
