"""
police_records/api/body_limit.py

Request body ceiling for the upload routes.

Starlette spools a whole multipart body to a temporary file before any
handler runs, so the UploadGate alone only refuses an oversized file after
it has been received. This middleware stops reading earlier:

  - a declared Content-Length over the route's ceiling is refused before
    the app is called;
  - otherwise the body bytes are counted as they arrive and the request is
    cut off as soon as the count crosses the ceiling.

Either way the caller gets 413 {"error": ..., "reason": "PayloadTooLarge"}.

Implemented as a pure ASGI middleware so the body stream can be wrapped.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from starlette.responses import JSONResponse

from police_records.core.constants import (
    API_PREFIX,
    CUSTODIAL_RECORDS_PATH,
    GEOFILES_PATH,
    MULTIPART_OVERHEAD_BYTES,
)
from police_records.core.exceptions import PayloadTooLargeError
from police_records.core.logger import get_logger
from police_records.services.upload_gate import UploadCategory, UploadGate

logger = get_logger(__name__)

#: Upload routes and the policy whose ceiling bounds their request body.
UPLOAD_ROUTES: Dict[str, UploadCategory] = {
    f"{API_PREFIX}/evidence/geofiles": UploadCategory.GEOFILE,
    GEOFILES_PATH: UploadCategory.GEOFILE,
    f"{API_PREFIX}/custodial/photos": UploadCategory.CUSTODIAL_PHOTO,
    CUSTODIAL_RECORDS_PATH: UploadCategory.CUSTODIAL_PHOTO,
}

_BODY_METHODS = {"POST", "PUT", "PATCH"}


def upload_body_limits(gate: UploadGate) -> Dict[str, int]:
    """Map each upload route to its policy ceiling plus multipart overhead."""
    return {
        path: gate.policy(category).max_size_bytes + MULTIPART_OVERHEAD_BYTES
        for path, category in UPLOAD_ROUTES.items()
    }


def _declared_length(scope) -> Optional[int]:
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


class UploadBodyLimitMiddleware:
    """Refuse request bodies larger than the ceiling of their upload route."""

    def __init__(self, app, limits: Mapping[str, int]):
        self.app = app
        self.limits = dict(limits)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["method"] not in _BODY_METHODS:
            await self.app(scope, receive, send)
            return

        path = scope["path"].rstrip("/") or "/"
        limit = self.limits.get(path)
        if limit is None:
            await self.app(scope, receive, send)
            return

        declared = _declared_length(scope)
        if declared is not None and declared > limit:
            logger.warning("Upload refused — %s declared %d bytes, limit %d.", path, declared, limit)
            await self._reject(scope, receive, send, limit)
            return

        received = 0
        exceeded = False
        started = False
        replied = False

        async def limited_receive():
            nonlocal received, exceeded
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    exceeded = True
                    raise PayloadTooLargeError(f"Request body for {path} exceeds {limit} bytes.")
            return message

        async def guarded_send(message):
            nonlocal started, replied
            # The form parser may turn the abort into its own error response;
            # that response is replaced by the 413.
            if exceeded and not started:
                if not replied:
                    replied = True
                    await self._reject(scope, receive, send, limit)
                return
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except Exception:
            if not exceeded:
                raise

        if exceeded:
            logger.warning("Upload refused — %s body passed %d bytes.", path, limit)
            if not (replied or started):
                await self._reject(scope, receive, send, limit)

    @staticmethod
    async def _reject(scope, receive, send, limit: int) -> None:
        response = JSONResponse(
            status_code=PayloadTooLargeError.status_code,
            content={
                "error": f"Request body exceeds the {limit} byte limit for this route.",
                "reason": PayloadTooLargeError.reason,
            },
        )
        await response(scope, receive, send)
