"""
police_records/services/upload_gate.py

Upload admission gate: decides whether an incoming file may be stored.

    evaluate(category, filename, declared_size)  → UploadDecision  (pure)
    admit(category, UploadFile)                  → StoredUpload    (writes to disk)

Ordering of checks:
  1. Extension (case-insensitive) against the category whitelist. A bad
     extension is refused before size is even looked at.
  2. Declared size (multipart part size, when the client sent it) against
     the category ceiling.
  3. While streaming to disk the bytes are counted again; crossing the
     ceiling aborts the write, removes the partial file and reports
     PayloadTooLarge. This covers clients that lie about or omit the size.
     Disk writes run in a worker thread so a large file does not stall
     the event loop.

Only the filename extension is inspected. File contents are never sniffed,
so a renamed executable with a ``.png`` suffix is accepted. Callers that
need stronger guarantees must validate contents themselves.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Optional

from fastapi import UploadFile

from police_records.core.config import settings
from police_records.core.constants import (
    GEOFILE_EXTENSIONS,
    GEOFILE_MAX_BYTES,
    PHOTO_EXTENSIONS,
    PHOTO_MAX_BYTES,
    UPLOAD_CHUNK_BYTES,
    UPLOADS_MOUNT,
)
from police_records.core.exceptions import (
    PayloadTooLargeError,
    UnsupportedFileTypeError,
    UploadValidationError,
)
from police_records.core.logger import get_logger

logger = get_logger(__name__)


class UploadCategory(str, Enum):
    GEOFILE = "geofile"
    CUSTODIAL_PHOTO = "custodial-photo"


class UploadRejection(str, Enum):
    UNSUPPORTED_FILE_TYPE = "UnsupportedFileType"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"


@dataclass(frozen=True)
class UploadPolicy:
    allowed_extensions: FrozenSet[str]
    max_size_bytes: int
    destination_directory: Path


@dataclass(frozen=True)
class UploadDecision:
    accepted: bool
    reason: Optional[UploadRejection] = None


@dataclass(frozen=True)
class StoredUpload:
    """Where an accepted upload ended up."""

    original_name: str
    stored_name: str
    path: Path
    size: int
    content_type: Optional[str] = None

    @property
    def url(self) -> str:
        return f"{UPLOADS_MOUNT}/{self.stored_name}"


_ACCEPT = UploadDecision(accepted=True)


def default_policies(upload_dir: str | Path) -> Dict[UploadCategory, UploadPolicy]:
    """The two policies the service runs with, both writing to ``upload_dir``."""
    destination = Path(upload_dir)
    return {
        UploadCategory.GEOFILE: UploadPolicy(
            allowed_extensions=GEOFILE_EXTENSIONS,
            max_size_bytes=GEOFILE_MAX_BYTES,
            destination_directory=destination,
        ),
        UploadCategory.CUSTODIAL_PHOTO: UploadPolicy(
            allowed_extensions=PHOTO_EXTENSIONS,
            max_size_bytes=PHOTO_MAX_BYTES,
            destination_directory=destination,
        ),
    }


class UploadGate:
    """
    Stateless validator over an immutable table of UploadPolicy objects.

    Safe to share between concurrent requests.
    """

    def __init__(self, policies: Dict[UploadCategory, UploadPolicy] | None = None) -> None:
        self._policies: Dict[UploadCategory, UploadPolicy] = dict(
            policies if policies is not None else default_policies(settings.upload_dir)
        )

    def policy(self, category: UploadCategory | str) -> UploadPolicy:
        return self._policies[UploadCategory(category)]

    # ── Public API ─────────────────────────────────────────────────────────────

    def evaluate(
        self,
        category: UploadCategory | str,
        filename: str | None,
        declared_size: int | None,
    ) -> UploadDecision:
        """
        Decide on one file from its metadata alone. Nothing is written.

        Args:
            category      : Which policy applies.
            filename      : Client-supplied filename; only its suffix matters.
            declared_size : Size in bytes if known, else None.
        """
        policy = self.policy(category)

        extension = Path(filename or "").suffix.lower()
        if extension not in policy.allowed_extensions:
            return UploadDecision(False, UploadRejection.UNSUPPORTED_FILE_TYPE)

        if declared_size is not None and declared_size > policy.max_size_bytes:
            return UploadDecision(False, UploadRejection.PAYLOAD_TOO_LARGE)

        return _ACCEPT

    async def admit(self, category: UploadCategory | str, upload: UploadFile) -> StoredUpload:
        """
        Validate ``upload`` and stream it to the category's destination.

        Returns:
            StoredUpload describing the written file.

        Raises:
            UnsupportedFileTypeError: Extension not allowed (nothing written).
            PayloadTooLargeError:     Declared or streamed size over the ceiling.
        """
        category = UploadCategory(category)
        policy = self.policy(category)
        filename = upload.filename or ""

        decision = self.evaluate(category, filename, getattr(upload, "size", None))
        if not decision.accepted:
            self._reject(category, filename, decision.reason)  # raises

        policy.destination_directory.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}{Path(filename).suffix.lower()}"
        target = policy.destination_directory / stored_name

        written = 0
        try:
            out = await asyncio.to_thread(open, target, "wb")
            try:
                while True:
                    chunk = await upload.read(UPLOAD_CHUNK_BYTES)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > policy.max_size_bytes:
                        raise PayloadTooLargeError(
                            f"'{filename}' exceeds the {policy.max_size_bytes} byte limit "
                            f"for {category.value} uploads."
                        )
                    await asyncio.to_thread(out.write, chunk)
            finally:
                await asyncio.to_thread(out.close)
        except UploadValidationError as exc:
            target.unlink(missing_ok=True)
            logger.warning("Upload refused — category=%s file='%s' reason=%s", category.value, filename, exc.reason)
            raise
        except Exception:
            target.unlink(missing_ok=True)
            raise

        logger.info("Stored %s upload '%s' as %s (%d bytes).", category.value, filename, stored_name, written)
        return StoredUpload(
            original_name=filename,
            stored_name=stored_name,
            path=target,
            size=written,
            content_type=upload.content_type,
        )

    # ── Internals ──────────────────────────────────────────────────────────────

    def _reject(self, category: UploadCategory, filename: str, reason: UploadRejection) -> None:
        policy = self._policies[category]
        logger.warning("Upload refused — category=%s file='%s' reason=%s", category.value, filename, reason.value)
        if reason is UploadRejection.UNSUPPORTED_FILE_TYPE:
            allowed = ", ".join(sorted(policy.allowed_extensions))
            raise UnsupportedFileTypeError(
                f"'{filename}' is not an accepted {category.value} file. Allowed: {allowed}."
            )
        raise PayloadTooLargeError(
            f"'{filename}' exceeds the {policy.max_size_bytes} byte limit for {category.value} uploads."
        )
