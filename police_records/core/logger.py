"""
police_records/core/logger.py

Centralised logging configuration.
Every module should obtain its logger via:

    from police_records.core.logger import get_logger
    logger = get_logger(__name__)

Connection strings are masked by a handler filter, so a driver error that
echoes MONGODB_URI never prints the password.
"""

import logging
import sys

from police_records.core.config import mask_credentials, settings


class CredentialMaskFilter(logging.Filter):
    """Rewrite ``scheme://user:password@`` as ``scheme://user:***@`` in every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_credentials(message)
        if masked != message:
            record.msg, record.args = masked, None
        return True


def _build_handler() -> logging.StreamHandler:
    """Return a stdout handler with a structured, readable format."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    handler.addFilter(CredentialMaskFilter())

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(fmt)
    return handler


def _configure_root_logger() -> None:
    """Configure the root logger once at import time."""
    root = logging.getLogger()
    if root.handlers:
        # Already configured (e.g. by uvicorn or pytest) — leave it alone.
        return

    root.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    root.addHandler(_build_handler())

    # Startup chatter from the driver and the proxy is not useful at INFO.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


_configure_root_logger()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
