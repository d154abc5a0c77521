"""
police_records/core/config.py

Centralised configuration loaded from environment variables.
Use a .env file locally; the deployment injects these at runtime.
"""

import re
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from police_records.core.constants import INSECURE_DEFAULT_SESSION_SECRET


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "Police Management System API"
    app_version: str = "1.0.0"
    debug: bool = False

    # ── Listener ───────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 5000
    node_env: str = "development"   # "production" selects the static bundle

    # ── Database (MongoDB) ─────────────────────────────────────────────────────
    mongodb_uri: Optional[str] = None     # unset → degraded mode
    mongodb_db_name: str = "police_management"
    mongodb_timeout_ms: int = 5000        # bounds the startup connection attempt

    # ── Sessions ───────────────────────────────────────────────────────────────
    session_secret: Optional[str] = None
    session_max_age: int = 24 * 60 * 60  # seconds

    # ── Files ──────────────────────────────────────────────────────────────────
    upload_dir: str = "./uploads"
    static_dist_dir: str = "./dist/public"
    frontend_dev_server_url: str = "http://127.0.0.1:5173"

    # ── Seed data ──────────────────────────────────────────────────────────────
    admin_username: str = "admin"
    admin_password: str = "admin123"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.node_env.strip().lower() == "production"

    @property
    def effective_session_secret(self) -> str:
        """SESSION_SECRET, or the well-known insecure default when unset."""
        return self.session_secret or INSECURE_DEFAULT_SESSION_SECRET


#: user:password@ section of a connection string.
CREDENTIALS_PATTERN = re.compile(r"://([^:/@\s]+):([^@\s]+)@")


def mask_credentials(text: str) -> str:
    return CREDENTIALS_PATTERN.sub(r"://\1:***@", text)


def mask_mongo_uri(uri: Optional[str]) -> str:
    """Hide the password part of a connection string before it reaches a log."""
    if not uri:
        return "[NOT SET]"
    return mask_credentials(uri)


# Single shared instance — import this everywhere.
settings = Settings()
