"""
police_records/services/seed_service.py

Best-effort reference data for a fresh database.

Each seeder is independent: it raises SeedDataError on failure and the
bootstrap sequencer logs it and moves on to the next one. Seeders are
idempotent; existing data is left untouched.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, List

from police_records.core.config import settings
from police_records.core.exceptions import SeedDataError
from police_records.core.logger import get_logger
from police_records.services.records_service import GEOFILES

logger = get_logger(__name__)

USERS = "users"

_PBKDF2_ITERATIONS = 260_000

SAMPLE_GEOFILES: List[Dict[str, Any]] = [
    {
        "filename": "sample_patrol_zones.geojson",
        "original_name": "patrol_zones.geojson",
        "file_type": "geojson",
        "description": "Patrol zone boundaries for the central district.",
        "tags": ["patrol", "zones"],
    },
    {
        "filename": "sample_incident_hotspots.kml",
        "original_name": "incident_hotspots.kml",
        "file_type": "kml",
        "description": "Incident hotspots aggregated over the last quarter.",
        "tags": ["incidents", "hotspots"],
    },
    {
        "filename": "sample_station_locations.csv",
        "original_name": "station_locations.csv",
        "file_type": "csv",
        "description": "Police station coordinates and contact numbers.",
        "tags": ["stations"],
    },
]


def hash_password(password: str, salt: str | None = None) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), _PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${_PBKDF2_ITERATIONS}${salt}${digest.hex()}"


async def seed_geofiles(db: Any) -> int:
    """
    Insert the sample geofile records into an empty collection.

    Returns:
        Number of documents inserted (0 when the collection already had data).
    """
    try:
        if await db[GEOFILES].count_documents({}) > 0:
            logger.info("Geofiles already present — skipping sample data.")
            return 0

        now = datetime.now(timezone.utc)
        docs = [
            {**sample, "uploaded_by": "system", "url": None, "size": 0, "created_at": now}
            for sample in SAMPLE_GEOFILES
        ]
        await db[GEOFILES].insert_many(docs)
    except Exception as exc:
        raise SeedDataError(f"Could not seed sample geofiles: {exc}") from exc

    logger.info("Seeded %d sample geofile(s).", len(docs))
    return len(docs)


async def seed_admin_user(db: Any, username: str | None = None, password: str | None = None) -> bool:
    """
    Create the default administrative account unless it exists.

    Returns:
        True if the account was created.
    """
    username = username or settings.admin_username
    password = password or settings.admin_password
    try:
        if await db[USERS].find_one({"username": username}) is not None:
            logger.info("Admin user '%s' already exists — skipping.", username)
            return False

        await db[USERS].insert_one(
            {
                "username": username,
                "password_hash": hash_password(password),
                "role": "admin",
                "full_name": "System Administrator",
                "created_at": datetime.now(timezone.utc),
            }
        )
    except Exception as exc:
        raise SeedDataError(f"Could not seed admin user '{username}': {exc}") from exc

    logger.info("Seeded admin user '%s'.", username)
    return True
