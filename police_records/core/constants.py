"""
police_records/core/constants.py

Application-wide fixed constants.

These are business rules that are part of the system's contract and are
NOT configurable via environment variables.
"""

# ── Routing ────────────────────────────────────────────────────────────────────

#: Every JSON endpoint lives under this prefix; the frontend owns the rest.
API_PREFIX: str = "/api"

#: Public mount point for accepted uploads.
UPLOADS_MOUNT: str = "/uploads"

# ── Upload policies ────────────────────────────────────────────────────────────

MIB: int = 1024 * 1024

#: Geospatial data files accepted by the evidence and geofile routes.
GEOFILE_EXTENSIONS: frozenset = frozenset(
    {".shp", ".kml", ".geojson", ".csv", ".gpx", ".kmz", ".gml"}
)
GEOFILE_MAX_BYTES: int = 50 * MIB

#: Identification photographs attached to custodial records.
PHOTO_EXTENSIONS: frozenset = frozenset({".jpg", ".jpeg", ".png"})
PHOTO_MAX_BYTES: int = 5 * MIB

#: Chunk size used when streaming an upload to disk.
UPLOAD_CHUNK_BYTES: int = 64 * 1024

#: Allowance for multipart boundaries, part headers and small form fields.
MULTIPART_OVERHEAD_BYTES: int = 64 * 1024

# ── Sessions ───────────────────────────────────────────────────────────────────

#: Used only when SESSION_SECRET is unset. Anyone can forge cookies signed with it.
INSECURE_DEFAULT_SESSION_SECRET: str = "police-management-secret-key"

# ── Health messages ────────────────────────────────────────────────────────────

HEALTH_MESSAGE_CONNECTED: str = "All systems operational"
HEALTH_MESSAGE_DISCONNECTED: str = (
    "Running in fallback mode - set MONGODB_URI to enable full functionality"
)

# ── Database-backed paths ──────────────────────────────────────────────────────

GEOFILES_PATH: str = f"{API_PREFIX}/geofiles"
CUSTODIAL_RECORDS_PATH: str = f"{API_PREFIX}/custodial-records"
