"""
police_records/core/exceptions.py

Custom exception hierarchy for the application.

Raising typed exceptions from services lets controllers catch specific
cases and return the correct HTTP status code without leaking internals.
Only RequiredRouteRegistrationError is allowed to end the process; every
other startup failure is caught in the phase that raised it.
"""


class AppBaseException(Exception):
    """Root exception — catch-all for any application-level error."""


# ── Startup exceptions ─────────────────────────────────────────────────────────

class DependencyConnectionError(AppBaseException):
    """Raised when the database cannot be reached (or is not configured)."""


class OptionalCapabilityLoadError(AppBaseException):
    """Raised when an optional route group cannot be imported or registered."""


class RequiredRouteRegistrationError(AppBaseException):
    """Raised when a required route group fails to register. Fatal."""


class SeedDataError(AppBaseException):
    """Raised when one seeding step fails."""


class RegistryFrozenError(AppBaseException):
    """Raised when service state is mutated after the listener opened."""


# ── Database exceptions ────────────────────────────────────────────────────────

class DatabaseUnavailableError(AppBaseException):
    """Raised when a database-backed operation runs without a connection."""

    reason = "DatabaseUnavailable"


class RecordNotFoundError(AppBaseException):
    """Raised when a record id does not match any stored document."""


# ── Upload exceptions ──────────────────────────────────────────────────────────

class UploadValidationError(AppBaseException):
    """
    Raised when the upload admission gate refuses a file.

    ``reason`` is the machine-readable code returned to the caller and
    ``status_code`` the HTTP status the controllers answer with.
    """

    reason = "UploadRejected"
    status_code = 400


class UnsupportedFileTypeError(UploadValidationError):
    """Raised when the file extension is not allowed for the category."""

    reason = "UnsupportedFileType"
    status_code = 400


class PayloadTooLargeError(UploadValidationError):
    """Raised when the file exceeds the category's size ceiling."""

    reason = "PayloadTooLarge"
    status_code = 413
