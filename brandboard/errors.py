"""
Domain errors raised by the store and service layers.

Each error carries the HTTP status the API maps it to, so routes never need
to translate them one by one.
"""

from __future__ import annotations


class BrandingError(Exception):
    """Base class for all branding board failures."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class Unauthenticated(BrandingError):
    status_code = 401
    default_message = "You must be signed in"


class Unauthorized(BrandingError):
    status_code = 403
    default_message = "Unauthorized"


class AlreadySubmitted(BrandingError):
    status_code = 409
    default_message = "You have already submitted a branding idea"


class NotFound(BrandingError):
    status_code = 404
    default_message = "Submission not found"


class StorageUnavailable(BrandingError):
    status_code = 503
    default_message = "Storage unavailable"


class InvalidUpload(BrandingError):
    status_code = 400
    default_message = "Invalid file type"


class UploadTooLarge(BrandingError):
    status_code = 413
    default_message = "File too large"
