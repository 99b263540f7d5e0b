"""
Validation and storage of uploaded logo images.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import uuid
from typing import Iterable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from brandboard.errors import InvalidUpload, StorageUnavailable, UploadTooLarge
from brandboard.storage import StorageClient

logger = logging.getLogger(__name__)

_FALLBACK_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/svg+xml": ".svg",
    "image/gif": ".gif",
}


def _extension_for(filename: Optional[str], content_type: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext and ext[1:].isalnum():
        return ext
    return _FALLBACK_EXTENSIONS.get(content_type) or mimetypes.guess_extension(
        content_type
    ) or ""


def save_logo(
    storage: StorageClient,
    data: bytes,
    *,
    filename: Optional[str],
    content_type: Optional[str],
    allowed_types: Iterable[str],
    max_bytes: int,
) -> str:
    """Validate an uploaded image and store it under a fresh unique name.

    Returns the reference string to use as a submission's ``logoUrl``.
    """
    if content_type not in set(allowed_types):
        raise InvalidUpload()
    if not data:
        raise InvalidUpload("No file uploaded")
    if len(data) > max_bytes:
        raise UploadTooLarge(f"File too large (max {max_bytes // (1024 * 1024)}MB)")

    name = f"{uuid.uuid4()}{_extension_for(filename, content_type)}"
    try:
        reference = storage.put_bytes(name, data, content_type)
    except (OSError, ValueError, BotoCoreError, ClientError) as exc:
        logger.error("Error uploading file %s: %s", name, exc)
        raise StorageUnavailable("Error uploading file") from exc
    logger.info("Stored logo %s (%d bytes)", name, len(data))
    return reference
