"""Reference image uploads through Evolink's base64 endpoint."""

from __future__ import annotations

import base64
import logging
from typing import Dict

from modules.evolink.service import EvolinkError, EvolinkService
from .settings import ALLOWED_MIME_TYPES, MAX_FILE_SIZE

logger = logging.getLogger(__name__)


class UploadError(ValueError):
    """Raised when an uploaded file is rejected."""


def to_data_url(content: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def validate_upload(content: bytes | None, mime_type: str | None) -> None:
    if not content:
        raise UploadError("No file provided")
    if (mime_type or "").lower() not in ALLOWED_MIME_TYPES:
        raise UploadError("Invalid file type. Supported: JPG, PNG, WebP")
    if len(content) > MAX_FILE_SIZE:
        raise UploadError("File too large. Max 10MB.")


def upload_reference(
    content: bytes,
    mime_type: str,
    file_name: str,
    *,
    service: EvolinkService | None = None,
) -> Dict[str, str]:
    """Upload a reference image and return ``{"url", "fileName"}``.

    When Evolink refuses the upload or cannot be reached the data URI
    itself is returned so the studio can still pass the image inline.
    """

    validate_upload(content, mime_type)
    service = service or EvolinkService()
    data_url = to_data_url(content, mime_type.lower())

    try:
        uploaded = service.upload_base64(data_url, file_name)
    except EvolinkError as exc:
        logger.warning(
            "Evolink upload failed, falling back to data URI",
            extra={"status": exc.status_code, "file_name": file_name},
        )
        return {"url": data_url, "fileName": file_name}

    return {"url": uploaded["url"], "fileName": uploaded["file_name"] or file_name}
