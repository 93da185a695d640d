"""
Upload acceptance checks, run before anything is stored or sent out.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from app.errors import ErrorKind, IngestError

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".pdf"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "application/pdf"}


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lower()

    @property
    def media_type(self) -> str:
        # strip parameters such as "; charset=..."
        return (self.content_type or "").split(";")[0].strip().lower()


def validate_upload(upload: Optional[UploadedFile], max_size: int) -> UploadedFile:
    """Raise ``IngestError`` unless *upload* is present, allowed and small enough."""
    if upload is None or not upload.filename:
        raise IngestError(ErrorKind.NO_FILE, "No file uploaded")

    if (
        upload.extension not in ALLOWED_EXTENSIONS
        or upload.media_type not in ALLOWED_CONTENT_TYPES
    ):
        raise IngestError(
            ErrorKind.UNSUPPORTED_TYPE, "Only image and PDF files are allowed!"
        )

    if len(upload.data) > max_size:
        raise IngestError(
            ErrorKind.TOO_LARGE,
            f"File too large (max {max_size // (1024 * 1024)} MB)",
        )
    return upload
