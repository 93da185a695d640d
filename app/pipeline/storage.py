"""
Disk storage for uploaded receipt files.

Every accepted upload gets a fresh ``<uuid4>-<epoch ms><ext>`` name so
concurrent uploads never collide. Files are exposed publicly under
``url_path`` by the static mount in ``app.main``.
"""
from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class UploadStorage:
    def __init__(self, directory: str | os.PathLike, url_path: str = "/uploads"):
        self.directory = Path(directory)
        self.url_path = "/" + url_path.strip("/")

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_name(original_filename: str) -> str:
        ext = os.path.splitext(original_filename)[1]
        return f"{uuid.uuid4()}-{int(time.time() * 1000)}{ext}"

    def path_for(self, filename: str) -> Path:
        # Never let a name escape the upload directory
        return self.directory / Path(filename).name

    def save(self, data: bytes, original_filename: str) -> str:
        """Write *data* under a fresh unique name and return that name."""
        self.ensure_directory()
        filename = self.generate_name(original_filename)
        with open(self.path_for(filename), "wb") as f:
            f.write(data)
        logger.info("Stored upload %s (%d bytes)", filename, len(data))
        return filename

    def public_url(self, filename: str, base_url: str) -> str:
        return f"{base_url.rstrip('/')}{self.url_path}/{filename}"

    @staticmethod
    def filename_from_url(url: str) -> str:
        return Path(urlparse(url).path).name

    def discard(self, filename: str) -> bool:
        """Best-effort removal. Failures are logged, never raised."""
        try:
            self.path_for(filename).unlink()
        except OSError as e:
            logger.warning("Failed to remove stored file %s: %s", filename, e)
            return False
        logger.info("Removed stored file %s", filename)
        return True

    def discard_url(self, url: str) -> bool:
        return self.discard(self.filename_from_url(url))
