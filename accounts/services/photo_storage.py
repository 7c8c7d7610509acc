"""
Profile photo storage on the local filesystem.

Files are written under ``UPLOAD_DIR`` and served from ``UPLOAD_URL_PREFIX``.
Only JPEG and PNG images are accepted.
"""

import asyncio
import logging
import secrets
import time
from pathlib import Path
from typing import Optional

from accounts.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png"}


class PhotoStorage:
    """
    Stores uploaded profile photos and returns their public URL.
    """

    def __init__(
        self,
        upload_dir: str,
        url_prefix: str,
        max_bytes: int = 5 * 1024 * 1024,
    ):
        """
        Initialize PhotoStorage.

        Args:
            upload_dir: Directory the files are written to
            url_prefix: Public URL path the directory is served under
            max_bytes: Largest accepted upload
        """
        self._upload_dir = Path(upload_dir)
        self._url_prefix = url_prefix.rstrip("/")
        self._max_bytes = max_bytes

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    @staticmethod
    def _extension(filename: Optional[str]) -> str:
        if not filename or "." not in filename:
            return ""
        return filename.rsplit(".", 1)[-1].lower()

    def validate(self, filename: Optional[str], content: bytes, content_type: Optional[str]) -> str:
        """
        Check an upload and return its normalized extension.

        Raises:
            ValidationError: Empty, too large, or not jpg/jpeg/png
        """
        if not content:
            raise ValidationError("No file uploaded", code="NO_FILE")

        extension = self._extension(filename)
        if extension not in ALLOWED_EXTENSIONS:
            raise ValidationError("Only jpg, jpeg and png images are allowed", code="INVALID_FILE_TYPE")
        if content_type and content_type.lower() not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Only jpg, jpeg and png images are allowed", code="INVALID_FILE_TYPE")

        if len(content) > self._max_bytes:
            raise ValidationError(
                f"File too large (max {self._max_bytes // (1024 * 1024)}MB)",
                code="FILE_TOO_LARGE",
            )
        return extension

    def _write(self, path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def save(
        self,
        account_id: str,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Store a photo for an account and return its URL."""
        extension = self.validate(filename, content, content_type)
        unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        name = f"profile-{account_id}-{unique_suffix}.{extension}"

        await asyncio.to_thread(self._write, self._upload_dir / name, content)
        logger.info(f"Stored profile photo {name} ({len(content)} bytes)")

        return f"{self._url_prefix}/{name}"
