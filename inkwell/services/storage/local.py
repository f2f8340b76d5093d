"""
Local filesystem storage implementation.

Thumbnails are written under the configured uploads directory and served
back by the static files mount at `/uploads`.
"""

import time
from pathlib import Path

import aiofiles
import aiofiles.os

from inkwell.configs import settings
from inkwell.monitoring import get_logger
from inkwell.utils.helpers import secure_filename

logger = get_logger(__name__)

THUMBNAIL_FOLDER = "thumbnails"
URL_PREFIX = f"/uploads/{THUMBNAIL_FOLDER}/"


class LocalStorage:
    """
    Local filesystem storage implementation.

    Stored names are `<epoch-millis>-<sanitized original name>`, so two
    uploads of the same file never overwrite each other.
    """

    def __init__(self, uploads_dir: Path | None = None) -> None:
        """Initialize local storage with configured paths."""
        self.uploads_dir = uploads_dir or settings.UPLOADS_DIR
        self.base_path = self.uploads_dir / THUMBNAIL_FOLDER
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Ensure the upload directory exists."""
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _stored_name(self, filename: str) -> str:
        return f"{time.time_ns() // 1_000_000}-{secure_filename(filename)}"

    async def upload_thumbnail(
        self,
        filename: str,
        file_data: bytes,
        content_type: str,
    ) -> str:
        """
        Write a thumbnail to the local filesystem.

        Args:
            filename: Name the client gave the file
            file_data: Raw image bytes
            content_type: MIME type of the image

        Returns:
            str: URL path to the stored image
        """
        stored_name = self._stored_name(filename)
        file_path = self.base_path / stored_name

        async with aiofiles.open(file_path, "wb") as f:
            await f.write(file_data)

        logger.info("Stored thumbnail %s (%s, %d bytes)", stored_name, content_type, len(file_data))
        # Return URL path for serving via static files
        return f"{URL_PREFIX}{stored_name}"

    async def delete_thumbnail(self, url: str) -> bool:
        """
        Delete a thumbnail previously stored by this backend.

        URIs that point elsewhere (external links given at creation time)
        are left alone.

        Args:
            url: Stored thumbnail URI

        Returns:
            bool: True if deletion was successful, False otherwise
        """
        if not url.startswith(URL_PREFIX):
            return False
        name = url.removeprefix(URL_PREFIX)
        if not name or name != secure_filename(name):
            return False
        file_path = self.base_path / name
        if not file_path.exists():
            return False
        await aiofiles.os.remove(file_path)
        return True
