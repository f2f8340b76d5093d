"""
Thumbnail upload service.

Validates uploaded images and hands them to the storage backend.
"""

from io import BytesIO

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from inkwell.configs import settings
from inkwell.errors import (
    ImageTooLargeError,
    InvalidImageError,
    ThumbnailStorageError,
    UnsupportedImageTypeError,
)
from inkwell.monitoring import get_logger
from inkwell.services.storage import StorageService, get_storage_service

logger = get_logger(__name__)


class ThumbnailService:
    """
    Service for storing post thumbnails.

    Files are stored as uploaded; they are checked, never re-encoded.
    """

    def __init__(self, storage: StorageService | None = None) -> None:
        """
        Initialize the thumbnail service.

        Args:
            storage: Optional storage service instance. If not provided,
                    the default storage service will be used.
        """
        self.storage = storage or get_storage_service()
        self.max_size_bytes = settings.THUMBNAIL_MAX_SIZE_MB * 1024 * 1024
        self.allowed_types = settings.THUMBNAIL_ALLOWED_TYPES

    def _validate_type(self, content_type: str | None) -> None:
        """Validate image content type."""
        if not content_type or content_type not in self.allowed_types:
            raise UnsupportedImageTypeError(
                content_type=content_type or "unknown",
                allowed_types=self.allowed_types,
            )

    def _validate_size(self, file_data: bytes) -> None:
        """Validate image file size."""
        actual_size = len(file_data)
        if actual_size > self.max_size_bytes:
            raise ImageTooLargeError(
                max_size_mb=settings.THUMBNAIL_MAX_SIZE_MB,
                actual_size_mb=actual_size / (1024 * 1024),
            )

    def _validate_content(self, file_data: bytes) -> None:
        """Validate that the file is a readable image."""
        if not file_data:
            raise InvalidImageError("The uploaded file is empty.")
        try:
            with Image.open(BytesIO(file_data)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            mssg = f"Invalid or corrupted image file: {e!s}"
            raise InvalidImageError(mssg) from e

    async def store(self, file: UploadFile) -> str:
        """
        Validate and store an uploaded thumbnail.

        Args:
            file: Uploaded file

        Returns:
            str: URI of the stored thumbnail

        Raises:
            UnsupportedImageTypeError: If the content type is not allowed
            ImageTooLargeError: If the file exceeds the size limit
            InvalidImageError: If the file is not a readable image
            ThumbnailStorageError: If the file cannot be written
        """
        self._validate_type(file.content_type)
        file_data = await file.read()
        self._validate_size(file_data)
        self._validate_content(file_data)

        try:
            return await self.storage.upload_thumbnail(
                filename=file.filename or "upload",
                file_data=file_data,
                content_type=file.content_type or "application/octet-stream",
            )
        except OSError as e:
            logger.exception("Failed to store thumbnail %s", file.filename)
            raise ThumbnailStorageError from e

    async def discard(self, url: str | None) -> bool:
        """
        Remove a stored thumbnail that is no longer referenced.

        Failures are logged and reported as False; the owning post is
        already gone by the time this runs.

        Args:
            url: Thumbnail URI of a deleted post

        Returns:
            bool: True if a file was removed
        """
        if not url:
            return False
        try:
            return await self.storage.delete_thumbnail(url)
        except OSError:
            logger.warning("Failed to remove thumbnail %s", url, exc_info=True)
            return False
