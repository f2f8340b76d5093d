"""
Base storage protocol for thumbnail files.

This module defines the interface for storage backends so the post
routes do not depend on where uploaded files end up.
"""

from abc import abstractmethod
from typing import Protocol


class StorageService(Protocol):
    """
    Protocol defining the interface for storage services.

    All storage implementations must implement these methods
    to ensure consistent behavior across different backends.
    """

    @abstractmethod
    async def upload_thumbnail(
        self,
        filename: str,
        file_data: bytes,
        content_type: str,
    ) -> str:
        """
        Store a thumbnail image.

        Args:
            filename: Name the client gave the file
            file_data: Raw image bytes
            content_type: MIME type of the image

        Returns:
            str: URI the stored file is served under
        """
        ...

    @abstractmethod
    async def delete_thumbnail(self, url: str) -> bool:
        """
        Delete a stored thumbnail.

        Args:
            url: URI previously returned by `upload_thumbnail`

        Returns:
            bool: True if a file was removed, False otherwise
        """
        ...
