"""
Storage services package.

Storage backends for uploaded thumbnails. Only the local filesystem
backend is shipped.
"""

from inkwell.services.storage.base import StorageService
from inkwell.services.storage.local import LocalStorage


def get_storage_service() -> StorageService:
    """
    Get the configured storage service.

    Returns:
        StorageService: Configured storage service instance
    """
    return LocalStorage()


__all__ = [
    "LocalStorage",
    "StorageService",
    "get_storage_service",
]
