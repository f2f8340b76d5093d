from inkwell.errors.base import BaseAppError, create_exception_handler
from inkwell.errors.post import (
    PostError,
    PostForbiddenError,
    PostNotFoundError,
    PostStorageError,
    PostValidationError,
    PostVersionConflictError,
    post_exception_handler,
)
from inkwell.errors.upload import (
    ImageTooLargeError,
    InvalidImageError,
    ThumbnailStorageError,
    UnsupportedImageTypeError,
    UploadError,
    upload_exception_handler,
)
from inkwell.errors.validation import format_validation_errors, validation_exception_handler

__all__ = [
    "BaseAppError",
    "create_exception_handler",
    "PostError",
    "PostForbiddenError",
    "PostNotFoundError",
    "PostStorageError",
    "PostValidationError",
    "PostVersionConflictError",
    "post_exception_handler",
    "ImageTooLargeError",
    "InvalidImageError",
    "ThumbnailStorageError",
    "UnsupportedImageTypeError",
    "UploadError",
    "upload_exception_handler",
    "format_validation_errors",
    "validation_exception_handler",
]
