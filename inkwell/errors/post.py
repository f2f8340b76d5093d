"""Post errors."""

from uuid import UUID

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from inkwell.errors.base import BaseAppError, create_exception_handler
from inkwell.monitoring import get_logger

logger = get_logger(__name__)


class PostError(BaseAppError):
    """Base exception for post operations."""

    def __init__(
        self,
        detail: str = "Post operation failed",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail, status_code)


class PostNotFoundError(PostError):
    """Raised when a post id does not resolve to a stored post."""

    def __init__(self, post_id: UUID) -> None:
        super().__init__(f"Post with ID {post_id} not found", HTTP_404_NOT_FOUND)
        self.post_id = str(post_id)


class PostForbiddenError(PostError):
    """Raised when a non-author tries to change or delete a post."""

    def __init__(self, action: str = "modify") -> None:
        super().__init__(f"You can only {action} your own posts", HTTP_403_FORBIDDEN)


class PostValidationError(PostError):
    """Raised when create or update input is malformed."""

    def __init__(
        self,
        detail: str = "Invalid post data",
        errors: list[dict] | None = None,
    ) -> None:
        super().__init__(detail, HTTP_400_BAD_REQUEST)
        self.errors = errors or []


class PostStorageError(PostError):
    """Raised when the database is unreachable or a statement fails."""

    def __init__(self, detail: str = "Post storage is unavailable") -> None:
        super().__init__(detail, HTTP_500_INTERNAL_SERVER_ERROR)


class PostVersionConflictError(PostStorageError):
    """Raised when a version-checked write loses against a concurrent writer."""

    def __init__(self, post_id: UUID) -> None:
        super().__init__(f"Post with ID {post_id} was modified concurrently")
        self.post_id = str(post_id)


post_exception_handler = create_exception_handler(logger)
