"""
Like toggling and view counting for posts.

The like set is a set of actor ids stored on the post row. Toggling reads
the set with its version, flips the actor's membership and writes the new
set back only if the version is unchanged. A lost race is retried with
backoff; concurrent toggles by different actors therefore never drop each
other's changes.
"""

from uuid import UUID

from inkwell.configs import settings
from inkwell.decorators import with_retry
from inkwell.errors import PostNotFoundError, PostVersionConflictError
from inkwell.monitoring import get_logger
from inkwell.repositories import PostRepository
from inkwell.schemas import PostResponse

logger = get_logger(__name__)


def toggle_member(members: list[str], actor_id: str) -> list[str]:
    """
    Flip an actor's membership in a like set.

    Args:
        members: Current like set
        actor_id: Actor to add or remove

    Returns:
        list[str]: New like set; the input list is not modified
    """
    updated = list(members)
    if actor_id in updated:
        updated.remove(actor_id)
    else:
        updated.append(actor_id)
    return updated


class MembershipToggle:
    """Version-checked like toggling plus the atomic view counter."""

    def __init__(
        self,
        repository: PostRepository,
        max_retries: int | None = None,
        base_delay: float | None = None,
        max_delay: float | None = None,
    ) -> None:
        self.repository = repository
        self.max_retries = (
            max_retries if max_retries is not None else settings.LIKE_TOGGLE_MAX_RETRIES
        )
        self.base_delay = base_delay if base_delay is not None else settings.LIKE_TOGGLE_BASE_DELAY
        self.max_delay = max_delay if max_delay is not None else settings.LIKE_TOGGLE_MAX_DELAY

    async def _toggle_once(self, post_id: UUID, actor_id: str) -> bool:
        state = await self.repository.load_membership(post_id)
        if state is None:
            raise PostNotFoundError(post_id)
        members, version = state
        updated = toggle_member(members, actor_id)
        if not await self.repository.compare_and_set_liked_by(post_id, version, updated):
            raise PostVersionConflictError(post_id)
        return actor_id in updated

    async def toggle(self, post_id: UUID, actor_id: UUID) -> PostResponse:
        """
        Add the actor to the post's like set, or remove them if present.

        Args:
            post_id: Post UUID
            actor_id: Authenticated actor

        Returns:
            PostResponse: The post as stored after the toggle

        Raises:
            PostNotFoundError: If the post does not exist
            PostVersionConflictError: If every attempt lost to a concurrent writer
            PostStorageError: If the database fails
        """
        retrying = with_retry(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            exec_retry=(PostVersionConflictError,),
        )(self._toggle_once)
        liked = await retrying(post_id, str(actor_id))
        logger.info("Post %s %s by %s", post_id, "liked" if liked else "unliked", actor_id)
        return await self._reload(post_id)

    async def increment_view(self, post_id: UUID) -> PostResponse:
        """
        Count one view of the post.

        Args:
            post_id: Post UUID

        Returns:
            PostResponse: The post as stored after the increment

        Raises:
            PostNotFoundError: If the post does not exist
            PostStorageError: If the database fails
        """
        await self.repository.increment_views(post_id)
        return await self._reload(post_id)

    async def _reload(self, post_id: UUID) -> PostResponse:
        enriched = await self.repository.get_enriched(post_id)
        if enriched is None:
            raise PostNotFoundError(post_id)
        return PostResponse.from_enriched(enriched)
