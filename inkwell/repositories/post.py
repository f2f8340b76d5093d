"""Post repository for database operations."""

from uuid import UUID

from sqlalchemy import Select, desc, select, update
from sqlalchemy.exc import SQLAlchemyError

from inkwell.errors import PostNotFoundError, PostStorageError
from inkwell.models import PostDB, TopicDB, UserDB
from inkwell.monitoring import get_logger
from inkwell.repositories.base import BaseRepository
from inkwell.schemas.post import EnrichedPost, PostCreate, PostUpdate
from inkwell.utils.helpers import utc_now

logger = get_logger(__name__)


class PostRepository(BaseRepository[PostDB]):
    """
    Repository for Post database operations.

    Every write to a post row bumps `version`. The like set is rewritten only
    through `compare_and_set_liked_by`, which succeeds only when the row still
    carries the version the caller read.
    """

    model = PostDB

    async def create(self, post: PostCreate, author_id: UUID) -> PostDB:
        """
        Create a new post in the database.

        Args:
            post: Post creation schema
            author_id: UUID of the authenticated author

        Returns:
            PostDB: Created post database model
        """
        db_post = PostDB(
            author_id=author_id,
            topic_id=post.topic_id,
            title=post.title,
            content=post.content,
            thumbnail=post.thumbnail,
            views=0,
            liked_by=[],
            version=0,
            created_at=utc_now(),
        )
        return await self._add_and_refresh(db_post)

    async def get_or_raise(self, post_id: UUID) -> PostDB:
        """
        Get a post by ID or raise if it does not exist.

        Raises:
            PostNotFoundError: If no post has this ID
        """
        post = await self.get_by_id(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    async def topic_exists(self, topic_id: UUID) -> bool:
        """Check that a topic ID references a stored topic."""
        statement = select(1).where(TopicDB.id == topic_id).limit(1)
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PostStorageError(f"Failed to query topics: {e}") from e
        return result.scalar_one_or_none() is not None

    def _enriched_query(self) -> Select[tuple[PostDB, UserDB, TopicDB]]:
        return (
            select(PostDB, UserDB, TopicDB)
            # pyrefly: ignore [bad-argument-type]
            .join(UserDB, UserDB.id == PostDB.author_id)
            # pyrefly: ignore [bad-argument-type]
            .outerjoin(TopicDB, TopicDB.id == PostDB.topic_id)
            .execution_options(populate_existing=True)
        )

    async def get_enriched(self, post_id: UUID) -> EnrichedPost | None:
        """
        Get a post with its author and topic resolved.

        A dangling topic reference resolves to None rather than hiding the post.

        Args:
            post_id: Post UUID

        Returns:
            EnrichedPost | None: Post with references if found, None otherwise
        """
        statement = self._enriched_query().where(PostDB.id == post_id)
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PostStorageError(f"Failed to load post: {e}") from e
        row = result.one_or_none()
        if row is None:
            return None
        post, author, topic = row
        return EnrichedPost(post=post, author=author, topic=topic)

    async def list_enriched(self) -> list[EnrichedPost]:
        """
        List every post with references resolved, newest first.

        Returns:
            list[EnrichedPost]: Posts ordered by creation time descending
        """
        statement = self._enriched_query().order_by(
            # pyrefly: ignore [bad-argument-type]
            desc(PostDB.created_at),
            desc(PostDB.id),
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PostStorageError(f"Failed to list posts: {e}") from e
        return [
            EnrichedPost(post=post, author=author, topic=topic)
            for post, author, topic in result.all()
        ]

    async def load_membership(self, post_id: UUID) -> tuple[list[str], int] | None:
        """
        Read the like set and the version it belongs to.

        Columns are selected directly so the values come from the database,
        never from an object cached in the session.

        Args:
            post_id: Post UUID

        Returns:
            tuple[list[str], int] | None: (liked_by, version), None if missing
        """
        # pyrefly: ignore [bad-argument-type]
        statement = select(PostDB.liked_by, PostDB.version).where(PostDB.id == post_id)
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PostStorageError(f"Failed to read likes: {e}") from e
        row = result.one_or_none()
        if row is None:
            return None
        liked_by, version = row
        return list(liked_by or []), version

    async def compare_and_set_liked_by(
        self,
        post_id: UUID,
        expected_version: int,
        members: list[str],
    ) -> bool:
        """
        Replace the like set if the row is still at `expected_version`.

        Args:
            post_id: Post UUID
            expected_version: Version read together with the current like set
            members: New like set

        Returns:
            bool: True if the row was written, False if another writer won
        """
        statement = (
            update(PostDB)
            # pyrefly: ignore [bad-argument-type]
            .where(PostDB.id == post_id, PostDB.version == expected_version)
            .values(liked_by=members, version=PostDB.version + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PostStorageError(f"Failed to write likes: {e}") from e
        return result.rowcount == 1

    async def increment_views(self, post_id: UUID) -> int:
        """
        Add one to the view counter in a single statement.

        Args:
            post_id: Post UUID

        Returns:
            int: The counter value after this increment

        Raises:
            PostNotFoundError: If no post has this ID
        """
        statement = (
            update(PostDB)
            .where(PostDB.id == post_id)
            .values(views=PostDB.views + 1, version=PostDB.version + 1)
            .returning(PostDB.views)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PostStorageError(f"Failed to record view: {e}") from e
        views = result.scalar_one_or_none()
        if views is None:
            raise PostNotFoundError(post_id)
        logger.info("Post %s viewed, %d views", post_id, views)
        return views

    async def update(self, post: PostDB, post_update: PostUpdate) -> PostDB:
        """
        Apply the fields present in the update to a loaded post.

        Only assigned columns are written, so the like set and view counter
        are never overwritten with stale values.

        Args:
            post: Post loaded in this session
            post_update: Fields to change

        Returns:
            PostDB: Refreshed post
        """
        for key, value in post_update.model_dump(exclude_unset=True).items():
            setattr(post, key, value)
        post.updated_at = utc_now()
        # Evaluated by the database at flush time
        post.version = PostDB.version + 1  # type: ignore[assignment]
        return await self._add_and_refresh(post)
