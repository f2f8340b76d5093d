"""
Post schemas for the Inkwell application.

Request models for creating and updating posts, and the enriched
response model with author and topic resolved.
"""

from typing import Annotated, NamedTuple, Self
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    computed_field,
    model_validator,
)

from inkwell.configs import MAX_CONTENT_LENGTH, MAX_THUMBNAIL_URL_LENGTH, MAX_TITLE_LENGTH
from inkwell.models import PostDB, TopicDB, UserDB
from inkwell.utils.helpers import format_datetime

Title = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_TITLE_LENGTH),
]
Content = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_CONTENT_LENGTH),
]
ThumbnailUri = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_THUMBNAIL_URL_LENGTH),
]


class EnrichedPost(NamedTuple):
    """A post row together with its resolved author and topic rows."""

    post: PostDB
    author: UserDB
    topic: TopicDB | None


class AuthorSummary(BaseModel):
    """Author information shown alongside a post."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: UUID
    username: str
    display_name: str | None = Field(default=None, alias="displayName")


class TopicSummary(BaseModel):
    """Topic information shown alongside a post."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class PostCreate(BaseModel):
    """Post creation command (the author comes from the authenticated actor)."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    title: Title = Field(
        ...,
        description="Post title",
        examples=["Writing async Python that reads well"],
    )
    content: Content = Field(
        ...,
        description="Post content",
        examples=["Coroutines are easiest to follow when every await is a visible step."],
    )
    topic_id: UUID = Field(
        ...,
        alias="topicId",
        description="Topic ID (must reference an existing topic)",
    )
    thumbnail: ThumbnailUri | None = Field(
        default=None,
        description="Thumbnail URI (set from an upload or given directly)",
    )


class PostUpdate(BaseModel):
    """
    Post update command.

    Only the listed fields may change; unknown fields are rejected. Omitted
    fields keep their value, and `thumbnail` may be set to null to clear it.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Writing async Python that reads well (revised)",
                "topicId": "9b2d7c1e-6f0a-4a57-8f63-0d7e1b2a4c11",
            },
        },
    )

    title: Title | None = None
    content: Content | None = None
    topic_id: UUID | None = Field(default=None, alias="topicId")
    thumbnail: ThumbnailUri | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> Self:
        """Title, content and topic may be omitted but never cleared."""
        for name in ("title", "content", "topic_id"):
            if name in self.model_fields_set and getattr(self, name) is None:
                mssg = f"{name} cannot be null"
                raise ValueError(mssg)
        return self


class PostResponse(BaseModel):
    """Enriched post (safe for API responses)."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    title: str
    content: str
    author: AuthorSummary
    topic: TopicSummary | None = None
    thumbnail: str | None = None
    views: int
    liked_by: list[UUID] = Field(alias="likedBy")
    created_at: str = Field(alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    @computed_field(alias="likeCount")
    @property
    def like_count(self) -> int:
        """Number of actors currently liking the post."""
        return len(self.liked_by)

    @classmethod
    def from_enriched(cls, enriched: EnrichedPost) -> "PostResponse":
        """
        Build the response from a post row and its resolved references.

        Args:
            enriched: Post, author and topic rows.

        Returns:
            PostResponse: Validated response model.
        """
        post, author, topic = enriched
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            author=AuthorSummary.model_validate(author),
            topic=TopicSummary.model_validate(topic) if topic else None,
            thumbnail=post.thumbnail,
            views=post.views,
            liked_by=[UUID(str(actor_id)) for actor_id in post.liked_by],
            created_at=format_datetime(post.created_at) or "",
            updated_at=format_datetime(post.updated_at),
        )


class PostDeleteResponse(BaseModel):
    """Confirmation returned after a post is deleted."""

    message: str = "Post deleted"
    id: UUID
