"""Post database model using SQLModel."""

from datetime import datetime
from typing import cast
from uuid import UUID, uuid4

from pydantic import ConfigDict
from sqlalchemy import JSON, DateTime, Index, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, ForeignKey, SQLModel, String

from inkwell.configs import MAX_THUMBNAIL_URL_LENGTH, MAX_TITLE_LENGTH
from inkwell.utils.helpers import utc_now

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
MembersType = JSON().with_variant(JSONB(), "postgresql")


class PostDB(SQLModel, table=True):
    """
    Post database model.

    Represents the posts table. `liked_by` holds actor ids as strings and is
    only ever rewritten through a version-checked update, `version` being the
    optimistic concurrency token bumped by every write to the row.
    """

    __tablename__ = cast("declared_attr[str]", "posts")

    __table_args__ = (Index("ix_posts_author_created", "author_id", "created_at"),)

    # Primary key
    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
        description="Post ID",
    )

    # Foreign keys
    author_id: UUID = Field(
        sa_column=Column(
            "author_id",
            Uuid,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="Author ID (foreign key to users.id)",
    )
    topic_id: UUID = Field(
        sa_column=Column(
            "topic_id",
            Uuid,
            ForeignKey("topics.id"),
            nullable=False,
            index=True,
        ),
        description="Topic ID (foreign key to topics.id)",
    )

    # Required fields
    title: str = Field(
        sa_column=Column(String(MAX_TITLE_LENGTH), nullable=False),
        description="Post title",
    )
    content: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Post content",
    )

    # Optional fields
    thumbnail: str | None = Field(
        default=None,
        sa_column=Column(String(MAX_THUMBNAIL_URL_LENGTH)),
        description="Thumbnail URI",
    )

    # Counters and membership
    views: int = Field(
        default=0,
        nullable=False,
        description="View counter",
    )
    liked_by: list[str] = Field(
        default_factory=list,
        sa_column=Column(MembersType, nullable=False),
        description="IDs of actors who liked the post",
    )
    version: int = Field(
        default=0,
        nullable=False,
        description="Optimistic concurrency token",
    )

    # Timestamps (timezone-aware)
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Creation timestamp",
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
        description="Last update timestamp",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "author_id": "123e4567-e89b-12d3-a456-426614174000",
                "topic_id": "9b2d7c1e-6f0a-4a57-8f63-0d7e1b2a4c11",
                "title": "Writing async Python that reads well",
                "content": "Coroutines are easiest to follow when...",
                "thumbnail": "/uploads/thumbnails/1735689600000-cover.png",
                "views": 0,
                "liked_by": [],
            },
        },
    )
