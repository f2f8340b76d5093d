"""User and topic database models using SQLModel."""

from typing import cast
from uuid import UUID, uuid4

from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String


class UserDB(SQLModel, table=True):
    """
    Actor accounts.

    Rows are owned by the external authentication system; this service only
    reads them to resolve bearer tokens and to show post authors.
    """

    __tablename__ = cast("declared_attr[str]", "users")

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
        description="User ID",
    )
    username: str = Field(
        sa_column=Column(String(50), unique=True, nullable=False, index=True),
        description="Username (unique)",
    )
    display_name: str | None = Field(
        default=None,
        sa_column=Column(String(200)),
        description="Display name",
    )


class TopicDB(SQLModel, table=True):
    """Topics a post can be filed under."""

    __tablename__ = cast("declared_attr[str]", "topics")

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
        description="Topic ID",
    )
    name: str = Field(
        sa_column=Column(String(100), unique=True, nullable=False, index=True),
        description="Topic name (unique)",
    )
