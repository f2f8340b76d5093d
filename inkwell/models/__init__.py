"""Database models for the application."""

from inkwell.models.post import PostDB
from inkwell.models.user import TopicDB, UserDB

__all__ = ["PostDB", "TopicDB", "UserDB"]
