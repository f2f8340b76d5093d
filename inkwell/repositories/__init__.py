from inkwell.repositories.base import BaseRepository
from inkwell.repositories.post import PostRepository
from inkwell.repositories.user import UserRepository

__all__ = ["BaseRepository", "PostRepository", "UserRepository"]
