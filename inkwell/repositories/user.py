"""User repository for database operations."""

from inkwell.models import UserDB
from inkwell.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserDB]):
    """Read access to the actor accounts referenced by posts and tokens."""

    model = UserDB
