"""Base repository for database operations."""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from inkwell.errors import PostStorageError, PostValidationError


ModelT = TypeVar("ModelT", bound=SQLModel)


class BaseRepository(Generic[ModelT]):
    """
    Base repository implementing the lookups shared by every table.

    Reads go through `populate_existing` so a row loaded earlier in the same
    session is overwritten with the committed state instead of being served
    from the identity map.

    Attributes:
        model: The SQLModel database model type.
        id_field: The name of the primary key field (default: "id").
    """

    model: type[ModelT]
    id_field: str = "id"

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

    async def get_by_id(self, record_id: UUID) -> ModelT | None:
        """
        Get a record by its ID.

        Args:
            record_id: Record UUID

        Returns:
            ModelT | None: Record if found, None otherwise

        Raises:
            PostStorageError: If the database cannot be queried
        """
        id_column = getattr(self.model, self.id_field)
        statement = (
            select(self.model)
            .where(id_column == record_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise PostStorageError(f"Failed to load {self.model.__name__}: {e}") from e
        return result.scalar_one_or_none()

    async def delete(self, record: ModelT) -> None:
        """
        Delete a loaded record and commit.

        The commit happens here so callers can clean up files that belong to
        the record once the row is really gone.

        Args:
            record: Record to delete
        """
        try:
            await self.session.delete(record)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PostStorageError(f"Failed to delete record: {e}") from e

    async def _add_and_refresh(self, record: ModelT) -> ModelT:
        """
        Add a record and refresh it from the database with error handling.

        Args:
            record: Record to add

        Returns:
            ModelT: Refreshed record

        Raises:
            PostValidationError: If a constraint is violated
            PostStorageError: For other database errors
        """
        try:
            self.session.add(record)
            await self.session.flush()
            await self.session.refresh(record)
            return record
        except IntegrityError as e:
            await self.session.rollback()
            error_msg = str(e.orig) if e.orig else str(e)
            raise PostValidationError(f"Database integrity error: {error_msg}") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PostStorageError(f"Failed to save record: {e}") from e
