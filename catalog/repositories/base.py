"""
Base repository with common collection operations.

The Repository pattern separates data access logic from business logic,
making it easier to test and maintain. Repositories encapsulate all
database operations for a specific entity and contain no business rules.

Example:
    ```python
    from catalog.repositories.base import BaseRepository
    from catalog.models.author import Author


    class AuthorRepository(BaseRepository[Author]):
        def __init__(self, session: AsyncSession):
            super().__init__(session, Author)

        async def get_by_name(self, name: str) -> Author | None:
            stmt = select(Author).where(Author.name == name)
            result = await self.session.exec(stmt)
            return result.first()
    ```
"""

from typing import Any, Generic, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.logging import logger

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository providing common collection operations.

    Each repository operates on a single model type. Writes are flushed, not
    committed; the caller owns the transaction and ends it with ``commit``.

    Type Parameters:
        T: The SQLModel type this repository manages.

    Attributes:
        session: The database session for executing queries.
        model: The SQLModel class this repository manages.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    def _filtered(self, stmt: Any, filters: dict[str, Any]) -> Any:
        for key, value in filters.items():
            if value is not None:
                stmt = stmt.where(getattr(self.model, key) == value)
        return stmt

    async def get_by_id(self, id: int) -> T | None:
        """
        Get entity by primary key ID.

        Args:
            id: Primary key value.

        Returns:
            Entity if found, None otherwise.
        """
        return await self.session.get(self.model, id)

    async def get_all(self, **filters: Any) -> list[T]:
        """
        Get all entities matching the provided filters.

        Args:
            **filters: Field name and value pairs to filter by.
                Example: get_all(name="Frank Herbert")

        Returns:
            List of entities matching all filters.

        Raises:
            SQLAlchemyError: If database query fails.
        """
        try:
            stmt = self._filtered(select(self.model), filters).order_by(
                self.model.id
            )
            result = await self.session.exec(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {self.model.__name__}: {e}")
            raise

    async def count(self, **filters: Any) -> int:
        """
        Count entities matching the provided filters.

        Args:
            **filters: Field name and value pairs to filter by.

        Returns:
            Number of matching entities.

        Raises:
            SQLAlchemyError: If database query fails.
        """
        try:
            stmt = self._filtered(
                select(func.count()).select_from(self.model), filters
            )
            result = await self.session.exec(stmt)
            return int(result.one())
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model.__name__}: {e}")
            raise

    async def create(self, entity: T) -> T:
        """
        Create new entity in database.

        Args:
            entity: The entity instance to create.

        Returns:
            The created entity with generated fields populated.

        Raises:
            SQLAlchemyError: If database operation fails.
        """
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise

    async def update(self, entity: T) -> T:
        """
        Update existing entity in database.

        Args:
            entity: The entity instance with updated values.

        Returns:
            The updated entity.

        Raises:
            SQLAlchemyError: If database operation fails.
        """
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error updating {self.model.__name__}: {e}")
            raise

    async def update_by_id(self, id: int, **values: Any) -> T | None:
        """
        Update selected fields of the entity with the given ID.

        Args:
            id: Primary key value.
            **values: Field name and new value pairs.

        Returns:
            The updated entity, or None if no entity has that ID.

        Raises:
            SQLAlchemyError: If database operation fails.
        """
        entity = await self.get_by_id(id)
        if entity is None:
            return None

        for key, value in values.items():
            setattr(entity, key, value)

        return await self.update(entity)

    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            SQLAlchemyError: If the commit fails; the session is rolled back.
        """
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error committing {self.model.__name__}: {e}")
            raise
