"""
Repository for Author entity with specialized query methods.

Example:
    ```python
    from catalog.repositories.author_repository import AuthorRepository
    from catalog.storage.db import async_session

    async with async_session() as session:
        repo = AuthorRepository(session)
        authors = await repo.get_all()
        author, created = await repo.get_or_create_by_name("Frank Herbert")
    ```
"""

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.logging import logger
from catalog.models.author import Author
from catalog.repositories.base import BaseRepository


class AuthorRepository(BaseRepository[Author]):
    """
    Repository for Author entity operations.

    Provides operations inherited from BaseRepository plus name-keyed
    lookups. The author name is the de-duplication key of the catalog.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, Author)

    async def get_by_name(self, name: str) -> Author | None:
        """
        Get author by exact name match.

        Args:
            name: Exact author name to search for.

        Returns:
            Author if found, None otherwise.
        """
        stmt = select(Author).where(Author.name == name)
        result = await self.session.exec(stmt)
        return result.first()

    async def get_or_create_by_name(self, name: str) -> tuple[Author, bool]:
        """
        Return the author called ``name``, creating it when missing.

        The insert runs inside a SAVEPOINT. When a concurrent request wins
        the race, the unique index on ``author.name`` rejects our insert,
        only the savepoint is rolled back and the winner's row is returned.

        Args:
            name: Exact author name.

        Returns:
            Tuple of (author, created) where ``created`` is True if this call
            inserted the row.

        Raises:
            IntegrityError: If the insert failed for a reason other than a
                concurrent insert of the same name.
        """
        existing = await self.get_by_name(name)
        if existing is not None:
            return existing, False

        author = Author(name=name)
        try:
            async with self.session.begin_nested():
                self.session.add(author)
        except IntegrityError:
            winner = await self.get_by_name(name)
            if winner is None:
                raise
            logger.info(
                f"Author '{name}' was inserted concurrently, reusing id {winner.id}"
            )
            return winner, False

        await self.session.refresh(author)
        logger.debug(f"Created author '{name}' with id {author.id}")
        return author, True
