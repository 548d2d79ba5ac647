"""
Repository for Book entity with relationship-aware queries.

Books reference their author by id only, so every author-centric question
(how many books, which books) is answered by querying this collection.
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.models.book import Book
from catalog.repositories.base import BaseRepository


class BookRepository(BaseRepository[Book]):
    """Repository for Book entity operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Book)

    async def count_by_author(self, author_id: int) -> int:
        """
        Count books referencing the given author.

        Args:
            author_id: Identifier of the author.

        Returns:
            Number of books whose ``author_id`` equals ``author_id``.
        """
        return await self.count(author_id=author_id)

    async def get_filtered(
        self, author_id: int | None = None, genre: str | None = None
    ) -> list[Book]:
        """
        Get books matching every provided filter.

        Args:
            author_id: Only books referencing this author.
            genre: Only books whose genre list contains this exact tag.

        Returns:
            Books in insertion order.

        Note:
            Genre membership is checked on the loaded rows because the
            genre list is a JSON column and JSON containment is not portable
            across database backends.
        """
        stmt = select(Book).order_by(Book.id)
        if author_id is not None:
            stmt = stmt.where(Book.author_id == author_id)

        result = await self.session.exec(stmt)
        books = list(result.all())

        if genre is not None:
            books = [book for book in books if genre in (book.genres or [])]

        return books
