"""
Author↔Book relationship resolution.

Books store only their author's id and authors store no list of books, so
both directions of the relationship are rebuilt by query:

- ``count_books_by_author`` counts the books referencing an author;
- ``resolve_author_view`` turns a book's author reference into a complete
  ``AuthorView`` including that count.

Counts are recomputed on every call. Nothing is cached or denormalized, so
the result is only as accurate as the stored references at read time.

Every call opens its own session. GraphQL resolves list items concurrently
and an ``AsyncSession`` must never be shared between concurrent tasks.
"""

from catalog.exceptions import DanglingReferenceError
from catalog.models.author import Author
from catalog.repositories.author_repository import AuthorRepository
from catalog.repositories.book_repository import BookRepository
from catalog.schemas.views import AuthorView
from catalog.storage.db import SessionFactory, session_scope


class RelationshipResolver:
    """Resolve cross-references between authors and books."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    async def count_books_by_author(self, author_id: int) -> int:
        """
        Count the books referencing an author.

        Args:
            author_id: Identifier of the author.

        Returns:
            Number of books referencing ``author_id``.
        """
        async with session_scope(self.session_factory) as session:
            return await BookRepository(session).count_by_author(author_id)

    async def author_view(self, author: Author) -> AuthorView:
        """
        Materialize an already loaded author with its book count.

        Args:
            author: Author record with an assigned id.

        Returns:
            AuthorView carrying the current book count.
        """
        book_count = await self.count_books_by_author(author.id)
        return AuthorView(
            id=author.id,
            name=author.name,
            born=author.born,
            book_count=book_count,
        )

    async def resolve_author_view(self, author_id: int) -> AuthorView:
        """
        Resolve a book's author reference to a complete author view.

        Args:
            author_id: The author reference stored on a book.

        Returns:
            AuthorView with name, birth year and book count.

        Raises:
            DanglingReferenceError: If no author has ``author_id``.
        """
        async with session_scope(self.session_factory) as session:
            author = await AuthorRepository(session).get_by_id(author_id)

        if author is None:
            raise DanglingReferenceError("Author", author_id)

        return await self.author_view(author)
