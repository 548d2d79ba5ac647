"""
Commands for Book operations.

``AddBookCommand`` is the only write path for books. It creates the
referenced author on demand and announces the new book on the event bus
after its transaction is committed.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError

from catalog.commands.base import BaseCommand, store_error
from catalog.constants import MIN_AUTHOR_NAME_LENGTH, MIN_BOOK_TITLE_LENGTH
from catalog.exceptions import ValidationError
from catalog.logging import logger
from catalog.managers.event_bus import EventBus, EventKind
from catalog.models.book import Book
from catalog.repositories.author_repository import AuthorRepository
from catalog.repositories.book_repository import BookRepository
from catalog.schemas.auth import AuthContext


class ListBooksInput(BaseModel):  # type: ignore[misc]
    """Optional filters for listing books. Both combine with AND."""

    author: str | None = Field(default=None, description="Author name")
    genre: str | None = Field(default=None, description="Exact genre tag")


class AddBookInput(BaseModel):  # type: ignore[misc]
    """Input model for adding a book."""

    title: str
    author: str = Field(..., description="Author name, created if unknown")
    published: int
    genres: list[str] = Field(default_factory=list)

    @field_validator("genres", mode="before")
    @classmethod
    def _drop_null_genres(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [genre for genre in value if genre is not None]
        return value


class CountBooksCommand(BaseCommand[None, int]):
    """Command to count every book in the catalog."""

    def __init__(self, repository: BookRepository):
        self.repository = repository

    async def execute(self, input_data: None = None) -> int:
        return await self.repository.count()


class ListBooksCommand(BaseCommand[ListBooksInput, list[Book]]):
    """
    Command to list books, optionally filtered.

    The author filter is a display name. It is resolved to an id first and
    an unknown name yields an empty list instead of an error.
    """

    def __init__(
        self, repository: BookRepository, author_repository: AuthorRepository
    ):
        self.repository = repository
        self.author_repository = author_repository

    async def execute(self, input_data: ListBooksInput) -> list[Book]:
        author_id = None
        if input_data.author:
            author = await self.author_repository.get_by_name(input_data.author)
            if author is None:
                return []
            author_id = author.id

        return await self.repository.get_filtered(
            author_id=author_id, genre=input_data.genre or None
        )


class AddBookCommand(BaseCommand[AddBookInput, Book]):
    """
    Command to add a book, creating its author when missing.

    Authors are matched by exact name. The author insert and the book
    insert share one transaction, so a rejected book leaves no orphan
    author behind.
    """

    def __init__(
        self,
        auth: AuthContext,
        repository: BookRepository,
        author_repository: AuthorRepository,
        event_bus: EventBus,
    ):
        self.auth = auth
        self.repository = repository
        self.author_repository = author_repository
        self.event_bus = event_bus

    async def execute(self, input_data: AddBookInput) -> Book:
        """
        Execute command to add book.

        Args:
            input_data: Book data including the author's name.

        Returns:
            The stored book with its generated ID.

        Raises:
            UnauthenticatedError: If the request is anonymous.
            ValidationError: If the title or author name is too short or
                the store rejects the insert.
        """
        self.auth.require_user()
        invalid_args = input_data.model_dump()

        if len(input_data.title) < MIN_BOOK_TITLE_LENGTH:
            raise ValidationError(
                f"book title too short, must be at least {MIN_BOOK_TITLE_LENGTH}",
                invalid_args,
            )
        if len(input_data.author) < MIN_AUTHOR_NAME_LENGTH:
            raise ValidationError(
                f"author name too short, must be at least {MIN_AUTHOR_NAME_LENGTH}",
                invalid_args,
            )

        try:
            author, created = await self.author_repository.get_or_create_by_name(
                input_data.author
            )
            book = await self.repository.create(
                Book(
                    title=input_data.title,
                    published=input_data.published,
                    author_id=author.id,
                    genres=list(input_data.genres),
                )
            )
            await self.repository.commit()
        except SQLAlchemyError as ex:
            raise store_error(ex, invalid_args) from ex

        if created:
            logger.info(f"Created author '{author.name}' for new book")
        logger.info(f"Added book '{book.title}' with id {book.id}")

        self.event_bus.publish(EventKind.BOOK_ADDED, book)
        return book
