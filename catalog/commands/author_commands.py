"""
Commands for Author operations.

Read commands (``CountAuthorsCommand``, ``ListAuthorsCommand``) never modify
state. Write commands (``AddAuthorCommand``, ``EditAuthorCommand``) commit
their own transaction before returning.

Example:
    ```python
    from catalog.commands.author_commands import AddAuthorCommand, AddAuthorInput

    command = AddAuthorCommand(AuthorRepository(session), relationships)
    author = await command.execute(AddAuthorInput(name="Ursula K. Le Guin"))
    ```
"""

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from catalog.commands.base import BaseCommand, store_error
from catalog.constants import MIN_AUTHOR_NAME_LENGTH
from catalog.exceptions import ValidationError
from catalog.logging import logger
from catalog.models.author import Author
from catalog.protocols import Repository
from catalog.repositories.author_repository import AuthorRepository
from catalog.resolvers.relationships import RelationshipResolver
from catalog.schemas.auth import AuthContext
from catalog.schemas.views import AuthorView


# ============================================================================
# Input Models
# ============================================================================


class AddAuthorInput(BaseModel):  # type: ignore[misc]
    """Input model for creating an author."""

    name: str = Field(..., description="Author name")
    born: int | None = Field(default=None, description="Birth year")


class EditAuthorInput(BaseModel):  # type: ignore[misc]
    """Input model for setting an author's birth year."""

    name: str = Field(..., description="Exact name of the author to edit")
    set_born_to: int = Field(..., description="New birth year")


# ============================================================================
# Read Commands
# ============================================================================


class CountAuthorsCommand(BaseCommand[None, int]):
    """Command to count every author in the catalog."""

    def __init__(self, repository: Repository[Author]):
        self.repository = repository

    async def execute(self, input_data: None = None) -> int:
        return await self.repository.count()


class ListAuthorsCommand(BaseCommand[None, list[AuthorView]]):
    """
    Command to list every author with its current book count.

    Book counts are computed per author on each call, each in its own
    session, after the listing transaction has ended.
    """

    def __init__(
        self,
        repository: AuthorRepository,
        relationships: RelationshipResolver,
    ):
        self.repository = repository
        self.relationships = relationships

    async def execute(self, input_data: None = None) -> list[AuthorView]:
        authors = await self.repository.get_all()
        await self.repository.commit()
        return [await self.relationships.author_view(a) for a in authors]


# ============================================================================
# Write Commands
# ============================================================================


class AddAuthorCommand(BaseCommand[AddAuthorInput, AuthorView]):
    """
    Command to create a new author.

    Unlike the implicit creation performed by ``AddBookCommand`` there is no
    existence check here: the insert is attempted unconditionally and a
    duplicate name is rejected by the store's unique index.
    """

    def __init__(
        self,
        repository: AuthorRepository,
        relationships: RelationshipResolver,
    ):
        self.repository = repository
        self.relationships = relationships

    async def execute(self, input_data: AddAuthorInput) -> AuthorView:
        """
        Execute command to create author.

        Args:
            input_data: Author data to create.

        Returns:
            The created author with its generated ID.

        Raises:
            ValidationError: If the name is shorter than 4 characters or the
                store rejects the insert.
        """
        invalid_args = input_data.model_dump()

        if len(input_data.name) < MIN_AUTHOR_NAME_LENGTH:
            raise ValidationError(
                f"author name too short, must be at least {MIN_AUTHOR_NAME_LENGTH}",
                invalid_args,
            )

        try:
            author = await self.repository.create(
                Author(name=input_data.name, born=input_data.born)
            )
            await self.repository.commit()
        except SQLAlchemyError as ex:
            raise store_error(ex, invalid_args) from ex

        logger.info(f"Added author '{author.name}' with id {author.id}")
        return await self.relationships.author_view(author)


class EditAuthorCommand(BaseCommand[EditAuthorInput, AuthorView | None]):
    """
    Command to set the birth year of an existing author.

    Only ``born`` changes. An unknown name is not an error: the command
    returns None and the caller reports "nothing to edit".
    """

    def __init__(
        self,
        auth: AuthContext,
        repository: AuthorRepository,
        relationships: RelationshipResolver,
    ):
        self.auth = auth
        self.repository = repository
        self.relationships = relationships

    async def execute(self, input_data: EditAuthorInput) -> AuthorView | None:
        """
        Execute command to edit author.

        Args:
            input_data: Author name and new birth year.

        Returns:
            The updated author, or None if no author has that name.

        Raises:
            UnauthenticatedError: If the request is anonymous.
            ValidationError: If the store rejects the update.
        """
        self.auth.require_user()

        author = await self.repository.get_by_name(input_data.name)
        if author is None:
            logger.info(f"No author named '{input_data.name}' to edit")
            return None

        try:
            updated = await self.repository.update_by_id(
                author.id, born=input_data.set_born_to
            )
            await self.repository.commit()
        except SQLAlchemyError as ex:
            raise store_error(ex, input_data.model_dump()) from ex

        if updated is None:
            return None

        return await self.relationships.author_view(updated)
