"""
GraphQL object types.

Types are plain Strawberry classes built from the catalog's read models.
``Book.author`` is the only lazily resolved field: it is looked up through
the relationship resolver when a query selects it.
"""

import strawberry

from catalog.api.graphql.context import CatalogInfo
from catalog.models.book import Book
from catalog.schemas.views import AuthorView, UserView


@strawberry.type(name="Author")
class AuthorType:
    """An author and the number of books that reference it."""

    id: strawberry.ID
    name: str
    born: int | None
    book_count: int

    @classmethod
    def from_view(cls, view: AuthorView) -> "AuthorType":
        return cls(
            id=strawberry.ID(str(view.id)),
            name=view.name,
            born=view.born,
            book_count=view.book_count,
        )


@strawberry.type(name="Book")
class BookType:
    """A book; its author is resolved on demand."""

    id: strawberry.ID
    title: str
    published: int
    genres: list[str]
    author_id: strawberry.Private[int]

    @strawberry.field
    async def author(self, info: CatalogInfo) -> AuthorType:
        view = await info.context.relationships.resolve_author_view(
            self.author_id
        )
        return AuthorType.from_view(view)

    @classmethod
    def from_model(cls, book: Book) -> "BookType":
        return cls(
            id=strawberry.ID(str(book.id)),
            title=book.title,
            published=book.published,
            genres=list(book.genres or []),
            author_id=book.author_id,
        )


@strawberry.type(name="User")
class UserType:
    id: strawberry.ID
    username: str
    favorite_genre: str

    @classmethod
    def from_view(cls, view: UserView) -> "UserType":
        return cls(
            id=strawberry.ID(str(view.id)),
            username=view.username,
            favorite_genre=view.favorite_genre,
        )


@strawberry.type(name="Token")
class TokenType:
    """Opaque bearer credential returned by ``login``."""

    value: str
