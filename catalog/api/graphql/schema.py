"""
GraphQL schema: queries, mutations and the ``bookAdded`` subscription.

Resolvers stay thin. Each one opens a session, builds the matching command
with its repositories and maps the command's result to a GraphQL type.
Errors raised by commands are ``AppException`` subclasses whose
``extensions`` end up in the GraphQL error payload.
"""

from collections.abc import AsyncGenerator
from typing import Any, TypeVar

import strawberry
from graphql import GraphQLError
from strawberry.types import ExecutionContext

from catalog.api.graphql.context import CatalogInfo
from catalog.api.graphql.types import AuthorType, BookType, TokenType, UserType
from catalog.commands.author_commands import (
    AddAuthorCommand,
    AddAuthorInput,
    CountAuthorsCommand,
    EditAuthorCommand,
    EditAuthorInput,
    ListAuthorsCommand,
)
from catalog.commands.base import BaseCommand
from catalog.commands.book_commands import (
    AddBookCommand,
    AddBookInput,
    CountBooksCommand,
    ListBooksCommand,
    ListBooksInput,
)
from catalog.commands.user_commands import (
    CreateUserCommand,
    CreateUserInput,
    LoginCommand,
    LoginInput,
)
from catalog.exceptions import AppException
from catalog.logging import logger
from catalog.managers.event_bus import EventKind
from catalog.repositories.author_repository import AuthorRepository
from catalog.repositories.book_repository import BookRepository
from catalog.repositories.user_repository import UserRepository
from catalog.schemas.views import UserView
from catalog.storage.db import session_scope
from catalog.utils.metrics import mutations_total

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


async def run_mutation(
    operation: str, command: BaseCommand[TInput, TOutput], input_data: TInput
) -> TOutput:
    """Execute a write command and record its outcome."""
    try:
        result = await command.execute(input_data)
    except Exception:
        mutations_total.labels(operation=operation, status="error").inc()
        raise

    mutations_total.labels(operation=operation, status="success").inc()
    return result


@strawberry.type
class Query:
    @strawberry.field
    async def book_count(self, info: CatalogInfo) -> int:
        async with session_scope(info.context.session_factory) as session:
            return await CountBooksCommand(BookRepository(session)).execute()

    @strawberry.field
    async def author_count(self, info: CatalogInfo) -> int:
        async with session_scope(info.context.session_factory) as session:
            return await CountAuthorsCommand(AuthorRepository(session)).execute()

    @strawberry.field
    async def all_books(
        self,
        info: CatalogInfo,
        author: str | None = None,
        genre: str | None = None,
    ) -> list[BookType]:
        async with session_scope(info.context.session_factory) as session:
            command = ListBooksCommand(
                BookRepository(session), AuthorRepository(session)
            )
            books = await command.execute(
                ListBooksInput(author=author, genre=genre)
            )
        return [BookType.from_model(book) for book in books]

    @strawberry.field
    async def all_authors(self, info: CatalogInfo) -> list[AuthorType]:
        async with session_scope(info.context.session_factory) as session:
            command = ListAuthorsCommand(
                AuthorRepository(session), info.context.relationships
            )
            authors = await command.execute()
        return [AuthorType.from_view(view) for view in authors]

    @strawberry.field
    def me(self, info: CatalogInfo) -> UserType | None:
        user = info.context.auth.user
        if user is None:
            return None
        return UserType.from_view(UserView.model_validate(user))


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def add_book(
        self,
        info: CatalogInfo,
        title: str,
        author: str,
        published: int,
        genres: list[str | None],
    ) -> BookType | None:
        ctx = info.context
        async with session_scope(ctx.session_factory) as session:
            command = AddBookCommand(
                ctx.auth,
                BookRepository(session),
                AuthorRepository(session),
                ctx.event_bus,
            )
            book = await run_mutation(
                "addBook",
                command,
                AddBookInput(
                    title=title, author=author, published=published, genres=genres
                ),
            )
        return BookType.from_model(book)

    @strawberry.mutation
    async def add_author(
        self, info: CatalogInfo, name: str, born: int | None = None
    ) -> AuthorType | None:
        ctx = info.context
        async with session_scope(ctx.session_factory) as session:
            command = AddAuthorCommand(AuthorRepository(session), ctx.relationships)
            view = await run_mutation(
                "addAuthor", command, AddAuthorInput(name=name, born=born)
            )
        return AuthorType.from_view(view)

    @strawberry.mutation
    async def edit_author(
        self, info: CatalogInfo, name: str, set_born_to: int
    ) -> AuthorType | None:
        ctx = info.context
        async with session_scope(ctx.session_factory) as session:
            command = EditAuthorCommand(
                ctx.auth, AuthorRepository(session), ctx.relationships
            )
            view = await run_mutation(
                "editAuthor",
                command,
                EditAuthorInput(name=name, set_born_to=set_born_to),
            )
        return AuthorType.from_view(view) if view is not None else None

    @strawberry.mutation
    async def create_user(
        self,
        info: CatalogInfo,
        username: str,
        password: str,
        favorite_genre: str,
    ) -> UserType | None:
        async with session_scope(info.context.session_factory) as session:
            command = CreateUserCommand(UserRepository(session))
            view = await run_mutation(
                "createUser",
                command,
                CreateUserInput(
                    username=username,
                    password=password,
                    favorite_genre=favorite_genre,
                ),
            )
        return UserType.from_view(view)

    @strawberry.mutation
    async def login(
        self, info: CatalogInfo, username: str, password: str
    ) -> TokenType | None:
        ctx = info.context
        async with session_scope(ctx.session_factory) as session:
            command = LoginCommand(UserRepository(session), ctx.token_manager)
            token = await run_mutation(
                "login",
                command,
                LoginInput(username=username, password=password),
            )
        return TokenType(value=token)


@strawberry.type
class Subscription:
    @strawberry.subscription
    async def book_added(
        self, info: CatalogInfo
    ) -> AsyncGenerator[BookType, None]:
        """Every book added after the subscription starts, in order."""
        bus = info.context.event_bus
        async with bus.subscribe(EventKind.BOOK_ADDED) as subscription:
            async for book in subscription:
                yield BookType.from_model(book)


class CatalogSchema(strawberry.Schema):
    """Schema that logs resolver errors according to their severity."""

    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: ExecutionContext | None = None,
    ) -> None:
        for error in errors:
            original: Any = error.original_error
            if original is None:
                logger.warning(f"Invalid GraphQL request: {error.message}")
            elif isinstance(original, AppException) and original.http_status < 500:
                logger.info(f"GraphQL request rejected: {error.message}")
            else:
                logger.error(
                    f"GraphQL error at {error.path}: {error.message}",
                    exc_info=original,
                )


schema = CatalogSchema(query=Query, mutation=Mutation, subscription=Subscription)
