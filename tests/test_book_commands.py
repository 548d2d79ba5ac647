"""Tests for Book commands."""

import pytest
from sqlalchemy.exc import IntegrityError

from catalog.commands.book_commands import (
    AddBookCommand,
    AddBookInput,
    CountBooksCommand,
    ListBooksCommand,
    ListBooksInput,
)
from catalog.exceptions import UnauthenticatedError, ValidationError
from catalog.managers.event_bus import EventKind
from tests.mocks.factories import create_author_fixture, create_book_fixture
from tests.mocks.repository_mocks import (
    create_mock_author_repository,
    create_mock_book_repository,
    create_mock_event_bus,
)


def _dune_input(**overrides):
    data = {
        "title": "Dune",
        "author": "Frank Herbert",
        "published": 1965,
        "genres": ["scifi"],
    }
    data.update(overrides)
    return AddBookInput(**data)


class TestCountBooksCommand:
    @pytest.mark.asyncio
    async def test_count_books(self):
        mock_repo = create_mock_book_repository()
        mock_repo.count.return_value = 7

        assert await CountBooksCommand(mock_repo).execute() == 7


class TestListBooksCommand:
    """Tests for ListBooksCommand."""

    @pytest.mark.asyncio
    async def test_list_all_books(self):
        """Test listing without filters."""
        book_repo = create_mock_book_repository()
        book_repo.get_filtered.return_value = [create_book_fixture()]
        author_repo = create_mock_author_repository()

        result = await ListBooksCommand(book_repo, author_repo).execute(
            ListBooksInput()
        )

        assert len(result) == 1
        book_repo.get_filtered.assert_called_once_with(author_id=None, genre=None)
        author_repo.get_by_name.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_books_by_author_name(self):
        """Test the author name is resolved to an id before filtering."""
        book_repo = create_mock_book_repository()
        author_repo = create_mock_author_repository()
        author_repo.get_by_name.return_value = create_author_fixture(id=9)

        await ListBooksCommand(book_repo, author_repo).execute(
            ListBooksInput(author="Frank Herbert", genre="scifi")
        )

        author_repo.get_by_name.assert_called_once_with("Frank Herbert")
        book_repo.get_filtered.assert_called_once_with(author_id=9, genre="scifi")

    @pytest.mark.asyncio
    async def test_list_books_unknown_author(self):
        """Test an unknown author name yields an empty list."""
        book_repo = create_mock_book_repository()
        author_repo = create_mock_author_repository()

        result = await ListBooksCommand(book_repo, author_repo).execute(
            ListBooksInput(author="Nobody Known")
        )

        assert result == []
        book_repo.get_filtered.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_filters_are_ignored(self):
        """Test empty author and genre strings list every book."""
        book_repo = create_mock_book_repository()
        book_repo.get_filtered.return_value = [create_book_fixture()]
        author_repo = create_mock_author_repository()

        result = await ListBooksCommand(book_repo, author_repo).execute(
            ListBooksInput(author="", genre="")
        )

        assert len(result) == 1
        author_repo.get_by_name.assert_not_called()
        book_repo.get_filtered.assert_called_once_with(author_id=None, genre=None)


class TestAddBookCommand:
    """Tests for AddBookCommand."""

    def test_null_genres_are_dropped(self):
        book_input = _dune_input(genres=["scifi", None, "classic"])

        assert book_input.genres == ["scifi", "classic"]

    @pytest.mark.asyncio
    async def test_add_book_with_new_author(self, authed):
        """Test a book with an unseen author creates the author and publishes."""
        book_repo = create_mock_book_repository()
        author_repo = create_mock_author_repository()
        author_repo.get_or_create_by_name.return_value = (
            create_author_fixture(id=1),
            True,
        )
        book = create_book_fixture(id=1, author_id=1)
        book_repo.create.return_value = book
        bus = create_mock_event_bus()

        result = await AddBookCommand(authed, book_repo, author_repo, bus).execute(
            _dune_input()
        )

        assert result is book
        author_repo.get_or_create_by_name.assert_called_once_with("Frank Herbert")
        created = book_repo.create.call_args.args[0]
        assert created.author_id == 1
        assert created.genres == ["scifi"]
        book_repo.commit.assert_called_once()
        bus.publish.assert_called_once_with(EventKind.BOOK_ADDED, book)

    @pytest.mark.asyncio
    async def test_add_book_with_existing_author(self, authed):
        """Test an existing author is reused."""
        book_repo = create_mock_book_repository()
        book_repo.create.return_value = create_book_fixture(author_id=4)
        author_repo = create_mock_author_repository()
        author_repo.get_or_create_by_name.return_value = (
            create_author_fixture(id=4),
            False,
        )

        result = await AddBookCommand(
            authed, book_repo, author_repo, create_mock_event_bus()
        ).execute(_dune_input(title="Dune Messiah", published=1969))

        assert result.author_id == 4
        author_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_book_requires_authentication(self, anonymous):
        """Test anonymous callers are rejected before any write."""
        book_repo = create_mock_book_repository()
        author_repo = create_mock_author_repository()
        bus = create_mock_event_bus()

        with pytest.raises(UnauthenticatedError):
            await AddBookCommand(anonymous, book_repo, author_repo, bus).execute(
                _dune_input()
            )

        author_repo.get_or_create_by_name.assert_not_called()
        book_repo.create.assert_not_called()
        bus.publish.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, expected",
        [
            ({"title": "D"}, "book title too short"),
            ({"author": "Bob"}, "author name too short"),
        ],
    )
    async def test_add_book_validation(self, authed, overrides, expected):
        """Test short titles and author names create nothing."""
        book_repo = create_mock_book_repository()
        author_repo = create_mock_author_repository()
        bus = create_mock_event_bus()

        with pytest.raises(ValidationError) as exc_info:
            await AddBookCommand(authed, book_repo, author_repo, bus).execute(
                _dune_input(**overrides)
            )

        assert expected in exc_info.value.message
        assert exc_info.value.invalid_args["published"] == 1965
        author_repo.get_or_create_by_name.assert_not_called()
        book_repo.create.assert_not_called()
        bus.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_book_store_failure(self, authed):
        """Test a store failure is reported as ValidationError without publishing."""
        book_repo = create_mock_book_repository()
        book_repo.create.side_effect = IntegrityError(
            "INSERT", {}, Exception("constraint failed")
        )
        author_repo = create_mock_author_repository()
        author_repo.get_or_create_by_name.return_value = (
            create_author_fixture(id=1),
            True,
        )
        bus = create_mock_event_bus()

        with pytest.raises(ValidationError) as exc_info:
            await AddBookCommand(authed, book_repo, author_repo, bus).execute(
                _dune_input()
            )

        assert exc_info.value.message == "constraint failed"
        book_repo.commit.assert_not_called()
        bus.publish.assert_not_called()
