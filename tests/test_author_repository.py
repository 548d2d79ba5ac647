"""
Tests for AuthorRepository.

Session interactions are verified with mocks; find-or-create is also
exercised against SQLite to cover the SAVEPOINT path.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.commands.author_commands import ListAuthorsCommand
from catalog.commands.book_commands import AddBookCommand, AddBookInput
from catalog.models.author import Author
from catalog.repositories.author_repository import AuthorRepository
from catalog.repositories.book_repository import BookRepository
from catalog.resolvers.relationships import RelationshipResolver
from catalog.storage.db import create_session_factory, init_models
from tests.mocks.repository_mocks import create_mock_event_bus


@pytest.fixture
def mock_session():
    """
    Provides a mock AsyncSession for testing.

    Returns:
        AsyncMock: Mocked database session
    """
    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.commit = AsyncMock()
    session.exec = AsyncMock()
    session.get = AsyncMock()
    return session


def _exec_result(value):
    result = MagicMock()
    result.first.return_value = value
    result.one.return_value = value
    return result


class TestAuthorRepositoryCrud:
    """Tests for inherited repository operations."""

    @pytest.mark.asyncio
    async def test_create_author(self, mock_session):
        repo = AuthorRepository(mock_session)
        author = Author(name="Test Author")

        created = await repo.create(author)

        assert created == author
        mock_session.add.assert_called_once_with(author)
        mock_session.flush.assert_called_once()
        mock_session.refresh.assert_called_once_with(author)

    @pytest.mark.asyncio
    async def test_create_rolls_back_on_error(self, mock_session):
        mock_session.flush.side_effect = IntegrityError("INSERT", {}, Exception())
        repo = AuthorRepository(mock_session)

        with pytest.raises(IntegrityError):
            await repo.create(Author(name="Test Author"))

        mock_session.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_get_by_id(self, mock_session):
        expected = Author(id=1, name="Test Author")
        mock_session.get.return_value = expected

        found = await AuthorRepository(mock_session).get_by_id(1)

        assert found == expected
        mock_session.get.assert_called_once_with(Author, 1)

    @pytest.mark.asyncio
    async def test_get_by_name_not_found(self, mock_session):
        mock_session.exec.return_value = _exec_result(None)

        assert await AuthorRepository(mock_session).get_by_name("Nobody") is None

    @pytest.mark.asyncio
    async def test_count(self, mock_session):
        mock_session.exec.return_value = _exec_result(4)

        assert await AuthorRepository(mock_session).count() == 4

    @pytest.mark.asyncio
    async def test_get_all_orders_by_id(self, mock_session):
        result = MagicMock()
        result.all.return_value = []
        mock_session.exec.return_value = result

        assert await AuthorRepository(mock_session).get_all() == []

        stmt = mock_session.exec.call_args.args[0]
        assert "ORDER BY author.id" in str(stmt)

    @pytest.mark.asyncio
    async def test_update_by_id_missing(self, mock_session):
        mock_session.get.return_value = None

        result = await AuthorRepository(mock_session).update_by_id(1, born=1900)

        assert result is None
        mock_session.flush.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_by_id(self, mock_session):
        author = Author(id=1, name="Frank Herbert")
        mock_session.get.return_value = author

        result = await AuthorRepository(mock_session).update_by_id(1, born=1920)

        assert result.born == 1920
        assert result.name == "Frank Herbert"
        mock_session.flush.assert_called_once()


@pytest.fixture
async def session_factory(db_engine):
    await init_models(db_engine)
    yield create_session_factory(db_engine)
    await db_engine.dispose()


class TestGetOrCreateByName:
    """Find-or-create against a real database."""

    @pytest.mark.asyncio
    async def test_creates_then_reuses(self, session_factory):
        async with session_factory() as session:
            repo = AuthorRepository(session)
            first, created = await repo.get_or_create_by_name("Frank Herbert")
            again, created_again = await repo.get_or_create_by_name("Frank Herbert")
            await repo.commit()

        assert created is True
        assert created_again is False
        assert again.id == first.id

        async with session_factory() as session:
            assert await AuthorRepository(session).count() == 1

    @pytest.mark.asyncio
    async def test_concurrent_insert_reuses_winner(self, session_factory):
        """Test losing the insert race returns the committed row."""
        async with session_factory() as winner_session:
            winner = Author(name="Frank Herbert")
            winner_session.add(winner)
            await winner_session.commit()

        async with session_factory() as session:
            repo = AuthorRepository(session)
            # First lookup misses, as if it ran before the other insert committed
            repo.get_by_name = AsyncMock(side_effect=[None, winner])
            author, created = await repo.get_or_create_by_name("Frank Herbert")
            await repo.commit()

        assert created is False
        assert author.name == "Frank Herbert"

        async with session_factory() as session:
            assert await AuthorRepository(session).count() == 1

    @pytest.mark.asyncio
    async def test_exact_name_match(self, session_factory):
        async with session_factory() as session:
            repo = AuthorRepository(session)
            await repo.get_or_create_by_name("Frank Herbert")
            _, created = await repo.get_or_create_by_name("frank herbert")
            await repo.commit()

        assert created is True


class TestConcurrentSessions:
    """Independent sessions writing to the same SQLite database."""

    @pytest.mark.asyncio
    async def test_concurrent_add_book_shares_new_author(
        self, session_factory, authed
    ):
        """Test two books for one new author create a single author row."""
        event_bus = create_mock_event_bus()

        async def add_book(title):
            async with session_factory() as session:
                command = AddBookCommand(
                    authed,
                    BookRepository(session),
                    AuthorRepository(session),
                    event_bus,
                )
                return await command.execute(
                    AddBookInput(
                        title=title,
                        author="Frank Herbert",
                        published=1965,
                        genres=["scifi"],
                    )
                )

        first, second = await asyncio.gather(
            add_book("Dune"), add_book("Dune Messiah")
        )

        assert first.author_id == second.author_id
        assert event_bus.publish.call_count == 2

        async with session_factory() as session:
            assert await AuthorRepository(session).count() == 1
            assert await BookRepository(session).count() == 2

    @pytest.mark.asyncio
    async def test_list_authors_counts_in_separate_sessions(
        self, session_factory
    ):
        """Test listing authors does not wait on its own listing session."""
        async with session_factory() as session:
            repo = AuthorRepository(session)
            await repo.get_or_create_by_name("Frank Herbert")
            await repo.get_or_create_by_name("Ursula K. Le Guin")
            await repo.commit()

        async with session_factory() as session:
            command = ListAuthorsCommand(
                AuthorRepository(session), RelationshipResolver(session_factory)
            )
            views = await asyncio.wait_for(command.execute(), timeout=5)

        assert [v.name for v in views] == ["Frank Herbert", "Ursula K. Le Guin"]
        assert all(v.book_count == 0 for v in views)
