"""
Tests for user registration and login commands.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from catalog.commands.user_commands import (
    CreateUserCommand,
    CreateUserInput,
    LoginCommand,
    LoginInput,
)
from catalog.exceptions import InvalidCredentialsError, ValidationError
from catalog.security import hash_password, verify_password
from tests.mocks.factories import create_user_fixture
from tests.mocks.repository_mocks import create_mock_user_repository


class TestCreateUserCommand:
    """Tests for CreateUserCommand."""

    @pytest.mark.asyncio
    async def test_create_user_hashes_password(self):
        """Test the stored digest is a bcrypt hash of the password."""
        mock_repo = create_mock_user_repository()
        mock_repo.create.side_effect = lambda user: _with_id(user, 1)

        result = await CreateUserCommand(mock_repo).execute(
            CreateUserInput(
                username="alice", password="pw1", favorite_genre="fantasy"
            )
        )

        stored = mock_repo.create.call_args.args[0]
        assert stored.password_hash != "pw1"
        assert verify_password("pw1", stored.password_hash)
        assert result.id == 1
        assert result.username == "alice"
        assert result.favorite_genre == "fantasy"
        assert not hasattr(result, "password_hash")
        mock_repo.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_create_user_duplicate_username(self):
        """Test a duplicate username is rejected without echoing the password."""
        mock_repo = create_mock_user_repository()
        mock_repo.create.side_effect = IntegrityError(
            "INSERT", {}, Exception("UNIQUE constraint failed: catalog_user.username")
        )

        with pytest.raises(ValidationError) as exc_info:
            await CreateUserCommand(mock_repo).execute(
                CreateUserInput(
                    username="alice", password="pw1", favorite_genre="fantasy"
                )
            )

        assert exc_info.value.invalid_args == {
            "username": "alice",
            "favorite_genre": "fantasy",
        }

    @pytest.mark.asyncio
    async def test_create_user_password_too_long(self):
        """Test passwords bcrypt would truncate are rejected."""
        mock_repo = create_mock_user_repository()

        with pytest.raises(ValidationError):
            await CreateUserCommand(mock_repo).execute(
                CreateUserInput(
                    username="alice", password="x" * 73, favorite_genre="fantasy"
                )
            )

        mock_repo.create.assert_not_called()


class TestLoginCommand:
    """Tests for LoginCommand."""

    @pytest.mark.asyncio
    async def test_login_success(self, token_manager):
        """Test valid credentials yield a token naming the user."""
        mock_repo = create_mock_user_repository()
        mock_repo.get_by_username.return_value = create_user_fixture(
            id=7, username="alice", password_hash=hash_password("pw1", rounds=4)
        )

        token = await LoginCommand(mock_repo, token_manager).execute(
            LoginInput(username="alice", password="pw1")
        )

        claims = token_manager.verify(token)
        assert claims.username == "alice"
        assert claims.id == 7

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_fail_alike(self, token_manager):
        """Test both failure paths raise the same error."""
        mock_repo = create_mock_user_repository()
        mock_repo.get_by_username.return_value = create_user_fixture(
            password_hash=hash_password("pw1", rounds=4)
        )

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await LoginCommand(mock_repo, token_manager).execute(
                LoginInput(username="alice", password="nope")
            )

        mock_repo.get_by_username.return_value = None
        with pytest.raises(InvalidCredentialsError) as unknown_user:
            await LoginCommand(mock_repo, token_manager).execute(
                LoginInput(username="nobody", password="nope")
            )

        assert wrong_password.value.message == unknown_user.value.message
        assert wrong_password.value.message == "wrong credentials"
        assert wrong_password.value.extensions == unknown_user.value.extensions


def _with_id(user, id):
    user.id = id
    return user
