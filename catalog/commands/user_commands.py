"""
Commands for user accounts and login.

Passwords only ever travel inside ``CreateUserInput`` and ``LoginInput``;
they are excluded from error payloads and never logged.
"""

from pydantic import BaseModel, Field, SecretStr
from sqlalchemy.exc import SQLAlchemyError

from catalog.commands.base import BaseCommand, store_error
from catalog.constants import MAX_PASSWORD_BYTES, WRONG_CREDENTIALS_MSG
from catalog.exceptions import InvalidCredentialsError, ValidationError
from catalog.logging import logger
from catalog.models.user import User
from catalog.repositories.user_repository import UserRepository
from catalog.schemas.views import UserView
from catalog.security import (
    TokenManager,
    hash_password_async,
    verify_password_async,
)
from catalog.utils.metrics import auth_attempts_total


class CreateUserInput(BaseModel):  # type: ignore[misc]
    """Input model for registering a user."""

    username: str
    password: SecretStr
    favorite_genre: str = Field(..., description="Preferred genre tag")


class LoginInput(BaseModel):  # type: ignore[misc]
    """Input model for exchanging credentials for a token."""

    username: str
    password: SecretStr


class CreateUserCommand(BaseCommand[CreateUserInput, UserView]):
    """Command to register a user with a bcrypt-hashed password."""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def execute(self, input_data: CreateUserInput) -> UserView:
        """
        Execute command to create user.

        Args:
            input_data: Username, plain password and favorite genre.

        Returns:
            The stored user, without its password digest.

        Raises:
            ValidationError: If the password is too long to hash or the
                username is already taken.
        """
        invalid_args = input_data.model_dump(exclude={"password"})
        password = input_data.password.get_secret_value()

        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"password too long, must be at most {MAX_PASSWORD_BYTES} bytes",
                invalid_args,
            )

        digest = await hash_password_async(password)

        try:
            user = await self.repository.create(
                User(
                    username=input_data.username,
                    favorite_genre=input_data.favorite_genre,
                    password_hash=digest,
                )
            )
            await self.repository.commit()
        except SQLAlchemyError as ex:
            raise store_error(ex, invalid_args) from ex

        logger.info(f"Created user '{user.username}' with id {user.id}")
        return UserView.model_validate(user)


class LoginCommand(BaseCommand[LoginInput, str]):
    """
    Command to exchange a username and password for an access token.

    Unknown usernames and wrong passwords fail identically.
    """

    def __init__(self, repository: UserRepository, token_manager: TokenManager):
        self.repository = repository
        self.token_manager = token_manager

    async def execute(self, input_data: LoginInput) -> str:
        user = await self.repository.get_by_username(input_data.username)

        valid = await verify_password_async(
            input_data.password.get_secret_value(),
            user.password_hash if user is not None else None,
        )
        if user is None or not valid:
            auth_attempts_total.labels(status="failure").inc()
            logger.info(f"Failed login for '{input_data.username}'")
            raise InvalidCredentialsError(WRONG_CREDENTIALS_MSG)

        auth_attempts_total.labels(status="success").inc()
        return self.token_manager.sign({"username": user.username, "id": user.id})
