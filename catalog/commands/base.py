"""
Base command for encapsulating business operations.

The Command pattern encapsulates business logic as objects, keeping it out
of the GraphQL resolvers and easy to test in isolation. Commands depend on
repositories for data access and never open sessions themselves.

Example:
    ```python
    from pydantic import BaseModel
    from catalog.commands.base import BaseCommand


    class AddAuthorInput(BaseModel):
        name: str
        born: int | None = None


    class AddAuthorCommand(BaseCommand[AddAuthorInput, AuthorView]):
        def __init__(self, repository: AuthorRepository, ...):
            self.repository = repository

        async def execute(self, input_data: AddAuthorInput) -> AuthorView:
            ...


    # Usage in a resolver
    async with session_scope(context.session_factory) as session:
        command = AddAuthorCommand(AuthorRepository(session), ...)
        author = await command.execute(AddAuthorInput(name=name, born=born))
    ```
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from catalog.exceptions import ValidationError

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


class BaseCommand(ABC, Generic[TInput, TOutput]):
    """
    Base command for business operations.

    Type Parameters:
        TInput: Input data type (usually a Pydantic model).
        TOutput: Output data type.
    """

    @abstractmethod
    async def execute(self, input_data: TInput) -> TOutput:
        """
        Execute the command.

        Args:
            input_data: Input data for the command.

        Returns:
            Result of the command execution.

        Raises:
            AppException: For validation, authentication and integrity
                failures; see ``catalog.exceptions``.
        """
        pass


def store_error(ex: SQLAlchemyError, invalid_args: dict[str, Any]) -> ValidationError:
    """
    Wrap a store failure into a ValidationError.

    Args:
        ex: Error raised by the database layer.
        invalid_args: Arguments of the rejected operation.

    Returns:
        ValidationError carrying the driver message and the arguments.
    """
    return ValidationError(str(getattr(ex, "orig", None) or ex), invalid_args)
