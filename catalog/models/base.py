"""
Base model for all database tables with async relationship support.

All table models inherit from ``BaseModel`` so that they share SQLAlchemy's
``AsyncAttrs`` mixin, which makes lazy attributes awaitable instead of
raising ``MissingGreenlet`` inside async sessions.
"""

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlmodel import SQLModel


class BaseModel(SQLModel, AsyncAttrs):  # type: ignore[misc]
    """
    Base model for all database tables with async relationship support.

    Example:
        class Book(BaseModel, table=True):
            id: int | None = Field(default=None, primary_key=True)
            title: str
            author_id: int = Field(foreign_key="author.id")
    """

    pass
