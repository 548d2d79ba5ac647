from sqlalchemy import JSON, Column
from sqlmodel import Field

from catalog.models.base import BaseModel


class Book(BaseModel, table=True):
    """
    SQLModel representing a book entity in the database.

    A book holds a non-owning reference to its author through ``author_id``.
    Authors carry no back-pointer; the relationship is rebuilt by query.

    Attributes:
        id: Primary key identifier for the book
        title: Book title
        published: Year of publication
        author_id: Identifier of the author who wrote the book
        genres: Ordered list of genre tags, possibly empty
    """

    __table_args__ = {"extend_existing": True}

    id: int | None = Field(default=None, primary_key=True)
    title: str
    published: int
    author_id: int = Field(foreign_key="author.id", index=True)
    genres: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
