from sqlmodel import Field

from catalog.models.base import BaseModel


class Author(BaseModel, table=True):
    """
    SQLModel representing an author entity in the database.

    This is a clean data model without Active Record methods.
    Use AuthorRepository for all database operations.

    The number of books is never stored here; it is computed from the
    ``book`` table on every read.

    Attributes:
        id: Primary key identifier for the author
        name: Name of the author, unique across the catalog
        born: Optional birth year
    """

    __table_args__ = {"extend_existing": True}

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)
    born: int | None = Field(default=None)
