"""Read models returned by the query and mutation commands."""

from pydantic import BaseModel, ConfigDict


class AuthorView(BaseModel):  # type: ignore[misc]
    """Fully materialized author, including its computed book count."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    born: int | None = None
    book_count: int = 0


class UserView(BaseModel):  # type: ignore[misc]
    """Public projection of a user; the password digest is never included."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    username: str
    favorite_genre: str
