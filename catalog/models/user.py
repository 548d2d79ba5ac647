from sqlmodel import Field

from catalog.models.base import BaseModel


class User(BaseModel, table=True):
    """
    SQLModel representing a catalog user.

    Users exist only to authenticate mutations. The password digest is
    stored here and must never leave the service layer.

    Attributes:
        id: Primary key identifier for the user
        username: Unique login name
        favorite_genre: Genre the user prefers
        password_hash: bcrypt digest of the user's password
    """

    __tablename__ = "catalog_user"
    __table_args__ = {"extend_existing": True}

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    favorite_genre: str
    password_hash: str
