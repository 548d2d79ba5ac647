from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.models.user import User
from catalog.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, User)

    async def get_by_username(self, username: str) -> User | None:
        """
        Get user by exact username match.

        Args:
            username: Login name to search for.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(User.username == username)
        result = await self.session.exec(stmt)
        return result.first()
