from dataclasses import dataclass

from pydantic import BaseModel

from catalog.exceptions import UnauthenticatedError
from catalog.models.user import User


class TokenClaims(BaseModel):  # type: ignore[misc]
    """Claims carried by a catalog access token."""

    id: int
    username: str
    exp: int
    iat: int | None = None


@dataclass(frozen=True)
class AuthContext:
    """
    Identity resolved for a single request.

    Holds the authenticated user, or nothing for anonymous callers. Built
    once per request by ``IdentityResolver`` and passed explicitly to every
    operation that needs it.
    """

    user: User | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def require_user(self) -> User:
        """
        Return the authenticated user.

        Raises:
            UnauthenticatedError: If the request carries no valid identity.
        """
        if self.user is None:
            raise UnauthenticatedError("missing authorization header")
        return self.user


ANONYMOUS = AuthContext()
