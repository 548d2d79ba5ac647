"""
Request identity resolution.

``IdentityResolver`` turns the raw ``Authorization`` value of a request into
an ``AuthContext``. It is used by the GraphQL context getter for both HTTP
requests and websocket subscriptions.
"""

from starlette.requests import HTTPConnection

from catalog.constants import BEARER_PREFIX
from catalog.exceptions import InvalidTokenError
from catalog.logging import logger, set_log_context
from catalog.repositories.user_repository import UserRepository
from catalog.schemas.auth import ANONYMOUS, AuthContext
from catalog.security import TokenManager
from catalog.storage.db import SessionFactory, session_scope
from catalog.utils.metrics import auth_token_validations_total


def extract_authorization(connection: HTTPConnection) -> str | None:
    """
    Read the raw authorization value of a connection.

    HTTP requests carry it in the ``Authorization`` header. Websocket
    handshakes may carry it in the header or, since browsers cannot set
    headers on upgrades, in an ``Authorization`` query parameter.
    """
    header = connection.headers.get("authorization")
    if header is None and connection.scope["type"] == "websocket":
        header = connection.query_params.get("Authorization")
    return header


class IdentityResolver:
    """
    Resolve bearer credentials to catalog users.

    Attributes:
        token_manager: Verifies access tokens.
        session_factory: Opens the session used to look up the user.
    """

    def __init__(
        self, token_manager: TokenManager, session_factory: SessionFactory
    ) -> None:
        self.token_manager = token_manager
        self.session_factory = session_factory

    async def resolve_identity(self, authorization: str | None) -> AuthContext:
        """
        Build the AuthContext for a raw ``Authorization`` value.

        Args:
            authorization: Header value, or None when the header is absent.

        Returns:
            AuthContext holding the user, or an empty context for anonymous
            callers, non-bearer schemes and tokens of deleted users.

        Raises:
            InvalidTokenError: If a bearer token fails verification. This is
                never downgraded to anonymous.
        """
        if not authorization:
            return ANONYMOUS

        if not authorization.lower().startswith(BEARER_PREFIX):
            logger.debug("Ignoring non-bearer authorization scheme")
            return ANONYMOUS

        raw_token = authorization[len(BEARER_PREFIX) :]

        try:
            claims = self.token_manager.verify(raw_token)
        except InvalidTokenError:
            auth_token_validations_total.labels(status="invalid").inc()
            raise

        async with session_scope(self.session_factory) as session:
            user = await UserRepository(session).get_by_id(claims.id)

        if user is None:
            auth_token_validations_total.labels(status="unknown_user").inc()
            logger.warning(
                f"Token for user id {claims.id} ({claims.username}) "
                "does not match any user, treating request as anonymous"
            )
            return ANONYMOUS

        auth_token_validations_total.labels(status="valid").inc()
        set_log_context(user_id=user.id, username=user.username)
        return AuthContext(user=user)
