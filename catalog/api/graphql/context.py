"""
Per-request GraphQL context.

The context getter runs once per HTTP request and once per websocket
connection. It resolves the caller's identity and hands every resolver the
shared services stored on ``app.state`` by the application factory.
"""

from fastapi import HTTPException, WebSocketException
from starlette.requests import HTTPConnection
from strawberry.fastapi import BaseContext
from strawberry.types import Info

from catalog.auth import extract_authorization
from catalog.constants import WS_POLICY_VIOLATION_CODE
from catalog.exceptions import InvalidTokenError
from catalog.managers.event_bus import EventBus
from catalog.resolvers.relationships import RelationshipResolver
from catalog.schemas.auth import AuthContext
from catalog.security import TokenManager
from catalog.storage.db import SessionFactory


class CatalogContext(BaseContext):
    """
    Context object available as ``info.context`` in every resolver.

    Attributes:
        auth: Identity of the caller.
        session_factory: Opens database sessions for commands.
        event_bus: Fan-out hub for subscription events.
        relationships: Lazy Author/Book relationship resolution.
        token_manager: Issues access tokens on login.
    """

    def __init__(
        self,
        auth: AuthContext,
        session_factory: SessionFactory,
        event_bus: EventBus,
        relationships: RelationshipResolver,
        token_manager: TokenManager,
    ) -> None:
        super().__init__()
        self.auth = auth
        self.session_factory = session_factory
        self.event_bus = event_bus
        self.relationships = relationships
        self.token_manager = token_manager


CatalogInfo = Info[CatalogContext, None]


async def get_context(connection: HTTPConnection) -> CatalogContext:
    """
    Build the GraphQL context for an HTTP request or websocket handshake.

    Raises:
        HTTPException: 401 with ``WWW-Authenticate: Bearer`` when an HTTP
            request carries an invalid bearer token.
        WebSocketException: Policy violation close when a websocket
            handshake carries an invalid bearer token.
    """
    state = connection.app.state

    try:
        auth = await state.identity_resolver.resolve_identity(
            extract_authorization(connection)
        )
    except InvalidTokenError as ex:
        if connection.scope["type"] == "websocket":
            raise WebSocketException(
                code=WS_POLICY_VIOLATION_CODE, reason=ex.message
            ) from ex
        raise HTTPException(
            status_code=ex.http_status,
            detail=ex.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from ex

    return CatalogContext(
        auth=auth,
        session_factory=state.session_factory,
        event_bus=state.event_bus,
        relationships=state.relationships,
        token_manager=state.token_manager,
    )
