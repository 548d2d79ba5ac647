"""GraphQL endpoint: queries and mutations over HTTP, subscriptions over websockets."""

from strawberry.fastapi import GraphQLRouter
from strawberry.subscriptions import GRAPHQL_TRANSPORT_WS_PROTOCOL, GRAPHQL_WS_PROTOCOL

from catalog.api.graphql.context import get_context
from catalog.api.graphql.schema import schema
from catalog.settings import app_settings

router = GraphQLRouter(
    schema,
    path=app_settings.GRAPHQL_PATH,
    context_getter=get_context,
    graphql_ide="graphiql" if app_settings.GRAPHIQL_ENABLED else None,
    subscription_protocols=(GRAPHQL_TRANSPORT_WS_PROTOCOL, GRAPHQL_WS_PROTOCOL),
)
