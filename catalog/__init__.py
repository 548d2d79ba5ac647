# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from catalog.auth import IdentityResolver
from catalog.logging import logger
from catalog.managers.event_bus import EventBus
from catalog.middlewares.correlation_id import CorrelationIDMiddleware
from catalog.resolvers.relationships import RelationshipResolver
from catalog.routing import collect_subrouters
from catalog.security import TokenManager
from catalog.settings import app_settings
from catalog.storage import db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application startup and shutdown.

    Startup waits for the database and creates missing tables. A database
    that stays unreachable is logged and the service starts anyway.
    Shutdown releases the engine's connection pool.
    """
    logger.info("Application startup initiated")
    if await db.wait_and_init_db(app.state.engine):
        logger.info("Initialized database and tables")
    else:
        logger.error("Starting without an initialized database")

    yield

    logger.info("Application shutdown initiated")
    await app.state.engine.dispose()
    logger.info("Application shutdown complete")


def application(engine: AsyncEngine | None = None) -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Shared services are created here and stored on ``app.state``:

    - ``engine`` and ``session_factory``: database access.
    - ``event_bus``: fan-out hub for ``bookAdded`` subscribers.
    - ``token_manager`` and ``identity_resolver``: bearer token handling.
    - ``relationships``: Author/Book relationship resolution.

    Args:
        engine: Engine to use instead of the one built from settings.

    Returns:
        FastAPI: The configured application.
    """
    app = FastAPI(
        title="Book catalog",
        description="Authors and books over GraphQL",
        version="1.0.0",
        lifespan=lifespan,
    )

    bind = engine or db.engine
    session_factory = (
        db.create_session_factory(bind) if engine is not None else db.async_session
    )
    token_manager = TokenManager.from_settings()

    app.state.engine = bind
    app.state.session_factory = session_factory
    app.state.event_bus = EventBus(max_queue_size=app_settings.EVENT_QUEUE_MAX_SIZE)
    app.state.token_manager = token_manager
    app.state.identity_resolver = IdentityResolver(token_manager, session_factory)
    app.state.relationships = RelationshipResolver(session_factory)

    # Collect routers
    app.include_router(collect_subrouters())

    app.add_middleware(CorrelationIDMiddleware)

    return app


app = application()  # Need for fastapi cli
