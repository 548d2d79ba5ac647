import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import catalog.models  # noqa: F401  (registers tables on SQLModel.metadata)
from catalog.exceptions import DatabaseError
from catalog.logging import logger
from catalog.settings import app_settings

SessionFactory = async_sessionmaker[AsyncSession]


def _enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """
    Make SQLite honour SAVEPOINT, foreign keys and concurrent writers.

    The sqlite3 driver defers BEGIN until the first DML statement, which
    breaks nested transactions. Emitting BEGIN ourselves restores them.
    BEGIN IMMEDIATE takes the write lock up front and a second writer waits
    up to the busy timeout for it. A session must not stay inside a
    transaction while another session of the same task opens one.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, _: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine(url: str | None = None) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Args:
        url: Database URL. Defaults to ``app_settings.database_url``.

    Returns:
        AsyncEngine: Configured engine. Pool settings only apply to
        server databases; SQLite uses the driver defaults.
    """
    url = url or app_settings.database_url

    if url.startswith("sqlite"):
        new_engine = create_async_engine(
            url,
            echo=False,
            connect_args={"timeout": app_settings.DB_SQLITE_BUSY_TIMEOUT},
        )
        _enable_sqlite_transactions(new_engine)
        return new_engine

    return create_async_engine(
        url,
        echo=False,
        pool_size=app_settings.DB_POOL_SIZE,
        max_overflow=app_settings.DB_MAX_OVERFLOW,
        pool_recycle=app_settings.DB_POOL_RECYCLE,
        pool_pre_ping=app_settings.DB_POOL_PRE_PING,
    )


def create_session_factory(bind: AsyncEngine) -> SessionFactory:
    """Build a session factory bound to ``bind``."""
    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


engine: AsyncEngine = create_engine()
async_session: SessionFactory = create_session_factory(engine)


async def init_models(bind: AsyncEngine) -> None:
    """Create all catalog tables that do not exist yet."""
    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def wait_and_init_db(
    bind: AsyncEngine | None = None,
    retry_interval: int | None = None,
    max_retries: int | None = None,
) -> bool:
    """
    Wait until the database is available, then create missing tables.

    A database that never comes up is logged, not raised: the service keeps
    accepting requests, which then fail one by one.

    Args:
        bind: Engine to initialise. Defaults to the module engine.
        retry_interval: Time in seconds between retries.
            Defaults to app_settings.DB_INIT_RETRY_INTERVAL
        max_retries: Maximum number of retries before giving up.
            Defaults to app_settings.DB_INIT_MAX_RETRIES

    Returns:
        True if the database was initialised, False otherwise.
    """
    bind = bind or engine
    if retry_interval is None:
        retry_interval = app_settings.DB_INIT_RETRY_INTERVAL
    if max_retries is None:
        max_retries = app_settings.DB_INIT_MAX_RETRIES

    for attempt in range(max_retries):
        try:
            await init_models(bind)
            logger.info("Database is now ready.")
            return True
        except (OperationalError, OSError) as ex:
            logger.warning(
                f"Database not ready ({ex}), retrying in {retry_interval} seconds... "
                f"(Attempt {attempt + 1}/{max_retries})"
            )
            await asyncio.sleep(retry_interval)

    logger.error("Failed to connect to the database after multiple attempts.")
    return False


@asynccontextmanager
async def session_scope(
    factory: SessionFactory | None = None,
) -> AsyncIterator[AsyncSession]:
    """
    Provide a session whose unexpected database failures become DatabaseError.

    Commands own their commit. Store errors they translate themselves (for
    example into ValidationError) never reach this scope; anything else
    raised by the database layer is rolled back, logged and re-raised as
    ``DatabaseError``.

    Args:
        factory: Session factory to use. Defaults to ``async_session``.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.

    Raises:
        DatabaseError: If the database layer fails.
    """
    factory = factory or async_session
    async with factory() as session:
        try:
            yield session
        except SQLAlchemyError as ex:
            await session.rollback()
            logger.error(f"Database error: {ex}")
            raise DatabaseError("database operation failed") from ex
