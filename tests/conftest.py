"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for authentication, database,
and the full application running against a temporary SQLite database.
"""

import os

import pytest

# Set required environment variables for testing before importing catalog modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./catalog-test.db")
os.environ.setdefault("JWT_SECRET", "test-secret-for-catalog-tokens-0123456789")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DB_INIT_MAX_RETRIES", "1")
os.environ.setdefault("DB_INIT_RETRY_INTERVAL", "0")


@pytest.fixture
def token_manager():
    """
    Provides a TokenManager with a fixed test secret.

    Returns:
        TokenManager: Manager signing HS256 tokens.
    """
    from catalog.security import TokenManager

    return TokenManager(secret="test-secret-for-catalog-tokens-0123456789")


@pytest.fixture
def mock_user():
    """
    Provides a persisted-looking User for testing.

    Returns:
        User: User with id 1
    """
    from tests.mocks.factories import create_user_fixture

    return create_user_fixture()


@pytest.fixture
def authed(mock_user):
    """
    Provides an authenticated AuthContext.

    Returns:
        AuthContext: Context holding ``mock_user``
    """
    from catalog.schemas.auth import AuthContext

    return AuthContext(user=mock_user)


@pytest.fixture
def anonymous():
    """Provides the anonymous AuthContext."""
    from catalog.schemas.auth import ANONYMOUS

    return ANONYMOUS


@pytest.fixture
def db_engine(tmp_path):
    """
    Provides an engine bound to a fresh SQLite database file.

    Args:
        tmp_path: Pytest temporary directory.

    Returns:
        AsyncEngine: Engine for ``tmp_path/catalog.db``
    """
    from catalog.storage.db import create_engine

    return create_engine(f"sqlite+aiosqlite:///{tmp_path}/catalog.db")


@pytest.fixture
def app(db_engine):
    """
    Provides the full catalog application bound to ``db_engine``.

    Returns:
        FastAPI: Application instance
    """
    from catalog import application

    return application(engine=db_engine)


@pytest.fixture
def client(app):
    """
    Provides a TestClient with the application lifespan running.

    Yields:
        TestClient: Client whose startup created all tables.
    """
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
