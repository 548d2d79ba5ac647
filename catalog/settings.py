"""Settings module for the catalog service."""

import os
from enum import Enum
from typing import Any, Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from catalog.constants import MIN_HMAC_SECRET_BYTES


class Environment(str, Enum):
    """Application environment types."""

    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):  # type: ignore[misc]
    """
    Main settings class.

    Values are read from environment variables (case sensitive) and an
    optional ``.env`` file. Environment-specific defaults are applied after
    loading for every setting that was not explicitly provided.
    """

    model_config = SettingsConfigDict(
        case_sensitive=True, env_file=".env", extra="ignore"
    )

    # Environment configuration
    ENV: Environment = Environment.DEV

    # Database settings
    DATABASE_URL: str | None = None
    DB_USER: str = "catalog"
    DB_PASSWORD: SecretStr = SecretStr("catalog")
    DB_HOST: str = "catalog-db"
    DB_PORT: int = 5432
    DB_NAME: str = "catalog"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True
    DB_INIT_RETRY_INTERVAL: int = 2
    DB_INIT_MAX_RETRIES: int = 5
    DB_SQLITE_BUSY_TIMEOUT: int = 30

    # Credential settings
    JWT_SECRET: SecretStr = SecretStr(
        "change-me-in-production-this-is-not-secret"
    )
    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # Event fanout settings
    EVENT_QUEUE_MAX_SIZE: int = 100

    # GraphQL settings
    GRAPHQL_PATH: str = "/graphql"
    GRAPHIQL_ENABLED: bool = True

    # Logging settings
    LOG_FILE_PATH: str = "logs/logging_errors.log"
    LOG_LEVEL: str = "INFO"
    LOG_CONSOLE_FORMAT: Literal["human", "json"] = "human"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize settings with environment-specific defaults."""
        super().__init__(**kwargs)
        self._apply_environment_defaults()

    @model_validator(mode="after")
    def _check_jwt_secret_length(self) -> "Settings":
        """Reject HMAC secrets shorter than the algorithm's digest."""
        minimum = MIN_HMAC_SECRET_BYTES[self.JWT_ALGORITHM]
        secret = self.JWT_SECRET.get_secret_value().encode("utf-8")
        if len(secret) < minimum:
            raise ValueError(
                f"JWT_SECRET must be at least {minimum} bytes "
                f"for {self.JWT_ALGORITHM}, got {len(secret)}"
            )
        return self

    def _apply_environment_defaults(self) -> None:
        """Apply environment-specific configuration defaults."""
        if self.ENV == Environment.PRODUCTION:
            if os.getenv("LOG_CONSOLE_FORMAT") is None:
                self.LOG_CONSOLE_FORMAT = "json"
            if os.getenv("LOG_LEVEL") is None:
                self.LOG_LEVEL = "WARNING"
            if os.getenv("GRAPHIQL_ENABLED") is None:
                self.GRAPHIQL_ENABLED = False

        elif self.ENV == Environment.STAGING:
            if os.getenv("LOG_CONSOLE_FORMAT") is None:
                self.LOG_CONSOLE_FORMAT = "json"
            if os.getenv("LOG_LEVEL") is None:
                self.LOG_LEVEL = "INFO"

        else:  # Environment.DEV
            if os.getenv("LOG_CONSOLE_FORMAT") is None:
                self.LOG_CONSOLE_FORMAT = "human"
            if os.getenv("LOG_LEVEL") is None:
                self.LOG_LEVEL = "DEBUG"

    @property
    def database_url(self) -> str:
        """Database URL, either the explicit override or built from DB_*."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        password = self.DB_PASSWORD.get_secret_value()
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{password}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


app_settings = Settings()
