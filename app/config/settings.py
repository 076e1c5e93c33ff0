"""
==============================================================================
Application Settings Module
==============================================================================

Pydantic Settings for the catalog publishing service.

Values come from environment variables first, then a .env file, then the
defaults below. Names are case-insensitive (DATABASE_URL, database_url).

Settings Groups:
---------------
- Runtime:   APP_NAME, APP_ENV, DEBUG, HOST, PORT, CORS_ORIGINS
- Storage:   DATABASE_URL
- Tokens:    JWT_SECRET_KEY, JWT_ALGORITHM, token lifetimes
- Bootstrap: DEFAULT_ADMIN_USERNAME, DEFAULT_ADMIN_PASSWORD
- Catalog:   PRIMARY_SHOP_ID, MEDIA_URL_PREFIX

Set a real JWT_SECRET_KEY and admin password outside development.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)

ENVIRONMENTS = ("development", "staging", "production")
JWT_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """
    Service configuration.

    Example:
        >>> settings = Settings(primary_shop_id="main")
        >>> settings.media_url_prefix
        '/assets/files/Media'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # --- runtime -------------------------------------------------------------
    app_name: str = Field(default="Catalog Publishing API")
    app_env: str = Field(default="development", description="development, staging or production")
    debug: bool = Field(default=False, description="Verbose logging and SQL echo")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: str = Field(default='["*"]', description="JSON array of allowed origins")

    # --- storage -------------------------------------------------------------
    database_url: str = Field(
        default="sqlite:///./storage/db/catalog.db",
        description="SQLAlchemy URL; sqlite:// keeps everything in memory"
    )

    # --- tokens --------------------------------------------------------------
    jwt_secret_key: str = Field(default="change-this-in-production", min_length=16)
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=30, ge=1, le=1440)
    refresh_token_expire_days: int = Field(default=7, ge=1, le=90)

    # --- bootstrap -----------------------------------------------------------
    default_admin_username: str = Field(default="admin", min_length=3, max_length=50)
    default_admin_password: str = Field(default="admin123", min_length=6)

    # --- catalog -------------------------------------------------------------
    primary_shop_id: str = Field(
        default="primary",
        min_length=1,
        description="Shop whose createProduct grants cover every shop"
    )
    media_url_prefix: str = Field(
        default="/assets/files/Media",
        description="Prefix of {prefix}/{media_id}/{store}/{filename} URLs"
    )

    @field_validator("app_env")
    @classmethod
    def normalize_app_env(cls, value: str) -> str:
        """Unknown environments fall back to development."""
        normalized = value.lower().strip()
        if normalized in ENVIRONMENTS:
            return normalized

        logger.warning(f"Unknown environment '{value}', using 'development'")
        return "development"

    @field_validator("jwt_algorithm")
    @classmethod
    def check_jwt_algorithm(cls, value: str) -> str:
        """Only HMAC algorithms work with a shared secret key."""
        algorithm = value.upper()
        if algorithm not in JWT_ALGORITHMS:
            raise ValueError(f"JWT_ALGORITHM must be one of {', '.join(JWT_ALGORITHMS)}")
        return algorithm

    @field_validator("media_url_prefix")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def cors_origins_list(self) -> List[str]:
        """CORS_ORIGINS parsed as a list; anything malformed allows all."""
        try:
            origins = json.loads(self.cors_origins)
        except json.JSONDecodeError:
            logger.warning(f"CORS_ORIGINS is not valid JSON ({self.cors_origins}), allowing all")
            return ["*"]

        return origins if isinstance(origins, list) else ["*"]

    @property
    def access_token_expire_seconds(self) -> int:
        return self.access_token_expire_minutes * 60

    def get_database_path(self) -> Optional[Path]:
        """
        File behind a SQLite URL.

        Returns:
            Relative or absolute path, or None for in-memory SQLite and
            other databases
        """
        prefix = "sqlite:///"
        if not self.database_url.startswith(prefix):
            return None

        path = self.database_url[len(prefix):]
        if not path or path == ":memory:":
            return None
        return Path(path)

    def ensure_directories(self) -> None:
        """Create the directory of a SQLite database file."""
        db_path = self.get_database_path()
        if db_path is not None:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Database directory ready: {db_path.parent}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Shared Settings instance, created on first use."""
    settings = Settings()
    settings.ensure_directories()

    logger.debug(
        f"Settings loaded: env={settings.app_env} "
        f"database={settings.database_url} primary_shop={settings.primary_shop_id}"
    )
    return settings
