"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for QuantumEdge happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). Type coercion and validation are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved. Development mode generates a signing key with a warning;
      production mode refuses to start without one.

Values read here are handed to components at construction time (see the
lifespan in api/main.py). Nothing outside this module caches settings in
module globals.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or jobs/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("quantumedge.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'quantumedge.db'}"

# Browser front-ends allowed to call the API with credentials.
_DEFAULT_CORS_ORIGINS = [
    "https://nexrox-digital.vercel.app",
    "http://localhost:5173",
    "https://hilarious-dolphin-b5dd58.netlify.app",
]

SESSION_LIFETIME_SECONDS = 7 * 24 * 60 * 60


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    environment: str = "development"
    port: int = 3000
    log_level: str = "INFO"
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = SESSION_LIFETIME_SECONDS
    # When True the auth gate re-loads the user on every request, so a deleted
    # account loses access immediately instead of at token expiry.
    verify_user_on_request: bool = False

    # ------------------------------------------------------------------
    # CORS
    # ------------------------------------------------------------------

    cors_origins: list[str] = list(_DEFAULT_CORS_ORIGINS)

    @property
    def is_production(self) -> bool:
        """True when running with production cookie and secret policy."""
        return self.environment.lower() == "production"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Development: auto-generate a random key with a warning. Sessions will
            not survive restart -- acceptable for local dev.

        Production: refuse to start if SECRET_KEY is missing. Rotating or
            losing the key invalidates every outstanding session token.

        Both: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if not self.is_production:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Sessions will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production. "
                    "Set SECRET_KEY in your environment or .env file, "
                    "or run with ENVIRONMENT=development."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        if self.token_expire_seconds <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
