"""Application configuration loaded from environment variables.

Uses ``pydantic-settings`` for automatic env-var loading, type coercion,
and ``.env`` file support.  Validates required settings on import and fails
fast if critical vars are missing outside of tests.
"""

VERSION = "0.1.0"

import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------------------------------------------------------------------------
# Required var names, checked after instantiation (not during), so tests
# that leave them blank still work.
# ---------------------------------------------------------------------------
_REQUIRED_VARS: list[str] = [
    "JWT_SECRET",
]


class Settings(BaseSettings):
    """Application settings, sourced from environment / ``.env`` file.

    Required vars (must be set in production, may be blank in test):
      JWT_SECRET

    ``DATABASE_URL`` is optional: when blank, master configuration lives
    only in memory and every repository call is skipped.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- required in production (default empty so tests don't fail) --
    JWT_SECRET: str = ""

    # -- optional with sensible defaults --
    DATABASE_URL: str = ""
    FRONTEND_URL: str = "http://localhost:5174"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    # Plain-text rotating log file; blank disables it.
    LOG_FILE: str = ""
    ACCESS_LOG_ENABLED: bool = True

    # Mutating routes need an operator bearer token when enabled.
    REQUIRE_AUTH: bool = True

    # Per-operator rebuild throttle (sliding window).
    REBUILD_RATE_LIMIT: int = Field(default=30, ge=1)
    REBUILD_RATE_WINDOW_SECONDS: int = Field(default=60, ge=1)


settings = Settings()


# Validate at import time, but only when NOT running under pytest.
if "pytest" not in sys.modules:
    _missing = [v for v in _REQUIRED_VARS if not getattr(settings, v)]
    if _missing:
        print(
            f"[config] FATAL: missing required environment variables: "
            f"{', '.join(_missing)}",
            file=sys.stderr,
        )
        sys.exit(1)
