"""
Application Configuration.

Settings for the SuperMock admin API, read from the environment and an
optional ``.env`` file.  Secrets are ``SecretStr`` and never logged.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field, SecretStr, model_validator


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")
    SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("")
    SUPABASE_TIMEOUT_S: int = 10

    # --- Browser-facing keys ---
    TURNSTILE_SITE_KEY: str = ""
    SESSION_COOKIE_NAME: str = "sb-access-token"

    # --- Provisioning guards ---
    MAX_PAYLOAD_BYTES: int = 8192
    RATE_LIMIT_MAX_REQUESTS: int = 20
    RATE_LIMIT_WINDOW_S: float = 60.0

    # Orphan auth users (no profile row) are only linked to a new
    # membership when their email is confirmed, unless this is enabled.
    ALLOW_UNCONFIRMED_ORPHAN_LINK: bool = False

    # --- HTTP server ---
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "supermock.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing,
        so operators get a log line instead of a confusing 500 on the
        first provisioning request.
        """
        _log = logging.getLogger("supermock.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.SUPABASE_URL:
            _log.warning(
                "SUPABASE_URL is empty. Every remote call will fail with 500."
            )

        if not self.SUPABASE_SERVICE_ROLE_KEY.get_secret_value():
            _log.warning(
                "SUPABASE_SERVICE_ROLE_KEY is empty. Member and student "
                "provisioning are disabled."
            )

        return self

    @property
    def log_level(self) -> int:
        """Numeric ``logging`` level for ``LOG_LEVEL`` (INFO when unknown)."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Process-wide ``AppConfig``, built once on first use.

    Check-lock-check: request threads that arrive after startup never
    touch the lock.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
