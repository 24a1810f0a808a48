"""
SuperMock Admin API Entry Point.

Bootstraps the dependency graph via constructor injection and serves the
Flask app.  Every subsystem is wired here; there are no module-level
globals beyond the config singleton.

Usage::

    python main.py
"""

from __future__ import annotations

import sys
import traceback

from flask import Flask

from supermock.config import get_config
from supermock.database import SupabaseManager
from supermock.logger import StructuredLogger, get_logger
from supermock.server import create_app
from supermock.services import create_services


def build_app() -> Flask:
    """Wire configuration, clients and services into a Flask app."""
    logger: StructuredLogger = get_logger("supermock.main")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()
    logger.info("Configuration loaded (log level %s).", config.LOG_LEVEL)

    # ------------------------------------------------------------------
    # 2. Supabase clients (admin + public)
    # ------------------------------------------------------------------
    db = SupabaseManager(
        supabase_url=config.SUPABASE_URL,
        anon_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        service_role_key=config.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
        timeout_s=config.SUPABASE_TIMEOUT_S,
        logger=StructuredLogger(name="supermock.database"),
    )
    logger.info("Supabase clients configured for %s.", config.SUPABASE_URL)

    # ------------------------------------------------------------------
    # 3. Service Container (repositories + services, single composition root)
    # ------------------------------------------------------------------
    services = create_services(db=db, config=config)
    logger.info("Service container wired: %s.", ", ".join(sorted(services)))

    # ------------------------------------------------------------------
    # 4. HTTP layer
    # ------------------------------------------------------------------
    return create_app(config=config, services=services, logger=get_logger("supermock.http"))


def main() -> None:
    """Application entry point: build the app and serve it."""
    logger = get_logger("supermock.main")
    logger.info("Starting SuperMock admin API...")
    config = get_config()
    app = build_app()
    try:
        app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
    finally:
        logger.info("SuperMock admin API shut down.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")
        sys.exit(1)
