"""
SuperMock API Routes
====================

All API route blueprints for the admin service.

Usage:
    from supermock.routes import register_routes
    register_routes(app, services, config)
"""

from __future__ import annotations

from flask import Flask

from supermock.config import AppConfig
from supermock.jwt_auth import require_auth
from supermock.routes.center_routes import create_center_blueprint
from supermock.routes.provisioning_routes import create_provisioning_blueprint
from supermock.routes.review_routes import create_review_blueprint
from supermock.routes.student_routes import create_student_blueprint
from supermock.services import ServiceContainer


def register_routes(app: Flask, services: ServiceContainer, config: AppConfig) -> None:
    """Register all route blueprints with the Flask app."""
    auth_guard = require_auth(services["resolver"], config.SESSION_COOKIE_NAME)

    app.register_blueprint(create_provisioning_blueprint(
        services["member_provisioning_service"],
        services["student_provisioning_service"],
        config,
    ))
    app.register_blueprint(create_review_blueprint(services["review_service"], auth_guard))
    app.register_blueprint(create_center_blueprint(services["center_access_service"], auth_guard))
    app.register_blueprint(
        create_student_blueprint(services["student_directory_service"], auth_guard)
    )


__all__ = [
    "create_center_blueprint",
    "create_provisioning_blueprint",
    "create_review_blueprint",
    "create_student_blueprint",
    "register_routes",
]
