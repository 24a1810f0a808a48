"""
Authentication Guard Decorator.

Provides a factory that produces a decorator for gating Flask view
functions behind a valid Supabase access token.

Usage::

    from supermock.auth import PrincipalResolver
    from supermock.jwt_auth import require_auth

    auth_guard = require_auth(resolver, cookie_name="sb-access-token")

    @bp.route("/api/centers/<center_id>/reviews")
    @auth_guard
    def list_reviews(center_id: str):
        principal = g.principal
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional, ParamSpec, TypeVar

from flask import g, jsonify, request

from supermock.auth import PrincipalResolver
from supermock.errors import AuthenticationError

P = ParamSpec("P")
R = TypeVar("R")

_BEARER_PREFIX = "Bearer "


def extract_access_token(cookie_name: str) -> Optional[str]:
    """Read the caller's token from ``Authorization`` or the session cookie.

    The header wins when both are present.
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith(_BEARER_PREFIX):
        token = auth_header[len(_BEARER_PREFIX):].strip()
        if token:
            return token
    return request.cookies.get(cookie_name) or None


def require_auth(
    resolver: PrincipalResolver,
    cookie_name: str,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Return a decorator that enforces authentication via *resolver*.

    On success the wrapped view sees ``g.principal`` and
    ``g.access_token``.  Otherwise a ``401`` JSON body is returned and the
    view is never called.

    Args:
        resolver: Injectable ``PrincipalResolver``.
        cookie_name: Name of the session cookie used as a fallback token
            source.

    Returns:
        A decorator suitable for wrapping Flask view functions.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            token = extract_access_token(cookie_name)
            try:
                principal = resolver.resolve(token)
            except AuthenticationError as exc:
                return jsonify({"error": exc.message}), exc.status_code  # type: ignore[return-value]
            g.principal = principal
            g.access_token = token
            return func(*args, **kwargs)

        return wrapper

    return decorator
