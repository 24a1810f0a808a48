"""
Caller Authentication.

Provides an injectable ``PrincipalResolver`` that turns a Supabase access
token into a :class:`~supermock.models.auth_models.Principal`.  Session
issuance and refresh stay with Supabase Auth; this service only asks
"who is holding this token?".

Usage::

    from supermock.auth import PrincipalResolver

    resolver = PrincipalResolver(db=db, logger=logger)
    principal = resolver.resolve(access_token)
"""

from __future__ import annotations

from typing import Optional

from supermock.database import SupabaseManager
from supermock.errors import AuthenticationError
from supermock.logger import StructuredLogger
from supermock.models.auth_models import Principal

UNAUTHORIZED_MESSAGE: str = "Unauthorized. Please sign in."


class PrincipalResolver:
    """Validates access tokens against Supabase Auth.

    Each call performs one ``auth.get_user`` round-trip; no principal is
    cached between requests.
    """

    def __init__(self, db: SupabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    def resolve(self, access_token: Optional[str]) -> Principal:
        """Return the principal behind *access_token*.

        Raises:
            AuthenticationError: Token missing, expired, revoked, or the
                auth service could not be reached.
        """
        if not access_token:
            raise AuthenticationError(UNAUTHORIZED_MESSAGE)

        try:
            response = self._db.public.auth.get_user(access_token)
        except Exception as exc:
            self._logger.warning("Access token rejected: %s", exc)
            raise AuthenticationError(UNAUTHORIZED_MESSAGE, original_error=exc)

        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            raise AuthenticationError(UNAUTHORIZED_MESSAGE)

        return Principal(
            id=str(user.id),
            email=(user.email or "").lower(),
            email_confirmed=bool(getattr(user, "email_confirmed_at", None)),
        )
