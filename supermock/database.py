"""
Database Abstraction Layer.

Owns the Supabase clients used by the SuperMock admin service:

- **Admin client** (service-role key): bypasses row-level security.  Used
  only by the provisioning workflows for auth-admin calls and for writes
  that must happen on behalf of another user.

- **Public client** (anon key): validates caller access tokens.

- **User-scoped clients**: built per request from the caller's access
  token so that row-level security applies to review and grading RPCs.

Data access is performed through the Repository pattern.  This module only
manages the raw *clients*; it contains no query logic.

Usage (dependency injection at app startup)::

    from supermock.database import SupabaseManager
    from supermock.logger import StructuredLogger

    db = SupabaseManager(
        supabase_url=settings.SUPABASE_URL,
        anon_key=settings.SUPABASE_ANON_KEY.get_secret_value(),
        service_role_key=settings.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
        timeout_s=settings.SUPABASE_TIMEOUT_S,
        logger=StructuredLogger(name="database"),
    )
"""

from __future__ import annotations

from typing import Optional

from supabase import Client as SupabaseClient
from supabase import ClientOptions, create_client

from supermock.logger import StructuredLogger


class SupabaseManager:
    """Holds the admin and public Supabase clients.

    Fully configured at construction time via dependency injection.
    When a key is empty the corresponding client is **not** created and
    the matching property raises ``RuntimeError``; services translate that
    into a 500 so a misconfigured deployment fails loudly per request
    instead of at import time.

    Parameters
    ----------
    supabase_url:
        The Supabase project URL (e.g. ``https://xyz.supabase.co``).
    anon_key:
        Public anon key.  Used to validate access tokens and to build
        user-scoped clients.
    service_role_key:
        Privileged key.  Never exposed to callers.
    timeout_s:
        Upper bound in seconds for every PostgREST call.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    """

    def __init__(
        self,
        supabase_url: str,
        anon_key: str,
        service_role_key: str,
        timeout_s: int,
        logger: StructuredLogger,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._url: str = supabase_url
        self._anon_key: str = anon_key
        self._timeout_s: int = timeout_s

        self._admin: Optional[SupabaseClient] = self._build_client(
            service_role_key, label="admin"
        )
        self._public: Optional[SupabaseClient] = self._build_client(
            anon_key, label="public"
        )

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def admin(self) -> SupabaseClient:
        """Return the service-role client.

        Raises
        ------
        RuntimeError
            If the service-role key was not configured.
        """
        if self._admin is None:
            raise RuntimeError(
                "Supabase admin client is not initialised. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
            )
        return self._admin

    @property
    def public(self) -> SupabaseClient:
        """Return the anon-key client."""
        if self._public is None:
            raise RuntimeError(
                "Supabase public client is not initialised. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        return self._public

    @property
    def is_configured(self) -> bool:
        """``True`` when both clients are available."""
        return self._admin is not None and self._public is not None

    def for_user(self, access_token: str) -> SupabaseClient:
        """Build a client whose PostgREST calls carry *access_token*.

        A fresh client per request keeps one caller's token from leaking
        into another caller's queries.
        """
        if not self._url or not self._anon_key:
            raise RuntimeError(
                "Supabase is not configured; cannot build a user-scoped client."
            )
        client = create_client(self._url, self._anon_key, options=self._options())
        client.postgrest.auth(access_token)
        return client

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _options(self) -> ClientOptions:
        return ClientOptions(
            postgrest_client_timeout=self._timeout_s,
            auto_refresh_token=False,
            persist_session=False,
        )

    def _build_client(self, key: str, label: str) -> Optional[SupabaseClient]:
        if not self._url or not key:
            self._logger.warning(
                "Supabase %s credentials not configured; client disabled.", label
            )
            return None
        try:
            client = create_client(self._url, key, options=self._options())
            self._logger.info("Supabase %s client initialized.", label)
            return client
        except (ValueError, TypeError) as exc:
            self._logger.warning(
                "Supabase %s credential format error: %s. Client disabled.",
                label,
                exc,
            )
        except Exception as exc:
            self._logger.error(
                "Unexpected Supabase %s initialization failure: %s.",
                label,
                exc,
                exc_info=True,
            )
        return None
