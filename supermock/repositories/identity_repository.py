"""
Identity Repository.

Wraps the Supabase Auth admin API and the ``admin_get_auth_user_by_email``
RPC.  Auth accounts are created pre-verified because staff and students are
provisioned by an owner, not through self-registration.
"""

from __future__ import annotations

from typing import Optional

from supermock.errors import DuplicateIdentityError
from supermock.models.auth_models import AuthAccount
from supermock.repositories.base_repository import BaseRepository

# Fragments of the auth-admin error text that mean "email taken".
_DUPLICATE_MARKERS: tuple[str, ...] = ("already", "registered", "exists")


class IdentityRepository(BaseRepository):
    """Data access for ``auth.users`` via the admin API."""

    def create_user(
        self,
        email: str,
        password: str,
        user_metadata: dict[str, str],
    ) -> str:
        """Create a pre-verified auth account and return its id.

        Raises:
            DuplicateIdentityError: The email is already registered.
            Exception: Any other auth-admin failure is re-raised as-is.
        """
        try:
            response = self.supabase.auth.admin.create_user({
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": user_metadata,
            })
        except Exception as exc:
            message = str(getattr(exc, "message", "") or exc).lower()
            if any(marker in message for marker in _DUPLICATE_MARKERS):
                raise DuplicateIdentityError(email, original_error=exc) from exc
            raise

        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            raise RuntimeError("Auth admin returned no user for create_user.")
        return str(user.id)

    def delete_user(self, user_id: str) -> None:
        """Hard-delete an auth account."""
        self.supabase.auth.admin.delete_user(user_id)
        self._logger.info("Deleted auth user %s", user_id)

    def find_by_email(self, email: str) -> Optional[AuthAccount]:
        """Look up an auth account by email through the privileged RPC.

        Returns ``None`` when no row matches.  RPC failures propagate.
        """
        response = self.supabase.rpc(
            "admin_get_auth_user_by_email", {"p_email": email}
        ).execute()
        rows = response.data or []
        if isinstance(rows, dict):
            rows = [rows]
        if not rows or not rows[0].get("id"):
            return None
        return AuthAccount(**rows[0])
