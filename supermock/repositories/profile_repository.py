"""
Profile Repository.

Handles ``public.users`` rows, the application profile that sits beside
each staff auth account.
"""

from __future__ import annotations

from typing import Any, Optional

from supermock.models.user import UserProfile
from supermock.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository):
    """Data access layer for ``UserProfile`` entities."""

    TABLE = "users"

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        """Fetch a profile by (normalised) email address."""
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .eq("email", email.strip().lower())
            .limit(1)
            .execute()
        )
        row = self._first(response)
        return UserProfile(**row) if row else None

    def get_by_id(self, user_id: str) -> Optional[UserProfile]:
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        row = self._first(response)
        return UserProfile(**row) if row else None

    def upsert(self, profile: UserProfile) -> UserProfile:
        """Insert or update the profile keyed by ``user_id``.

        A sign-up trigger may already have created the row; the upsert
        turns that case into an update.
        """
        payload = {
            "user_id": profile.user_id,
            "email": profile.email,
            "full_name": profile.full_name,
            "role": profile.role,
            "is_active": profile.is_active,
        }
        response = (
            self.supabase.table(self.TABLE)
            .upsert(payload, on_conflict="user_id")
            .execute()
        )
        row = self._first(response)
        return UserProfile(**row) if row else profile

    def delete(self, user_id: str) -> None:
        self.supabase.table(self.TABLE).delete().eq("user_id", user_id).execute()
        self._logger.info("Deleted users row %s", user_id)

    def update(self, user_id: str, fields: dict[str, Any]) -> Optional[UserProfile]:
        """Apply *fields* to the profile; ``None`` when no row matched."""
        response = (
            self.supabase.table(self.TABLE)
            .update(fields)
            .eq("user_id", user_id)
            .execute()
        )
        row = self._first(response)
        return UserProfile(**row) if row else None
