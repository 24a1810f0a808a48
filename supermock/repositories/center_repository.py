"""
Center Repository.

Reads and writes the tenancy tables: ``centers`` (ownership),
``center_members`` (staff links) and ``exchange_codes`` (staff invites).
Also wraps the ``verify_and_join_center`` RPC, which must run under the
joining user's own token.
"""

from __future__ import annotations

from typing import Any, Optional

from supabase import Client as SupabaseClient

from supermock.errors import DuplicateRecordError
from supermock.models.user import Membership, StaffInvite
from supermock.repositories.base_repository import BaseRepository


class CenterRepository(BaseRepository):
    """Data access for center ownership, memberships and invites."""

    TABLE = "center_members"
    CENTERS_TABLE = "centers"
    INVITES_TABLE = "exchange_codes"

    # ------------------------------------------------------------------
    # Ownership / membership checks
    # ------------------------------------------------------------------

    def is_owner(self, center_id: str, user_id: str) -> bool:
        """``True`` when *user_id* owns *center_id*."""
        response = (
            self.supabase.table(self.CENTERS_TABLE)
            .select("center_id")
            .eq("center_id", center_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return self._first(response) is not None

    def get_owner_id(self, center_id: str) -> Optional[str]:
        response = (
            self.supabase.table(self.CENTERS_TABLE)
            .select("user_id")
            .eq("center_id", center_id)
            .limit(1)
            .execute()
        )
        row = self._first(response)
        return str(row["user_id"]) if row and row.get("user_id") else None

    def get_membership(self, center_id: str, user_id: str) -> Optional[Membership]:
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .eq("center_id", center_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        row = self._first(response)
        return Membership(**row) if row else None

    def is_member(self, center_id: str, user_id: str) -> bool:
        return self.get_membership(center_id, user_id) is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_membership(self, center_id: str, user_id: str) -> Membership:
        """Link *user_id* to *center_id*.

        Raises:
            DuplicateRecordError: A concurrent request already linked them.
        """
        try:
            response = (
                self.supabase.table(self.TABLE)
                .insert({"center_id": center_id, "user_id": user_id})
                .execute()
            )
        except Exception as exc:
            if self._is_unique_violation(exc):
                raise DuplicateRecordError(self.TABLE, original_error=exc) from exc
            raise
        row = self._first(response)
        return Membership(**row) if row else Membership(center_id=center_id, user_id=user_id)

    def upsert_invite(self, invite: StaffInvite) -> StaffInvite:
        """Create or replace the pending invite for ``invite.email``."""
        (
            self.supabase.table(self.INVITES_TABLE)
            .upsert(invite.model_dump(mode="json"), on_conflict="email")
            .execute()
        )
        return invite

    def delete_membership(self, center_id: str, user_id: str) -> None:
        """Unlink *user_id* from *center_id*.  The ``users`` row is kept."""
        (
            self.supabase.table(self.TABLE)
            .delete()
            .eq("center_id", center_id)
            .eq("user_id", user_id)
            .execute()
        )
        self._logger.info("Removed member %s from center %s", user_id, center_id)

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def list_memberships(self, center_id: str) -> list[dict[str, Any]]:
        """Membership rows joined with their ``users`` profile, newest first.

        The joined profile is under the ``users`` key and may be ``None``.
        """
        response = (
            self.supabase.table(self.TABLE)
            .select(
                "membership_id, center_id, user_id, invited_at, "
                "users (user_id, email, role, full_name, is_active, created_at, updated_at)"
            )
            .eq("center_id", center_id)
            .order("invited_at", desc=True)
            .execute()
        )
        return list(response.data or [])

    # ------------------------------------------------------------------
    # Passcode join
    # ------------------------------------------------------------------

    def verify_and_join(self, client: SupabaseClient, passcode_hash: str) -> dict[str, Any]:
        """Call ``verify_and_join_center`` as the joining user.

        Returns the procedure's JSON payload (``success``, ``error``,
        ``center_slug``).
        """
        response = client.rpc(
            "verify_and_join_center", {"p_passcode_hash": passcode_hash}
        ).execute()
        data = response.data
        if isinstance(data, list):
            data = data[0] if data else {}
        return dict(data or {})
