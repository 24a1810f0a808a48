"""
Student Repository.

Handles ``student_profiles`` rows.  A student's ``student_id`` is the id
of the auth account created for them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from supermock.errors import DuplicateRecordError
from supermock.models.student import StudentProfile
from supermock.repositories.base_repository import BaseRepository


class StudentRepository(BaseRepository):
    """Data access layer for ``StudentProfile`` entities."""

    TABLE = "student_profiles"

    def insert(self, profile: StudentProfile) -> StudentProfile:
        """Insert a new student profile and return the stored row.

        Raises:
            DuplicateRecordError: The student is already enrolled.
        """
        payload = profile.model_dump(
            mode="json",
            exclude={"grade", "enrolled_at", "updated_at"},
        )
        try:
            response = self.supabase.table(self.TABLE).insert(payload).execute()
        except Exception as exc:
            if self._is_unique_violation(exc):
                raise DuplicateRecordError(self.TABLE, original_error=exc) from exc
            raise
        row = self._first(response)
        return StudentProfile(**row) if row else profile

    def list_by_center(self, center_id: str) -> list[StudentProfile]:
        """Students enrolled in *center_id*, most recent enrolment first."""
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .eq("center_id", center_id)
            .order("enrolled_at", desc=True)
            .execute()
        )
        return [StudentProfile(**row) for row in response.data or []]

    def get(self, student_id: str) -> Optional[StudentProfile]:
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .eq("student_id", student_id)
            .limit(1)
            .execute()
        )
        row = self._first(response)
        return StudentProfile(**row) if row else None

    def update(self, student_id: str, fields: dict[str, Any]) -> Optional[StudentProfile]:
        """Apply *fields* and stamp ``updated_at``; ``None`` when no row matched."""
        payload = {**fields, "updated_at": datetime.now(timezone.utc).isoformat()}
        response = (
            self.supabase.table(self.TABLE)
            .update(payload)
            .eq("student_id", student_id)
            .execute()
        )
        row = self._first(response)
        return StudentProfile(**row) if row else None

    def delete(self, student_id: str) -> None:
        """Remove the profile row.  The auth account is left in place."""
        self.supabase.table(self.TABLE).delete().eq("student_id", student_id).execute()
        self._logger.info("Deleted student_profiles row %s", student_id)
