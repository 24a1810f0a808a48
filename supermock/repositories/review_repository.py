"""
Review Repository.

Wraps the review and grading procedures.  Every method takes the
caller's user-scoped client so row-level security decides which
attempts the caller can see or grade.
"""

from __future__ import annotations

from typing import Any, Optional

from supabase import Client as SupabaseClient

from supermock.models.review_models import AnswerGrade
from supermock.repositories.base_repository import BaseRepository

JsonPayload = Any


class ReviewRepository(BaseRepository):
    """Data access for attempt reviews and grade submission."""

    TABLE = "mock_attempts"

    @staticmethod
    def _call(client: SupabaseClient, name: str, params: dict[str, Any]) -> JsonPayload:
        return client.rpc(name, params).execute().data

    def get_center_reviews(self, client: SupabaseClient, center_id: str) -> list[dict[str, Any]]:
        data = self._call(client, "get_center_reviews", {"p_center_id": center_id})
        return list(data or [])

    def get_attempt_preview(self, client: SupabaseClient, attempt_id: str) -> Optional[dict[str, Any]]:
        data = self._call(client, "get_attempt_preview", {"p_attempt_id": attempt_id})
        return data or None

    def get_grading_data(
        self, client: SupabaseClient, attempt_module_id: str
    ) -> Optional[dict[str, Any]]:
        data = self._call(
            client, "get_grading_data", {"p_attempt_module_id": attempt_module_id}
        )
        return data or None

    def save_grades(
        self,
        client: SupabaseClient,
        module_id: str,
        answers: list[AnswerGrade],
        feedback: Optional[str],
    ) -> dict[str, Any]:
        """Submit one batch of grades; returns the procedure's payload."""
        data = self._call(
            client,
            "save_grades",
            {
                "p_module_id": module_id,
                "p_answers": [answer.model_dump() for answer in answers],
                "p_feedback": feedback,
            },
        )
        return dict(data or {})

    def delete_attempt(self, client: SupabaseClient, attempt_id: str) -> None:
        client.table(self.TABLE).delete().eq("id", attempt_id).execute()
