"""
Review Aggregation Service.

Reshapes the output of the review procedures into typed, null-safe view
models and submits grading batches.

Every method returns a ``ServiceResult``.  ``success=True`` with an empty
list means "no reviews yet"; ``success=False`` means the fetch failed,
and the failure has already been logged here.  Calls run through a
client scoped to the caller's access token so row-level security decides
what the caller may see.
"""

from __future__ import annotations

from typing import Any, Optional

from supermock.database import SupabaseManager
from supermock.errors import NotFoundError, SuperMockError, UpstreamError
from supermock.logger import StructuredLogger
from supermock.models.enums import ModuleType
from supermock.models.review_models import (
    AnswerDetail,
    AttemptDetail,
    AttemptReview,
    GradeAnswerDetail,
    GradeModuleDetail,
    GradingDecision,
    PreviewModuleDetail,
    ReviewModuleEntry,
    SaveGradesResult,
)
from supermock.models.service_models import ServiceResult
from supermock.repositories.review_repository import ReviewRepository
from supermock.services.base_service import BaseService
from supermock.services.grading_session import GradingSession
from supermock.utils.audit import log_audit_event

NO_MODULES_MESSAGE: str = "No modules found for this attempt"
NO_MODULE_DATA_MESSAGE: str = "No module data found"


# ---------------------------------------------------------------------------
# Row -> view model mapping
# ---------------------------------------------------------------------------

def _answer(row: dict[str, Any]) -> AnswerDetail:
    return AnswerDetail(
        id=str(row.get("id")),
        question_ref=row.get("question_ref") or "",
        student_response=row.get("student_response"),
        marks_awarded=row.get("marks_awarded"),
        is_correct=row.get("is_correct"),
        reference_id=row.get("reference_id"),
    )


def _grade_answer(row: dict[str, Any]) -> GradeAnswerDetail:
    return GradeAnswerDetail(
        **_answer(row).model_dump(),
        correct_answer=row.get("correct_answer") or "N/A",
    )


def review_from_row(item: dict[str, Any]) -> AttemptReview:
    """Build an ``AttemptReview`` from one ``get_center_reviews`` element.

    The listing never carries individual answers.
    """
    return AttemptReview(
        attempt_id=str(item.get("attemptId")),
        student_id=item.get("studentId"),
        student_name=item.get("studentName") or "Student",
        student_email=item.get("studentEmail") or "",
        status=item.get("status") or "unknown",
        created_at=item.get("createdAt"),
        modules=[
            ReviewModuleEntry(
                attempt_module_id=str(mod.get("attemptModuleId")),
                module_type=mod.get("moduleType") or "unknown",
                heading=mod.get("heading"),
                status=mod.get("status"),
                score=mod.get("score"),
                band=mod.get("band"),
                time_spent_seconds=mod.get("timeSpentSeconds"),
                completed_at=mod.get("completedAt"),
                answers=[],
            )
            for mod in item.get("modules") or []
        ],
    )


def attempt_detail_from_payload(data: dict[str, Any]) -> AttemptDetail:
    return AttemptDetail(
        attempt_id=str(data.get("attemptId")),
        student_id=data.get("studentId") or None,
        student_name=data.get("studentName") or "Unknown Student",
        student_email=data.get("studentEmail") or "",
        paper_title=data.get("paperTitle") or "Untitled Paper",
        status=data.get("status") or "unknown",
        created_at=data.get("createdAt") or None,
        modules=[
            PreviewModuleDetail(
                attempt_module_id=str(mod.get("attemptModuleId")),
                module_type=mod.get("moduleType") or "unknown",
                heading=mod.get("heading"),
                status=mod.get("status"),
                score_obtained=mod.get("score_obtained"),
                band_score=mod.get("band_score"),
                time_spent_seconds=mod.get("time_spent_seconds"),
                completed_at=mod.get("completed_at"),
                answers=[_answer(ans) for ans in mod.get("answers") or []],
            )
            for mod in data.get("modules") or []
        ],
    )


def grade_module_from_payload(data: dict[str, Any]) -> GradeModuleDetail:
    return GradeModuleDetail(
        attempt_module_id=str(data.get("attemptModuleId")),
        module_type=data.get("moduleType") or "unknown",
        heading=data.get("heading") or None,
        status=data.get("status"),
        feedback=data.get("feedback"),
        band_score=data.get("band_score"),
        score_obtained=data.get("score_obtained"),
        answers=[_grade_answer(ans) for ans in data.get("answers") or []],
        student_name=data.get("studentName") or "Unknown Student",
        student_email=data.get("studentEmail") or "",
        paper_title=data.get("paperTitle") or "Untitled Paper",
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ReviewService(BaseService):
    """Review listing, attempt preview, grading data and grade submission."""

    def __init__(
        self,
        db: SupabaseManager,
        repo: ReviewRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._db = db
        self._repo = repo

    def fetch_reviews(
        self, access_token: str, center_id: str
    ) -> ServiceResult[list[AttemptReview]]:
        try:
            rows = self._repo.get_center_reviews(self._db.for_user(access_token), center_id)
            return ServiceResult(success=True, data=[review_from_row(row) for row in rows])
        except Exception as exc:
            self._logger.error("Error loading reviews for %s: %s", center_id, exc)
            return ServiceResult(
                success=False, error="Failed to load reviews", status_code=500
            )

    def fetch_attempt_details(
        self, access_token: str, attempt_id: str
    ) -> ServiceResult[AttemptDetail]:
        try:
            data = self._repo.get_attempt_preview(self._db.for_user(access_token), attempt_id)
        except Exception as exc:
            self._logger.error("Error loading attempt %s: %s", attempt_id, exc)
            return ServiceResult(
                success=False, error="Failed to load attempt details", status_code=500
            )

        if not isinstance(data, dict) or not data or data.get("error"):
            return ServiceResult.from_error(NotFoundError(NO_MODULES_MESSAGE))
        try:
            detail = attempt_detail_from_payload(data)
        except Exception as exc:
            self._logger.error("Malformed attempt payload for %s: %s", attempt_id, exc)
            return ServiceResult(
                success=False, error="Failed to load attempt details", status_code=500
            )
        return ServiceResult(success=True, data=detail)

    def fetch_grade_module_details(
        self, access_token: str, attempt_module_id: str
    ) -> ServiceResult[GradeModuleDetail]:
        try:
            return ServiceResult(
                success=True,
                data=self._load_grade_module(access_token, attempt_module_id),
            )
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)

    def save_grades(
        self,
        access_token: str,
        module_id: str,
        session: GradingSession,
        answers: list[AnswerDetail],
        feedback: Optional[str],
    ) -> ServiceResult[SaveGradesResult]:
        """Submit *session*'s decisions for *answers* as one batch.

        Nothing is sent unless the decision set is complete.
        """
        try:
            payload = session.build_payload(answers)
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)

        try:
            data = self._repo.save_grades(
                self._db.for_user(access_token), module_id, payload, feedback
            )
        except Exception as exc:
            self._logger.error("Error saving grades for %s: %s", module_id, exc)
            return ServiceResult(
                success=False, error="Failed to save grades", status_code=500
            )

        if not data.get("success"):
            message = data.get("error") or "Failed to save grades"
            self._logger.error("save_grades rejected for %s: %s", module_id, message)
            return ServiceResult.from_error(UpstreamError(str(message)))

        result = SaveGradesResult(**data)
        if session.module_type == ModuleType.WRITING and result.band_score is None:
            result = result.model_copy(update={"band_score": session.writing_band(answers)})
        return ServiceResult(success=True, data=result)

    def submit_grades(
        self,
        access_token: str,
        actor_id: str,
        attempt_module_id: str,
        decisions: list[GradingDecision],
        feedback: Optional[str],
    ) -> ServiceResult[SaveGradesResult]:
        """Load the module, apply *decisions* over existing grades, and save.

        Existing graded answers seed the session, so a caller only needs
        to send the answers it changed as long as the rest were graded
        before.
        """
        try:
            module = self._load_grade_module(access_token, attempt_module_id)
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)

        answers: list[AnswerDetail] = list(module.answers)
        refs = {answer.id: answer.question_ref for answer in answers}

        session = GradingSession(module_type=module.module_type)
        session.load_existing(answers)
        for decision in decisions:
            if not decision.question_ref and decision.answer_id in refs:
                decision = decision.model_copy(
                    update={"question_ref": refs[decision.answer_id]}
                )
            session.set_decision(decision)

        outcome = self.save_grades(
            access_token, attempt_module_id, session, answers, feedback
        )
        if outcome.success:
            log_audit_event(
                self._logger,
                action="SAVE_GRADES",
                entity_type="AttemptModule",
                entity_id=attempt_module_id,
                user_id=actor_id,
                details={
                    "module_type": module.module_type,
                    "answers": len(answers),
                    "total_score": session.total_score(answers),
                },
            )
        return outcome

    def delete_attempt(
        self, access_token: str, actor_id: str, attempt_id: str
    ) -> ServiceResult[bool]:
        try:
            self._repo.delete_attempt(self._db.for_user(access_token), attempt_id)
        except Exception as exc:
            self._logger.error("Error deleting attempt %s: %s", attempt_id, exc)
            return ServiceResult(
                success=False, error="Failed to delete attempt", status_code=500
            )
        log_audit_event(
            self._logger,
            action="DELETE_ATTEMPT",
            entity_type="MockAttempt",
            entity_id=attempt_id,
            user_id=actor_id,
        )
        return ServiceResult(success=True, data=True)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _load_grade_module(
        self, access_token: str, attempt_module_id: str
    ) -> GradeModuleDetail:
        """Fetch and map grading data.

        Raises:
            NotFoundError: The procedure returned nothing or an ``error``.
            UpstreamError: The procedure call itself failed.
        """
        try:
            data = self._repo.get_grading_data(
                self._db.for_user(access_token), attempt_module_id
            )
        except Exception as exc:
            self._logger.error(
                "Error loading module details for %s: %s", attempt_module_id, exc
            )
            raise UpstreamError("Failed to load module details", original_error=exc)

        if not isinstance(data, dict) or not data or data.get("error"):
            message = data.get("error") if isinstance(data, dict) else None
            raise NotFoundError(str(message or NO_MODULE_DATA_MESSAGE))
        try:
            return grade_module_from_payload(data)
        except Exception as exc:
            self._logger.error(
                "Malformed module payload for %s: %s", attempt_module_id, exc
            )
            raise UpstreamError("Failed to load module details", original_error=exc)
