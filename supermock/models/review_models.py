"""
Review & Grading View Models.

Read-only shapes built from the ``get_center_reviews``,
``get_attempt_preview`` and ``get_grading_data`` procedures, plus the
grading-decision and save-result contracts of ``save_grades``.

View models use snake_case attributes in Python and serialise with
camelCase keys (``model_dump(by_alias=True)``) for the dashboard.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from supermock.utils.string_helpers import to_camel_case

__all__ = [
    "AnswerDetail",
    "AnswerGrade",
    "AttemptDetail",
    "AttemptReview",
    "GradeAnswerDetail",
    "GradeModuleDetail",
    "GradingDecision",
    "PreviewModuleDetail",
    "ReviewModuleEntry",
    "SaveGradesResult",
]


class _ViewModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel_case,
        populate_by_name=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------

class AnswerDetail(_ViewModel):
    id: str
    question_ref: str = ""
    student_response: Optional[str] = None
    marks_awarded: Optional[float] = None
    is_correct: Optional[bool] = None
    reference_id: Optional[str] = None


class GradeAnswerDetail(AnswerDetail):
    correct_answer: str = "N/A"


# ---------------------------------------------------------------------------
# Review listing
# ---------------------------------------------------------------------------

class ReviewModuleEntry(_ViewModel):
    attempt_module_id: str
    module_type: str = "unknown"
    heading: Optional[str] = None
    status: Optional[str] = None
    score: Optional[float] = None
    band: Optional[float] = None
    time_spent_seconds: Optional[int] = None
    completed_at: Optional[str] = None
    answers: list[AnswerDetail] = Field(default_factory=list)


class AttemptReview(_ViewModel):
    attempt_id: str
    student_id: Optional[str] = None
    student_name: str = "Student"
    student_email: str = ""
    status: str = "unknown"
    created_at: Optional[str] = None
    modules: list[ReviewModuleEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Attempt preview
# ---------------------------------------------------------------------------

class PreviewModuleDetail(_ViewModel):
    attempt_module_id: str
    module_type: str = "unknown"
    heading: Optional[str] = None
    status: Optional[str] = None
    score_obtained: Optional[float] = None
    band_score: Optional[float] = None
    time_spent_seconds: Optional[int] = None
    completed_at: Optional[str] = None
    answers: list[AnswerDetail] = Field(default_factory=list)


class AttemptDetail(_ViewModel):
    attempt_id: str
    student_id: Optional[str] = None
    student_name: str = "Unknown Student"
    student_email: str = ""
    paper_title: str = "Untitled Paper"
    status: str = "unknown"
    created_at: Optional[str] = None
    modules: list[PreviewModuleDetail] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Grading
# ---------------------------------------------------------------------------

class GradeModuleDetail(_ViewModel):
    attempt_module_id: str
    module_type: str = "unknown"
    heading: Optional[str] = None
    status: Optional[str] = None
    feedback: Optional[str] = None
    band_score: Optional[float] = None
    score_obtained: Optional[float] = None
    answers: list[GradeAnswerDetail] = Field(default_factory=list)
    student_name: str = "Unknown Student"
    student_email: str = ""
    paper_title: str = "Untitled Paper"


class GradingDecision(_ViewModel):
    """A pending per-answer judgment, keyed by ``answer_id``."""

    answer_id: str
    question_ref: str = ""
    is_correct: bool
    marks_awarded: float = Field(ge=0)


class AnswerGrade(BaseModel):
    """Wire shape of one entry in the ``save_grades`` batch."""

    id: str
    is_correct: bool
    marks_awarded: float


class SaveGradesResult(_ViewModel):
    success: bool
    band_score: Optional[float] = None
    total_score: Optional[float] = None
    task1_score: Optional[float] = None
    task2_score: Optional[float] = None
    module_type: Optional[str] = None
    updated_count: Optional[int] = None

    model_config = ConfigDict(extra="ignore")
