"""
Grading Session.

Holds an examiner's pending per-answer decisions for one attempt module
until they are submitted as a single ``save_grades`` batch.

Decisions are keyed by answer id; setting a decision for the same answer
replaces the earlier one.  A batch is only built when every visible
answer has a decision and no decision points at an unknown answer.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional

from supermock.errors import ValidationError
from supermock.models.enums import ModuleType
from supermock.models.review_models import AnswerDetail, AnswerGrade, GradingDecision

# Maximum marks for a single answer, by module type.
WRITING_MAX_MARKS: float = 9.0
OBJECTIVE_MAX_MARKS: float = 1.0

_TASK_MARKERS: dict[int, tuple[str, str]] = {
    1: ("task 1", "1"),
    2: ("task 2", "2"),
}


def round_half_band(value: float) -> float:
    """Round to the nearest 0.5, halves upward (``6.25 -> 6.5``)."""
    return math.floor(value * 2 + 0.5) / 2


class GradingSession:
    """In-memory decision store for one attempt module."""

    def __init__(self, module_type: str = "unknown") -> None:
        self.module_type: str = module_type
        self._decisions: dict[str, GradingDecision] = {}

    # ------------------------------------------------------------------
    # Decision store
    # ------------------------------------------------------------------

    def set_decision(self, decision: GradingDecision) -> None:
        self._decisions[decision.answer_id] = decision

    def get_decision(self, answer_id: str) -> Optional[GradingDecision]:
        return self._decisions.get(answer_id)

    def clear_decisions(self) -> None:
        self._decisions.clear()

    def get_all_decisions(self) -> list[GradingDecision]:
        """Snapshot of every decision, in insertion order."""
        return list(self._decisions.values())

    def __len__(self) -> int:
        return len(self._decisions)

    # ------------------------------------------------------------------
    # Grading helpers
    # ------------------------------------------------------------------

    @property
    def max_marks(self) -> float:
        if self.module_type == ModuleType.WRITING:
            return WRITING_MAX_MARKS
        return OBJECTIVE_MAX_MARKS

    def load_existing(self, answers: Iterable[AnswerDetail]) -> None:
        """Seed decisions from answers that were already graded.

        Answers whose ``is_correct`` is ``None`` are left ungraded;
        missing marks count as ``0``.
        """
        for answer in answers:
            if answer.is_correct is None:
                continue
            self.set_decision(GradingDecision(
                answer_id=answer.id,
                question_ref=answer.question_ref,
                is_correct=answer.is_correct,
                marks_awarded=answer.marks_awarded or 0,
            ))

    def quick_grade(self, answer_id: str, is_correct: bool, question_ref: str = "") -> GradingDecision:
        """Mark an answer right (full marks) or wrong (zero)."""
        decision = GradingDecision(
            answer_id=answer_id,
            question_ref=question_ref,
            is_correct=is_correct,
            marks_awarded=self.max_marks if is_correct else 0,
        )
        self.set_decision(decision)
        return decision

    def _marks_for(self, answer: AnswerDetail) -> float:
        decision = self._decisions.get(answer.id)
        if decision is not None:
            return decision.marks_awarded
        return answer.marks_awarded or 0

    def total_score(self, answers: Iterable[AnswerDetail]) -> float:
        """Sum of decided marks, falling back to stored marks per answer."""
        return sum(self._marks_for(answer) for answer in answers)

    @staticmethod
    def find_task(answers: Iterable[AnswerDetail], task: int) -> Optional[AnswerDetail]:
        """First answer whose ``question_ref`` names writing task *task*."""
        phrase, bare = _TASK_MARKERS[task]
        for answer in answers:
            ref = answer.question_ref or ""
            if phrase in ref.lower() or ref == bare:
                return answer
        return None

    def task_scores(self, answers: list[AnswerDetail]) -> tuple[float, float]:
        task1 = self.find_task(answers, 1)
        task2 = self.find_task(answers, 2)
        return (
            self._marks_for(task1) if task1 else 0,
            self._marks_for(task2) if task2 else 0,
        )

    def writing_band(self, answers: list[AnswerDetail]) -> float:
        """Weighted writing band: ``(task1 + 2 * task2) / 3`` to the nearest 0.5."""
        task1, task2 = self.task_scores(answers)
        return round_half_band((task1 + 2 * task2) / 3)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def build_payload(self, answers: list[AnswerDetail]) -> list[AnswerGrade]:
        """Serialise decisions for ``save_grades``.

        Raises:
            ValidationError: An answer lacks a decision, or a decision
                refers to an answer that is not in *answers*.
        """
        visible = {answer.id for answer in answers}
        errors: list[str] = []

        ungraded = [answer.id for answer in answers if answer.id not in self._decisions]
        if ungraded:
            errors.append(f"{len(ungraded)} answer(s) have not been graded.")

        unknown = [answer_id for answer_id in self._decisions if answer_id not in visible]
        if unknown:
            errors.append(
                f"{len(unknown)} decision(s) refer to answers outside this module."
            )

        if errors:
            raise ValidationError(errors)

        return [
            AnswerGrade(
                id=answer.id,
                is_correct=self._decisions[answer.id].is_correct,
                marks_awarded=self._decisions[answer.id].marks_awarded,
            )
            for answer in answers
        ]
