"""
Grading session: decision store, scoring and batch building.
"""
import pytest

from supermock.errors import ValidationError
from supermock.models.review_models import AnswerDetail, GradingDecision
from supermock.services.grading_session import GradingSession, round_half_band


def _answer(answer_id, ref="", marks=None, correct=None):
    return AnswerDetail(id=answer_id, question_ref=ref, marks_awarded=marks, is_correct=correct)


class TestRoundHalfBand:
    def test_halves_round_up(self):
        assert round_half_band(6.25) == 6.5
        assert round_half_band(6.75) == 7.0

    def test_nearest_half(self):
        assert round_half_band(6.1) == 6.0
        assert round_half_band(6.4) == 6.5
        assert round_half_band(0) == 0


class TestDecisionStore:
    def test_latest_decision_wins(self):
        session = GradingSession("reading")
        session.quick_grade("a1", True)
        session.quick_grade("a1", False)

        assert len(session) == 1
        assert session.get_decision("a1").is_correct is False
        assert session.get_decision("a1").marks_awarded == 0

    def test_clear(self):
        session = GradingSession()
        session.quick_grade("a1", True)
        session.clear_decisions()
        assert session.get_all_decisions() == []

    def test_quick_grade_marks_by_module(self):
        assert GradingSession("listening").quick_grade("a", True).marks_awarded == 1
        assert GradingSession("writing").quick_grade("a", True).marks_awarded == 9

    def test_load_existing_skips_ungraded(self):
        session = GradingSession("reading")
        session.load_existing([
            _answer("a1", marks=None, correct=True),
            _answer("a2", correct=None),
        ])
        assert session.get_decision("a1").marks_awarded == 0
        assert session.get_decision("a2") is None


class TestScoring:
    def test_total_falls_back_to_stored_marks(self):
        session = GradingSession("reading")
        answers = [_answer("a1", marks=1), _answer("a2", marks=0), _answer("a3")]
        session.quick_grade("a2", True)
        assert session.total_score(answers) == 2

    def test_writing_band_weights_task_two(self):
        session = GradingSession("writing")
        answers = [_answer("t1", ref="Task 1"), _answer("t2", ref="2")]
        session.set_decision(GradingDecision(answer_id="t1", is_correct=True, marks_awarded=5))
        session.set_decision(GradingDecision(answer_id="t2", is_correct=True, marks_awarded=6))

        assert session.task_scores(answers) == (5, 6)
        assert session.writing_band(answers) == 5.5

    def test_missing_task_counts_zero(self):
        session = GradingSession("writing")
        answers = [_answer("t2", ref="Writing Task 2", marks=9)]
        assert session.find_task(answers, 1) is None
        assert session.writing_band(answers) == 6.0


class TestBuildPayload:
    def test_complete_batch(self):
        session = GradingSession("reading")
        answers = [_answer("a1"), _answer("a2")]
        session.quick_grade("a2", False)
        session.quick_grade("a1", True)

        payload = session.build_payload(answers)
        assert [grade.id for grade in payload] == ["a1", "a2"]
        assert payload[0].marks_awarded == 1
        assert payload[1].is_correct is False

    def test_ungraded_answer_rejected(self):
        session = GradingSession("reading")
        session.quick_grade("a1", True)
        with pytest.raises(ValidationError, match="1 answer"):
            session.build_payload([_answer("a1"), _answer("a2")])

    def test_unknown_decision_rejected(self):
        session = GradingSession("reading")
        session.quick_grade("a1", True)
        session.quick_grade("ghost", True)
        with pytest.raises(ValidationError) as excinfo:
            session.build_payload([_answer("a1")])
        assert excinfo.value.status_code == 422
