"""
Review service: listing, preview, grading data and submission.
"""
import pytest

from supermock.models.review_models import AnswerDetail, GradingDecision
from supermock.services.grading_session import GradingSession
from supermock.services.reviews import (
    attempt_detail_from_payload,
    grade_module_from_payload,
    review_from_row,
)


@pytest.fixture
def writing_module():
    return {
        "attemptModuleId": "am-1",
        "moduleType": "writing",
        "heading": "Academic Writing",
        "status": "pending",
        "studentName": "Sam",
        "answers": [
            {"id": "t1", "question_ref": "Task 1", "student_response": "...", "is_correct": None},
            {"id": "t2", "question_ref": "Task 2", "student_response": "...", "is_correct": None},
        ],
    }


class TestRowMapping:
    def test_review_defaults(self):
        review = review_from_row({"attemptId": 42, "modules": [{"attemptModuleId": 7}]})
        assert review.attempt_id == "42"
        assert review.student_name == "Student"
        assert review.status == "unknown"
        assert review.modules[0].attempt_module_id == "7"
        assert review.modules[0].module_type == "unknown"
        assert review.modules[0].answers == []

    def test_attempt_detail_defaults(self):
        detail = attempt_detail_from_payload({"attemptId": "a-1", "studentId": ""})
        assert detail.student_id is None
        assert detail.student_name == "Unknown Student"
        assert detail.paper_title == "Untitled Paper"
        assert detail.modules == []

    def test_grade_answer_correct_answer_fallback(self, writing_module):
        module = grade_module_from_payload(writing_module)
        assert module.answers[0].correct_answer == "N/A"
        assert module.answers[0].question_ref == "Task 1"

    def test_camel_case_serialisation(self):
        review = review_from_row({"attemptId": "a", "studentName": "Sam"})
        dumped = review.model_dump(by_alias=True)
        assert dumped["attemptId"] == "a"
        assert dumped["studentName"] == "Sam"


class TestFetch:
    def test_reviews_use_caller_scoped_client(self, review_service, review_repo):
        review_repo.reviews = [{"attemptId": "a1"}]
        result = review_service.fetch_reviews("tok", "center-1")
        assert result.success
        assert [r.attempt_id for r in result.data] == ["a1"]

    def test_empty_listing_is_success(self, review_service):
        result = review_service.fetch_reviews("tok", "center-1")
        assert result.success
        assert result.data == []

    def test_listing_failure(self, review_service, review_repo):
        review_repo.fail = True
        result = review_service.fetch_reviews("tok", "center-1")
        assert not result.success
        assert result.error == "Failed to load reviews"

    def test_attempt_not_found(self, review_service, review_repo):
        review_repo.preview = {"error": "not visible"}
        result = review_service.fetch_attempt_details("tok", "a1")
        assert result.status_code == 404
        assert result.error == "No modules found for this attempt"

    def test_grading_data_error_passes_through(self, review_service, review_repo):
        review_repo.grading = {"error": "Module not found"}
        result = review_service.fetch_grade_module_details("tok", "am-1")
        assert result.status_code == 404
        assert result.error == "Module not found"

    def test_grading_data_missing(self, review_service):
        result = review_service.fetch_grade_module_details("tok", "am-1")
        assert result.error == "No module data found"

    def test_malformed_attempt_payload(self, review_service, review_repo):
        review_repo.preview = {"attemptId": "a1", "modules": ["not-a-module"]}
        result = review_service.fetch_attempt_details("tok", "a1")
        assert not result.success
        assert result.status_code == 500
        assert result.error == "Failed to load attempt details"

    def test_non_object_attempt_payload(self, review_service, review_repo):
        review_repo.preview = ["a1"]
        result = review_service.fetch_attempt_details("tok", "a1")
        assert result.status_code == 404

    def test_malformed_grading_payload(self, review_service, review_repo, writing_module):
        writing_module["answers"].append("not-an-answer")
        review_repo.grading = writing_module
        result = review_service.fetch_grade_module_details("tok", "am-1")
        assert not result.success
        assert result.status_code == 500
        assert result.error == "Failed to load module details"


class TestSaveGrades:
    def test_incomplete_batch_sends_nothing(self, review_service, review_repo):
        session = GradingSession("reading")
        answers = [AnswerDetail(id="a1"), AnswerDetail(id="a2")]
        session.quick_grade("a1", True)

        result = review_service.save_grades("tok", "am-1", session, answers, None)
        assert result.status_code == 422
        assert review_repo.saved == []

    def test_writing_band_filled_in(self, review_service, review_repo):
        review_repo.save_response = {"success": True, "band_score": None, "total_score": 13}
        session = GradingSession("writing")
        answers = [AnswerDetail(id="t1", question_ref="Task 1"), AnswerDetail(id="t2", question_ref="Task 2")]
        session.set_decision(GradingDecision(answer_id="t1", is_correct=True, marks_awarded=6))
        session.set_decision(GradingDecision(answer_id="t2", is_correct=True, marks_awarded=7))

        result = review_service.save_grades("tok", "am-1", session, answers, "Good")
        assert result.success
        assert result.data.band_score == 6.5
        client, module_id, payload, feedback = review_repo.saved[0]
        assert client == ("client", "tok")
        assert module_id == "am-1"
        assert feedback == "Good"
        assert [row["id"] for row in payload] == ["t1", "t2"]

    def test_rejected_by_procedure(self, review_service, review_repo):
        review_repo.save_response = {"success": False, "error": "Not allowed"}
        session = GradingSession("reading")
        session.quick_grade("a1", True)

        result = review_service.save_grades("tok", "am-1", session, [AnswerDetail(id="a1")], None)
        assert not result.success
        assert result.error == "Not allowed"


class TestSubmitGrades:
    def test_merges_with_existing_grades(self, review_service, review_repo, writing_module):
        writing_module["answers"][0].update(is_correct=True, marks_awarded=6)
        review_repo.grading = writing_module
        review_repo.save_response = {"success": True, "band_score": 6.5}

        result = review_service.submit_grades(
            "tok", "examiner-1", "am-1",
            [GradingDecision(answer_id="t2", is_correct=True, marks_awarded=7)],
            None,
        )
        assert result.success
        payload = review_repo.saved[0][2]
        assert payload == [
            {"id": "t1", "is_correct": True, "marks_awarded": 6.0},
            {"id": "t2", "is_correct": True, "marks_awarded": 7.0},
        ]

    def test_missing_module(self, review_service):
        result = review_service.submit_grades("tok", "examiner-1", "am-x", [], None)
        assert result.status_code == 404


class TestDeleteAttempt:
    def test_delete(self, review_service, review_repo):
        result = review_service.delete_attempt("tok", "owner-1", "a1")
        assert result.success
        assert review_repo.deleted == ["a1"]

    def test_delete_failure(self, review_service, review_repo):
        review_repo.fail = True
        result = review_service.delete_attempt("tok", "owner-1", "a1")
        assert result.status_code == 500
