"""
Student directory: listing, edits and removal by center staff.
"""
import pytest

from conftest import CENTER_ID

from supermock.models.enums import EnrollmentType, StudentStatus
from supermock.models.student import StudentProfile


@pytest.fixture
def enrolled(student_repo):
    student_repo.rows.extend([
        StudentProfile(student_id="s-1", center_id=CENTER_ID, name="Sam", email="sam@example.com"),
        StudentProfile(student_id="s-2", center_id=CENTER_ID, name="Sue"),
        StudentProfile(student_id="s-9", center_id="center-2", name="Other"),
    ])
    return student_repo


class TestStudentRowDefaults:
    def test_null_columns_take_defaults(self):
        student = StudentProfile(**{
            "student_id": 11,
            "center_id": CENTER_ID,
            "status": None,
            "enrollment_type": None,
            "tests_taken": None,
            "grade": 10,
        })
        assert student.student_id == "11"
        assert student.status == StudentStatus.ACTIVE
        assert student.enrollment_type == EnrollmentType.REGULAR
        assert student.tests_taken == 0
        assert student.grade == "10"


class TestListStudents:
    def test_member_lists_own_center_newest_first(self, student_directory_service, enrolled, examiner):
        result = student_directory_service.list_students(examiner, CENTER_ID)
        assert result.success
        assert [s.student_id for s in result.data] == ["s-2", "s-1"]

    def test_owner_may_list(self, student_directory_service, enrolled, owner):
        assert student_directory_service.list_students(owner, CENTER_ID).success

    def test_stranger_forbidden(self, student_directory_service, enrolled, stranger):
        result = student_directory_service.list_students(stranger, CENTER_ID)
        assert result.status_code == 403

    def test_listing_failure(self, student_directory_service, student_repo, owner):
        def boom(center_id):
            raise RuntimeError("db down")

        student_repo.list_by_center = boom
        result = student_directory_service.list_students(owner, CENTER_ID)
        assert result.status_code == 500
        assert result.error == "Failed to load students"


class TestUpdateStudent:
    def test_only_present_fields_change(self, student_directory_service, enrolled, examiner):
        result = student_directory_service.update_student(
            examiner, "s-1", {"phone": " 0123 ", "status": "archived"}
        )
        assert result.success
        assert result.data.phone == "0123"
        assert result.data.status == StudentStatus.ARCHIVED
        assert result.data.email == "sam@example.com"
        assert result.data.name == "Sam"

    def test_blank_optional_field_is_cleared(self, student_directory_service, enrolled, owner):
        result = student_directory_service.update_student(owner, "s-1", {"email": "  "})
        assert result.success
        assert result.data.email is None

    def test_invalid_fields_reported_together(self, student_directory_service, enrolled, owner):
        result = student_directory_service.update_student(
            owner, "s-1", {"name": "", "status": "expelled"}
        )
        assert result.status_code == 422
        assert "Full name is required." in result.error
        assert "Status must be one of" in result.error

    def test_empty_body(self, student_directory_service, enrolled, owner):
        result = student_directory_service.update_student(owner, "s-1", {})
        assert result.status_code == 422
        assert result.error == "No fields to update."

    def test_unknown_student(self, student_directory_service, enrolled, owner):
        result = student_directory_service.update_student(owner, "s-404", {"name": "X"})
        assert result.status_code == 404
        assert result.error == "Student not found"

    def test_other_center_forbidden(self, student_directory_service, enrolled, owner):
        result = student_directory_service.update_student(owner, "s-9", {"name": "X"})
        assert result.status_code == 403
        assert enrolled.get("s-9").name == "Other"

    def test_update_is_audited(self, student_directory_service, enrolled, owner, tmp_path):
        student_directory_service.update_student(owner, "s-1", {"grade": "11"})
        log_text = (tmp_path / "test.log").read_text()
        assert "AUDIT UPDATE_STUDENT StudentProfile/s-1" in log_text


class TestDeleteStudent:
    def test_member_deletes(self, student_directory_service, enrolled, examiner, tmp_path):
        result = student_directory_service.delete_student(examiner, "s-2")
        assert result.success
        assert enrolled.deleted == ["s-2"]
        assert "AUDIT DELETE_STUDENT StudentProfile/s-2" in (tmp_path / "test.log").read_text()

    def test_stranger_cannot_delete(self, student_directory_service, enrolled, stranger):
        result = student_directory_service.delete_student(stranger, "s-1")
        assert result.status_code == 403
        assert enrolled.deleted == []

    def test_unknown_student(self, student_directory_service, enrolled, owner):
        result = student_directory_service.delete_student(owner, "s-404")
        assert result.status_code == 404

    def test_delete_failure(self, student_directory_service, enrolled, owner):
        def boom(student_id):
            raise RuntimeError("db down")

        enrolled.delete = boom
        result = student_directory_service.delete_student(owner, "s-1")
        assert result.status_code == 500
        assert result.error == "Failed to delete student"
