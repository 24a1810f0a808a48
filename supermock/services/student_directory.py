"""
Student Directory Service.

Lists, edits and removes enrolled students.  Center owners and members
manage the students of their own center; the center of an existing
student is taken from its stored row, never from the request.
"""

from __future__ import annotations

from typing import Any

from supermock.errors import AuthorizationError, NotFoundError, SuperMockError
from supermock.logger import StructuredLogger
from supermock.models.auth_models import Principal
from supermock.models.service_models import ServiceResult
from supermock.models.student import StudentProfile
from supermock.repositories.center_repository import CenterRepository
from supermock.repositories.student_repository import StudentRepository
from supermock.services.base_service import BaseService
from supermock.services.student_provisioning import NO_ACCESS_MESSAGE
from supermock.services.validation import validate_student_update
from supermock.utils.audit import log_audit_event

STUDENT_NOT_FOUND_MESSAGE: str = "Student not found"


class StudentDirectoryService(BaseService):
    """Student listing and maintenance for center staff."""

    def __init__(
        self,
        center_repo: CenterRepository,
        student_repo: StudentRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._center_repo = center_repo
        self._student_repo = student_repo

    def list_students(
        self, principal: Principal, center_id: str
    ) -> ServiceResult[list[StudentProfile]]:
        try:
            self._authorize(principal, center_id)
            students = self._student_repo.list_by_center(center_id)
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)
        except Exception as exc:
            self._logger.error("Error fetching students for %s: %s", center_id, exc)
            return ServiceResult(
                success=False, error="Failed to load students", status_code=500
            )
        return ServiceResult(success=True, data=students)

    def update_student(
        self,
        principal: Principal,
        student_id: str,
        body: dict[str, Any],
    ) -> ServiceResult[StudentProfile]:
        """Apply the fields present in *body* to the student's profile."""
        try:
            fields = validate_student_update(body)
            student = self._require_student(principal, student_id)
            updated = self._student_repo.update(student_id, fields)
            if updated is None:
                raise NotFoundError(STUDENT_NOT_FOUND_MESSAGE)
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)
        except Exception as exc:
            self._logger.error("Error updating student %s: %s", student_id, exc)
            return ServiceResult(
                success=False, error="Failed to update student", status_code=500
            )

        log_audit_event(
            self._logger,
            action="UPDATE_STUDENT",
            entity_type="StudentProfile",
            entity_id=student_id,
            user_id=principal.id,
            details={"center_id": student.center_id, "fields": ",".join(sorted(fields))},
        )
        return ServiceResult(success=True, data=updated)

    def delete_student(self, principal: Principal, student_id: str) -> ServiceResult[None]:
        """Remove the student's profile row.  The auth account is kept."""
        try:
            student = self._require_student(principal, student_id)
            self._student_repo.delete(student_id)
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)
        except Exception as exc:
            self._logger.error("Error deleting student %s: %s", student_id, exc)
            return ServiceResult(
                success=False, error="Failed to delete student", status_code=500
            )

        log_audit_event(
            self._logger,
            action="DELETE_STUDENT",
            entity_type="StudentProfile",
            entity_id=student_id,
            user_id=principal.id,
            details={"center_id": student.center_id},
        )
        return ServiceResult(success=True)

    def _authorize(self, principal: Principal, center_id: str) -> None:
        if not (
            self._center_repo.is_member(center_id, principal.id)
            or self._center_repo.is_owner(center_id, principal.id)
        ):
            raise AuthorizationError(NO_ACCESS_MESSAGE)

    def _require_student(self, principal: Principal, student_id: str) -> StudentProfile:
        student = self._student_repo.get(student_id)
        if student is None:
            raise NotFoundError(STUDENT_NOT_FOUND_MESSAGE)
        self._authorize(principal, student.center_id)
        return student
