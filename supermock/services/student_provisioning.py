"""
Student Provisioning Workflow.

Enrols a student in a center: a fresh pre-verified auth account plus a
``student_profiles`` row.  Center owners and members may enrol students.

Unlike member provisioning there is no identity reuse; an email that is
already registered is a conflict.  If the profile insert fails the auth
account is always deleted.
"""

from __future__ import annotations

from typing import Any, Optional

from supermock.auth import PrincipalResolver
from supermock.errors import (
    AuthorizationError,
    ConflictError,
    DuplicateIdentityError,
    DuplicateRecordError,
    SuperMockError,
    UpstreamError,
)
from supermock.logger import StructuredLogger
from supermock.models.enums import StudentStatus
from supermock.models.provisioning import StudentProvisioningRequest
from supermock.models.service_models import ServiceResult
from supermock.models.student import StudentProfile
from supermock.repositories.center_repository import CenterRepository
from supermock.repositories.identity_repository import IdentityRepository
from supermock.repositories.student_repository import StudentRepository
from supermock.services.base_service import BaseService
from supermock.services.compensation import CompensatingTransaction
from supermock.services.member_provisioning import UNEXPECTED_ERROR_MESSAGE
from supermock.services.rate_limiter import FixedWindowRateLimiter
from supermock.services.validation import validate_student_request
from supermock.utils.audit import log_audit_event

NO_ACCESS_MESSAGE: str = "Forbidden. You do not have access to this center."
EMAIL_TAKEN_MESSAGE: str = "An account with this email already exists."
ALREADY_ENROLLED_MESSAGE: str = "This student is already enrolled in this center."


class StudentProvisioningService(BaseService):
    """Runs the create-student workflow end to end."""

    def __init__(
        self,
        resolver: PrincipalResolver,
        rate_limiter: FixedWindowRateLimiter,
        center_repo: CenterRepository,
        identity_repo: IdentityRepository,
        student_repo: StudentRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._resolver = resolver
        self._rate_limiter = rate_limiter
        self._center_repo = center_repo
        self._identity_repo = identity_repo
        self._student_repo = student_repo

    def provision(
        self,
        body: dict[str, Any],
        access_token: Optional[str],
    ) -> ServiceResult[StudentProfile]:
        """Validate *body* and enrol the student on behalf of the caller."""
        try:
            request = validate_student_request(body)
            principal = self._resolver.resolve(access_token)
            self._rate_limiter.enforce(principal.id)

            if not (
                self._center_repo.is_member(request.center_id, principal.id)
                or self._center_repo.is_owner(request.center_id, principal.id)
            ):
                raise AuthorizationError(NO_ACCESS_MESSAGE)

            student = self._enrol(request, principal.id)
            return ServiceResult(success=True, data=student, status_code=201)
        except SuperMockError as exc:
            if exc.original_error is not None:
                self._logger.error(
                    "[create-student] %s: %s", exc.message, exc.original_error
                )
            return ServiceResult.from_error(exc)
        except Exception as exc:
            self._logger.error("[create-student] unhandled: %s", exc, exc_info=True)
            return ServiceResult(
                success=False, error=UNEXPECTED_ERROR_MESSAGE, status_code=500
            )

    def _enrol(self, request: StudentProvisioningRequest, actor_id: str) -> StudentProfile:
        with CompensatingTransaction(
            self._logger, label="create-student", actor_id=actor_id
        ) as tx:
            try:
                student_id = self._identity_repo.create_user(
                    request.email,
                    request.password,
                    {"full_name": request.name, "role": "student"},
                )
            except DuplicateIdentityError as exc:
                raise ConflictError(EMAIL_TAKEN_MESSAGE, original_error=exc)
            except Exception as exc:
                raise UpstreamError(
                    "Failed to create user account. Please try again.",
                    original_error=exc,
                )
            tx.register(
                "delete auth user", lambda: self._identity_repo.delete_user(student_id)
            )

            try:
                student = self._student_repo.insert(StudentProfile(
                    student_id=student_id,
                    center_id=request.center_id,
                    name=request.name,
                    email=request.email,
                    phone=request.phone,
                    guardian=request.guardian,
                    guardian_phone=request.guardian_phone,
                    date_of_birth=request.date_of_birth,
                    address=request.address,
                    enrollment_type=request.enrollment_type,
                    status=StudentStatus.ACTIVE,
                    tests_taken=0,
                ))
            except DuplicateRecordError as exc:
                raise ConflictError(ALREADY_ENROLLED_MESSAGE, original_error=exc)
            except Exception as exc:
                raise UpstreamError(
                    "Failed to enrol student. The auth account was rolled back.",
                    original_error=exc,
                )

        log_audit_event(
            self._logger,
            action="CREATE_STUDENT",
            entity_type="StudentProfile",
            entity_id=student.student_id,
            user_id=actor_id,
            details={
                "center_id": request.center_id,
                "enrollment_type": request.enrollment_type.value,
            },
        )
        return student
