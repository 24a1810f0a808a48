"""
Data Models Package.

Re-exports all Pydantic models for short imports:
    from supermock.models import Principal, Membership, StudentProfile
    from supermock.models import MemberRole, EnrollmentType, AccountClass
    from supermock.models import AttemptReview, GradingDecision, ServiceResult
"""

from __future__ import annotations

from supermock.models.auth_models import (
    AuthAccount,
    IdentityResolution,
    Principal,
    RateBucket,
    ValidationResult,
)
from supermock.models.enums import (
    AccountClass,
    EnrollmentType,
    IdentityOrigin,
    MemberRole,
    ModuleType,
    ReviewStatusCategory,
    StudentStatus,
)
from supermock.models.provisioning import (
    MemberProvisioningRequest,
    StudentProvisioningRequest,
)
from supermock.models.review_models import (
    AnswerDetail,
    AnswerGrade,
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
from supermock.models.student import StudentProfile
from supermock.models.user import CenterMember, Membership, StaffInvite, UserProfile

__all__ = [
    "AccountClass",
    "AuthAccount",
    "AnswerDetail",
    "AnswerGrade",
    "AttemptDetail",
    "AttemptReview",
    "CenterMember",
    "EnrollmentType",
    "GradeAnswerDetail",
    "GradeModuleDetail",
    "GradingDecision",
    "IdentityOrigin",
    "IdentityResolution",
    "MemberProvisioningRequest",
    "MemberRole",
    "Membership",
    "ModuleType",
    "PreviewModuleDetail",
    "Principal",
    "RateBucket",
    "ReviewModuleEntry",
    "ReviewStatusCategory",
    "SaveGradesResult",
    "ServiceResult",
    "StaffInvite",
    "StudentProfile",
    "StudentProvisioningRequest",
    "StudentStatus",
    "UserProfile",
    "ValidationResult",
]
