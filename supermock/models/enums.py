"""
Shared Enumerations for SuperMock Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so code like ``if role == "admin"`` continues to work.
"""

from __future__ import annotations
from enum import StrEnum


class MemberRole(StrEnum):
    """Roles a staff member can hold inside a center.

    ``OWNER`` is never stored on a membership row; it is derived from
    ``centers.user_id`` and only appears in roster listings.
    """

    OWNER = "owner"
    ADMIN = "admin"
    EXAMINER = "examiner"


class AccountClass(StrEnum):
    """Account classes with distinct credential policies."""

    STAFF = "staff"
    STUDENT = "student"


class EnrollmentType(StrEnum):
    REGULAR = "regular"
    MOCK_ONLY = "mock_only"
    VISITOR = "visitor"


class StudentStatus(StrEnum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"
    PASSED = "passed"


class ModuleType(StrEnum):
    """IELTS paper modules."""

    READING = "reading"
    LISTENING = "listening"
    WRITING = "writing"
    SPEAKING = "speaking"


class IdentityOrigin(StrEnum):
    """How member provisioning obtained the auth identity it links.

    Only ``FRESH_AUTH_USER`` identities were created by the current
    request and may be deleted on rollback.
    """

    EXISTING_PROFILE = "existing_profile"
    FRESH_AUTH_USER = "fresh_auth_user"
    ORPHAN_AUTH_USER = "orphan_auth_user"


class ReviewStatusCategory(StrEnum):
    """Display category for an attempt or module status badge."""

    SUCCESS = "success"
    ACTIVE = "active"
    PENDING = "pending"
    NEUTRAL = "neutral"
