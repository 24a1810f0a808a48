"""
Student Profile Model.

A student profile is created 1:1 with a fresh auth identity by the
student provisioning workflow; ``student_id`` is that identity's id.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ValidationInfo, field_validator

from supermock.models.enums import EnrollmentType, StudentStatus


class StudentProfile(BaseModel):
    """Row of ``student_profiles``."""

    student_id: str
    center_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    guardian: Optional[str] = None
    guardian_phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    grade: Optional[str] = None
    enrollment_type: EnrollmentType = EnrollmentType.REGULAR
    status: StudentStatus = StudentStatus.ACTIVE
    tests_taken: int = 0
    enrolled_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "extra": "ignore", "coerce_numbers_to_str": True}

    @field_validator("enrollment_type", "status", "tests_taken", mode="before")
    @classmethod
    def _null_to_default(cls, value: object, info: ValidationInfo) -> object:
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value
