"""
Provisioning Request Models.

Sanitised, validated inputs for the member and student provisioning
workflows.  Instances are only ever built by ``supermock.services.validation``
after every rule has passed, and are immutable for the rest of the request.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from supermock.models.enums import EnrollmentType, MemberRole


class MemberProvisioningRequest(BaseModel):
    full_name: str
    email: str
    password: str = Field(repr=False)
    center_id: str
    role: MemberRole

    model_config = {"frozen": True}


class StudentProvisioningRequest(BaseModel):
    """Student enrolment input.  Blank optional fields are ``None``."""

    name: str
    email: str
    password: str = Field(repr=False)
    center_id: str
    phone: Optional[str] = None
    guardian: Optional[str] = None
    guardian_phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    enrollment_type: EnrollmentType = EnrollmentType.REGULAR

    model_config = {"frozen": True}
