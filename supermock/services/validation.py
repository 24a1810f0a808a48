"""
Input Sanitizer / Validator.

Pure functions, no I/O.  Turns an untrusted JSON body into an immutable
provisioning request (or, for edits, a dict of the columns to change) or
raises one :class:`ValidationError` listing every violation at once.

Password rules are looked up by account class so staff and student
policies cannot drift apart between the two workflows.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel

from supermock.errors import MalformedRequestError, PayloadTooLargeError, ValidationError
from supermock.models.auth_models import ValidationResult
from supermock.models.enums import AccountClass, EnrollmentType, MemberRole, StudentStatus
from supermock.models.provisioning import (
    MemberProvisioningRequest,
    StudentProvisioningRequest,
)
from supermock.utils.string_helpers import normalize_email, sanitize_string

E = TypeVar("E", bound=Enum)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_RE: re.Pattern[str] = re.compile(
    r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$"
)

# Maximum stored length per free-text field.
MAX_NAME_LEN: int = 200
MAX_CENTER_ID_LEN: int = 100
MAX_PHONE_LEN: int = 30
MAX_GUARDIAN_LEN: int = 200
MAX_DOB_LEN: int = 10
MAX_ADDRESS_LEN: int = 500
MAX_GRADE_LEN: int = 50

NO_FIELDS_MESSAGE: str = "No fields to update."
PAYLOAD_TOO_LARGE_MESSAGE: str = "Payload too large."
INVALID_JSON_MESSAGE: str = "Invalid JSON body."

# Staff members may only be provisioned into these roles; ownership is
# never granted through the API.
PROVISIONABLE_ROLES: tuple[MemberRole, ...] = (MemberRole.ADMIN, MemberRole.EXAMINER)


class PasswordPolicy(BaseModel):
    """Credential rule for one account class."""

    pattern: re.Pattern[str]
    message: str
    strip: bool = False

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


PASSWORD_POLICIES: dict[AccountClass, PasswordPolicy] = {
    AccountClass.STAFF: PasswordPolicy(
        pattern=re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9]).{8,}$"),
        message=(
            "Password must be at least 8 characters and include uppercase, "
            "lowercase, and a number."
        ),
    ),
    AccountClass.STUDENT: PasswordPolicy(
        pattern=re.compile(r"^[0-9]{8}$"),
        message="Password must be exactly 8 digits (numbers only).",
        strip=True,
    ),
}


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------

def validate_email(email: str) -> ValidationResult:
    """Check an already-normalised email against :data:`EMAIL_RE`."""
    if not EMAIL_RE.fullmatch(email):
        return ValidationResult(is_valid=False, error_message="Invalid email format.")
    return ValidationResult(is_valid=True)


def normalize_password(raw: object, account_class: AccountClass) -> str:
    """Return the password exactly as it will be checked and stored.

    Student passwords are trimmed; staff passwords are used verbatim.
    """
    if not isinstance(raw, str):
        return ""
    return raw.strip() if PASSWORD_POLICIES[account_class].strip else raw


def validate_password(password: str, account_class: AccountClass) -> ValidationResult:
    """Check *password* against the policy for *account_class*."""
    policy = PASSWORD_POLICIES[account_class]
    if not policy.pattern.fullmatch(password):
        return ValidationResult(is_valid=False, error_message=policy.message)
    return ValidationResult(is_valid=True)


def parse_enum(
    raw: object,
    enum_type: type[E],
    default: Optional[E] = None,
    choices: Optional[Iterable[E]] = None,
) -> Optional[E]:
    """Parse *raw* into a member of *enum_type*.

    Returns *default* when *raw* is missing, not a string, not a member
    value, or not among *choices* (when given).
    """
    if not isinstance(raw, str):
        return default
    try:
        value = enum_type(raw)
    except ValueError:
        return default
    if choices is not None and value not in tuple(choices):
        return default
    return value


def _optional(raw: object, max_len: int) -> Optional[str]:
    return sanitize_string(raw, max_len) or None


# ---------------------------------------------------------------------------
# Body parsing
# ---------------------------------------------------------------------------

def parse_json_body(
    raw: bytes,
    declared_length: Optional[int],
    max_bytes: int,
) -> dict[str, Any]:
    """Decode a request body into a JSON object.

    Raises:
        PayloadTooLargeError: The declared or actual size exceeds *max_bytes*.
        MalformedRequestError: Undecodable JSON or a non-object top level.
    """
    if declared_length is not None and declared_length > max_bytes:
        raise PayloadTooLargeError(PAYLOAD_TOO_LARGE_MESSAGE)
    if len(raw) > max_bytes:
        raise PayloadTooLargeError(PAYLOAD_TOO_LARGE_MESSAGE)

    try:
        body = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedRequestError(INVALID_JSON_MESSAGE, original_error=exc)

    if not isinstance(body, dict):
        raise MalformedRequestError(INVALID_JSON_MESSAGE)
    return body


# ---------------------------------------------------------------------------
# Request validators
# ---------------------------------------------------------------------------

def validate_member_request(body: dict[str, Any]) -> MemberProvisioningRequest:
    """Sanitise and validate a create-member body.

    Raises:
        ValidationError: With every violation, in field order.
    """
    full_name = sanitize_string(body.get("full_name"), MAX_NAME_LEN)
    email = normalize_email(body.get("email"))
    password = normalize_password(body.get("password"), AccountClass.STAFF)
    center_id = sanitize_string(body.get("center_id"), MAX_CENTER_ID_LEN)
    role = parse_enum(body.get("role"), MemberRole, choices=PROVISIONABLE_ROLES)

    errors: list[str] = []
    if not full_name:
        errors.append("Full name is required.")
    email_check = validate_email(email)
    if not email_check.is_valid:
        errors.append(email_check.error_message or "")
    password_check = validate_password(password, AccountClass.STAFF)
    if not password_check.is_valid:
        errors.append(password_check.error_message or "")
    if not center_id:
        errors.append("Center ID is required.")
    if role is None:
        errors.append("Role must be 'admin' or 'examiner'.")

    if errors:
        raise ValidationError(errors)

    return MemberProvisioningRequest(
        full_name=full_name,
        email=email,
        password=password,
        center_id=center_id,
        role=role,
    )


def validate_student_request(body: dict[str, Any]) -> StudentProvisioningRequest:
    """Sanitise and validate a create-student body.

    Optional profile fields that are blank after sanitising become
    ``None``; an unknown ``enrollment_type`` falls back to ``regular``.

    Raises:
        ValidationError: With every violation, in field order.
    """
    name = sanitize_string(body.get("name"), MAX_NAME_LEN)
    email = normalize_email(body.get("email"))
    password = normalize_password(body.get("password"), AccountClass.STUDENT)
    center_id = sanitize_string(body.get("center_id"), MAX_CENTER_ID_LEN)

    errors: list[str] = []
    if not name:
        errors.append("Full name is required.")
    email_check = validate_email(email)
    if not email_check.is_valid:
        errors.append(email_check.error_message or "")
    password_check = validate_password(password, AccountClass.STUDENT)
    if not password_check.is_valid:
        errors.append(password_check.error_message or "")
    if not center_id:
        errors.append("Center ID is required.")

    if errors:
        raise ValidationError(errors)

    return StudentProvisioningRequest(
        name=name,
        email=email,
        password=password,
        center_id=center_id,
        phone=_optional(body.get("phone"), MAX_PHONE_LEN),
        guardian=_optional(body.get("guardian"), MAX_GUARDIAN_LEN),
        guardian_phone=_optional(body.get("guardian_phone"), MAX_PHONE_LEN),
        date_of_birth=_optional(body.get("date_of_birth"), MAX_DOB_LEN),
        address=_optional(body.get("address"), MAX_ADDRESS_LEN),
        enrollment_type=parse_enum(
            body.get("enrollment_type"), EnrollmentType, default=EnrollmentType.REGULAR
        ),
    )


# ---------------------------------------------------------------------------
# Partial updates
# ---------------------------------------------------------------------------

# Optional student columns: request key -> max length.  Blank clears the column.
_STUDENT_TEXT_FIELDS: dict[str, int] = {
    "phone": MAX_PHONE_LEN,
    "guardian": MAX_GUARDIAN_LEN,
    "guardian_phone": MAX_PHONE_LEN,
    "date_of_birth": MAX_DOB_LEN,
    "address": MAX_ADDRESS_LEN,
    "grade": MAX_GRADE_LEN,
}


def validate_member_update(body: dict[str, Any]) -> dict[str, Any]:
    """Sanitise the fields of an edit-member body.

    Only keys present in *body* are returned, ready to be written to the
    member's ``users`` row.

    Raises:
        ValidationError: With every violation, or when nothing is set.
    """
    fields: dict[str, Any] = {}
    errors: list[str] = []

    if "full_name" in body:
        full_name = sanitize_string(body.get("full_name"), MAX_NAME_LEN)
        if full_name:
            fields["full_name"] = full_name
        else:
            errors.append("Full name is required.")
    if "email" in body:
        email = normalize_email(body.get("email"))
        email_check = validate_email(email)
        if email_check.is_valid:
            fields["email"] = email
        else:
            errors.append(email_check.error_message or "")
    if "role" in body:
        role = parse_enum(body.get("role"), MemberRole, choices=PROVISIONABLE_ROLES)
        if role is not None:
            fields["role"] = role.value
        else:
            errors.append("Role must be 'admin' or 'examiner'.")
    if "is_active" in body:
        if isinstance(body.get("is_active"), bool):
            fields["is_active"] = body["is_active"]
        else:
            errors.append("is_active must be true or false.")

    if errors:
        raise ValidationError(errors)
    if not fields:
        raise ValidationError([NO_FIELDS_MESSAGE])
    return fields


def validate_student_update(body: dict[str, Any]) -> dict[str, Any]:
    """Sanitise the fields of an edit-student body.

    Only keys present in *body* are returned.  Optional profile fields
    that are blank after sanitising become ``None``.

    Raises:
        ValidationError: With every violation, or when nothing is set.
    """
    fields: dict[str, Any] = {}
    errors: list[str] = []

    if "name" in body:
        name = sanitize_string(body.get("name"), MAX_NAME_LEN)
        if name:
            fields["name"] = name
        else:
            errors.append("Full name is required.")
    if "email" in body:
        email = normalize_email(body.get("email"))
        if not email:
            fields["email"] = None
        elif validate_email(email).is_valid:
            fields["email"] = email
        else:
            errors.append("Invalid email format.")
    for key, max_len in _STUDENT_TEXT_FIELDS.items():
        if key in body:
            fields[key] = _optional(body.get(key), max_len)
    if "status" in body:
        status = parse_enum(body.get("status"), StudentStatus)
        if status is not None:
            fields["status"] = status.value
        else:
            errors.append(
                "Status must be one of: "
                + ", ".join(member.value for member in StudentStatus) + "."
            )
    if "enrollment_type" in body:
        enrollment_type = parse_enum(body.get("enrollment_type"), EnrollmentType)
        if enrollment_type is not None:
            fields["enrollment_type"] = enrollment_type.value
        else:
            errors.append(
                "Enrollment type must be one of: "
                + ", ".join(member.value for member in EnrollmentType) + "."
            )

    if errors:
        raise ValidationError(errors)
    if not fields:
        raise ValidationError([NO_FIELDS_MESSAGE])
    return fields
