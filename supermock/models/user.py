"""
User, Membership and Roster Models.

Pydantic models mirroring the ``users``, ``center_members`` and
``exchange_codes`` rows the admin service reads and writes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from supermock.models.enums import MemberRole


class UserProfile(BaseModel):
    """Application profile row (``public.users``), keyed by auth user id."""

    user_id: str
    # Either may be null on rows created outside the admin API.
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "extra": "ignore"}

    @field_validator("is_active", mode="before")
    @classmethod
    def _null_means_active(cls, value: object) -> object:
        return True if value is None else value


class Membership(BaseModel):
    """Link between a center and a staff user.

    At most one row exists per ``(center_id, user_id)``.
    """

    membership_id: Optional[str] = None
    center_id: str
    user_id: str
    invited_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "extra": "ignore", "coerce_numbers_to_str": True}


class CenterMember(BaseModel):
    """One roster line: the owner or a staff member of a center."""

    membership_id: Optional[str] = None
    user_id: str
    center_id: str
    full_name: str
    email: str
    role: MemberRole
    is_active: bool = True
    joined_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_owner: bool = False

    model_config = {"coerce_numbers_to_str": True}


class StaffInvite(BaseModel):
    """Pending staff invite (``exchange_codes``), redeemed by passcode."""

    email: str
    role: MemberRole
    center_id: str
    passcode_hash: str
