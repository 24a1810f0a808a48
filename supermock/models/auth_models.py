"""
Authentication Pipeline Models.

Pydantic models for the caller identity, rate-limit buckets and the
identity-resolution outcome of member provisioning.  These give every
auth step a structured, inspectable result rather than raw strings.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from supermock.models.enums import IdentityOrigin


# ---------------------------------------------------------------------------
# Caller identity
# ---------------------------------------------------------------------------

class Principal(BaseModel):
    """The authenticated caller, as reported by Supabase Auth.

    Attributes
    ----------
    id:
        Supabase auth user UUID.
    email:
        Email on the auth record (may be empty for phone-only users).
    email_confirmed:
        ``True`` when Supabase reports ``email_confirmed_at``.
    """

    id: str
    email: str = ""
    email_confirmed: bool = False

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationResult(BaseModel):
    """Result of a single field validation check."""

    is_valid: bool
    error_message: Optional[str] = None


# ---------------------------------------------------------------------------
# Rate-limit models
# ---------------------------------------------------------------------------

class RateBucket(BaseModel):
    """Fixed-window counter for one principal.

    ``reset_at`` is expressed on the limiter's clock (seconds).
    """

    count: int = 0
    reset_at: float


# ---------------------------------------------------------------------------
# Identity resolution
# ---------------------------------------------------------------------------

class IdentityResolution(BaseModel):
    """Outcome of resolving a member's auth identity by email."""

    user_id: str
    origin: IdentityOrigin

    model_config = {"frozen": True}

    @property
    def created_in_request(self) -> bool:
        """``True`` when the identity was created by this request."""
        return self.origin == IdentityOrigin.FRESH_AUTH_USER

    @property
    def needs_profile(self) -> bool:
        """Fresh and orphan identities may lack a ``users`` row."""
        return self.origin != IdentityOrigin.EXISTING_PROFILE


class AuthAccount(BaseModel):
    """Row returned by ``admin_get_auth_user_by_email``."""

    id: str
    email: str = ""
    email_confirmed_at: Optional[str] = None

    model_config = {"extra": "ignore"}

    @property
    def email_confirmed(self) -> bool:
        return bool(self.email_confirmed_at)
