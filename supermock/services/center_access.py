"""
Center Access Service.

Staff invites, passcode joins, the member roster and owner-only member
edits and removals.

Invites are stored as ``exchange_codes`` rows holding the SHA-256 of a
passcode chosen by the owner.  The invitee signs up on their own and then
redeems the passcode through ``verify_and_join_center``, which runs under
the invitee's token and links them to the center.
"""

from __future__ import annotations

import hashlib
from typing import Any, Optional

from supermock.database import SupabaseManager
from supermock.errors import (
    AuthorizationError,
    MalformedRequestError,
    NotFoundError,
    SuperMockError,
    ValidationError,
)
from supermock.logger import StructuredLogger
from supermock.models.auth_models import Principal
from supermock.models.enums import MemberRole
from supermock.models.service_models import ServiceResult
from supermock.models.user import CenterMember, Membership, StaffInvite
from supermock.repositories.center_repository import CenterRepository
from supermock.repositories.profile_repository import ProfileRepository
from supermock.services.base_service import BaseService
from supermock.services.validation import (
    MAX_NAME_LEN,
    PROVISIONABLE_ROLES,
    parse_enum,
    validate_email,
    validate_member_update,
)
from supermock.utils.audit import log_audit_event
from supermock.utils.string_helpers import normalize_email, sanitize_string

INVALID_PASSCODE_MESSAGE: str = "Invalid or expired passcode"
NO_ACCESS_MESSAGE: str = "Forbidden. You do not have access to this center."
OWNER_ONLY_INVITE_MESSAGE: str = "Forbidden. Only the center owner can invite members."
OWNER_ONLY_MANAGE_MESSAGE: str = "Forbidden. Only the center owner can manage members."
OWNER_IMMUTABLE_MESSAGE: str = "The center owner cannot be edited or removed here."
MEMBER_NOT_FOUND_MESSAGE: str = "Member not found"


def hash_passcode(passcode: str) -> str:
    """Lowercase hex SHA-256 of *passcode* (``""`` for an empty passcode)."""
    if not passcode:
        return ""
    return hashlib.sha256(passcode.encode("utf-8")).hexdigest()


class CenterAccessService(BaseService):
    """Invites, passcode joins and roster listing for one center."""

    def __init__(
        self,
        db: SupabaseManager,
        center_repo: CenterRepository,
        profile_repo: ProfileRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._db = db
        self._center_repo = center_repo
        self._profile_repo = profile_repo

    # ------------------------------------------------------------------
    # Invites
    # ------------------------------------------------------------------

    def create_invite(
        self,
        principal: Principal,
        center_id: str,
        full_name: object,
        email: object,
        role: object,
        passcode: object,
    ) -> ServiceResult[StaffInvite]:
        """Create or replace the pending invite for *email* (owner only).

        *full_name* is not stored on the invite; the invitee supplies it
        when they sign up.  It is kept on the audit record.
        """
        normalized = normalize_email(email)
        parsed_role = parse_enum(role, MemberRole, choices=PROVISIONABLE_ROLES)
        code = passcode if isinstance(passcode, str) else ""

        errors: list[str] = []
        email_check = validate_email(normalized)
        if not email_check.is_valid:
            errors.append(email_check.error_message or "")
        if parsed_role is None:
            errors.append("Role must be 'admin' or 'examiner'.")
        if not code.strip():
            errors.append("Passcode is required.")

        try:
            if errors:
                raise ValidationError(errors)
            if not self._center_repo.is_owner(center_id, principal.id):
                raise AuthorizationError(OWNER_ONLY_INVITE_MESSAGE)

            invite = self._center_repo.upsert_invite(StaffInvite(
                email=normalized,
                role=parsed_role,
                center_id=center_id,
                passcode_hash=hash_passcode(code),
            ))
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)
        except Exception as exc:
            self._logger.error("Error creating member invite: %s", exc)
            return ServiceResult(
                success=False, error="Failed to create invite", status_code=500
            )

        log_audit_event(
            self._logger,
            action="CREATE_INVITE",
            entity_type="StaffInvite",
            entity_id=invite.email,
            user_id=principal.id,
            details={
                "center_id": center_id,
                "role": invite.role.value,
                "full_name": sanitize_string(full_name, MAX_NAME_LEN),
            },
        )
        return ServiceResult(success=True, data=invite, status_code=201)

    # ------------------------------------------------------------------
    # Passcode join
    # ------------------------------------------------------------------

    def join_center(
        self,
        principal: Principal,
        access_token: str,
        passcode: object,
    ) -> ServiceResult[str]:
        """Redeem *passcode* for the caller; ``data`` is the center slug."""
        if not isinstance(passcode, str) or not passcode.strip():
            return ServiceResult.from_error(MalformedRequestError("Passcode is required."))

        try:
            outcome = self._center_repo.verify_and_join(
                self._db.for_user(access_token), hash_passcode(passcode.strip())
            )
        except Exception as exc:
            self._logger.error("verify_and_join_center failed: %s", exc)
            return ServiceResult(
                success=False, error="Failed to join center", status_code=500
            )

        if not outcome.get("success"):
            return ServiceResult.from_error(
                MalformedRequestError(str(outcome.get("error") or INVALID_PASSCODE_MESSAGE))
            )

        slug: Optional[str] = outcome.get("center_slug")
        log_audit_event(
            self._logger,
            action="JOIN_CENTER",
            entity_type="Membership",
            entity_id=slug or "",
            user_id=principal.id,
        )
        return ServiceResult(success=True, data=slug)

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def list_members(
        self, principal: Principal, center_id: str
    ) -> ServiceResult[list[CenterMember]]:
        """Owner first, then staff newest-first; owner never listed twice."""
        try:
            owner_id = self._center_repo.get_owner_id(center_id)
            if owner_id != principal.id and not self._center_repo.is_member(
                center_id, principal.id
            ):
                raise AuthorizationError(NO_ACCESS_MESSAGE)

            rows = self._center_repo.list_memberships(center_id)
            owner = self._profile_repo.get_by_id(owner_id) if owner_id else None
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)
        except Exception as exc:
            self._logger.error("Error fetching members for %s: %s", center_id, exc)
            return ServiceResult(
                success=False, error="Failed to load members", status_code=500
            )

        members: list[CenterMember] = []
        if owner is not None:
            members.append(CenterMember(
                membership_id=None,
                user_id=owner.user_id,
                center_id=center_id,
                full_name=owner.full_name or "",
                email=owner.email or "",
                role=MemberRole.OWNER,
                is_active=owner.is_active,
                joined_at=owner.created_at,
                updated_at=owner.updated_at,
                is_owner=True,
            ))

        for row in rows:
            member = self._member_from_row(row)
            if member is not None and member.user_id != owner_id:
                members.append(member)
        return ServiceResult(success=True, data=members)

    def _member_from_row(self, row: dict[str, Any]) -> Optional[CenterMember]:
        user = row.get("users")
        if not user:
            return None
        role = parse_enum(user.get("role"), MemberRole)
        if role is None:
            self._logger.warning(
                "Skipping member %s with unknown role %r", row.get("user_id"), user.get("role")
            )
            return None
        is_active = user.get("is_active")
        return CenterMember(
            membership_id=row.get("membership_id"),
            user_id=str(row.get("user_id")),
            center_id=str(row.get("center_id")),
            full_name=user.get("full_name") or "",
            email=user.get("email") or "",
            role=role,
            is_active=True if is_active is None else bool(is_active),
            joined_at=row.get("invited_at") or user.get("created_at"),
            updated_at=user.get("updated_at"),
            is_owner=False,
        )

    # ------------------------------------------------------------------
    # Member management (owner only)
    # ------------------------------------------------------------------

    def update_member(
        self,
        principal: Principal,
        center_id: str,
        user_id: str,
        body: dict[str, Any],
    ) -> ServiceResult[CenterMember]:
        """Edit a staff member's profile: name, email, role or active flag.

        Only the keys present in *body* change.  The auth account's email
        is not touched.
        """
        try:
            fields = validate_member_update(body)
            membership = self._require_managed_member(principal, center_id, user_id)
            profile = self._profile_repo.update(user_id, fields)
            if profile is None:
                raise NotFoundError(MEMBER_NOT_FOUND_MESSAGE)
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)
        except Exception as exc:
            self._logger.error("Error updating member %s: %s", user_id, exc)
            return ServiceResult(
                success=False, error="Failed to update member", status_code=500
            )

        log_audit_event(
            self._logger,
            action="UPDATE_MEMBER",
            entity_type="Membership",
            entity_id=user_id,
            user_id=principal.id,
            details={"center_id": center_id, "fields": ",".join(sorted(fields))},
        )
        return ServiceResult(success=True, data=CenterMember(
            membership_id=membership.membership_id,
            user_id=profile.user_id,
            center_id=center_id,
            full_name=profile.full_name or "",
            email=profile.email or "",
            role=parse_enum(profile.role, MemberRole, default=MemberRole.EXAMINER),
            is_active=profile.is_active,
            joined_at=membership.invited_at or profile.created_at,
            updated_at=profile.updated_at,
        ))

    def remove_member(
        self,
        principal: Principal,
        center_id: str,
        user_id: str,
    ) -> ServiceResult[None]:
        """Unlink a staff member from the center.  Their account survives."""
        try:
            self._require_managed_member(principal, center_id, user_id)
            self._center_repo.delete_membership(center_id, user_id)
        except SuperMockError as exc:
            return ServiceResult.from_error(exc)
        except Exception as exc:
            self._logger.error("Error removing member %s: %s", user_id, exc)
            return ServiceResult(
                success=False, error="Failed to remove member", status_code=500
            )

        log_audit_event(
            self._logger,
            action="DELETE_MEMBER",
            entity_type="Membership",
            entity_id=user_id,
            user_id=principal.id,
            details={"center_id": center_id},
        )
        return ServiceResult(success=True)

    def _require_managed_member(
        self, principal: Principal, center_id: str, user_id: str
    ) -> Membership:
        """Owner-only gate shared by edit and removal.

        Raises:
            AuthorizationError: The caller does not own the center.
            MalformedRequestError: The target is the owner.
            NotFoundError: The target is not a member of the center.
        """
        if not self._center_repo.is_owner(center_id, principal.id):
            raise AuthorizationError(OWNER_ONLY_MANAGE_MESSAGE)
        if user_id == principal.id:
            raise MalformedRequestError(OWNER_IMMUTABLE_MESSAGE)
        membership = self._center_repo.get_membership(center_id, user_id)
        if membership is None:
            raise NotFoundError(MEMBER_NOT_FOUND_MESSAGE)
        return membership
