"""
Member Provisioning Workflow.

Creates (or links) a staff account and attaches it to a center as an
``admin`` or ``examiner``.  Only the center owner may do this.

Pipeline::

    validate -> authenticate -> rate limit -> authorise (owner only)
      -> resolve identity -> ensure profile -> duplicate check
      -> insert membership

Identity resolution, in order:

1. A ``users`` profile already has the email: reuse its ``user_id``.
2. Otherwise create a pre-verified auth account.
3. If the auth layer says the email is taken, the account is an orphan
   (auth row, no profile).  Look it up with
   ``admin_get_auth_user_by_email`` and link it.  Unconfirmed orphans
   are refused unless ``ALLOW_UNCONFIRMED_ORPHAN_LINK`` is set.

Only an auth account created by *this* request is ever deleted on
failure, together with the profile row written for it.
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
from supermock.models.auth_models import IdentityResolution, Principal
from supermock.models.enums import IdentityOrigin
from supermock.models.provisioning import MemberProvisioningRequest
from supermock.models.service_models import ServiceResult
from supermock.models.user import Membership, UserProfile
from supermock.repositories.center_repository import CenterRepository
from supermock.repositories.identity_repository import IdentityRepository
from supermock.repositories.profile_repository import ProfileRepository
from supermock.services.base_service import BaseService
from supermock.services.compensation import CompensatingTransaction
from supermock.services.rate_limiter import FixedWindowRateLimiter
from supermock.services.validation import validate_member_request
from supermock.utils.audit import log_audit_event

UNEXPECTED_ERROR_MESSAGE: str = "An unexpected error occurred."
OWNER_ONLY_MESSAGE: str = "Forbidden. Only the center owner can add members."
ALREADY_MEMBER_MESSAGE: str = "This user is already a member of this center."
ORPHAN_UNLINKABLE_MESSAGE: str = (
    "An account with this email already exists and could not be linked."
)


class MemberProvisioningService(BaseService):
    """Runs the create-member workflow end to end."""

    def __init__(
        self,
        resolver: PrincipalResolver,
        rate_limiter: FixedWindowRateLimiter,
        center_repo: CenterRepository,
        profile_repo: ProfileRepository,
        identity_repo: IdentityRepository,
        logger: StructuredLogger,
        allow_unconfirmed_orphan_link: bool = False,
    ) -> None:
        super().__init__(logger)
        self._resolver = resolver
        self._rate_limiter = rate_limiter
        self._center_repo = center_repo
        self._profile_repo = profile_repo
        self._identity_repo = identity_repo
        self._allow_unconfirmed_orphan_link = allow_unconfirmed_orphan_link

    def provision(
        self,
        body: dict[str, Any],
        access_token: Optional[str],
    ) -> ServiceResult[Membership]:
        """Validate *body* and create the membership on behalf of the caller.

        Args:
            body: Decoded JSON object from the request.
            access_token: Caller's Supabase access token (may be ``None``).

        Returns:
            ``ServiceResult`` with the new ``Membership`` and status 201, or
            a failed result carrying the client-safe message and status.
        """
        try:
            request = validate_member_request(body)
            principal = self._resolver.resolve(access_token)
            self._rate_limiter.enforce(principal.id)

            if not self._center_repo.is_owner(request.center_id, principal.id):
                self._logger.warning(
                    "Member provisioning refused: %s does not own center %s",
                    principal.id,
                    request.center_id,
                )
                raise AuthorizationError(OWNER_ONLY_MESSAGE)

            membership = self._provision(request, principal)
            return ServiceResult(success=True, data=membership, status_code=201)
        except SuperMockError as exc:
            if exc.original_error is not None:
                self._logger.error(
                    "[create-member] %s: %s", exc.message, exc.original_error
                )
            return ServiceResult.from_error(exc)
        except Exception as exc:
            self._logger.error("[create-member] unhandled: %s", exc, exc_info=True)
            return ServiceResult(
                success=False, error=UNEXPECTED_ERROR_MESSAGE, status_code=500
            )

    # ------------------------------------------------------------------
    # Private implementation
    # ------------------------------------------------------------------

    def _provision(
        self,
        request: MemberProvisioningRequest,
        principal: Principal,
    ) -> Membership:
        with CompensatingTransaction(
            self._logger, label="create-member", actor_id=principal.id
        ) as tx:
            identity = self._resolve_identity(request, tx)
            fresh = identity.created_in_request

            if identity.needs_profile:
                try:
                    self._profile_repo.upsert(UserProfile(
                        user_id=identity.user_id,
                        email=request.email,
                        full_name=request.full_name,
                        role=request.role.value,
                        is_active=True,
                    ))
                except Exception as exc:
                    raise UpstreamError(
                        "Failed to create user profile."
                        + (" Auth account rolled back." if fresh else ""),
                        original_error=exc,
                    )
                if fresh:
                    user_id = identity.user_id
                    tx.register("delete users row", lambda: self._profile_repo.delete(user_id))

            if self._center_repo.get_membership(request.center_id, identity.user_id):
                raise ConflictError(ALREADY_MEMBER_MESSAGE)

            try:
                membership = self._center_repo.insert_membership(
                    request.center_id, identity.user_id
                )
            except DuplicateRecordError as exc:
                raise ConflictError(ALREADY_MEMBER_MESSAGE, original_error=exc)
            except Exception as exc:
                raise UpstreamError(
                    "Failed to link member to center."
                    + (" All changes rolled back." if fresh else ""),
                    original_error=exc,
                )

        log_audit_event(
            self._logger,
            action="CREATE_MEMBER",
            entity_type="Membership",
            entity_id=membership.membership_id or f"{request.center_id}:{identity.user_id}",
            user_id=principal.id,
            details={
                "center_id": request.center_id,
                "member_user_id": identity.user_id,
                "role": request.role.value,
                "identity_origin": identity.origin.value,
            },
        )
        return membership

    def _resolve_identity(
        self,
        request: MemberProvisioningRequest,
        tx: CompensatingTransaction,
    ) -> IdentityResolution:
        existing = self._profile_repo.get_by_email(request.email)
        if existing is not None:
            return IdentityResolution(
                user_id=existing.user_id, origin=IdentityOrigin.EXISTING_PROFILE
            )

        try:
            user_id = self._identity_repo.create_user(
                request.email,
                request.password,
                {"full_name": request.full_name, "role": request.role.value},
            )
        except DuplicateIdentityError:
            return self._link_orphan(request.email)
        except Exception as exc:
            raise UpstreamError(
                "Failed to create auth account. Please try again.",
                original_error=exc,
            )

        tx.register("delete auth user", lambda: self._identity_repo.delete_user(user_id))
        return IdentityResolution(user_id=user_id, origin=IdentityOrigin.FRESH_AUTH_USER)

    def _link_orphan(self, email: str) -> IdentityResolution:
        try:
            account = self._identity_repo.find_by_email(email)
        except Exception as exc:
            self._logger.error("[create-member] orphan lookup failed: %s", exc)
            account = None

        if account is None:
            raise ConflictError(ORPHAN_UNLINKABLE_MESSAGE)

        if not account.email_confirmed and not self._allow_unconfirmed_orphan_link:
            self._logger.warning(
                "Refusing to link unconfirmed orphan auth user %s", account.id
            )
            raise ConflictError(ORPHAN_UNLINKABLE_MESSAGE)

        return IdentityResolution(user_id=account.id, origin=IdentityOrigin.ORPHAN_AUTH_USER)
