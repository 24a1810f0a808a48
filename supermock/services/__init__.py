"""
Business Logic Services Package.

Services depend on the Repository layer for data access and on
``PrincipalResolver`` for caller identity.

The ``create_services()`` factory wires every repository and service together,
returning a typed dict that the HTTP layer can consume without knowing the
internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from supermock.auth import PrincipalResolver
from supermock.config import AppConfig
from supermock.database import SupabaseManager
from supermock.logger import get_logger
from supermock.repositories.center_repository import CenterRepository
from supermock.repositories.identity_repository import IdentityRepository
from supermock.repositories.profile_repository import ProfileRepository
from supermock.repositories.review_repository import ReviewRepository
from supermock.repositories.student_repository import StudentRepository
from supermock.services.center_access import CenterAccessService
from supermock.services.member_provisioning import MemberProvisioningService
from supermock.services.rate_limiter import (
    FixedWindowRateLimiter,
    RateLimitStore,
)
from supermock.services.reviews import ReviewService
from supermock.services.student_directory import StudentDirectoryService
from supermock.services.student_provisioning import StudentProvisioningService


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    resolver: PrincipalResolver
    rate_limiter: FixedWindowRateLimiter
    member_provisioning_service: MemberProvisioningService
    student_provisioning_service: StudentProvisioningService
    review_service: ReviewService
    center_access_service: CenterAccessService
    student_directory_service: StudentDirectoryService


def create_services(
    db: SupabaseManager,
    config: AppConfig,
    rate_limit_store: Optional[RateLimitStore] = None,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup and hands the
    returned dict to ``create_app``.

    Args:
        db: Initialised SupabaseManager.
        config: Application configuration.
        rate_limit_store: Optional shared bucket store; in-process when
            omitted.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("supermock.services")

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    identity_repo = IdentityRepository(db=db, logger=logger)
    profile_repo = ProfileRepository(db=db, logger=logger)
    center_repo = CenterRepository(db=db, logger=logger)
    student_repo = StudentRepository(db=db, logger=logger)
    review_repo = ReviewRepository(db=db, logger=logger)

    # ------------------------------------------------------------------
    # 2. Leaf services
    # ------------------------------------------------------------------
    resolver = PrincipalResolver(db=db, logger=logger)
    # One limiter shared by both provisioning workflows.
    rate_limiter = FixedWindowRateLimiter(
        max_requests=config.RATE_LIMIT_MAX_REQUESTS,
        window_s=config.RATE_LIMIT_WINDOW_S,
        logger=logger,
        store=rate_limit_store,
    )

    # ------------------------------------------------------------------
    # 3. Workflows
    # ------------------------------------------------------------------
    member_provisioning_service = MemberProvisioningService(
        resolver=resolver,
        rate_limiter=rate_limiter,
        center_repo=center_repo,
        profile_repo=profile_repo,
        identity_repo=identity_repo,
        logger=logger,
        allow_unconfirmed_orphan_link=config.ALLOW_UNCONFIRMED_ORPHAN_LINK,
    )
    student_provisioning_service = StudentProvisioningService(
        resolver=resolver,
        rate_limiter=rate_limiter,
        center_repo=center_repo,
        identity_repo=identity_repo,
        student_repo=student_repo,
        logger=logger,
    )
    review_service = ReviewService(db=db, repo=review_repo, logger=logger)
    center_access_service = CenterAccessService(
        db=db,
        center_repo=center_repo,
        profile_repo=profile_repo,
        logger=logger,
    )
    student_directory_service = StudentDirectoryService(
        center_repo=center_repo,
        student_repo=student_repo,
        logger=logger,
    )

    return ServiceContainer(
        resolver=resolver,
        rate_limiter=rate_limiter,
        member_provisioning_service=member_provisioning_service,
        student_provisioning_service=student_provisioning_service,
        review_service=review_service,
        center_access_service=center_access_service,
        student_directory_service=student_directory_service,
    )
