"""
Shared test fixtures for the SuperMock admin service.
In-memory fake repositories, a fake token resolver and a controllable
clock.  Zero network calls: no Supabase client is ever constructed.
"""
import uuid

import pytest

from supermock.config import AppConfig
from supermock.errors import (
    AuthenticationError,
    DuplicateIdentityError,
    DuplicateRecordError,
)
from supermock.logger import StructuredLogger
from supermock.models.auth_models import AuthAccount, Principal
from supermock.models.student import StudentProfile
from supermock.models.user import Membership, StaffInvite, UserProfile
from supermock.server import create_app
from supermock.services.center_access import CenterAccessService
from supermock.services.member_provisioning import MemberProvisioningService
from supermock.services.rate_limiter import FixedWindowRateLimiter
from supermock.services.reviews import ReviewService
from supermock.services.student_directory import StudentDirectoryService
from supermock.services.student_provisioning import StudentProvisioningService

OWNER_TOKEN = "owner-token"
EXAMINER_TOKEN = "examiner-token"
STRANGER_TOKEN = "stranger-token"
CENTER_ID = "center-1"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeResolver:
    def __init__(self, principals):
        self.principals = principals

    def resolve(self, access_token):
        principal = self.principals.get(access_token)
        if principal is None:
            raise AuthenticationError("Unauthorized. Please sign in.")
        return principal


class FakeDb:
    """Stands in for SupabaseManager; user-scoped clients are tagged tuples."""

    def for_user(self, access_token):
        return ("client", access_token)


class FakeIdentityRepo:
    def __init__(self):
        self.users = {}          # user_id -> email
        self.confirmed = {}      # user_id -> bool
        self.fail_create = False
        self.fail_delete = False
        self.fail_lookup = False
        self.created = []
        self.deleted = []
        self._seq = 0

    def add_existing(self, email, confirmed=True):
        self._seq += 1
        user_id = f"existing-{self._seq}"
        self.users[user_id] = email
        self.confirmed[user_id] = confirmed
        return user_id

    def create_user(self, email, password, user_metadata):
        if self.fail_create:
            raise RuntimeError("auth admin unavailable")
        if email in self.users.values():
            raise DuplicateIdentityError(email)
        self._seq += 1
        user_id = f"auth-{self._seq}"
        self.users[user_id] = email
        self.confirmed[user_id] = True
        self.created.append((user_id, email, dict(user_metadata)))
        return user_id

    def delete_user(self, user_id):
        if self.fail_delete:
            raise RuntimeError("delete failed")
        self.users.pop(user_id, None)
        self.deleted.append(user_id)

    def find_by_email(self, email):
        if self.fail_lookup:
            raise RuntimeError("rpc failed")
        for user_id, stored in self.users.items():
            if stored == email:
                confirmed_at = "2025-01-01T00:00:00Z" if self.confirmed.get(user_id) else None
                return AuthAccount(id=user_id, email=email, email_confirmed_at=confirmed_at)
        return None


class FakeProfileRepo:
    def __init__(self):
        self.rows = {}
        self.fail_upsert = False
        self.deleted = []

    def get_by_email(self, email):
        for row in self.rows.values():
            if row.email == email.strip().lower():
                return row
        return None

    def get_by_id(self, user_id):
        return self.rows.get(user_id)

    def upsert(self, profile):
        if self.fail_upsert:
            raise RuntimeError("upsert failed")
        self.rows[profile.user_id] = profile
        return profile

    def update(self, user_id, fields):
        row = self.rows.get(user_id)
        if row is None:
            return None
        updated = UserProfile(**{**row.model_dump(), **fields})
        self.rows[user_id] = updated
        return updated

    def delete(self, user_id):
        self.rows.pop(user_id, None)
        self.deleted.append(user_id)


class FakeCenterRepo:
    def __init__(self):
        self.owners = {}           # center_id -> owner user_id
        self.memberships = []      # list[Membership]
        self.invites = {}          # email -> StaffInvite
        self.fail_insert = None    # None | "duplicate" | "error"
        self.join_outcome = {"success": True, "center_slug": "alpha"}
        self.join_calls = []
        self._seq = 0

    def is_owner(self, center_id, user_id):
        return self.owners.get(center_id) == user_id

    def get_owner_id(self, center_id):
        return self.owners.get(center_id)

    def get_membership(self, center_id, user_id):
        for membership in self.memberships:
            if membership.center_id == center_id and membership.user_id == user_id:
                return membership
        return None

    def is_member(self, center_id, user_id):
        return self.get_membership(center_id, user_id) is not None

    def insert_membership(self, center_id, user_id):
        if self.fail_insert == "duplicate":
            raise DuplicateRecordError("center_members")
        if self.fail_insert == "error":
            raise RuntimeError("insert failed")
        self._seq += 1
        membership = Membership(
            membership_id=f"m-{self._seq}", center_id=center_id, user_id=user_id
        )
        self.memberships.append(membership)
        return membership

    def upsert_invite(self, invite: StaffInvite):
        self.invites[invite.email] = invite
        return invite

    def delete_membership(self, center_id, user_id):
        self.memberships = [
            m for m in self.memberships
            if not (m.center_id == center_id and m.user_id == user_id)
        ]

    def list_memberships(self, center_id):
        return [
            {
                "membership_id": m.membership_id,
                "center_id": m.center_id,
                "user_id": m.user_id,
                "invited_at": None,
                "users": None,
            }
            for m in self.memberships
            if m.center_id == center_id
        ]

    def verify_and_join(self, client, passcode_hash):
        self.join_calls.append((client, passcode_hash))
        return dict(self.join_outcome)


class FakeStudentRepo:
    def __init__(self):
        self.rows = []
        self.fail_insert = None    # None | "duplicate" | "error"
        self.deleted = []

    def insert(self, profile: StudentProfile):
        if self.fail_insert == "duplicate":
            raise DuplicateRecordError("student_profiles")
        if self.fail_insert == "error":
            raise RuntimeError("insert failed")
        self.rows.append(profile)
        return profile

    def list_by_center(self, center_id):
        return [row for row in reversed(self.rows) if row.center_id == center_id]

    def get(self, student_id):
        for row in self.rows:
            if row.student_id == student_id:
                return row
        return None

    def update(self, student_id, fields):
        for index, row in enumerate(self.rows):
            if row.student_id == student_id:
                self.rows[index] = StudentProfile(**{**row.model_dump(), **fields})
                return self.rows[index]
        return None

    def delete(self, student_id):
        self.rows = [row for row in self.rows if row.student_id != student_id]
        self.deleted.append(student_id)


class FakeReviewRepo:
    def __init__(self):
        self.reviews = []
        self.preview = None
        self.grading = None
        self.save_response = {"success": True, "total_score": 0, "updated_count": 0}
        self.fail = False
        self.saved = []
        self.deleted = []

    def _check(self):
        if self.fail:
            raise RuntimeError("rpc failed")

    def get_center_reviews(self, client, center_id):
        self._check()
        return list(self.reviews)

    def get_attempt_preview(self, client, attempt_id):
        self._check()
        return self.preview

    def get_grading_data(self, client, attempt_module_id):
        self._check()
        return self.grading

    def save_grades(self, client, module_id, answers, feedback):
        self._check()
        self.saved.append((client, module_id, [a.model_dump() for a in answers], feedback))
        return dict(self.save_response)

    def delete_attempt(self, client, attempt_id):
        self._check()
        self.deleted.append(attempt_id)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def logger(tmp_path):
    """A uniquely named logger writing to a temp file."""
    return StructuredLogger(
        name=f"supermock.test.{uuid.uuid4().hex[:8]}",
        log_file=str(tmp_path / "test.log"),
    )


@pytest.fixture
def config():
    return AppConfig(
        _env_file=None,
        SUPABASE_URL="https://example.supabase.co",
        SUPABASE_ANON_KEY="anon-key",
        SUPABASE_SERVICE_ROLE_KEY="service-key",
        TURNSTILE_SITE_KEY="site-key",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def owner():
    return Principal(id="owner-1", email="owner@example.com", email_confirmed=True)


@pytest.fixture
def examiner():
    return Principal(id="examiner-1", email="examiner@example.com", email_confirmed=True)


@pytest.fixture
def stranger():
    return Principal(id="stranger-1", email="stranger@example.com", email_confirmed=True)


@pytest.fixture
def resolver(owner, examiner, stranger):
    return FakeResolver({
        OWNER_TOKEN: owner,
        EXAMINER_TOKEN: examiner,
        STRANGER_TOKEN: stranger,
    })


@pytest.fixture
def identity_repo():
    return FakeIdentityRepo()


@pytest.fixture
def profile_repo(owner):
    repo = FakeProfileRepo()
    repo.rows[owner.id] = UserProfile(
        user_id=owner.id, email=owner.email, full_name="Olive Owner", role="owner"
    )
    return repo


@pytest.fixture
def center_repo(owner, examiner):
    repo = FakeCenterRepo()
    repo.owners[CENTER_ID] = owner.id
    repo.memberships.append(
        Membership(membership_id="m-0", center_id=CENTER_ID, user_id=examiner.id)
    )
    return repo


@pytest.fixture
def student_repo():
    return FakeStudentRepo()


@pytest.fixture
def review_repo():
    return FakeReviewRepo()


@pytest.fixture
def rate_limiter(logger, clock):
    return FixedWindowRateLimiter(max_requests=20, window_s=60, logger=logger, clock=clock)


@pytest.fixture
def member_service(resolver, rate_limiter, center_repo, profile_repo, identity_repo, logger):
    return MemberProvisioningService(
        resolver=resolver,
        rate_limiter=rate_limiter,
        center_repo=center_repo,
        profile_repo=profile_repo,
        identity_repo=identity_repo,
        logger=logger,
    )


@pytest.fixture
def student_service(resolver, rate_limiter, center_repo, identity_repo, student_repo, logger):
    return StudentProvisioningService(
        resolver=resolver,
        rate_limiter=rate_limiter,
        center_repo=center_repo,
        identity_repo=identity_repo,
        student_repo=student_repo,
        logger=logger,
    )


@pytest.fixture
def review_service(review_repo, logger):
    return ReviewService(db=FakeDb(), repo=review_repo, logger=logger)


@pytest.fixture
def center_service(center_repo, profile_repo, logger):
    return CenterAccessService(
        db=FakeDb(), center_repo=center_repo, profile_repo=profile_repo, logger=logger
    )


@pytest.fixture
def student_directory_service(center_repo, student_repo, logger):
    return StudentDirectoryService(
        center_repo=center_repo, student_repo=student_repo, logger=logger
    )


@pytest.fixture
def services(resolver, rate_limiter, member_service, student_service,
             review_service, center_service, student_directory_service):
    return {
        "resolver": resolver,
        "rate_limiter": rate_limiter,
        "member_provisioning_service": member_service,
        "student_provisioning_service": student_service,
        "review_service": review_service,
        "center_access_service": center_service,
        "student_directory_service": student_directory_service,
    }


@pytest.fixture
def app(config, services, logger):
    flask_app = create_app(config=config, services=services, logger=logger)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def member_body():
    return {
        "full_name": "Ada Examiner",
        "email": "Ada@Example.com ",
        "password": "Secret123",
        "center_id": CENTER_ID,
        "role": "examiner",
    }


@pytest.fixture
def student_body():
    return {
        "name": "Sam Student",
        "email": "sam@example.com",
        "password": " 12345678 ",
        "center_id": CENTER_ID,
        "phone": "",
        "enrollment_type": "mock_only",
    }
