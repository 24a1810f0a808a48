"""
Error Taxonomy.

Every failure a workflow can surface to an HTTP caller is one of the
``SuperMockError`` subclasses below.  Each carries the status code and a
client-safe ``message``; the underlying exception (if any) is kept on
``original_error`` for server-side logging only and is never serialised.
"""

from __future__ import annotations

from typing import Optional


class SuperMockError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        self.message: str = message
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)


class MalformedRequestError(SuperMockError):
    """Body is not a JSON object."""

    status_code = 400


class AuthenticationError(SuperMockError):
    """No valid session for the caller."""

    status_code = 401


class AuthorizationError(SuperMockError):
    """Caller is authenticated but lacks access.

    The message must not reveal whether the target resource exists.
    """

    status_code = 403


class NotFoundError(SuperMockError):
    status_code = 404


class ConflictError(SuperMockError):
    """Duplicate membership, duplicate enrolment or unlinkable account."""

    status_code = 409


class PayloadTooLargeError(SuperMockError):
    status_code = 413


class ValidationError(SuperMockError):
    """One or more client-correctable input violations.

    All violations are kept on ``errors`` and joined into ``message`` so
    the caller sees every problem at once.
    """

    status_code = 422

    def __init__(self, errors: list[str]) -> None:
        self.errors: list[str] = list(errors)
        super().__init__(" ".join(self.errors))


class RateLimitError(SuperMockError):
    status_code = 429

    def __init__(self, message: str, retry_after: int = 0) -> None:
        self.retry_after: int = retry_after
        super().__init__(message)


class UpstreamError(SuperMockError):
    """Unexpected failure of the remote store."""

    status_code = 500


class DuplicateIdentityError(Exception):
    """Raised by the identity repository when the auth layer already
    has an account for the requested email."""

    def __init__(self, email: str, original_error: Optional[Exception] = None) -> None:
        self.email: str = email
        self.original_error: Optional[Exception] = original_error
        super().__init__(f"Auth identity already registered for {email}")


class DuplicateRecordError(Exception):
    """Raised by a repository when an insert violates a uniqueness
    constraint (Postgres ``23505``)."""

    def __init__(self, table: str, original_error: Optional[Exception] = None) -> None:
        self.table: str = table
        self.original_error: Optional[Exception] = original_error
        super().__init__(f"Duplicate row in {table}")
