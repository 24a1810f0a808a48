"""
Service Layer Data Transfer Objects.

Pydantic models for validated input/output at service boundaries.
Replaces raw dict passing between layers.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from supermock.errors import RateLimitError, SuperMockError

T = TypeVar("T")

__all__ = ["ServiceResult"]


class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    All service methods return this, providing a consistent contract
    for the route layer.  ``success=True`` with empty ``data`` means
    "legitimately empty"; ``success=False`` means the operation failed
    and ``error`` holds a client-safe message.

    Generic over ``T`` so callers can annotate return types precisely
    (e.g. ``ServiceResult[list[AttemptReview]]``).
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
    retry_after: Optional[int] = None

    @classmethod
    def from_error(cls, exc: SuperMockError) -> "ServiceResult[T]":
        """Build a failed result from a taxonomy error."""
        retry_after = exc.retry_after if isinstance(exc, RateLimitError) else None
        return cls(
            success=False,
            error=exc.message,
            status_code=exc.status_code,
            retry_after=retry_after,
        )
