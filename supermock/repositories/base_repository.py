"""
Base Repository.

Provides shared infrastructure for all repositories:
- SupabaseManager reference (admin + public clients)
- Logger reference
- Helpers for single-row reads and Postgres error classification
"""

from __future__ import annotations

from typing import Any, Optional

from supabase import Client as SupabaseClient

from supermock.database import SupabaseManager
from supermock.logger import StructuredLogger

# Postgres SQLSTATE for unique_violation.
UNIQUE_VIOLATION: str = "23505"


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: SupabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the service-role client.

        Callers are responsible for authorising the principal first;
        this client bypasses row-level security.
        """
        return self._db.admin

    @staticmethod
    def _first(response: Any) -> Optional[dict[str, Any]]:
        """Return the first row of a PostgREST response, or ``None``."""
        rows = getattr(response, "data", None) or []
        return rows[0] if rows else None

    @staticmethod
    def _is_unique_violation(exc: Exception) -> bool:
        return str(getattr(exc, "code", "")) == UNIQUE_VIOLATION
