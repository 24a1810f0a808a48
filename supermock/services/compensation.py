"""
Compensating Transaction.

Supabase offers no cross-service transaction spanning the auth admin API
and PostgREST tables.  Multi-step provisioning therefore registers an
undo action after each write that succeeds; if a later step raises, the
registered compensations run in reverse order and the original error is
re-raised unchanged.

Example::

    with CompensatingTransaction(logger, label="create-member") as tx:
        user_id = identity_repo.create_user(...)
        tx.register("delete auth user", lambda: identity_repo.delete_user(user_id))
        profile_repo.upsert(...)
        tx.register("delete profile", lambda: profile_repo.delete(user_id))
        center_repo.insert_membership(...)
    # On any exception: delete profile, then delete auth user.
"""

from __future__ import annotations

from types import TracebackType
from typing import Callable, Optional

from supermock.logger import StructuredLogger
from supermock.utils.audit import log_audit_event

Compensation = Callable[[], None]


class CompensatingTransaction:
    """Context manager holding ordered ``(description, compensation)`` steps.

    Compensation failures are logged and never replace the original
    exception.  Clean exit discards every registered step.
    """

    def __init__(
        self,
        logger: StructuredLogger,
        label: str,
        actor_id: str = "system",
    ) -> None:
        self._logger = logger
        self._label = label
        self._actor_id = actor_id
        self._steps: list[tuple[str, Compensation]] = []
        self.rolled_back: bool = False
        self.failed_compensations: list[str] = []

    def register(self, description: str, compensation: Compensation) -> None:
        """Record the undo action for a write that just succeeded."""
        self._steps.append((description, compensation))

    @property
    def pending(self) -> int:
        return len(self._steps)

    def rollback(self) -> None:
        """Run registered compensations newest-first, then forget them."""
        attempted = len(self._steps)
        while self._steps:
            description, compensation = self._steps.pop()
            try:
                compensation()
                self._logger.info("[%s] Rolled back: %s", self._label, description)
            except Exception as exc:
                self.failed_compensations.append(description)
                self._logger.error(
                    "[%s] Compensation '%s' failed: %s. Manual cleanup required.",
                    self._label,
                    description,
                    exc,
                    exc_info=True,
                )
        self.rolled_back = True
        log_audit_event(
            self._logger,
            action="ROLLBACK",
            entity_type="ProvisioningWorkflow",
            entity_id=self._label,
            user_id=self._actor_id,
            details={
                "compensations": attempted,
                "failed": len(self.failed_compensations),
            },
        )

    def __enter__(self) -> "CompensatingTransaction":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        if exc is None:
            self._steps.clear()
            return False

        if self._steps:
            self._logger.warning(
                "[%s] Step failed (%s); rolling back %d change(s).",
                self._label,
                exc_type.__name__ if exc_type else "error",
                len(self._steps),
            )
            self.rollback()
        return False
