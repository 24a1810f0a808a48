"""
Audit Trail.

State changes made on behalf of a principal are recorded as one
``AUDIT <action> <entity_type>/<entity_id>`` log line with the full event
as JSON: accounts created, memberships linked, edited or removed,
rollbacks, grades saved, attempts deleted, invites issued, centers joined,
and students edited or deleted.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from supermock.logger import REDACTED, SENSITIVE_KEYS, StructuredLogger

__all__ = ["AuditEvent", "log_audit_event"]

# Flat scalars only.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    """One audit trail entry.  Credential-named ``details`` are masked."""

    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    action: str
    entity_type: str
    entity_id: str
    user_id: str
    details: dict[str, DetailValue] = Field(default_factory=dict)

    @field_validator("details")
    @classmethod
    def _mask_credentials(cls, value: dict[str, DetailValue]) -> dict[str, DetailValue]:
        return {
            key: REDACTED if key.lower() in SENSITIVE_KEYS else item
            for key, item in value.items()
        }


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    entity_type: str,
    entity_id: str,
    user_id: str,
    details: Optional[dict[str, DetailValue]] = None,
) -> AuditEvent:
    """Record *action* on ``entity_type/entity_id`` by *user_id*.

    Args:
        logger: Destination logger.
        action: ``CREATE_MEMBER``, ``CREATE_STUDENT``, ``ROLLBACK``,
            ``SAVE_GRADES``, ``DELETE_ATTEMPT``, ``CREATE_INVITE``,
            ``JOIN_CENTER``, ``UPDATE_MEMBER``, ``DELETE_MEMBER``,
            ``UPDATE_STUDENT`` or ``DELETE_STUDENT``.
        entity_type: ``Membership``, ``StudentProfile``, ``AttemptModule``
            and so on.
        entity_id: Key of the affected row (or workflow label).
        user_id: Principal that performed the action, ``"system"`` if none.
        details: Extra flat context.

    Returns:
        The event as logged.
    """
    event = AuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        details=details or {},
    )
    logger.info(
        "AUDIT %s %s/%s %s",
        event.action,
        event.entity_type,
        event.entity_id,
        json.dumps(event.model_dump(), default=str),
    )
    return event
