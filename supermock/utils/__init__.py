"""Shared utility functions and models for the SuperMock admin service.

This package provides convenience re-exports so that consumers can import
directly from ``supermock.utils`` (e.g. ``from supermock.utils import
sanitize_string``) while full absolute imports (e.g. ``from
supermock.utils.string_helpers import sanitize_string``) remain supported.
"""

from supermock.utils.audit import AuditEvent, log_audit_event
from supermock.utils.string_helpers import (
    normalize_email,
    sanitize_string,
    to_camel_case,
)

__all__ = [
    "AuditEvent",
    "log_audit_event",
    "normalize_email",
    "sanitize_string",
    "to_camel_case",
]
