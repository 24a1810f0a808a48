"""
String Helpers.

Single source of truth for input sanitisation and key-case conversion.
Every free-text field that reaches Supabase passes through
:func:`sanitize_string`; every email through :func:`normalize_email`.
"""

from __future__ import annotations

import re

__all__ = [
    "normalize_email",
    "sanitize_string",
    "to_camel_case",
]

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

# Characters that can open an HTML/script injection vector when a stored
# value is later rendered: angle brackets, both quote styles, backtick
# and backslash.
_HTML_UNSAFE_RE: re.Pattern[str] = re.compile(r"[<>\"'`\\]")

_RE_SNAKE_SEGMENT = re.compile(r"_([a-z0-9])")


def sanitize_string(raw: object, max_len: int = 255) -> str:
    """Strip injection characters, trim, and truncate.

    Defence in depth only: output encoding at render time is still
    required.

    Parameters
    ----------
    raw:
        Untrusted value from a request body.  Anything that is not a
        ``str`` yields ``""``.
    max_len:
        Maximum length of the returned string.

    Returns
    -------
    str
        The cleaned value, at most *max_len* characters long.
    """
    if not isinstance(raw, str):
        return ""
    return _HTML_UNSAFE_RE.sub("", raw).strip()[:max_len]


def normalize_email(raw: object) -> str:
    """Normalise an email address: strip whitespace and lowercase.

    Non-string input yields ``""`` so that it fails format validation.
    """
    if not isinstance(raw, str):
        return ""
    return raw.strip().lower()


def to_camel_case(name: str) -> str:
    """Convert a snake_case name to camelCase.

    Used as the pydantic ``alias_generator`` for the dashboard view
    models::

        attempt_module_id -> attemptModuleId
        time_spent_seconds -> timeSpentSeconds
        task1_score -> task1Score
    """
    return _RE_SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), name)
