"""
JSON response helpers shared by every blueprint.

Every error body is ``{"error": "<message>"}``; rate-limited responses
also carry a ``Retry-After`` header.
"""

from __future__ import annotations

from typing import Any, Optional

from flask import Response, jsonify

from supermock.errors import SuperMockError
from supermock.models.service_models import ServiceResult


def error_response(
    message: str,
    status_code: int,
    retry_after: Optional[int] = None,
) -> tuple[Response, int]:
    response = jsonify({"error": message})
    if retry_after:
        response.headers["Retry-After"] = str(retry_after)
    return response, status_code


def error_from_exception(exc: SuperMockError) -> tuple[Response, int]:
    return error_response(
        exc.message, exc.status_code, getattr(exc, "retry_after", None)
    )


def error_from_result(result: ServiceResult[Any]) -> tuple[Response, int]:
    return error_response(
        result.error or "An unexpected error occurred.",
        result.status_code,
        result.retry_after,
    )
