"""
Provisioning Routes
===================
POST /api/create/members  - add an admin/examiner to a center (owner only)
POST /api/create/student  - enrol a student in a center (owner or member)

Both endpoints guard body size and JSON shape before the workflow runs.
Any other method returns 405 from the app-level handler.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from supermock.config import AppConfig
from supermock.errors import PayloadTooLargeError, SuperMockError
from supermock.jwt_auth import extract_access_token
from supermock.routes.responses import error_from_exception, error_from_result
from supermock.services.member_provisioning import MemberProvisioningService
from supermock.services.student_provisioning import StudentProvisioningService
from supermock.services.validation import PAYLOAD_TOO_LARGE_MESSAGE, parse_json_body


def create_provisioning_blueprint(
    member_service: MemberProvisioningService,
    student_service: StudentProvisioningService,
    config: AppConfig,
) -> Blueprint:
    """Build the provisioning blueprint around the injected services."""
    bp = Blueprint("provisioning", __name__)

    def _read_body():
        # Declared size is checked before any byte of the body is read, and
        # the read itself never goes past the cap.
        limit = config.MAX_PAYLOAD_BYTES
        declared = request.content_length
        if declared is not None and declared > limit:
            raise PayloadTooLargeError(PAYLOAD_TOO_LARGE_MESSAGE)
        raw = request.stream.read(limit + 1)
        return parse_json_body(raw, declared, limit)

    @bp.route("/api/create/members", methods=["POST"])
    def create_member():
        try:
            body = _read_body()
        except SuperMockError as exc:
            return error_from_exception(exc)

        result = member_service.provision(
            body, extract_access_token(config.SESSION_COOKIE_NAME)
        )
        if not result.success or result.data is None:
            return error_from_result(result)
        return jsonify({
            "success": True,
            "membership": result.data.model_dump(mode="json"),
        }), 201

    @bp.route("/api/create/student", methods=["POST"])
    def create_student():
        try:
            body = _read_body()
        except SuperMockError as exc:
            return error_from_exception(exc)

        result = student_service.provision(
            body, extract_access_token(config.SESSION_COOKIE_NAME)
        )
        if not result.success or result.data is None:
            return error_from_result(result)
        return jsonify({
            "success": True,
            "student": result.data.model_dump(mode="json"),
        }), 201

    return bp
