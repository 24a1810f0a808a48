"""
Center Routes
=============
GET    /api/centers/<center_id>/members             - roster, owner first
POST   /api/centers/<center_id>/invites             - create a staff invite (owner only)
POST   /api/centers/join                            - redeem an invite passcode
PATCH  /api/centers/<center_id>/members/<user_id>   - edit a member (owner only)
DELETE /api/centers/<center_id>/members/<user_id>   - remove a member (owner only)
"""

from __future__ import annotations

from typing import Callable

from flask import Blueprint, g, jsonify, request

from supermock.routes.responses import error_from_result, error_response
from supermock.services.center_access import CenterAccessService


def create_center_blueprint(
    center_service: CenterAccessService,
    auth_guard: Callable,
) -> Blueprint:
    bp = Blueprint("centers", __name__)

    @bp.route("/api/centers/<center_id>/members", methods=["GET"])
    @auth_guard
    def list_members(center_id: str):
        result = center_service.list_members(g.principal, center_id)
        if not result.success:
            return error_from_result(result)
        return jsonify({
            "members": [member.model_dump(mode="json") for member in result.data or []]
        })

    @bp.route("/api/centers/<center_id>/invites", methods=["POST"])
    @auth_guard
    def create_invite(center_id: str):
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return error_response("Invalid JSON body.", 400)

        result = center_service.create_invite(
            g.principal,
            center_id,
            full_name=body.get("full_name"),
            email=body.get("email"),
            role=body.get("role"),
            passcode=body.get("passcode"),
        )
        if not result.success or result.data is None:
            return error_from_result(result)
        # The passcode hash stays server-side.
        invite = result.data.model_dump(mode="json", exclude={"passcode_hash"})
        return jsonify({"success": True, "invite": invite}), 201

    @bp.route("/api/centers/join", methods=["POST"])
    @auth_guard
    def join_center():
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return error_response("Invalid JSON body.", 400)

        result = center_service.join_center(
            g.principal, g.access_token, body.get("passcode")
        )
        if not result.success:
            return error_from_result(result)
        return jsonify({"success": True, "center_slug": result.data})

    @bp.route("/api/centers/<center_id>/members/<user_id>", methods=["PATCH"])
    @auth_guard
    def update_member(center_id: str, user_id: str):
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return error_response("Invalid JSON body.", 400)

        result = center_service.update_member(g.principal, center_id, user_id, body)
        if not result.success or result.data is None:
            return error_from_result(result)
        return jsonify({"success": True, "member": result.data.model_dump(mode="json")})

    @bp.route("/api/centers/<center_id>/members/<user_id>", methods=["DELETE"])
    @auth_guard
    def remove_member(center_id: str, user_id: str):
        result = center_service.remove_member(g.principal, center_id, user_id)
        if not result.success:
            return error_from_result(result)
        return jsonify({"success": True})

    return bp
