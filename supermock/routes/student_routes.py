"""
Student Routes
==============
GET    /api/centers/<center_id>/students   - enrolled students, newest first
PATCH  /api/students/<student_id>          - edit the fields present in the body
DELETE /api/students/<student_id>          - remove the student profile
"""

from __future__ import annotations

from typing import Callable

from flask import Blueprint, g, jsonify, request

from supermock.routes.responses import error_from_result, error_response
from supermock.services.student_directory import StudentDirectoryService


def create_student_blueprint(
    student_service: StudentDirectoryService,
    auth_guard: Callable,
) -> Blueprint:
    bp = Blueprint("students", __name__)

    @bp.route("/api/centers/<center_id>/students", methods=["GET"])
    @auth_guard
    def list_students(center_id: str):
        result = student_service.list_students(g.principal, center_id)
        if not result.success:
            return error_from_result(result)
        return jsonify({
            "students": [student.model_dump(mode="json") for student in result.data or []]
        })

    @bp.route("/api/students/<student_id>", methods=["PATCH"])
    @auth_guard
    def update_student(student_id: str):
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return error_response("Invalid JSON body.", 400)

        result = student_service.update_student(g.principal, student_id, body)
        if not result.success or result.data is None:
            return error_from_result(result)
        return jsonify({"success": True, "student": result.data.model_dump(mode="json")})

    @bp.route("/api/students/<student_id>", methods=["DELETE"])
    @auth_guard
    def delete_student(student_id: str):
        result = student_service.delete_student(g.principal, student_id)
        if not result.success:
            return error_from_result(result)
        return jsonify({"success": True})

    return bp
