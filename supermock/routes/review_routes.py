"""
Review Routes
=============
GET    /api/centers/<center_id>/reviews          - attempts awaiting review
GET    /api/attempts/<attempt_id>                - attempt preview
DELETE /api/attempts/<attempt_id>                - delete an attempt
GET    /api/attempt-modules/<id>/grading         - grading data for one module
POST   /api/attempt-modules/<id>/grades          - submit a complete grade batch

View models are serialised with camelCase keys.  Listing and preview
payloads also carry display labels (formatted dates, durations and a
status badge category).
"""

from __future__ import annotations

from typing import Any, Callable

from flask import Blueprint, g, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from supermock.models.review_models import (
    AttemptDetail,
    AttemptReview,
    GradingDecision,
)
from supermock.routes.responses import error_from_result, error_response
from supermock.services.reviews import ReviewService
from supermock.utils.formatting import (
    format_duration,
    format_duration_detailed,
    format_review_date,
    review_status_category,
)


def review_payload(review: AttemptReview) -> dict[str, Any]:
    """Camel-cased review plus display labels."""
    payload = review.model_dump(mode="json", by_alias=True)
    payload["createdAtLabel"] = format_review_date(review.created_at)
    payload["statusCategory"] = review_status_category(review.status).value
    for module, data in zip(review.modules, payload["modules"]):
        data["durationLabel"] = format_duration(module.time_spent_seconds)
        data["completedAtLabel"] = format_review_date(module.completed_at)
        data["statusCategory"] = review_status_category(module.status).value
    return payload


def attempt_payload(attempt: AttemptDetail) -> dict[str, Any]:
    payload = attempt.model_dump(mode="json", by_alias=True)
    payload["createdAtLabel"] = format_review_date(attempt.created_at)
    payload["statusCategory"] = review_status_category(attempt.status).value
    for module, data in zip(attempt.modules, payload["modules"]):
        data["durationLabel"] = format_duration_detailed(module.time_spent_seconds)
        data["completedAtLabel"] = format_review_date(module.completed_at)
        data["statusCategory"] = review_status_category(module.status).value
    return payload


def _decision_errors(exc: PydanticValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}." if location else f"{error.get('msg')}.")
    return messages


def create_review_blueprint(
    review_service: ReviewService,
    auth_guard: Callable,
) -> Blueprint:
    """Build the review blueprint; every route requires a signed-in caller."""
    bp = Blueprint("reviews", __name__)

    @bp.route("/api/centers/<center_id>/reviews", methods=["GET"])
    @auth_guard
    def list_reviews(center_id: str):
        result = review_service.fetch_reviews(g.access_token, center_id)
        if not result.success:
            return error_from_result(result)
        return jsonify({"reviews": [review_payload(review) for review in result.data or []]})

    @bp.route("/api/attempts/<attempt_id>", methods=["GET"])
    @auth_guard
    def get_attempt(attempt_id: str):
        result = review_service.fetch_attempt_details(g.access_token, attempt_id)
        if not result.success or result.data is None:
            return error_from_result(result)
        return jsonify({"attempt": attempt_payload(result.data)})

    @bp.route("/api/attempts/<attempt_id>", methods=["DELETE"])
    @auth_guard
    def delete_attempt(attempt_id: str):
        result = review_service.delete_attempt(g.access_token, g.principal.id, attempt_id)
        if not result.success:
            return error_from_result(result)
        return jsonify({"success": True})

    @bp.route("/api/attempt-modules/<attempt_module_id>/grading", methods=["GET"])
    @auth_guard
    def get_grading_data(attempt_module_id: str):
        result = review_service.fetch_grade_module_details(g.access_token, attempt_module_id)
        if not result.success or result.data is None:
            return error_from_result(result)
        return jsonify({"module": result.data.model_dump(mode="json", by_alias=True)})

    @bp.route("/api/attempt-modules/<attempt_module_id>/grades", methods=["POST"])
    @auth_guard
    def submit_grades(attempt_module_id: str):
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return error_response("Invalid JSON body.", 400)

        raw_decisions = body.get("decisions")
        if not isinstance(raw_decisions, list):
            return error_response("decisions must be a list.", 422)

        try:
            decisions = [GradingDecision.model_validate(item) for item in raw_decisions]
        except PydanticValidationError as exc:
            return error_response(" ".join(_decision_errors(exc)), 422)

        feedback = body.get("feedback")
        if feedback is not None and not isinstance(feedback, str):
            return error_response("feedback must be a string.", 422)

        result = review_service.submit_grades(
            g.access_token,
            g.principal.id,
            attempt_module_id,
            decisions,
            feedback,
        )
        if not result.success or result.data is None:
            return error_from_result(result)
        return jsonify({
            "success": True,
            "result": result.data.model_dump(mode="json", by_alias=True),
        })

    return bp
