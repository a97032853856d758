"""
routes/join_requests.py — Join-request inbox, outbox and review handlers.

Endpoints (url_prefix=/api/v1/join-requests):
  GET    /join-requests/sent        → 200  caller's own requests, any status
  GET    /join-requests/received    → 200  pending requests on caller's projects
  PATCH  /join-requests/<id>        → 200  {"status": "approved" | "rejected"}, leader only

All endpoints require auth. Filing a request lives on the projects blueprint
(POST /projects/<id>/join-requests).
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from teamup.app.extensions import db
from teamup.app.middleware.auth_middleware import require_auth
from teamup.app.schemas.join_request_schema import ReviewJoinRequestSchema
from teamup.app.services import join_request_service

join_requests_bp = Blueprint("join_requests", __name__)


@join_requests_bp.route("/sent", methods=["GET"])
@require_auth
def list_sent():
    result = join_request_service.get_sent_join_requests(
        user_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@join_requests_bp.route("/received", methods=["GET"])
@require_auth
def list_received():
    result = join_request_service.get_received_join_requests(
        leader_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@join_requests_bp.route("/<int:request_id>", methods=["PATCH"])
@require_auth
def review(request_id: int):
    """PATCH /join-requests/<id> — Approve or reject; approval adds the member."""
    data = ReviewJoinRequestSchema().load(request.get_json(force=True) or {})
    result = join_request_service.update_join_request_status(
        request_id=request_id,
        status=data["status"],
        reviewed_by=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200
