"""
routes/profiles.py — Profile route handlers.

Endpoints (url_prefix=/api/v1/profiles):
  GET    /profiles/me                   → 200  caller's profile (auth)
  PATCH  /profiles/me                   → 200  partial update, returns full profile (auth)
  GET    /profiles/<id>                 → 200  any profile (no auth)
  GET    /profiles/by-username/<name>   → 200  any profile (no auth)
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from teamup.app.extensions import db
from teamup.app.middleware.auth_middleware import require_auth
from teamup.app.schemas.profile_schema import UpdateProfileSchema
from teamup.app.services import profile_service

profiles_bp = Blueprint("profiles", __name__)


@profiles_bp.route("/me", methods=["GET"])
@require_auth
def get_my_profile():
    result = profile_service.get_current_profile(
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@profiles_bp.route("/me", methods=["PATCH"])
@require_auth
def update_my_profile():
    """PATCH /profiles/me — Only keys present in the body are changed."""
    data = UpdateProfileSchema().load(request.get_json(force=True) or {})
    result = profile_service.update_profile(
        caller_id=g.user_id,
        data=data,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@profiles_bp.route("/<int:profile_id>", methods=["GET"])
def get_profile(profile_id: int):
    result = profile_service.get_profile_by_id(
        profile_id=profile_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@profiles_bp.route("/by-username/<string:username>", methods=["GET"])
def get_profile_by_username(username: str):
    result = profile_service.get_profile_by_username(
        username=username,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200
