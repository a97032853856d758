"""
routes/auth.py — Signup, sign-in and token handlers.

Every handler validates its body with an auth schema, makes one auth_service
call and wraps the result in {"data": ..., "warnings": []}. Handlers that
write (new account, new refresh token, revocation) commit before replying.

Endpoints (url_prefix=/api/v1/auth):
  POST   /auth/register  → 201  account + profile + token pair
  POST   /auth/login     → 200  account + profile + token pair
  POST   /auth/refresh   → 200  new access token
  POST   /auth/logout    → 200  refresh token revoked (auth)
  GET    /auth/me        → 200  account + profile (auth)
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from teamup.app.extensions import db
from teamup.app.middleware.auth_middleware import require_auth
from teamup.app.schemas.auth_schema import LoginSchema, RefreshTokenSchema, RegisterSchema
from teamup.app.services import auth_service

auth_bp = Blueprint("auth", __name__)


def _body(schema) -> dict:
    return schema.load(request.get_json(force=True) or {})


@auth_bp.route("/register", methods=["POST"])
def register():
    """POST /auth/register — Sign up with a username, email and password."""
    data = _body(RegisterSchema())
    result = auth_service.register_user(
        username=data["username"],
        email=data["email"],
        password=data["password"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """POST /auth/login — Sign in by email."""
    data = _body(LoginSchema())
    result = auth_service.login_user(email=data["email"], password=data["password"], session=db.session)
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    data = _body(RefreshTokenSchema())
    result = auth_service.refresh_access_token(raw_refresh_token=data["refresh_token"], session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@auth_bp.route("/logout", methods=["POST"])
@require_auth
def logout():
    data = _body(RefreshTokenSchema())
    auth_service.logout_user(raw_refresh_token=data["refresh_token"], session=db.session)
    db.session.commit()
    return jsonify({"data": {"message": "Signed out."}, "warnings": []}), 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    """GET /auth/me — The signed-in account, used by the frontend on load."""
    result = auth_service.get_current_user(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200
