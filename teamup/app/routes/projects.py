"""
routes/projects.py — Project, membership and join-request intake handlers.

Layer rules:
  - Parse request body
  - Validate with ProjectSchema / CreateJoinRequestSchema
  - Call exactly ONE service function
  - Commit the DB session
  - Return the standard response envelope: {"data": ..., "warnings": []}

Endpoints (url_prefix=/api/v1/projects):
  GET    /projects/options                   → 200  suggested roles, tags, branches
  POST   /projects                           → 201  create (auth)
  GET    /projects                           → 200  browse, user_role attached when authed
  GET    /projects/mine                      → 200  led + member projects (auth)
  GET    /projects/<id>                      → 200  detail with members
  PATCH  /projects/<id>                      → 200  leader only (auth)
  DELETE /projects/<id>                      → 200  leader only (auth)
  POST   /projects/<id>/join-requests        → 201 new / 200 existing (auth)
  DELETE /projects/<id>/members/me           → 200  leave (auth)
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from teamup.app.catalog import BRANCHES, COMMON_ROLES, COMMON_TAGS
from teamup.app.extensions import db
from teamup.app.middleware.auth_middleware import optional_auth, require_auth
from teamup.app.schemas.join_request_schema import CreateJoinRequestSchema
from teamup.app.schemas.project_schema import ProjectSchema
from teamup.app.services import project_service

projects_bp = Blueprint("projects", __name__)


@projects_bp.route("/options", methods=["GET"])
def get_options():
    """GET /projects/options — Static suggestion lists for the forms."""
    data = {
        "roles": list(COMMON_ROLES),
        "tags": list(COMMON_TAGS),
        "branches": list(BRANCHES),
    }
    return jsonify({"data": data, "warnings": []}), 200


@projects_bp.route("", methods=["POST"])
@require_auth
def create_project():
    """POST /projects — Create a project led by the caller."""
    data = ProjectSchema().load(request.get_json(force=True) or {})
    result = project_service.create_project(
        caller_id=g.user_id,
        data=data,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@projects_bp.route("", methods=["GET"])
@optional_auth
def list_projects():
    result = project_service.get_projects_with_user_status(
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@projects_bp.route("/mine", methods=["GET"])
@require_auth
def list_my_projects():
    result = project_service.get_user_projects_with_role(
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@projects_bp.route("/<int:project_id>", methods=["GET"])
@optional_auth
def get_project(project_id: int):
    result = project_service.get_project_with_members(
        project_id=project_id,
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@projects_bp.route("/<int:project_id>", methods=["PATCH"])
@require_auth
def update_project(project_id: int):
    """PATCH /projects/<id> — Partial update; absent keys are left alone."""
    data = ProjectSchema(partial=True).load(request.get_json(force=True) or {})
    result = project_service.update_project(
        project_id=project_id,
        caller_id=g.user_id,
        data=data,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@projects_bp.route("/<int:project_id>", methods=["DELETE"])
@require_auth
def delete_project(project_id: int):
    project_service.delete_project(
        project_id=project_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": {"message": "Project deleted."}, "warnings": []}), 200


@projects_bp.route("/<int:project_id>/join-requests", methods=["POST"])
@require_auth
def request_to_join(project_id: int):
    """
    POST /projects/<id>/join-requests — Ask to join a project.

    The body is optional. Repeating the call returns the caller's existing
    request with 200 instead of creating a second one.
    """
    data = CreateJoinRequestSchema().load(request.get_json(silent=True) or {})
    result, created = project_service.request_to_join_project(
        project_id=project_id,
        caller_id=g.user_id,
        message=data["message"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201 if created else 200


@projects_bp.route("/<int:project_id>/members/me", methods=["DELETE"])
@require_auth
def leave_project(project_id: int):
    project_service.leave_project(
        project_id=project_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": {"message": "You left the project."}, "warnings": []}), 200
