"""
services/serializers.py — ORM row → plain dict conversions.

Pure data-shaping. No DB access, no authorization, no Flask. Every service
returns dicts built here so the JSON shape of a Profile or a Project is
identical on every endpoint.
"""

from __future__ import annotations

from datetime import datetime


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def profile_to_dict(profile) -> dict:
    return {
        "id": profile.id,
        "username": profile.username,
        "name": profile.name,
        "bio": profile.bio,
        "skills": list(profile.skills) if profile.skills else None,
        "linkedin_link": profile.linkedin_link,
        "github_link": profile.github_link,
        "twitter_link": profile.twitter_link,
        "portfolio_url": profile.portfolio_url,
        "branch": profile.branch,
        "batch_year": profile.batch_year,
        "avatar_url": profile.avatar_url,
        "profile_completed": bool(profile.profile_completed),
        "created_at": _iso(profile.created_at),
    }


def project_to_dict(project) -> dict:
    return {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "tags": list(project.tags) if project.tags else None,
        "looking_for": list(project.looking_for or []),
        "max_team_size": project.max_team_size,
        "leader": project.leader,
        "created_at": _iso(project.created_at),
    }


def member_to_dict(membership, profile) -> dict:
    """A membership row with the member's profile attached."""
    return {
        "id": membership.id,
        "project_id": membership.project_id,
        "user_id": membership.user_id,
        "role": membership.role.value,
        "joined_at": _iso(membership.joined_at),
        "profile": profile_to_dict(profile) if profile is not None else None,
    }


def join_request_to_dict(join_request, project=None, requester=None) -> dict:
    """
    A join request, optionally enriched with its project and requester.

    List endpoints pass both; mutation endpoints return the bare row.
    """
    payload = {
        "id": join_request.id,
        "project_id": join_request.project_id,
        "user_id": join_request.user_id,
        "message": join_request.message,
        "status": join_request.status.value,
        "created_at": _iso(join_request.created_at),
        "updated_at": _iso(join_request.updated_at),
        "reviewed_by": join_request.reviewed_by,
        "reviewed_at": _iso(join_request.reviewed_at),
    }
    if project is not None:
        payload["project"] = project_to_dict(project)
    if requester is not None:
        payload["requester"] = profile_to_dict(requester)
    return payload
