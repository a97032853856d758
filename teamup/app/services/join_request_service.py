"""
services/join_request_service.py — Join-request inbox, outbox and review.

State machine:
    pending ──approve──▶ approved   (terminal; requester becomes a member)
    pending ──reject───▶ rejected   (terminal)
There is no transition out of approved or rejected and no cancellation by
the requester. Requests are filed by project_service.request_to_join_project.

Authorization rules:
  - Sent list:      the requester's own requests.
  - Received list:  pending requests on projects the caller leads.
  - Review:         the leader of the request's project only (FORBIDDEN 403).

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility — only flush here. Approval and
    the membership insert share one transaction.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session, aliased

from teamup.app.errors import AppError, ErrorCode
from teamup.app.models.join_request import JoinRequest, JoinRequestStatus
from teamup.app.models.profile import Profile
from teamup.app.models.project import Project
from teamup.app.models.project_member import MemberRole, ProjectMember
from teamup.app.services.access import can_review_join_request, enforce
from teamup.app.services.project_service import team_size
from teamup.app.services.serializers import join_request_to_dict

logger = logging.getLogger(__name__)

# Allowed transitions; anything not listed here is refused.
TRANSITIONS: dict[JoinRequestStatus, frozenset[JoinRequestStatus]] = {
    JoinRequestStatus.PENDING: frozenset({JoinRequestStatus.APPROVED, JoinRequestStatus.REJECTED}),
    JoinRequestStatus.APPROVED: frozenset(),
    JoinRequestStatus.REJECTED: frozenset(),
}


def _validate_transition(current: JoinRequestStatus, requested: JoinRequestStatus) -> None:
    """Raises INVALID_STATUS_TRANSITION (422) if `requested` is not reachable from `current`."""
    if requested not in TRANSITIONS.get(current, frozenset()):
        raise AppError(
            ErrorCode.INVALID_STATUS_TRANSITION,
            f"Cannot move a join request from '{current.value}' to '{requested.value}'.",
            422,
            field="status",
        )


def _enriched_query():
    """join_requests joined with their project and the requester's profile."""
    requester = aliased(Profile)
    return (
        select(JoinRequest, Project, requester)
        .join(Project, Project.id == JoinRequest.project_id)
        .join(requester, requester.id == JoinRequest.user_id)
    )


def get_sent_join_requests(user_id: int, session: Session) -> list[dict]:
    """Every request the user has filed, in any status, newest first."""
    rows = session.execute(
        _enriched_query()
        .where(JoinRequest.user_id == user_id)
        .order_by(JoinRequest.created_at.desc(), JoinRequest.id.desc())
    ).all()
    return [join_request_to_dict(jr, project, requester) for jr, project, requester in rows]


def get_received_join_requests(leader_id: int, session: Session) -> list[dict]:
    """
    Pending requests on projects the user leads, newest first.

    Resolved requests never appear here; once approved or rejected they are
    only visible from the requester's sent list.
    """
    project_ids = session.execute(
        select(Project.id).where(Project.leader == leader_id)
    ).scalars().all()

    if not project_ids:
        return []

    rows = session.execute(
        _enriched_query()
        .where(
            JoinRequest.project_id.in_(project_ids),
            JoinRequest.status == JoinRequestStatus.PENDING,
        )
        .order_by(JoinRequest.created_at.desc(), JoinRequest.id.desc())
    ).all()
    return [join_request_to_dict(jr, project, requester) for jr, project, requester in rows]


def update_join_request_status(
        request_id: int,
        status: JoinRequestStatus,
        reviewed_by: int,
        session: Session,
) -> dict:
    """
    Approves or rejects a pending join request.

    On approval the requester gets a ProjectMember(role='member') row in the
    same transaction, unless the team is already at max_team_size.

    Raises:
      AppError(JOIN_REQUEST_NOT_FOUND, 404)
      AppError(FORBIDDEN, 403)                  — reviewer does not lead the project
      AppError(INVALID_STATUS_TRANSITION, 422)  — request is no longer pending
      AppError(TEAM_FULL, 422)                  — approving would exceed max_team_size

    Returns: the updated join request dict.
    """
    join_request = session.get(JoinRequest, request_id)
    # Row lock on the project serialises concurrent reviews, so two approvals
    # cannot both pass the max_team_size check.
    project = (
        session.get(Project, join_request.project_id, with_for_update=True)
        if join_request is not None
        else None
    )

    enforce(
        can_review_join_request(join_request, project, reviewed_by),
        not_found=AppError(
            ErrorCode.JOIN_REQUEST_NOT_FOUND,
            f"Join request {request_id} does not exist.",
            404,
        ),
        forbidden=AppError(
            ErrorCode.FORBIDDEN,
            "Only the project leader may review join requests.",
            403,
        ),
    )

    _validate_transition(join_request.status, status)

    if status == JoinRequestStatus.APPROVED:
        _add_member(project, join_request.user_id, session)

    now = datetime.now(timezone.utc)
    join_request.status = status
    join_request.reviewed_by = reviewed_by
    join_request.reviewed_at = now
    join_request.updated_at = now
    session.flush()

    logger.info(
        "Join request %s %s by %s (project %s, requester %s)",
        request_id,
        status.value,
        reviewed_by,
        project.id,
        join_request.user_id,
    )
    return join_request_to_dict(join_request)


def _add_member(project: Project, user_id: int, session: Session) -> None:
    """Inserts the membership an approval grants, enforcing max_team_size."""
    existing = session.execute(
        select(ProjectMember).where(
            ProjectMember.project_id == project.id,
            ProjectMember.user_id == user_id,
        )
    ).scalar_one_or_none()
    if existing is not None:
        return

    if team_size(project, session) >= project.max_team_size:
        raise AppError(
            ErrorCode.TEAM_FULL,
            f"Project {project.id} already has {project.max_team_size} members.",
            422,
        )

    session.add(ProjectMember(
        project_id=project.id,
        user_id=user_id,
        role=MemberRole.MEMBER,
    ))
