"""
services/project_service.py — Project, membership and join-request intake logic.

Authorization rules:
  - Create:            any authenticated caller with a profile; becomes leader.
  - Browse / detail:   anyone; the caller's role is attached when known.
  - Update / delete:   leader only (FORBIDDEN 403, distinct from 404).
  - Request to join:   anyone who is neither leader nor member.
  - Leave:             members only; the leader is refused (LEADER_CANNOT_LEAVE).

Team membership:
  - The leader gets a ProjectMember(role='leader') row when the project is
    created. Project.leader stays the source of truth for leadership; role
    derivation never relies on that row.
  - "Team size" counts the leader plus every other member row.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from teamup.app.errors import AppError, ErrorCode
from teamup.app.models.join_request import JoinRequest, JoinRequestStatus
from teamup.app.models.profile import Profile
from teamup.app.models.project import Project
from teamup.app.models.project_member import MemberRole, ProjectMember
from teamup.app.services.access import (
    UserRole,
    can_leave_project,
    can_manage_project,
    derive_user_role,
    enforce,
    role_value,
)
from teamup.app.services.serializers import (
    join_request_to_dict,
    member_to_dict,
    profile_to_dict,
    project_to_dict,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "tags", "looking_for", "max_team_size")


# ── Private helpers ────────────────────────────────────────────────────────

def _project_not_found(project_id: int) -> AppError:
    return AppError(
        ErrorCode.PROJECT_NOT_FOUND,
        f"Project {project_id} does not exist.",
        404,
    )


def _get_project_or_404(project_id: int, session: Session) -> Project:
    """Returns the Project or raises PROJECT_NOT_FOUND (404)."""
    project = session.get(Project, project_id)
    if project is None:
        raise _project_not_found(project_id)
    return project


def _get_membership(project_id: int, user_id: int, session: Session) -> ProjectMember | None:
    return session.execute(
        select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
        )
    ).scalar_one_or_none()


def _get_join_request(project_id: int, user_id: int, session: Session) -> JoinRequest | None:
    return session.execute(
        select(JoinRequest).where(
            JoinRequest.project_id == project_id,
            JoinRequest.user_id == user_id,
        )
    ).scalar_one_or_none()


def _member_project_ids(user_id: int, session: Session) -> set[int]:
    """Ids of every project the user holds a membership row in."""
    return set(session.execute(
        select(ProjectMember.project_id).where(ProjectMember.user_id == user_id)
    ).scalars().all())


def _pending_project_ids(user_id: int, session: Session) -> set[int]:
    """Ids of every project the user has a pending join request for."""
    return set(session.execute(
        select(JoinRequest.project_id).where(
            JoinRequest.user_id == user_id,
            JoinRequest.status == JoinRequestStatus.PENDING,
        )
    ).scalars().all())


def team_size(project: Project, session: Session) -> int:
    """
    Current team size: the leader plus every non-leader member row.

    Counting the leader separately keeps the number right for projects whose
    leader has no membership row.
    """
    others = session.execute(
        select(func.count(ProjectMember.id)).where(
            ProjectMember.project_id == project.id,
            ProjectMember.user_id != project.leader,
        )
    ).scalar_one()
    return int(others) + 1


def _with_role(project: Project, role: UserRole | None) -> dict:
    payload = project_to_dict(project)
    payload["user_role"] = role_value(role)
    return payload


def _newest_first_key(project: Project):
    return (project.created_at, project.id)


# ── Public service functions ───────────────────────────────────────────────

def create_project(caller_id: int, data: dict, session: Session) -> dict:
    """
    Creates a project led by the caller and records the leader's membership.

    Args:
        caller_id: Authenticated user creating the project.
        data:      Validated dict from ProjectSchema (title, description,
                   tags, looking_for, max_team_size).

    Raises:
      AppError(PROFILE_NOT_FOUND, 404) — the caller has no profile to lead with

    Returns: the project dict with user_role = "leader".
    """
    if session.get(Profile, caller_id) is None:
        raise AppError(
            ErrorCode.PROFILE_NOT_FOUND,
            f"Profile {caller_id} does not exist.",
            404,
        )

    project = Project(
        title=data["title"],
        description=data["description"],
        tags=data.get("tags"),
        looking_for=data["looking_for"],
        max_team_size=data["max_team_size"],
        leader=caller_id,
    )
    session.add(project)
    session.flush()  # populate project.id before creating the membership

    session.add(ProjectMember(
        project_id=project.id,
        user_id=caller_id,
        role=MemberRole.LEADER,
    ))
    session.flush()

    logger.info("Project %s created by %s", project.id, caller_id)
    return _with_role(project, UserRole.LEADER)


def get_projects_with_user_status(caller_id: int | None, session: Session) -> list[dict]:
    """
    Every project, newest first, each annotated with the caller's user_role.

    Anonymous callers (caller_id None) get user_role = null everywhere and
    cost no membership queries.
    """
    projects = session.execute(
        select(Project).order_by(Project.created_at.desc(), Project.id.desc())
    ).scalars().all()

    if caller_id is None:
        return [_with_role(p, None) for p in projects]

    member_ids = _member_project_ids(caller_id, session)
    pending_ids = _pending_project_ids(caller_id, session)

    return [
        _with_role(p, derive_user_role(p, caller_id, member_ids, pending_ids))
        for p in projects
    ]


def get_user_projects_with_role(caller_id: int, session: Session) -> list[dict]:
    """
    Projects the caller leads or belongs to, newest first.

    Led projects and member projects are fetched separately and merged by
    id; when a project appears in both, the leader role wins.
    """
    led = session.execute(
        select(Project).where(Project.leader == caller_id)
    ).scalars().all()

    merged: dict[int, tuple[Project, UserRole]] = {
        p.id: (p, UserRole.LEADER) for p in led
    }

    member_ids = _member_project_ids(caller_id, session) - set(merged)
    if member_ids:
        member_projects = session.execute(
            select(Project).where(Project.id.in_(member_ids))
        ).scalars().all()
        for p in member_projects:
            merged.setdefault(p.id, (p, UserRole.MEMBER))

    ordered = sorted(merged.values(), key=lambda pair: _newest_first_key(pair[0]), reverse=True)
    return [_with_role(p, role) for p, role in ordered]


def get_project_with_members(
        project_id: int,
        caller_id: int | None,
        session: Session,
) -> dict:
    """
    Project detail: the project, its leader's profile, every member with
    their profile, the current team size, and the caller's role.

    Raises:
      AppError(PROJECT_NOT_FOUND, 404) — no such project
      AppError(PROFILE_NOT_FOUND, 404) — the leader's profile is gone

    A failure while loading the member list is logged and degrades to an
    empty list rather than failing the whole page.
    """
    project = _get_project_or_404(project_id, session)

    leader_profile = session.get(Profile, project.leader)
    if leader_profile is None:
        raise AppError(
            ErrorCode.PROFILE_NOT_FOUND,
            f"Leader profile {project.leader} for project {project_id} does not exist.",
            404,
        )

    # The savepoint keeps the outer transaction usable on PostgreSQL, where a
    # failed statement otherwise aborts every later query in the request.
    try:
        with session.begin_nested():
            rows = session.execute(
                select(ProjectMember, Profile)
                .join(Profile, Profile.id == ProjectMember.user_id)
                .where(ProjectMember.project_id == project_id)
                .order_by(ProjectMember.joined_at.asc(), ProjectMember.id.asc())
            ).all()
        members = [member_to_dict(membership, profile) for membership, profile in rows]
    except SQLAlchemyError:
        logger.exception("Could not load members of project %s", project_id)
        members = []

    role = None
    if caller_id is not None:
        member_ids = {project_id} if _get_membership(project_id, caller_id, session) else set()
        request = _get_join_request(project_id, caller_id, session)
        pending_ids = {project_id} if request is not None and request.is_pending else set()
        role = derive_user_role(project, caller_id, member_ids, pending_ids)

    payload = _with_role(project, role)
    payload["leader_profile"] = profile_to_dict(leader_profile)
    payload["members"] = members
    payload["team_size"] = team_size(project, session)
    return payload


def update_project(
        project_id: int,
        caller_id: int,
        data: dict,
        session: Session,
) -> dict:
    """
    Partially updates a project. Leader only.

    Raises:
      AppError(PROJECT_NOT_FOUND, 404)
      AppError(FORBIDDEN, 403)                 — caller is not the leader
      AppError(TEAM_SIZE_BELOW_MEMBERS, 422)   — new max below current team
    """
    project = session.get(Project, project_id)
    enforce(
        can_manage_project(project, caller_id),
        not_found=_project_not_found(project_id),
        forbidden=AppError(
            ErrorCode.FORBIDDEN,
            "Only the project leader may edit this project.",
            403,
        ),
    )

    new_size = data.get("max_team_size")
    if new_size is not None:
        current = team_size(project, session)
        if new_size < current:
            raise AppError(
                ErrorCode.TEAM_SIZE_BELOW_MEMBERS,
                f"The team already has {current} members; max_team_size cannot be {new_size}.",
                422,
                field="max_team_size",
            )

    for key in UPDATABLE_FIELDS:
        if key in data:
            setattr(project, key, data[key])

    session.flush()
    logger.info("Project %s updated by %s (%s)", project_id, caller_id, ", ".join(sorted(data)))
    return _with_role(project, UserRole.LEADER)


def delete_project(project_id: int, caller_id: int, session: Session) -> None:
    """
    Deletes a project with its memberships and join requests. Leader only.

    Raises:
      AppError(PROJECT_NOT_FOUND, 404)
      AppError(FORBIDDEN, 403) — caller is not the leader
    """
    project = session.get(Project, project_id)
    enforce(
        can_manage_project(project, caller_id),
        not_found=_project_not_found(project_id),
        forbidden=AppError(
            ErrorCode.FORBIDDEN,
            "Only the project leader may delete this project.",
            403,
        ),
    )

    session.delete(project)
    session.flush()
    logger.info("Project %s deleted by %s", project_id, caller_id)


def request_to_join_project(
        project_id: int,
        caller_id: int,
        message: str | None,
        session: Session,
) -> tuple[dict, bool]:
    """
    Files a pending join request, at most one per (project, user).

    If the caller already has a request for this project (in any status),
    that request is returned and nothing is inserted. The UNIQUE constraint
    on (project_id, user_id) settles concurrent calls: the loser's insert
    fails inside a savepoint and it returns the winner's row.

    Raises:
      AppError(PROJECT_NOT_FOUND, 404)
      AppError(ALREADY_MEMBER, 409) — caller leads or belongs to the project

    Returns: (join request dict, created) — created is False when an
    existing request satisfied the call.
    """
    project = _get_project_or_404(project_id, session)

    if project.leader == caller_id or _get_membership(project_id, caller_id, session):
        raise AppError(
            ErrorCode.ALREADY_MEMBER,
            f"You are already on the team of project {project_id}.",
            409,
        )

    existing = _get_join_request(project_id, caller_id, session)
    if existing is not None:
        return join_request_to_dict(existing), False

    try:
        with session.begin_nested():
            join_request = JoinRequest(
                project_id=project_id,
                user_id=caller_id,
                message=message,
                status=JoinRequestStatus.PENDING,
            )
            session.add(join_request)
            session.flush()
    except IntegrityError:
        existing = _get_join_request(project_id, caller_id, session)
        if existing is None:
            raise
        logger.info("Join request race on project %s for %s resolved to existing row", project_id, caller_id)
        return join_request_to_dict(existing), False

    logger.info("Join request %s filed by %s for project %s", join_request.id, caller_id, project_id)
    return join_request_to_dict(join_request), True


def leave_project(project_id: int, caller_id: int, session: Session) -> None:
    """
    Removes the caller's membership. The caller's old join request for the
    project is removed too, so they may ask to join again later.

    Raises:
      AppError(PROJECT_NOT_FOUND, 404)
      AppError(LEADER_CANNOT_LEAVE, 403) — leaders delete the project instead
      AppError(NOT_A_MEMBER, 404)        — caller has no membership to drop
    """
    project = _get_project_or_404(project_id, session)
    membership = _get_membership(project_id, caller_id, session)

    enforce(
        can_leave_project(project, membership, caller_id),
        not_found=AppError(
            ErrorCode.NOT_A_MEMBER,
            f"You are not a member of project {project_id}.",
            404,
        ),
        forbidden=AppError(
            ErrorCode.LEADER_CANNOT_LEAVE,
            "Project leaders cannot leave their own project. Delete it instead.",
            403,
        ),
    )

    session.delete(membership)
    old_request = _get_join_request(project_id, caller_id, session)
    if old_request is not None:
        session.delete(old_request)
    session.flush()
    logger.info("User %s left project %s", caller_id, project_id)
