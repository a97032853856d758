"""
services/access.py — Role derivation and permission decisions.

Pure functions over already-loaded rows. No session and no Flask, so
every rule here is unit-testable on SimpleNamespace stand-ins.

Role of a caller relative to a project (checked in this order, first hit wins):
  1. leader   — project.leader == caller_id
  2. member   — caller has a ProjectMember row for the project
  3. pending  — caller has a pending JoinRequest for the project
  4. None     — anything else, including anonymous callers

Permission checks return a Decision instead of raising, so the caller can
tell "no such project" from "not yours". enforce() converts a refusal into
the matching AppError at the service boundary.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Collection

from teamup.app.errors import AppError, ErrorCode

logger = logging.getLogger(__name__)


class UserRole(str, enum.Enum):
    LEADER  = "leader"
    MEMBER  = "member"
    PENDING = "pending"


class Decision(str, enum.Enum):
    ALLOWED         = "allowed"
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND       = "not_found"
    FORBIDDEN       = "forbidden"


def derive_user_role(
        project,
        caller_id: int | None,
        member_project_ids: Collection[int],
        pending_project_ids: Collection[int],
) -> UserRole | None:
    """Returns the caller's role for one project, or None."""
    if caller_id is None:
        return None
    if project.leader == caller_id:
        return UserRole.LEADER
    if project.id in member_project_ids:
        return UserRole.MEMBER
    if project.id in pending_project_ids:
        return UserRole.PENDING
    return None


def role_value(role: UserRole | None) -> str | None:
    """JSON form of a role: its string value, or null."""
    return role.value if role is not None else None


# ── Permission predicates ──────────────────────────────────────────────────

def can_manage_project(project, caller_id: int | None) -> Decision:
    """Edit or delete a project: leader only."""
    if caller_id is None:
        return Decision.UNAUTHENTICATED
    if project is None:
        return Decision.NOT_FOUND
    if project.leader != caller_id:
        return Decision.FORBIDDEN
    return Decision.ALLOWED


def can_review_join_request(join_request, project, caller_id: int | None) -> Decision:
    """Approve or reject a join request: leader of the request's project only."""
    if caller_id is None:
        return Decision.UNAUTHENTICATED
    if join_request is None or project is None:
        return Decision.NOT_FOUND
    if project.leader != caller_id:
        return Decision.FORBIDDEN
    return Decision.ALLOWED


def can_leave_project(project, membership, caller_id: int | None) -> Decision:
    """
    Leave a project: any member except the leader.

    Leaders are refused whether or not they hold a membership row; they
    must delete the project instead.
    """
    if caller_id is None:
        return Decision.UNAUTHENTICATED
    if project is None:
        return Decision.NOT_FOUND
    if project.leader == caller_id:
        return Decision.FORBIDDEN
    if membership is None:
        return Decision.NOT_FOUND
    return Decision.ALLOWED


def enforce(
        decision: Decision,
        *,
        not_found: AppError,
        forbidden: AppError,
) -> None:
    """
    Raises the AppError matching a refusal; returns silently on ALLOWED.

    The caller supplies the not-found and forbidden errors because their
    codes and messages depend on what was being accessed.
    """
    if decision is Decision.ALLOWED:
        return
    if decision is Decision.UNAUTHENTICATED:
        raise AppError(
            ErrorCode.TOKEN_MISSING,
            "Authentication required.",
            401,
        )
    if decision is Decision.NOT_FOUND:
        raise not_found
    logger.warning("Access refused: %s", forbidden.message)
    raise forbidden
