"""
Unit tests for join_request_service: the status state machine, review
authorization and the membership insert that approval performs.

These tests run DB-free with mocked session/query behavior.
"""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from teamup.app.models import refresh_token, user  # noqa: F401
from teamup.app.errors import AppError, ErrorCode
from teamup.app.models.join_request import JoinRequestStatus
from teamup.app.models.project_member import MemberRole, ProjectMember
from teamup.app.services import join_request_service

TS = datetime(2026, 1, 1, tzinfo=timezone.utc)

PENDING = JoinRequestStatus.PENDING
APPROVED = JoinRequestStatus.APPROVED
REJECTED = JoinRequestStatus.REJECTED


def _join_request(**overrides):
    fields = dict(
        id=5, project_id=10, user_id=2, message="hi",
        status=PENDING, created_at=TS, updated_at=TS,
        reviewed_by=None, reviewed_at=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _project(leader: int = 1, max_team_size: int = 5):
    return SimpleNamespace(id=10, leader=leader, max_team_size=max_team_size)


# ═══════════════════════════════════════════════════════════════════════════
# State machine
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("target", [APPROVED, REJECTED])
def test_pending_can_be_resolved(target):
    join_request_service._validate_transition(PENDING, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (APPROVED, REJECTED),
        (REJECTED, APPROVED),
        (APPROVED, APPROVED),
        (REJECTED, PENDING),
        (PENDING, PENDING),
    ],
)
def test_other_transitions_are_refused(current, target):
    with pytest.raises(AppError) as exc_info:
        join_request_service._validate_transition(current, target)

    err = exc_info.value
    assert err.code == ErrorCode.INVALID_STATUS_TRANSITION
    assert err.http_status == 422
    assert err.field == "status"


# ═══════════════════════════════════════════════════════════════════════════
# update_join_request_status
# ═══════════════════════════════════════════════════════════════════════════

def test_review_missing_request_raises_404():
    session = MagicMock()
    session.get.return_value = None

    with pytest.raises(AppError) as exc_info:
        join_request_service.update_join_request_status(
            request_id=5, status=APPROVED, reviewed_by=1, session=session,
        )

    assert exc_info.value.code == ErrorCode.JOIN_REQUEST_NOT_FOUND
    assert exc_info.value.http_status == 404


def test_review_by_non_leader_forbidden():
    session = MagicMock()
    join_request = _join_request()
    session.get.side_effect = [join_request, _project(leader=1)]

    with pytest.raises(AppError) as exc_info:
        join_request_service.update_join_request_status(
            request_id=5, status=APPROVED, reviewed_by=2, session=session,
        )

    assert exc_info.value.code == ErrorCode.FORBIDDEN
    assert join_request.status is PENDING


@patch("teamup.app.services.join_request_service._add_member")
def test_reject_records_reviewer_without_membership(mock_add_member):
    session = MagicMock()
    join_request = _join_request()
    session.get.side_effect = [join_request, _project(leader=1)]

    result = join_request_service.update_join_request_status(
        request_id=5, status=REJECTED, reviewed_by=1, session=session,
    )

    mock_add_member.assert_not_called()
    assert result["status"] == "rejected"
    assert result["reviewed_by"] == 1
    assert join_request.reviewed_at is not None
    assert join_request.updated_at == join_request.reviewed_at
    session.flush.assert_called_once()


@patch("teamup.app.services.join_request_service._add_member")
def test_approve_adds_member(mock_add_member):
    session = MagicMock()
    project = _project(leader=1)
    session.get.side_effect = [_join_request(user_id=2), project]

    result = join_request_service.update_join_request_status(
        request_id=5, status=APPROVED, reviewed_by=1, session=session,
    )

    mock_add_member.assert_called_once_with(project, 2, session)
    assert result["status"] == "approved"


@patch("teamup.app.services.join_request_service._add_member")
def test_review_locks_project_row_before_counting(mock_add_member):
    session = MagicMock()
    session.get.side_effect = [_join_request(user_id=2), _project(leader=1)]

    join_request_service.update_join_request_status(
        request_id=5, status=APPROVED, reviewed_by=1, session=session,
    )

    project_call = session.get.call_args_list[1]
    assert project_call.args[1] == 10
    assert project_call.kwargs == {"with_for_update": True}


@patch("teamup.app.services.join_request_service._add_member")
def test_resolved_request_is_terminal(mock_add_member):
    session = MagicMock()
    session.get.side_effect = [_join_request(status=REJECTED), _project(leader=1)]

    with pytest.raises(AppError) as exc_info:
        join_request_service.update_join_request_status(
            request_id=5, status=APPROVED, reviewed_by=1, session=session,
        )

    assert exc_info.value.code == ErrorCode.INVALID_STATUS_TRANSITION
    mock_add_member.assert_not_called()


# ═══════════════════════════════════════════════════════════════════════════
# _add_member
# ═══════════════════════════════════════════════════════════════════════════

@patch("teamup.app.services.join_request_service.team_size", return_value=2)
def test_add_member_inserts_member_row(mock_team_size):
    session = MagicMock()
    session.execute.return_value.scalar_one_or_none.return_value = None

    join_request_service._add_member(_project(max_team_size=5), 2, session)

    added = session.add.call_args.args[0]
    assert isinstance(added, ProjectMember)
    assert added.project_id == 10
    assert added.user_id == 2
    assert added.role is MemberRole.MEMBER


@patch("teamup.app.services.join_request_service.team_size", return_value=5)
def test_add_member_refuses_full_team(mock_team_size):
    session = MagicMock()
    session.execute.return_value.scalar_one_or_none.return_value = None

    with pytest.raises(AppError) as exc_info:
        join_request_service._add_member(_project(max_team_size=5), 2, session)

    assert exc_info.value.code == ErrorCode.TEAM_FULL
    session.add.assert_not_called()


@patch("teamup.app.services.join_request_service.team_size")
def test_add_member_skips_existing_membership(mock_team_size):
    session = MagicMock()
    session.execute.return_value.scalar_one_or_none.return_value = SimpleNamespace(id=3)

    join_request_service._add_member(_project(), 2, session)

    mock_team_size.assert_not_called()
    session.add.assert_not_called()


# ═══════════════════════════════════════════════════════════════════════════
# Listing
# ═══════════════════════════════════════════════════════════════════════════

def test_received_for_user_leading_nothing_is_empty():
    session = MagicMock()
    session.execute.return_value.scalars.return_value.all.return_value = []

    assert join_request_service.get_received_join_requests(leader_id=3, session=session) == []
    session.execute.assert_called_once()
