"""
tests/integration/test_join_requests.py — Integration tests for the join-request flow.

Endpoints covered:
  POST   /projects/<id>/join-requests
  GET    /join-requests/sent
  GET    /join-requests/received
  PATCH  /join-requests/<id>

Key behaviours:
  - requesting twice never creates a second row (201 then 200, same id)
  - received lists only pending requests; resolved ones vanish
  - approval turns the requester into a member in the same transaction
  - approved and rejected are terminal
  - only the project leader may review (403 otherwise)
"""

from __future__ import annotations

from teamup.tests.integration.helpers import (
    add_member,
    auth_headers,
    make_project,
    project_detail,
    register,
    request_join,
    review,
)


def _received(client, token: str) -> list[dict]:
    resp = client.get("/api/v1/join-requests/received", headers=auth_headers(token))
    assert resp.status_code == 200
    return resp.get_json()["data"]


def _sent(client, token: str) -> list[dict]:
    resp = client.get("/api/v1/join-requests/sent", headers=auth_headers(token))
    assert resp.status_code == 200
    return resp.get_json()["data"]


# ═══════════════════════════════════════════════════════════════════════════
# POST /projects/<id>/join-requests
# ═══════════════════════════════════════════════════════════════════════════

class TestRequestToJoin:

    def test_request_creates_pending_row(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")
        project = make_project(client, leader)

        resp = request_join(client, applicant["access_token"], project["id"], message="  Hi!  ")
        assert resp.status_code == 201
        join = resp.get_json()["data"]
        assert join["status"] == "pending"
        assert join["message"] == "Hi!"
        assert join["user_id"] == applicant["user"]["id"]
        assert join["reviewed_by"] is None

    def test_body_is_optional(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)

        resp = client.post(
            f"/api/v1/projects/{project['id']}/join-requests",
            headers=auth_headers(applicant),
        )
        assert resp.status_code == 201
        assert resp.get_json()["data"]["message"] is None

    def test_requesting_twice_returns_existing_row(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)

        first = request_join(client, applicant, project["id"])
        second = request_join(client, applicant, project["id"], message="again")
        assert first.status_code == 201
        assert second.status_code == 200
        assert second.get_json()["data"]["id"] == first.get_json()["data"]["id"]
        assert len(_sent(client, applicant)) == 1
        assert len(_received(client, leader)) == 1

    def test_rejected_request_is_returned_not_refiled(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)
        join = request_join(client, applicant, project["id"]).get_json()["data"]
        review(client, leader, join["id"], "rejected")

        again = request_join(client, applicant, project["id"])
        assert again.status_code == 200
        assert again.get_json()["data"]["status"] == "rejected"

    def test_leader_cannot_request_own_project(self, client):
        leader = register(client, "leader")["access_token"]
        project = make_project(client, leader)
        resp = request_join(client, leader, project["id"])
        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "ALREADY_MEMBER"

    def test_member_cannot_request_again(self, client):
        leader = register(client, "leader")["access_token"]
        member = register(client, "member")["access_token"]
        project = make_project(client, leader)
        add_member(client, leader, member, project["id"])

        resp = request_join(client, member, project["id"])
        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "ALREADY_MEMBER"

    def test_missing_project_returns_404(self, client):
        applicant = register(client, "applicant")["access_token"]
        resp = request_join(client, applicant, 999999)
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "PROJECT_NOT_FOUND"

    def test_overlong_message_returns_400(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)
        resp = request_join(client, applicant, project["id"], message="x" * 501)
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "message"

    def test_request_requires_auth(self, client):
        leader = register(client, "leader")["access_token"]
        project = make_project(client, leader)
        resp = client.post(f"/api/v1/projects/{project['id']}/join-requests", json={})
        assert resp.status_code == 401


# ═══════════════════════════════════════════════════════════════════════════
# GET /join-requests/sent and /received
# ═══════════════════════════════════════════════════════════════════════════

class TestListJoinRequests:

    def test_sent_includes_project_and_every_status(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        alpha = make_project(client, leader, title="Alpha")
        beta = make_project(client, leader, title="Beta")
        first = request_join(client, applicant, alpha["id"]).get_json()["data"]
        request_join(client, applicant, beta["id"])
        review(client, leader, first["id"], "rejected")

        sent = _sent(client, applicant)
        assert [s["project"]["title"] for s in sent] == ["Beta", "Alpha"]
        assert [s["status"] for s in sent] == ["pending", "rejected"]

    def test_received_includes_requester_profile(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)
        request_join(client, applicant, project["id"])

        received = _received(client, leader)
        assert len(received) == 1
        assert received[0]["requester"]["username"] == "applicant"
        assert received[0]["project"]["id"] == project["id"]

    def test_received_is_empty_for_non_leader(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)
        request_join(client, applicant, project["id"])
        assert _received(client, applicant) == []

    def test_resolved_requests_vanish_from_received(self, client):
        leader = register(client, "leader")["access_token"]
        approved = register(client, "approved_user")["access_token"]
        rejected = register(client, "rejected_user")["access_token"]
        waiting = register(client, "waiting_user")["access_token"]
        project = make_project(client, leader)

        to_approve = request_join(client, approved, project["id"]).get_json()["data"]
        to_reject = request_join(client, rejected, project["id"]).get_json()["data"]
        request_join(client, waiting, project["id"])
        assert len(_received(client, leader)) == 3

        review(client, leader, to_approve["id"], "approved")
        review(client, leader, to_reject["id"], "rejected")

        received = _received(client, leader)
        assert [r["requester"]["username"] for r in received] == ["waiting_user"]
        assert all(r["status"] == "pending" for r in received)

    def test_lists_require_auth(self, client):
        assert client.get("/api/v1/join-requests/sent").status_code == 401
        assert client.get("/api/v1/join-requests/received").status_code == 401


# ═══════════════════════════════════════════════════════════════════════════
# PATCH /join-requests/<id>
# ═══════════════════════════════════════════════════════════════════════════

class TestReviewJoinRequest:

    def test_end_to_end_request_and_approve(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")
        project = make_project(
            client, leader, title="Alpha", max_team_size=5, looking_for=["Backend Developer"],
        )

        join = request_join(client, applicant["access_token"], project["id"]).get_json()["data"]
        detail = project_detail(client, project["id"], applicant["access_token"])
        assert detail["user_role"] == "pending"

        resp = review(client, leader, join["id"], "approved")
        assert resp.status_code == 200
        approved = resp.get_json()["data"]
        assert approved["status"] == "approved"
        assert approved["reviewed_by"] is not None
        assert approved["reviewed_at"] is not None

        detail = project_detail(client, project["id"], applicant["access_token"])
        assert detail["user_role"] == "member"
        assert applicant["user"]["id"] in [m["user_id"] for m in detail["members"]]
        assert detail["team_size"] == 2

    def test_reject_does_not_add_member(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)
        join = request_join(client, applicant, project["id"]).get_json()["data"]

        resp = review(client, leader, join["id"], "rejected")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["status"] == "rejected"
        assert project_detail(client, project["id"])["team_size"] == 1

    def test_resolved_request_cannot_be_reviewed_again(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)
        join = request_join(client, applicant, project["id"]).get_json()["data"]
        review(client, leader, join["id"], "rejected")

        resp = review(client, leader, join["id"], "approved")
        assert resp.status_code == 422
        assert resp.get_json()["error"]["code"] == "INVALID_STATUS_TRANSITION"
        assert project_detail(client, project["id"], applicant)["user_role"] is None

    def test_non_leader_cannot_review(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)
        join = request_join(client, applicant, project["id"]).get_json()["data"]

        resp = review(client, applicant, join["id"], "approved")
        assert resp.status_code == 403
        assert resp.get_json()["error"]["code"] == "FORBIDDEN"
        assert _received(client, leader)[0]["status"] == "pending"

    def test_missing_request_returns_404(self, client):
        leader = register(client, "leader")["access_token"]
        resp = review(client, leader, 999999, "approved")
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "JOIN_REQUEST_NOT_FOUND"

    def test_pending_is_not_a_review_outcome(self, client):
        leader = register(client, "leader")["access_token"]
        applicant = register(client, "applicant")["access_token"]
        project = make_project(client, leader)
        join = request_join(client, applicant, project["id"]).get_json()["data"]

        resp = review(client, leader, join["id"], "pending")
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "status"

    def test_full_team_refuses_approval(self, client):
        leader = register(client, "leader")["access_token"]
        project = make_project(client, leader, max_team_size=3)
        add_member(client, leader, register(client, "m_one")["access_token"], project["id"])
        add_member(client, leader, register(client, "m_two")["access_token"], project["id"])

        late = register(client, "m_late")["access_token"]
        join = request_join(client, late, project["id"]).get_json()["data"]
        resp = review(client, leader, join["id"], "approved")
        assert resp.status_code == 422
        assert resp.get_json()["error"]["code"] == "TEAM_FULL"
        assert _received(client, leader)[0]["status"] == "pending"
