"""
tests/integration/helpers.py — Shared request helpers for integration tests.

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test without fixture parameterization overhead.

  - register(client, ...)       → {"user", "access_token", "refresh_token"}
  - login(client, ...)          → {"user", "access_token", "refresh_token"}
  - auth_headers(token)         → {"Authorization": "Bearer <token>"}
  - make_project(client, ...)   → project dict
  - request_join(client, ...)   → HTTP response
  - review(client, ...)         → HTTP response
  - add_member(client, ...)     → join request approved via the API
"""

from __future__ import annotations


def register(
    client,
    username: str = "alice",
    email: str | None = None,
    password: str = "Password1",
) -> dict:
    """
    Registers a new user and returns the full response data dict.
    Returns: {"user": {...}, "access_token": "...", "refresh_token": "..."}
    """
    if email is None:
        email = f"{username}@test.com"
    resp = client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": password},
    )
    assert resp.status_code == 201, f"register failed: {resp.get_json()}"
    return resp.get_json()["data"]


def login(client, email: str, password: str = "Password1") -> dict:
    resp = client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password},
    )
    assert resp.status_code == 200, f"login failed: {resp.get_json()}"
    return resp.get_json()["data"]


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def make_project(
    client,
    token: str,
    title: str = "Alpha",
    description: str = "A test project",
    looking_for: list[str] | None = None,
    max_team_size: int = 5,
    tags: list[str] | None = None,
) -> dict:
    """Creates a project led by the token owner and returns the project dict."""
    payload: dict = {
        "title": title,
        "description": description,
        "looking_for": looking_for if looking_for is not None else ["Backend Developer"],
        "max_team_size": max_team_size,
    }
    if tags is not None:
        payload["tags"] = tags
    resp = client.post(
        "/api/v1/projects",
        json=payload,
        headers=auth_headers(token),
    )
    assert resp.status_code == 201, f"make_project failed: {resp.get_json()}"
    return resp.get_json()["data"]


def request_join(client, token: str, project_id: int, message: str | None = None):
    """Files a join request for the token owner. Returns the HTTP response."""
    body = {"message": message} if message is not None else {}
    return client.post(
        f"/api/v1/projects/{project_id}/join-requests",
        json=body,
        headers=auth_headers(token),
    )


def review(client, token: str, request_id: int, status: str):
    """Approves or rejects a join request as the token owner. Returns the HTTP response."""
    return client.patch(
        f"/api/v1/join-requests/{request_id}",
        json={"status": status},
        headers=auth_headers(token),
    )


def add_member(client, leader_token: str, member_token: str, project_id: int) -> dict:
    """Requests and approves membership in one go. Returns the approved request."""
    join = request_join(client, member_token, project_id)
    assert join.status_code == 201, f"request_join failed: {join.get_json()}"
    resp = review(client, leader_token, join.get_json()["data"]["id"], "approved")
    assert resp.status_code == 200, f"approve failed: {resp.get_json()}"
    return resp.get_json()["data"]


def project_detail(client, project_id: int, token: str | None = None) -> dict:
    headers = auth_headers(token) if token else {}
    resp = client.get(f"/api/v1/projects/{project_id}", headers=headers)
    assert resp.status_code == 200, f"project_detail failed: {resp.get_json()}"
    return resp.get_json()["data"]
