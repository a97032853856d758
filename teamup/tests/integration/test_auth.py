"""
tests/integration/test_auth.py — Signup, email sign-in and the token lifecycle.

Field-level validation of the auth bodies lives in
unit/test_validation_schemas.py; these tests cover what only the running app
shows: the profile created at signup, the account payload, token revocation
and the shared envelopes.
"""

from __future__ import annotations

import pytest

from teamup.tests.integration.helpers import auth_headers, login, register


def _post_register(client, username, email, password="Password1"):
    return client.post("/api/v1/auth/register", json={
        "username": username, "email": email, "password": password,
    })


# ═══════════════════════════════════════════════════════════════════════════
# Signup
# ═══════════════════════════════════════════════════════════════════════════

class TestSignup:

    def test_signup_returns_account_profile_and_tokens(self, client):
        resp = _post_register(client, "alice", "alice@test.com")

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["warnings"] == []
        data = body["data"]
        assert data["access_token"] and data["refresh_token"]
        account = data["user"]
        assert account["email"] == "alice@test.com"
        assert "password_hash" not in account

        profile = account["profile"]
        assert profile["id"] == account["id"]
        assert profile["username"] == "alice"
        assert profile["profile_completed"] is False
        assert profile["skills"] is None

    def test_signed_up_profile_is_public(self, client):
        data = register(client, "bob")

        resp = client.get(f"/api/v1/profiles/{data['user']['id']}")

        assert resp.status_code == 200
        assert resp.get_json()["data"]["username"] == "bob"

    @pytest.mark.parametrize("username, email, code, field", [
        ("alice2", "shared@test.com", "DUPLICATE_EMAIL", "email"),
        ("shared", "other@test.com", "DUPLICATE_USERNAME", "username"),
    ])
    def test_taken_identity_returns_409(self, client, username, email, code, field):
        register(client, "shared", email="shared@test.com")

        resp = _post_register(client, username, email)

        assert resp.status_code == 409
        error = resp.get_json()["error"]
        assert (error["code"], error["field"]) == (code, field)

    def test_empty_body_reports_missing_field(self, client):
        resp = client.post("/api/v1/auth/register", json={})

        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "MISSING_FIELD"


# ═══════════════════════════════════════════════════════════════════════════
# Sign-in
# ═══════════════════════════════════════════════════════════════════════════

class TestSignIn:

    def test_login_by_email_embeds_profile(self, client):
        register(client, "alice")
        client.patch(
            "/api/v1/profiles/me",
            json={"name": "Alice"},
            headers=auth_headers(login(client, "alice@test.com")["access_token"]),
        )

        data = login(client, "alice@test.com")

        assert data["user"]["profile"]["name"] == "Alice"
        assert data["user"]["profile"]["profile_completed"] is True

    @pytest.mark.parametrize("email, password", [
        ("alice@test.com", "WrongPass1"),
        ("ghost@test.com", "Password1"),
    ])
    def test_bad_credentials_are_indistinguishable(self, client, email, password):
        register(client, "alice")

        resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})

        assert resp.status_code == 401
        body = resp.get_json()
        assert body["error"]["code"] == "INVALID_CREDENTIALS"
        assert "Traceback" not in str(body)


# ═══════════════════════════════════════════════════════════════════════════
# Token lifecycle
# ═══════════════════════════════════════════════════════════════════════════

class TestTokens:

    def test_refresh_then_logout_then_refresh_fails(self, client):
        data = register(client, "alice")
        payload = {"refresh_token": data["refresh_token"]}

        refreshed = client.post("/api/v1/auth/refresh", json=payload)
        assert refreshed.status_code == 200
        new_access = refreshed.get_json()["data"]["access_token"]
        assert new_access != data["access_token"]

        out = client.post("/api/v1/auth/logout", json=payload, headers=auth_headers(new_access))
        assert out.status_code == 200

        for path in ("/api/v1/auth/refresh", "/api/v1/auth/logout"):
            resp = client.post(path, json=payload, headers=auth_headers(new_access))
            assert resp.status_code == 401
            assert resp.get_json()["error"]["code"] == "REFRESH_TOKEN_INVALID"

    def test_unknown_refresh_token_returns_401(self, client):
        resp = client.post("/api/v1/auth/refresh", json={"refresh_token": "not-a-token"})

        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == "REFRESH_TOKEN_INVALID"

    def test_me_returns_signed_in_account(self, client):
        data = register(client, "alice")

        resp = client.get("/api/v1/auth/me", headers=auth_headers(data["access_token"]))

        assert resp.status_code == 200
        me = resp.get_json()["data"]
        assert me["id"] == data["user"]["id"]
        assert me["profile"]["username"] == "alice"

    @pytest.mark.parametrize("headers, code", [
        ({}, "TOKEN_MISSING"),
        ({"Authorization": "Bearer bad.token.here"}, "TOKEN_INVALID"),
        ({"Authorization": "notbearer xyz"}, "TOKEN_INVALID"),
    ])
    def test_me_rejects_missing_or_bad_token(self, client, headers, code):
        resp = client.get("/api/v1/auth/me", headers=headers)

        assert resp.status_code == 401
        assert resp.get_json()["error"]["code"] == code


# ═══════════════════════════════════════════════════════════════════════════
# App-wide behaviour
# ═══════════════════════════════════════════════════════════════════════════

def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/v1/nowhere")

    assert resp.status_code == 404
    assert resp.get_json()["error"]["code"] == "NOT_FOUND"


def test_cors_reflects_frontend_origin_in_testing(client):
    resp = client.get("/api/v1/projects/options", headers={"Origin": "http://localhost:3000"})

    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert "PATCH" in resp.headers["Access-Control-Allow-Methods"]
