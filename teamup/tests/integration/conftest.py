"""
tests/integration/conftest.py — Fixtures for all integration tests.

Design:
  - Tests run against a real database: in-memory SQLite by default, or
    whatever TEST_DATABASE_URL points at (e.g. a teamup_test PostgreSQL DB).
  - The app is created once per session using create_app("testing").
  - All tables are created once via db.create_all() at session start.
  - Between tests, all rows are deleted in FK-safe order so tests are isolated.

Request helpers (register, auth_headers, make_project, ...) live in
helpers.py as plain functions so any test can call them with arbitrary
arguments.
"""

from __future__ import annotations

import pytest

from teamup.app import create_app
from teamup.app.extensions import db as _db


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """
    Creates the Flask application in 'testing' mode once for the entire test session.

    Steps:
      1. Create app with TestingConfig.
      2. Run db.create_all() to create all tables.
      3. Yield the app for the test session.
      4. Drop all tables at teardown.
    """
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """
    Deletes all rows after every test in FK-safe order.

    projects.leader is ON DELETE RESTRICT, so projects must go before the
    profiles that lead them.
    """
    yield  # run the test

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test

        from teamup.app.models.join_request import JoinRequest
        from teamup.app.models.profile import Profile
        from teamup.app.models.project import Project
        from teamup.app.models.project_member import ProjectMember
        from teamup.app.models.refresh_token import RefreshToken
        from teamup.app.models.user import User

        for model in (JoinRequest, ProjectMember, Project, RefreshToken, Profile, User):
            _db.session.query(model).delete()
        _db.session.commit()
        _db.session.remove()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()
