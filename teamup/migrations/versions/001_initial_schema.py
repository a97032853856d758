"""Initial schema — all tables, constraints, and indexes.

Revision: 001_initial_schema
Created:  2026-10-17

Append-only:
  This file must NEVER be edited after it has been applied to any database.
  If a schema change is required, create a NEW migration file.

Creation order (FK dependency order):
  users → profiles → refresh_tokens → projects → project_members
  → join_requests

Enumerated columns (project_members.role, join_requests.status) are stored
as VARCHAR with CHECK constraints rather than PostgreSQL ENUM types, so the
same model definitions run unchanged on the SQLite test database.

ON DELETE policies:
  profiles.id                 → CASCADE   (profile owned by user)
  refresh_tokens.user_id      → CASCADE   (token owned by user)
  projects.leader             → RESTRICT  (cannot delete a profile that leads projects)
  project_members.project_id  → CASCADE   (memberships owned by project)
  project_members.user_id     → CASCADE
  join_requests.project_id    → CASCADE   (requests owned by project)
  join_requests.user_id       → CASCADE
  join_requests.reviewed_by   → SET NULL  (keep the request if the reviewer goes)
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# ── Alembic revision identifiers ──────────────────────────────────────────
revision: str = "001_initial_schema"
down_revision: str | None = None      # first migration
branch_labels: tuple | None = None
depends_on: tuple | None = None

_STRING_LIST = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """Apply the full initial schema."""

    # ── Step 1: users ──────────────────────────────────────────────────────

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint(
            "email LIKE '%@%'",
            name="ck_users_email_format",
        ),
    )

    # ── Step 2: profiles ───────────────────────────────────────────────────
    # Shares its primary key with users.

    op.create_table(
        "profiles",
        sa.Column(
            "id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_profiles_user"),
            nullable=False,
        ),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("name", sa.String(100), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("skills", _STRING_LIST, nullable=True),
        sa.Column("linkedin_link", sa.String(255), nullable=True),
        sa.Column("github_link", sa.String(255), nullable=True),
        sa.Column("twitter_link", sa.String(255), nullable=True),
        sa.Column("portfolio_url", sa.String(255), nullable=True),
        sa.Column("branch", sa.String(100), nullable=True),
        sa.Column("batch_year", sa.Integer(), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column(
            "profile_completed",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
        sa.UniqueConstraint("username", name="uq_profiles_username"),
        sa.CheckConstraint(
            "LENGTH(TRIM(username)) > 0",
            name="ck_profiles_username_nonempty",
        ),
    )

    # ── Step 3: refresh_tokens ─────────────────────────────────────────────

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE", name="fk_refresh_tokens_user"),
            nullable=False,
        ),
        sa.Column("token_hash", sa.String(255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "revoked",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_refresh_tokens"),
        sa.UniqueConstraint("token_hash", name="uq_refresh_tokens_token_hash"),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])

    # ── Step 4: projects ───────────────────────────────────────────────────

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("tags", _STRING_LIST, nullable=True),
        sa.Column("looking_for", _STRING_LIST, nullable=False),
        sa.Column(
            "max_team_size",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("3"),
        ),
        sa.Column(
            "leader",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="RESTRICT", name="fk_projects_leader"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
        sa.CheckConstraint(
            "LENGTH(TRIM(title)) > 0",
            name="ck_projects_title_nonempty",
        ),
        sa.CheckConstraint(
            "max_team_size BETWEEN 3 AND 9",
            name="ck_projects_team_size_range",
        ),
    )
    op.create_index("ix_projects_leader", "projects", ["leader"])
    op.create_index("idx_projects_created_at", "projects", ["created_at"])

    # ── Step 5: project_members ────────────────────────────────────────────

    op.create_table(
        "project_members",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "project_id",
            sa.Integer(),
            sa.ForeignKey("projects.id", ondelete="CASCADE", name="fk_project_members_project"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE", name="fk_project_members_user"),
            nullable=False,
        ),
        sa.Column(
            "role",
            sa.String(16),
            nullable=False,
            server_default="member",
        ),
        sa.Column(
            "joined_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_project_members"),
        sa.UniqueConstraint("project_id", "user_id", name="uq_project_members_project_user"),
        sa.CheckConstraint(
            "role IN ('leader', 'member')",
            name="ck_project_members_role",
        ),
    )
    op.create_index("ix_project_members_project_id", "project_members", ["project_id"])
    op.create_index("ix_project_members_user_id", "project_members", ["user_id"])

    # ── Step 6: join_requests ──────────────────────────────────────────────
    # UNIQUE(project_id, user_id) is what makes a repeated request idempotent.

    op.create_table(
        "join_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "project_id",
            sa.Integer(),
            sa.ForeignKey("projects.id", ondelete="CASCADE", name="fk_join_requests_project"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE", name="fk_join_requests_user"),
            nullable=False,
        ),
        sa.Column("message", sa.String(500), nullable=True),
        sa.Column(
            "status",
            sa.String(16),
            nullable=False,
            server_default="pending",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "reviewed_by",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="SET NULL", name="fk_join_requests_reviewer"),
            nullable=True,
        ),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_join_requests"),
        sa.UniqueConstraint("project_id", "user_id", name="uq_join_requests_project_user"),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_join_requests_status",
        ),
    )
    op.create_index("ix_join_requests_user_id", "join_requests", ["user_id"])
    op.create_index(
        "idx_join_requests_project_status",
        "join_requests",
        ["project_id", "status"],
    )


def downgrade() -> None:
    """Drop everything in reverse dependency order."""
    op.drop_index("idx_join_requests_project_status", table_name="join_requests")
    op.drop_index("ix_join_requests_user_id", table_name="join_requests")
    op.drop_table("join_requests")

    op.drop_index("ix_project_members_user_id", table_name="project_members")
    op.drop_index("ix_project_members_project_id", table_name="project_members")
    op.drop_table("project_members")

    op.drop_index("idx_projects_created_at", table_name="projects")
    op.drop_index("ix_projects_leader", table_name="projects")
    op.drop_table("projects")

    op.drop_index("ix_refresh_tokens_user_id", table_name="refresh_tokens")
    op.drop_table("refresh_tokens")

    op.drop_table("profiles")
    op.drop_table("users")
