"""
models/project.py — Project table definition.

No business logic. No imports from services or routes.

Key design points:
  - `leader` is the single source of truth for leadership. The leader also
    gets a ProjectMember(role='leader') row at creation, but role derivation
    never depends on that row existing.
  - `max_team_size` is bounded 3..9 here (CHECK) and in the schema.
  - Deleting a project deletes its memberships and join requests, both via
    ON DELETE CASCADE and via the ORM cascade (SQLite does not enforce FKs
    unless asked to).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teamup.app.extensions import db
from teamup.app.models.types import StringList, utcnow

MIN_TEAM_SIZE = 3
MAX_TEAM_SIZE = 9


class Project(db.Model):
    __tablename__ = "projects"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(title)) > 0",
            name="ck_projects_title_nonempty",
        ),
        CheckConstraint(
            f"max_team_size BETWEEN {MIN_TEAM_SIZE} AND {MAX_TEAM_SIZE}",
            name="ck_projects_team_size_range",
        ),
        # Browse page lists everything newest-first.
        Index("idx_projects_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # NULL rather than an empty list when no tags were given.
    tags: Mapped[list[str] | None] = mapped_column(StringList, nullable=True)

    # Non-empty; enforced by the schema (JSON columns cannot carry a portable CHECK).
    looking_for: Mapped[list[str]] = mapped_column(StringList, nullable=False)

    max_team_size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=MIN_TEAM_SIZE,
        server_default=str(MIN_TEAM_SIZE),
    )

    # ON DELETE RESTRICT: a profile that leads projects cannot be removed
    # until those projects are deleted.
    leader: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,   # "projects I lead" lookups
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    leader_profile: Mapped["Profile"] = relationship(  # noqa: F821
        "Profile",
        back_populates="led_projects",
        foreign_keys=[leader],
    )

    members: Mapped[list["ProjectMember"]] = relationship(  # noqa: F821
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectMember.joined_at",
    )

    join_requests: Mapped[list["JoinRequest"]] = relationship(  # noqa: F821
        "JoinRequest",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Project id={self.id} title={self.title!r} leader={self.leader}>"
