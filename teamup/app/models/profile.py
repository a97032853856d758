"""
models/profile.py — Profile table definition.

One profile per user, keyed by the user's id and created at registration.
Only its owner mutates it; anyone may read it.
No business logic. No imports from services or routes.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teamup.app.extensions import db
from teamup.app.models.types import StringList, utcnow


class Profile(db.Model):
    __tablename__ = "profiles"

    __table_args__ = (
        # Also enforced by the marshmallow schema (length + charset).
        CheckConstraint(
            "LENGTH(TRIM(username)) > 0",
            name="ck_profiles_username_nonempty",
        ),
    )

    # Same value as users.id; the profile is the public face of the identity.
    id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Ordered, upper-cased, de-duplicated by the schema. NULL when empty.
    skills: Mapped[list[str] | None] = mapped_column(StringList, nullable=True)

    linkedin_link: Mapped[str | None] = mapped_column(String(255), nullable=True)
    github_link: Mapped[str | None] = mapped_column(String(255), nullable=True)
    twitter_link: Mapped[str | None] = mapped_column(String(255), nullable=True)
    portfolio_url: Mapped[str | None] = mapped_column(String(255), nullable=True)

    branch: Mapped[str | None] = mapped_column(String(100), nullable=True)
    batch_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Flipped to TRUE by the first successful profile edit.
    profile_completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    user: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="profile",
    )

    led_projects: Mapped[list["Project"]] = relationship(  # noqa: F821
        "Project",
        back_populates="leader_profile",
        foreign_keys="[Project.leader]",
    )

    memberships: Mapped[list["ProjectMember"]] = relationship(  # noqa: F821
        "ProjectMember",
        back_populates="profile",
    )

    join_requests: Mapped[list["JoinRequest"]] = relationship(  # noqa: F821
        "JoinRequest",
        back_populates="requester",
        foreign_keys="[JoinRequest.user_id]",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Profile id={self.id} username={self.username!r}>"
