"""
models/project_member.py — ProjectMember junction table definition.

One row per accepted membership. Created for the leader when a project is
created and for a requester when their join request is approved.
No business logic. No imports from services or routes.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teamup.app.extensions import db
from teamup.app.models.types import enum_values, utcnow


class MemberRole(str, enum.Enum):
    LEADER = "leader"
    MEMBER = "member"


class ProjectMember(db.Model):
    __tablename__ = "project_members"

    __table_args__ = (
        # A user can only belong to a project once.
        UniqueConstraint("project_id", "user_id", name="uq_project_members_project_user"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # ON DELETE CASCADE: memberships are owned by their project.
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ON DELETE CASCADE: a removed profile drops out of every team.
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role: Mapped[MemberRole] = mapped_column(
        Enum(
            MemberRole,
            name="member_role_enum",
            native_enum=False,
            length=16,
            values_callable=enum_values,
        ),
        nullable=False,
        default=MemberRole.MEMBER,
        server_default=MemberRole.MEMBER.value,
    )

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    project: Mapped["Project"] = relationship(  # noqa: F821
        "Project",
        back_populates="members",
    )

    profile: Mapped["Profile"] = relationship(  # noqa: F821
        "Profile",
        back_populates="memberships",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<ProjectMember id={self.id} "
            f"project_id={self.project_id} "
            f"user_id={self.user_id} "
            f"role={self.role.value}>"
        )
