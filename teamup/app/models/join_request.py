"""
models/join_request.py — JoinRequest table definition.

No business logic. No imports from services or routes.

Key design points:
  - status: pending → approved | rejected. Both outcomes are terminal; the
    transition rule lives in join_request_service.py.
  - UNIQUE(project_id, user_id) is the authoritative "at most one request
    per user per project" rule. The service treats a violation of it as the
    already-requested path rather than an error.
  - reviewed_by / reviewed_at are NULL until a leader acts on the request.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teamup.app.extensions import db
from teamup.app.models.types import enum_values, utcnow


class JoinRequestStatus(str, enum.Enum):
    PENDING  = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class JoinRequest(db.Model):
    __tablename__ = "join_requests"

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_join_requests_project_user"),
        # Leader inbox: pending requests across a set of project ids.
        Index("idx_join_requests_project_status", "project_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # ON DELETE CASCADE: requests die with their project.
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )

    # The requester.
    user_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    message: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[JoinRequestStatus] = mapped_column(
        Enum(
            JoinRequestStatus,
            name="join_request_status_enum",
            native_enum=False,
            length=16,
            values_callable=enum_values,
        ),
        nullable=False,
        default=JoinRequestStatus.PENDING,
        server_default=JoinRequestStatus.PENDING.value,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    # ON DELETE SET NULL: the audit trail survives the reviewer's profile.
    reviewed_by: Mapped[int | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    project: Mapped["Project"] = relationship(  # noqa: F821
        "Project",
        back_populates="join_requests",
    )

    requester: Mapped["Profile"] = relationship(  # noqa: F821
        "Profile",
        back_populates="join_requests",
        foreign_keys=[user_id],
    )

    reviewer: Mapped["Profile"] = relationship(  # noqa: F821
        "Profile",
        foreign_keys=[reviewed_by],
    )

    @property
    def is_pending(self) -> bool:
        return self.status == JoinRequestStatus.PENDING

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<JoinRequest id={self.id} "
            f"project_id={self.project_id} "
            f"user_id={self.user_id} "
            f"status={self.status.value}>"
        )
