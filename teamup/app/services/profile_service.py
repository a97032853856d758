"""
services/profile_service.py — Profile reads and owner-only updates.

Authorization rules:
  - Read:   anyone, including anonymous callers.
  - Update: the owner only. There is no profile id in the update call; the
            row is always the caller's own.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamup.app.errors import AppError, ErrorCode
from teamup.app.models.profile import Profile
from teamup.app.services.serializers import profile_to_dict

logger = logging.getLogger(__name__)

# Columns PATCH /profiles/me may touch. profile_completed is set by the
# service itself, never by the client.
UPDATABLE_FIELDS = frozenset({
    "username",
    "name",
    "bio",
    "skills",
    "linkedin_link",
    "github_link",
    "twitter_link",
    "portfolio_url",
    "branch",
    "batch_year",
    "avatar_url",
})


def _get_profile_or_404(profile_id: int, session: Session) -> Profile:
    """Returns the Profile or raises PROFILE_NOT_FOUND (404)."""
    profile = session.get(Profile, profile_id)
    if profile is None:
        raise AppError(
            ErrorCode.PROFILE_NOT_FOUND,
            f"Profile {profile_id} does not exist.",
            404,
        )
    return profile


def _username_taken(username: str) -> AppError:
    return AppError(
        ErrorCode.DUPLICATE_USERNAME,
        f"The username '{username}' is already taken.",
        409,
        field="username",
    )


def get_current_profile(caller_id: int, session: Session) -> dict:
    """The caller's own profile."""
    return profile_to_dict(_get_profile_or_404(caller_id, session))


def get_profile_by_id(profile_id: int, session: Session) -> dict:
    """Any profile, no authorization check."""
    return profile_to_dict(_get_profile_or_404(profile_id, session))


def get_profile_by_username(username: str, session: Session) -> dict:
    """Any profile looked up by its unique handle."""
    profile = session.execute(
        select(Profile).where(Profile.username == username)
    ).scalar_one_or_none()
    if profile is None:
        raise AppError(
            ErrorCode.PROFILE_NOT_FOUND,
            f"No profile with username '{username}'.",
            404,
        )
    return profile_to_dict(profile)


def update_profile(caller_id: int, data: dict, session: Session) -> dict:
    """
    Applies a partial update to the caller's own profile.

    Only keys present in `data` are written (None clears a column). Any
    successful update marks the profile as completed.

    Raises:
      AppError(PROFILE_NOT_FOUND, 404)  — the caller has no profile row
      AppError(DUPLICATE_USERNAME, 409) — another profile owns the username

    Returns: the full updated profile, so the client replaces its copy
    instead of merging the partial payload into it.
    """
    profile = _get_profile_or_404(caller_id, session)

    new_username = data.get("username")
    if new_username is not None and new_username != profile.username:
        taken = session.execute(
            select(Profile.id).where(
                Profile.username == new_username,
                Profile.id != caller_id,
            )
        ).scalar_one_or_none()
        if taken is not None:
            raise _username_taken(new_username)

    # A concurrent update can claim the username between the check above and
    # this flush; the UNIQUE index then decides.
    try:
        with session.begin_nested():
            for key, value in data.items():
                if key in UPDATABLE_FIELDS:
                    setattr(profile, key, value)
            profile.profile_completed = True
            session.flush()
    except IntegrityError:
        if new_username is None:
            raise
        raise _username_taken(new_username) from None

    logger.info("Profile %s updated (%s)", caller_id, ", ".join(sorted(data)) or "no fields")
    return profile_to_dict(profile)
