"""
services/auth_service.py — Accounts, credentials and tokens.

A TeamUp account is two rows sharing one id: `users` holds the login
credentials, `profiles` holds the public identity (username and the fields
teammates see). Signup creates both; every auth response returns the account
with its profile embedded, so the client learns whether onboarding
(profile_completed) is still pending without a second call.

Tokens:
  - Access:  HS256 JWT carrying sub=str(user id), iat, exp and a random jti.
  - Refresh: 64 hex chars handed out once; only the SHA-256 digest is stored.
             Not rotated on use. Dies at expiry or on logout.

Layer rules:
  - No Flask request/g access; current_app.config is read for the JWT
    settings and the bcrypt cost only.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timezone

import bcrypt
import jwt
from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamup.app.errors import AppError, ErrorCode
from teamup.app.models.profile import Profile
from teamup.app.models.refresh_token import RefreshToken
from teamup.app.models.user import User
from teamup.app.services.serializers import profile_to_dict

logger = logging.getLogger(__name__)


# ── Hashing ────────────────────────────────────────────────────────────────

def _hash_token(raw_token: str) -> str:
    """Storage form of a refresh token."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def _hash_password(password: str) -> str:
    rounds = current_app.config.get("BCRYPT_LOG_ROUNDS", 12)
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def _password_matches(user: User | None, password: str) -> bool:
    if user is None:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8"))


def _as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; everything stored is UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


# ── Tokens ─────────────────────────────────────────────────────────────────

def _issue_access_token(user_id: int) -> str:
    config = current_app.config
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + config["JWT_ACCESS_TOKEN_EXPIRES"],
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(claims, config["JWT_SECRET_KEY"], algorithm=config.get("JWT_ALGORITHM", "HS256"))


def _issue_refresh_token(user_id: int, session: Session) -> str:
    raw_token = secrets.token_hex(32)
    session.add(RefreshToken(
        user_id=user_id,
        token_hash=_hash_token(raw_token),
        expires_at=datetime.now(timezone.utc) + current_app.config["JWT_REFRESH_TOKEN_EXPIRES"],
    ))
    session.flush()
    return raw_token


def _find_refresh_token(raw_token: str, session: Session) -> RefreshToken | None:
    return session.execute(
        select(RefreshToken).where(RefreshToken.token_hash == _hash_token(raw_token))
    ).scalar_one_or_none()


# ── Payloads ───────────────────────────────────────────────────────────────

def _account_dict(user: User, profile: Profile | None) -> dict:
    """The account as clients see it: no password hash, profile embedded."""
    return {
        "id": user.id,
        "email": user.email,
        "created_at": user.created_at.isoformat(),
        "profile": profile_to_dict(profile) if profile is not None else None,
    }


def _signed_in(user: User, profile: Profile | None, session: Session) -> dict:
    """Response body for register and login."""
    return {
        "user": _account_dict(user, profile),
        "access_token": _issue_access_token(user.id),
        "refresh_token": _issue_refresh_token(user.id, session),
    }


def _ensure_identity_available(email: str, username: str, session: Session) -> None:
    """Raises DUPLICATE_EMAIL or DUPLICATE_USERNAME (409), email checked first."""
    if session.execute(select(User.id).where(User.email == email)).scalar_one_or_none() is not None:
        raise AppError(
            ErrorCode.DUPLICATE_EMAIL,
            f"The email address '{email}' is already registered.",
            409,
            field="email",
        )
    if session.execute(select(Profile.id).where(Profile.username == username)).scalar_one_or_none() is not None:
        raise AppError(
            ErrorCode.DUPLICATE_USERNAME,
            f"The username '{username}' is already taken.",
            409,
            field="username",
        )


# ── Public service functions ───────────────────────────────────────────────

def register_user(username: str, email: str, password: str, session: Session) -> dict:
    """
    Signs up: a User with the credentials plus a bare Profile holding only the
    username (profile_completed stays False until the first profile edit).

    Raises:
      AppError(DUPLICATE_EMAIL, 409)
      AppError(DUPLICATE_USERNAME, 409)

    Returns: {"user": account-with-profile, "access_token", "refresh_token"}
    """
    _ensure_identity_available(email, username, session)

    # A concurrent signup can take the email or username after the check; the
    # UNIQUE indexes catch it and the check is repeated to name the field.
    try:
        with session.begin_nested():
            user = User(email=email, password_hash=_hash_password(password))
            session.add(user)
            session.flush()
            profile = Profile(id=user.id, username=username)
            session.add(profile)
            session.flush()
    except IntegrityError:
        _ensure_identity_available(email, username, session)
        raise

    logger.info("Registered account %s as '%s'", user.id, username)
    return _signed_in(user, profile, session)


def login_user(email: str, password: str, session: Session) -> dict:
    """
    Email + password sign-in.

    Raises:
      AppError(INVALID_CREDENTIALS, 401) — unknown email and wrong password
      are indistinguishable to the caller.
    """
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not _password_matches(user, password):
        logger.info("Failed sign-in for %s", email)
        raise AppError(
            ErrorCode.INVALID_CREDENTIALS,
            "The email or password is incorrect.",
            401,
        )
    return _signed_in(user, session.get(Profile, user.id), session)


def refresh_access_token(raw_refresh_token: str, session: Session) -> dict:
    """
    New access token for a live refresh token. The refresh token itself is
    returned unchanged to the client's keeping.

    Raises:
      AppError(REFRESH_TOKEN_INVALID, 401) — unknown, revoked or expired
    """
    record = _find_refresh_token(raw_refresh_token, session)
    live = (
        record is not None
        and not record.revoked
        and _as_utc(record.expires_at) > datetime.now(timezone.utc)
    )
    if not live:
        raise AppError(
            ErrorCode.REFRESH_TOKEN_INVALID,
            "The refresh token is invalid, expired, or has been revoked.",
            401,
        )
    return {"access_token": _issue_access_token(record.user_id)}


def logout_user(raw_refresh_token: str, session: Session) -> None:
    """
    Revokes one refresh token. Access tokens already issued stay valid
    until they expire.

    Raises:
      AppError(REFRESH_TOKEN_INVALID, 401) — unknown or already revoked
    """
    record = _find_refresh_token(raw_refresh_token, session)
    if record is None or record.revoked:
        raise AppError(
            ErrorCode.REFRESH_TOKEN_INVALID,
            "The refresh token is invalid or has already been revoked.",
            401,
        )
    record.revoked = True
    session.flush()
    logger.info("Refresh token revoked for account %s", record.user_id)


def get_current_user(user_id: int, session: Session) -> dict:
    """
    The signed-in account with its profile.

    Raises:
      AppError(USER_NOT_FOUND, 404) — the token outlived its account
    """
    user = session.get(User, user_id)
    if user is None:
        raise AppError(ErrorCode.USER_NOT_FOUND, f"User {user_id} not found.", 404)
    return _account_dict(user, session.get(Profile, user_id))
