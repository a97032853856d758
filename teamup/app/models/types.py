"""
models/types.py — Column types and defaults shared by several tables.

No business logic. No imports from services or routes.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects import postgresql


# Ordered list of strings (skills, tags, looking_for). JSONB on PostgreSQL,
# plain JSON elsewhere so the test suite can run on SQLite.
StringList = JSON().with_variant(postgresql.JSONB(), "postgresql")


def utcnow() -> datetime:
    """Python-side timestamp default; keeps sub-second ordering on every backend."""
    return datetime.now(timezone.utc)


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Ensure SQLAlchemy stores enum values (e.g., 'pending'), not names ('PENDING')."""
    return [member.value for member in enum_cls]
