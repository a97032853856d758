"""
schemas/profile_schema.py — Marshmallow schema for PATCH /profiles/me.

Every field is optional; only the keys present in the request are applied.
Empty strings clear a field (stored as NULL), the same way the profile
form submits an emptied input. The skills list is trimmed, upper-cased and
de-duplicated; an empty list is stored as NULL.

Username uniqueness (DUPLICATE_USERNAME, 409) is a DB concern and lives in
services/profile_service.py.
"""

from __future__ import annotations

from datetime import datetime, timezone

from marshmallow import (
    Schema,
    ValidationError,
    fields,
    post_load,
    pre_load,
    validate,
    validates,
)

from teamup.app.schemas.auth_schema import USERNAME_VALIDATORS
from teamup.app.schemas.common import blank_to_none, normalise_string_list

# The profile form offers five years back and four years ahead.
BATCH_YEARS_BACK = 5
BATCH_YEARS_AHEAD = 4

_NULLABLE_TEXT_FIELDS = (
    "name",
    "bio",
    "linkedin_link",
    "github_link",
    "twitter_link",
    "portfolio_url",
    "branch",
    "avatar_url",
)


def batch_year_window(today: datetime | None = None) -> tuple[int, int]:
    """Inclusive (first, last) batch year accepted right now."""
    year = (today or datetime.now(timezone.utc)).year
    return year - BATCH_YEARS_BACK, year + BATCH_YEARS_AHEAD


class UpdateProfileSchema(Schema):

    username = fields.Str(validate=USERNAME_VALIDATORS)

    name = fields.Str(allow_none=True, validate=validate.Length(max=100))
    bio = fields.Str(allow_none=True, validate=validate.Length(max=2000))

    skills = fields.List(
        fields.Str(validate=validate.Length(max=50)),
        allow_none=True,
        validate=validate.Length(max=50, error="A profile may list at most 50 skills."),
    )

    linkedin_link = fields.Url(allow_none=True, validate=validate.Length(max=255))
    github_link = fields.Url(allow_none=True, validate=validate.Length(max=255))
    twitter_link = fields.Url(allow_none=True, validate=validate.Length(max=255))
    portfolio_url = fields.Url(allow_none=True, validate=validate.Length(max=255))

    branch = fields.Str(allow_none=True, validate=validate.Length(max=100))
    batch_year = fields.Int(strict=True, allow_none=True)

    avatar_url = fields.Url(allow_none=True, validate=validate.Length(max=500))

    @pre_load
    def clear_blank_strings(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        return blank_to_none(data, _NULLABLE_TEXT_FIELDS)

    @validates("batch_year")
    def validate_batch_year(self, value: int | None, **kwargs) -> None:
        if value is None:
            return
        first, last = batch_year_window()
        if not first <= value <= last:
            raise ValidationError(f"Batch year must be between {first} and {last}.")

    @post_load
    def normalise_skills(self, data: dict, **kwargs) -> dict:
        if "skills" in data:
            skills = normalise_string_list(data["skills"], upper=True)
            data["skills"] = skills or None
        return data
