"""
schemas/project_schema.py — Marshmallow schemas for project endpoints.

Validation responsibility:
  - This file: title/description non-empty, role list non-empty, team size
    bounds, tag and role list normalisation.
  - services/project_service.py: leadership (FORBIDDEN), existence
    (PROJECT_NOT_FOUND), and max_team_size vs current member count
    (TEAM_SIZE_BELOW_MEMBERS) — all require a DB lookup.

The same schema serves POST (all required fields enforced) and PATCH
(loaded with partial=True, so only the keys present are validated).
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, post_load, validate, validates

from teamup.app.models.project import MAX_TEAM_SIZE, MIN_TEAM_SIZE
from teamup.app.schemas.common import normalise_string_list, validate_non_empty_after_trim

ROLES_REQUIRED_MESSAGE = "Please specify at least one role you are looking for"
TEAM_SIZE_MESSAGE = (
    f"Team size must be between {MIN_TEAM_SIZE} and {MAX_TEAM_SIZE} members"
)


class ProjectSchema(Schema):
    """POST /projects and PATCH /projects/:id"""

    title = fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=1,
                max=200,
                error="Project title must be between 1 and 200 characters.",
            ),
            validate_non_empty_after_trim,
        ],
        error_messages={"required": "Project title is required"},
    )

    description = fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=1,
                max=5000,
                error="Project description must be between 1 and 5000 characters.",
            ),
            validate_non_empty_after_trim,
        ],
        error_messages={"required": "Project description is required"},
    )

    tags = fields.List(
        fields.Str(validate=validate.Length(max=50)),
        allow_none=True,
        validate=validate.Length(max=20, error="A project may have at most 20 tags."),
    )

    looking_for = fields.List(
        fields.Str(validate=validate.Length(max=100)),
        required=True,
        error_messages={"required": ROLES_REQUIRED_MESSAGE},
    )

    max_team_size = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(
            min=MIN_TEAM_SIZE,
            max=MAX_TEAM_SIZE,
            error=TEAM_SIZE_MESSAGE,
        ),
    )

    @validates("looking_for")
    def validate_looking_for(self, value: list[str], **kwargs) -> None:
        if not normalise_string_list(value):
            raise ValidationError(ROLES_REQUIRED_MESSAGE)

    @post_load
    def normalise(self, data: dict, **kwargs) -> dict:
        if "title" in data:
            data["title"] = data["title"].strip()
        if "description" in data:
            data["description"] = data["description"].strip()
        if "looking_for" in data:
            data["looking_for"] = normalise_string_list(data["looking_for"])
        if "tags" in data:
            # An empty tag list is stored as NULL.
            data["tags"] = normalise_string_list(data["tags"]) or None
        return data
