"""
schemas/join_request_schema.py — Marshmallow schemas for join-request endpoints.

Only the shape of the request is checked here. Whether the caller may review
a request (FORBIDDEN) and whether the request is still pending
(INVALID_STATUS_TRANSITION) are decided in join_request_service.py.
"""

from __future__ import annotations

from marshmallow import Schema, fields, post_load, validate

from teamup.app.models.join_request import JoinRequestStatus


class CreateJoinRequestSchema(Schema):
    """POST /projects/:id/join-requests — the body may be empty."""

    message = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.Length(max=500, error="Message must be at most 500 characters."),
    )

    @post_load
    def strip_message(self, data: dict, **kwargs) -> dict:
        message = data.get("message")
        data["message"] = (message.strip() or None) if message else None
        return data


class ReviewJoinRequestSchema(Schema):
    """PATCH /join-requests/:id — a leader's decision."""

    status = fields.Enum(
        JoinRequestStatus,
        required=True,
        by_value=True,
        validate=validate.OneOf(
            [JoinRequestStatus.APPROVED, JoinRequestStatus.REJECTED],
            error="status must be 'approved' or 'rejected'.",
        ),
    )
