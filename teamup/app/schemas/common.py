"""
schemas/common.py — Validators and normalisers shared by several schemas.
"""

from __future__ import annotations

from marshmallow import ValidationError


def validate_non_empty_after_trim(value: str) -> None:
    """
    Raises ValidationError if the string is blank or contains only whitespace.
    Mirrors the DB CHECK(LENGTH(TRIM(...)) > 0) constraints at the API layer.
    """
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


def normalise_string_list(values: list[str] | None, upper: bool = False) -> list[str]:
    """
    Trims every entry, drops blanks, and removes duplicates keeping the first
    occurrence. Order is preserved: the client's ordering is meaningful.
    """
    if not values:
        return []
    seen: set[str] = set()
    result = []
    for raw in values:
        item = raw.strip()
        if upper:
            item = item.upper()
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def blank_to_none(data: dict, keys: tuple[str, ...]) -> dict:
    """Returns a copy of `data` with "" / whitespace-only values for `keys` replaced by None."""
    cleaned = dict(data)
    for key in keys:
        value = cleaned.get(key)
        if isinstance(value, str) and not value.strip():
            cleaned[key] = None
    return cleaned
