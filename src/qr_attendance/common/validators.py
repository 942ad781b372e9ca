from __future__ import annotations

from typing import Any

from ..core.exceptions import InputError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_text(value: Any, field_name: str) -> str:
    """Accept str or UTF-8 bytes; anything else is a malformed payload."""
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InputError(f"{field_name} is not valid UTF-8") from e
    if not isinstance(value, str):
        raise InputError(f"{field_name} must be a string")
    return value
