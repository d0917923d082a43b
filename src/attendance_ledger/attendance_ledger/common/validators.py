from __future__ import annotations

from ..core.exceptions import ValidationError
from .datetime_utils import parse_hhmm


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_hhmm(value: str, field_name: str) -> str:
    value = require_non_empty(value, field_name)
    try:
        parse_hhmm(value)
    except ValueError as exc:
        raise ValidationError(f"{field_name} must be HH:MM, got {value!r}") from exc
    return value


def require_choice(value: str, field_name: str, choices) -> str:
    allowed = [getattr(c, "value", c) for c in choices]
    if value not in allowed:
        raise ValidationError(f"{field_name} must be one of {', '.join(allowed)}")
    return value
