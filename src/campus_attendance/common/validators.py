from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value.strip()) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value.strip()


def parse_id_list(value: Optional[str]) -> list[str]:
    """Split a comma separated query parameter, dropping blanks."""

    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
