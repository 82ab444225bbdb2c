from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    value = (value or "").strip()
    if len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None
