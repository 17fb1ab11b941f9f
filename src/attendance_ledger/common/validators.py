from __future__ import annotations

from typing import Optional

from ..core.constants import MAX_ATTENDANCE_VALUE
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return str(value).strip()


def optional_text(value) -> Optional[str]:
    v = (value or "").strip() if isinstance(value, str) else value
    return v or None


def require_attendance_value(value, field_name: str = "value") -> float:
    """Attendance credit must be a number in [0, 1.2]."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    if not 0 <= v <= MAX_ATTENDANCE_VALUE:
        raise ValidationError(f"{field_name} must be between 0 and {MAX_ATTENDANCE_VALUE}", field=field_name)
    return round(v, 2)
