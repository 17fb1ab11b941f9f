from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Protocol

from ..core.constants import NO_PUNCH
from ..core.exceptions import ValidationError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_YEAR_RE = re.compile(r"^\d{4}-\d{2}$")


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    def now(self) -> datetime:
        return now_local()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_iso_date(value, field: str = "date") -> date:
    """Parse YYYY-MM-DD string into date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    v = (value or "").strip() if isinstance(value, str) else ""
    if not _ISO_DATE_RE.match(v):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD", field=field)
    try:
        return datetime.strptime(v, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD", field=field)


def parse_month_year(value: str, field: str = "month_year") -> tuple[int, int]:
    v = (value or "").strip()
    if not _MONTH_YEAR_RE.match(v):
        raise ValidationError(f"Invalid month {value!r}, expected YYYY-MM", field=field)
    year, month = int(v[:4]), int(v[5:])
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month {value!r}, expected YYYY-MM", field=field)
    return year, month


def month_year_of(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def iso(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def days_in_month(month_year: str) -> Iterator[date]:
    year, month = parse_month_year(month_year)
    current = date(year, month, 1)
    while current.month == month:
        yield current
        current += timedelta(days=1)


def date_range(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def normalize_time(value, field: str) -> Optional[str]:
    """Normalize a time-of-day into canonical ``HH:mm``.

    Empty values return None. Seconds are dropped. Anything else that is not a
    valid 24h time raises ValidationError naming the field.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime("%H:%M")
    v = str(value).strip()
    if not v:
        return None
    m = _TIME_RE.match(v)
    if not m:
        raise ValidationError(f"Invalid {field} time {value!r}, expected HH:mm", field=field)
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ValidationError(f"Invalid {field} time {value!r}, expected HH:mm", field=field)
    return f"{hours:02d}:{minutes:02d}"


def normalize_punch(checkin, checkout) -> tuple[Optional[str], Optional[str]]:
    """Normalize a checkin/checkout pair; ``00:00``/``00:00`` means no punch."""
    cin = normalize_time(checkin, "checkin")
    cout = normalize_time(checkout, "checkout")
    if cin in (None, NO_PUNCH) and cout in (None, NO_PUNCH):
        return None, None
    return cin, cout


def to_minutes(hhmm: str) -> int:
    h, m = hhmm.split(":")
    return int(h) * 60 + int(m)


def hours_between(start: Optional[str], end: Optional[str]) -> float:
    """Hours from start to end rounded to 2 places, never negative."""
    if not start or not end:
        return 0.0
    minutes = to_minutes(end) - to_minutes(start)
    return max(0.0, round(minutes / 60, 2))
