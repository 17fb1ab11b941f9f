"""Pending-request digest used when composing partner emails."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..requests.model import CorrectionRequest


@dataclass(frozen=True)
class DigestRow:
    user_name: str
    requested_status: str
    dates: str
    time_range: str
    reason: str
    request_ids: tuple[str, ...]


def group_dates_into_ranges(dates: Iterable[str]) -> list[str]:
    """["2024-07-01", "2024-07-02", "2024-07-04"] -> ["2024-07-01 to 2024-07-02", "2024-07-04"]"""
    ordered = sorted(set(dates))
    if not ordered:
        return []

    ranges: list[str] = []
    start = prev = ordered[0]
    for current in ordered[1:]:
        if parse_iso_date(current) - parse_iso_date(prev) > timedelta(days=1):
            ranges.append(start if start == prev else f"{start} to {prev}")
            start = current
        prev = current
    ranges.append(start if start == prev else f"{start} to {prev}")
    return ranges


def build_pending_digest(requests: Sequence[CorrectionRequest]) -> list[DigestRow]:
    groups: dict[tuple[str, str], list[CorrectionRequest]] = {}
    for req in sorted(requests, key=lambda r: r.created_at):
        groups.setdefault((req.user_name or req.user_id, req.requested_status), []).append(req)

    rows: list[DigestRow] = []
    for (user_name, requested_status), items in groups.items():
        first = items[0]
        rows.append(
            DigestRow(
                user_name=user_name,
                requested_status=requested_status,
                dates=", ".join(group_dates_into_ranges(r.date for r in items)),
                time_range=_time_range(first.start_time, first.end_time),
                reason=first.reason or "-",
                request_ids=tuple(r.request_id for r in items),
            )
        )
    return rows


def _time_range(start: Optional[str], end: Optional[str]) -> str:
    return f"{start} - {end}" if start and end else "-"
