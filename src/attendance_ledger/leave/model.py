from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..attendance.presence import is_leave_type
from ..core.constants import DEFAULT_MONTHLY_EARNED, FULL_DAY_VALUE


@dataclass
class LeaveBalance:
    """Số ngày phép của một nhân viên: đã tích luỹ, đã dùng, còn lại."""

    user_id: str
    earned: float = 0.0
    used: float = 0.0
    remaining: float = 0.0
    monthly_earned: float = DEFAULT_MONTHLY_EARNED
    last_updated: Optional[datetime] = None
    last_accrued_month: Optional[str] = None
    debit_references: set[str] = field(default_factory=set)

    def recompute_remaining(self) -> None:
        self.remaining = max(0.0, round(self.earned - self.used, 2))

    def accrual_marker(self) -> Optional[str]:
        if self.last_accrued_month:
            return self.last_accrued_month
        if self.last_updated:
            return f"{self.last_updated.year:04d}-{self.last_updated.month:02d}"
        return None

    @classmethod
    def from_dict(cls, data: dict) -> "LeaveBalance":
        last_updated = data.get("last_updated")
        if isinstance(last_updated, str):
            last_updated = datetime.fromisoformat(last_updated)
        return cls(
            user_id=str(data["user_id"]),
            earned=float(data.get("earned") or 0),
            used=float(data.get("used") or 0),
            remaining=float(data.get("remaining") or 0),
            monthly_earned=float(data.get("monthly_earned") or DEFAULT_MONTHLY_EARNED),
            last_updated=last_updated,
            last_accrued_month=data.get("last_accrued_month"),
            debit_references=set(data.get("debit_references") or []),
        )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "earned": self.earned,
            "used": self.used,
            "remaining": self.remaining,
            "monthly_earned": self.monthly_earned,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "last_accrued_month": self.last_accrued_month,
            "debit_references": sorted(self.debit_references),
        }


@dataclass(frozen=True)
class LeaveUsage:
    is_paid_leave: bool
    value: float
    date: Optional[date] = None


def decide_leave_usage(remaining: float, requested_status: Optional[str], on_date: Optional[date] = None) -> LeaveUsage:
    """Paid if at least one full day of balance remains; never mutates anything."""
    if not is_leave_type(requested_status):
        return LeaveUsage(is_paid_leave=False, value=FULL_DAY_VALUE, date=on_date)
    if remaining >= 1:
        return LeaveUsage(is_paid_leave=True, value=FULL_DAY_VALUE, date=on_date)
    return LeaveUsage(is_paid_leave=False, value=0.0, date=on_date)
