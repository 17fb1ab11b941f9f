from __future__ import annotations

from typing import Optional

from ...leave.model import LeaveBalance, decide_leave_usage
from .base import ValueDecision, ValueStrategy


class LeaveStrategy(ValueStrategy):
    """Leave/absent: paid (1) while balance covers a full day, else unpaid (0).

    Without a balance to consult the day is unpaid.
    """

    def decide(self, *, presence_type: str, total_hour: float, leave_balance: Optional[LeaveBalance]) -> ValueDecision:
        remaining = leave_balance.remaining if leave_balance is not None else 0.0
        usage = decide_leave_usage(remaining, presence_type)
        return ValueDecision(value=usage.value, half_day=False, is_paid_leave=usage.is_paid_leave)
