from __future__ import annotations

from typing import Optional

from ...core.constants import HALF_DAY_VALUE
from ...leave.model import LeaveBalance
from .base import ValueDecision, ValueStrategy


class HalfDayStrategy(ValueStrategy):
    """Half-day statuses always earn 0.75 and force the half-day flag."""

    def decide(self, *, presence_type: str, total_hour: float, leave_balance: Optional[LeaveBalance]) -> ValueDecision:
        return ValueDecision(value=HALF_DAY_VALUE, half_day=True)
