from __future__ import annotations

from typing import Optional

from ...leave.model import LeaveBalance
from .base import ValueDecision, ValueStrategy


class HolidayStrategy(ValueStrategy):
    def decide(self, *, presence_type: str, total_hour: float, leave_balance: Optional[LeaveBalance]) -> ValueDecision:
        return ValueDecision(value=0.0, half_day=False)
