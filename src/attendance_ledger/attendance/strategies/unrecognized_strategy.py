from __future__ import annotations

from typing import Optional

from ...leave.model import LeaveBalance
from .base import ValueDecision, ValueStrategy


class UnrecognizedStrategy(ValueStrategy):
    """Free-text statuses outside the vocabulary earn nothing (counted Absent)."""

    def decide(self, *, presence_type: str, total_hour: float, leave_balance: Optional[LeaveBalance]) -> ValueDecision:
        return ValueDecision(value=0.0)
