from __future__ import annotations

from typing import Optional

from ...core.constants import FULL_DAY_VALUE
from ...leave.model import LeaveBalance
from .base import ValueDecision, ValueStrategy


class PresentStrategy(ValueStrategy):
    """Present-like: full credit only when hours were actually worked."""

    def decide(self, *, presence_type: str, total_hour: float, leave_balance: Optional[LeaveBalance]) -> ValueDecision:
        return ValueDecision(value=FULL_DAY_VALUE if total_hour > 0 else 0.0)
