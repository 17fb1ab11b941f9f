from __future__ import annotations

from typing import Optional

from ...core.constants import OUTSTATION_VALUE
from ...leave.model import LeaveBalance
from .base import ValueDecision, ValueStrategy


class OutstationStrategy(ValueStrategy):
    def decide(self, *, presence_type: str, total_hour: float, leave_balance: Optional[LeaveBalance]) -> ValueDecision:
        return ValueDecision(value=OUTSTATION_VALUE)
