from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...leave.model import LeaveBalance


@dataclass(frozen=True)
class ValueDecision:
    value: float
    half_day: Optional[bool] = None  # None keeps the punch-derived flag
    is_paid_leave: bool = False


class ValueStrategy(ABC):
    """Strategy Pattern: encapsulate how a presence family earns attendance credit."""

    @abstractmethod
    def decide(self, *, presence_type: str, total_hour: float, leave_balance: Optional[LeaveBalance]) -> ValueDecision:
        raise NotImplementedError
