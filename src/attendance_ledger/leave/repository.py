from __future__ import annotations

from typing import Optional, Protocol

from .model import LeaveBalance


class LeaveBalanceRepository(Protocol):
    def load_leave_balance(self, user_id: str) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def save_leave_balance(self, balance: LeaveBalance) -> None:
        raise NotImplementedError
