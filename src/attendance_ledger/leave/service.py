from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock, SystemClock, date_range, iso, parse_iso_date, parse_month_year
from ..common.locks import KeyedLocks
from ..core.constants import DEFAULT_MONTHLY_EARNED
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import LeaveBalance, LeaveUsage, decide_leave_usage
from .repository import LeaveBalanceRepository

logger = logging.getLogger(__name__)

SUNDAY = 6


class LeaveLedger:
    """Per-user leave balance: monthly accrual, paid/unpaid decisions, debits.

    Mutations hold the user's lock (shared with RequestService, re-entrant);
    the read-only decisions here never write.
    """

    def __init__(
        self,
        balances: LeaveBalanceRepository,
        users: UserRepository,
        attendance: AttendanceRepository,
        *,
        clock: Optional[Clock] = None,
        monthly_earned: float = DEFAULT_MONTHLY_EARNED,
        locks: Optional[KeyedLocks] = None,
    ):
        self._balances = balances
        self._users = users
        self._attendance = attendance
        self._clock = clock or SystemClock()
        self._monthly_earned = float(monthly_earned)
        self._locks = locks or KeyedLocks()

    def _require_user(self, user_id: str):
        profile = self._users.load_user_profile(user_id)
        if profile is None:
            raise NotFoundError("User", user_id)
        return profile

    def get_balance(self, user_id: str) -> LeaveBalance:
        """Stored balance, or a zero balance for a known user who has none yet."""
        balance = self._balances.load_leave_balance(user_id)
        if balance is not None:
            return balance
        self._require_user(user_id)
        return LeaveBalance(user_id=user_id, monthly_earned=self._monthly_earned)

    def initialize(self, user_id: str) -> LeaveBalance:
        self._require_user(user_id)
        balance = LeaveBalance(user_id=user_id, monthly_earned=self._monthly_earned, last_updated=self._clock.now())
        self._balances.save_leave_balance(balance)
        return balance

    def accrue_monthly(self, user_id: str, month_year: str) -> bool:
        """Add one month's accrual; returns False when skipped.

        Skips users with no attendance records in the month and months that
        were already accrued.
        """
        parse_month_year(month_year)
        with self._locks.hold(user_id):
            return self._accrue_locked(user_id, month_year)

    def _accrue_locked(self, user_id: str, month_year: str) -> bool:
        attendance = self._attendance.load_monthly_attendance(user_id, month_year)
        if attendance is None or not attendance.records:
            logger.debug("accrual skipped, no attendance", extra={"user_id": user_id, "month_year": month_year})
            return False

        balance = self.get_balance(user_id)
        if balance.accrual_marker() == month_year and balance.earned > 0:
            logger.debug("accrual skipped, already applied", extra={"user_id": user_id, "month_year": month_year})
            return False

        balance.earned = round(balance.earned + balance.monthly_earned, 2)
        balance.recompute_remaining()
        balance.last_updated = self._clock.now()
        balance.last_accrued_month = month_year
        self._balances.save_leave_balance(balance)
        logger.info(
            "leave accrued",
            extra={"user_id": user_id, "month_year": month_year, "earned": balance.earned, "remaining": balance.remaining},
        )
        return True

    def accrue_monthly_for_all(self, month_year: str) -> int:
        parse_month_year(month_year)
        count = 0
        for user_id in self._attendance.list_user_ids_with_attendance(month_year):
            profile = self._users.load_user_profile(user_id)
            if profile is None or not profile.is_active:
                continue
            if self.accrue_monthly(user_id, month_year):
                count += 1
        logger.info("monthly accrual finished", extra={"month_year": month_year, "accrued": count})
        return count

    def calculate_leave_usage(self, user_id: str, on_date, requested_status: str) -> LeaveUsage:
        d = parse_iso_date(on_date)
        balance = self.get_balance(user_id)
        return decide_leave_usage(balance.remaining, requested_status, d)

    def calculate_leave_usage_for_multiple_days(
        self, user_id: str, dates: Iterable, requested_status: str
    ) -> list[LeaveUsage]:
        """Spend a local copy of the balance day by day, in date order."""
        ordered = sorted(parse_iso_date(d) for d in dates)
        remaining = self.get_balance(user_id).remaining
        out: list[LeaveUsage] = []
        for d in ordered:
            usage = decide_leave_usage(remaining, requested_status, d)
            if usage.is_paid_leave:
                remaining -= 1
            out.append(usage)
        return out

    def calculate_leave_usage_for_range(self, user_id: str, start, end, requested_status: str) -> list[LeaveUsage]:
        start_d = parse_iso_date(start, "start_date")
        end_d = parse_iso_date(end, "end_date")
        if end_d < start_d:
            raise ValidationError("End date must be on or after start date", field="end_date")
        dates = [d for d in date_range(start_d, end_d) if d.weekday() != SUNDAY]
        return self.calculate_leave_usage_for_multiple_days(user_id, dates, requested_status)

    def apply_approval(self, user_id: str, paid_day_count: float, *, reference: Optional[str] = None) -> bool:
        """Debit paid leave days. A reference already debited is a no-op (returns False)."""
        if paid_day_count < 0:
            raise ValidationError("paid_day_count must not be negative", field="paid_day_count")
        with self._locks.hold(user_id):
            return self._debit_locked(user_id, paid_day_count, reference)

    def _debit_locked(self, user_id: str, paid_day_count: float, reference: Optional[str]) -> bool:
        balance = self.get_balance(user_id)
        if reference and reference in balance.debit_references:
            logger.warning("duplicate leave debit ignored", extra={"user_id": user_id, "reference": reference})
            return False
        if paid_day_count == 0:
            return False

        balance.used = round(balance.used + paid_day_count, 2)
        balance.remaining = max(0.0, round(balance.remaining - paid_day_count, 2))
        if reference:
            balance.debit_references.add(reference)
        self._balances.save_leave_balance(balance)
        logger.info(
            "leave debited",
            extra={"user_id": user_id, "days": paid_day_count, "remaining": balance.remaining, "reference": reference},
        )
        return True

    def reset(self, user_id: str) -> LeaveBalance:
        with self._locks.hold(user_id):
            balance = self.get_balance(user_id)
            balance.earned = 0.0
            balance.used = 0.0
            balance.remaining = 0.0
            balance.last_updated = self._clock.now()
            balance.last_accrued_month = None
            self._balances.save_leave_balance(balance)
        logger.info("leave balance reset", extra={"user_id": user_id})
        return balance

    @staticmethod
    def paid_dates(usages: Sequence[LeaveUsage]) -> list[str]:
        return [iso(u.date) for u in usages if u.is_paid_leave and isinstance(u.date, date)]
