from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MonthlyAttendance


class AttendanceRepository(Protocol):
    def load_monthly_attendance(self, user_id: str, month_year: str) -> Optional[MonthlyAttendance]:
        raise NotImplementedError

    def save_monthly_attendance(self, attendance: MonthlyAttendance) -> None:
        """Whole-document write; atomic at the single aggregate level."""

        raise NotImplementedError

    def list_user_ids_with_attendance(self, month_year: str) -> Sequence[str]:
        """Users owning an aggregate with at least one record for the month."""

        raise NotImplementedError
