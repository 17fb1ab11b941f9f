from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.datetime_utils import days_in_month, hours_between
from ..core.constants import DEFAULT_IN_TIME, DEFAULT_OUT_TIME
from ..users.model import UserScheduleProfile
from .model import ScheduleTime

WINTER_MONTHS = (12, 1)
SATURDAY = 5
SUNDAY = 6


@dataclass
class ScheduleResolver:
    """Single source of truth for "which in/out pair applies on this date".

    Order: December/January use ``monthly`` (else ``regular``) on every
    weekday; otherwise Saturday uses ``saturday`` (else ``regular``), Monday
    to Friday use ``regular`` and Sunday has no scheduled work (None). When the
    profile carries no usable schedule the default pair applies.
    """

    default: ScheduleTime = ScheduleTime(DEFAULT_IN_TIME, DEFAULT_OUT_TIME)

    @staticmethod
    def _field(profile: UserScheduleProfile, name: str, year: int) -> Optional[ScheduleTime]:
        yearly = profile.schedules.get(str(year))
        if yearly is not None and getattr(yearly, name) is not None:
            return getattr(yearly, name)
        return getattr(profile, name)

    def resolve(self, profile: Optional[UserScheduleProfile], on_date: date) -> Optional[ScheduleTime]:
        weekday = on_date.weekday()
        if profile is None:
            return None if weekday == SUNDAY and on_date.month not in WINTER_MONTHS else self.default

        regular = self._field(profile, "regular", on_date.year)
        if on_date.month in WINTER_MONTHS:
            picked = self._field(profile, "monthly", on_date.year) or regular
        elif weekday == SATURDAY:
            picked = self._field(profile, "saturday", on_date.year) or regular
        elif weekday == SUNDAY:
            return None
        else:
            picked = regular
        return picked or self.default

    def scheduled_in_time(self, profile: Optional[UserScheduleProfile], on_date: date) -> Optional[str]:
        sched = self.resolve(profile, on_date)
        return sched.in_time if sched else None

    def is_late(self, profile: Optional[UserScheduleProfile], on_date: date, checkin: Optional[str]) -> bool:
        if not checkin or on_date.weekday() == SUNDAY:
            return False
        in_time = self.scheduled_in_time(profile, on_date)
        return in_time is not None and checkin > in_time

    def scheduled_hours(self, profile: Optional[UserScheduleProfile], on_date: date) -> float:
        sched = self.resolve(profile, on_date)
        if sched is None:
            return 0.0
        return hours_between(sched.in_time, sched.out_time)

    def expected_hours_for_month(self, profile: Optional[UserScheduleProfile], month_year: str) -> float:
        return round(sum(self.scheduled_hours(profile, d) for d in days_in_month(month_year)), 2)
