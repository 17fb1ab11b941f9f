from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..core.enums import PresenceFamily
from ..core.exceptions import InvariantViolation
from ..schedules.resolver import ScheduleResolver
from ..users.model import UserScheduleProfile
from .model import DailyRecord, MonthlyAttendance, Summary
from .presence import family_of

_PRESENT_LIKE = (PresenceFamily.PRESENT, PresenceFamily.HALF_DAY, PresenceFamily.OUTSTATION)


@dataclass
class MonthlyAggregator:
    """Folds a month's daily records into Summary counters.

    Always a full recompute from the records map; there is no incremental
    state to drift.
    """

    resolver: ScheduleResolver = field(default_factory=ScheduleResolver)

    def aggregate(self, records: Mapping[str, DailyRecord], profile: Optional[UserScheduleProfile]) -> Summary:
        total_hour = 0.0
        excess_hour = 0.0
        late = half_days = present = absent = leave = 0

        for date_key, record in sorted(records.items()):
            total_hour += record.total_hour
            excess_hour += record.excess_hour
            if record.half_day:
                half_days += 1
            if self.resolver.is_late(profile, MonthlyAttendance.key_date(date_key), record.checkin):
                late += 1

            family = family_of(record.presence_type)
            if family is PresenceFamily.HOLIDAY:
                continue
            if family in _PRESENT_LIKE:
                if record.total_hour > 0:
                    present += 1
                else:
                    absent += 1
            elif family is PresenceFamily.LEAVE and "leave" in record.presence_type.lower():
                leave += 1
            else:
                absent += 1

        return Summary(
            total_hour=round(total_hour, 2),
            total_late_arrival=late,
            excess_hour=round(excess_hour, 2),
            total_half_day=half_days,
            total_present=present,
            total_absent=absent,
            total_leave=leave,
        )

    def refresh(self, attendance: MonthlyAttendance, profile: Optional[UserScheduleProfile]) -> MonthlyAttendance:
        attendance.summary = self.aggregate(attendance.records, profile)
        return attendance

    def apply(
        self,
        attendance: MonthlyAttendance,
        date_key,
        record: DailyRecord,
        profile: Optional[UserScheduleProfile],
    ) -> MonthlyAttendance:
        """Write one record and recompute the summary in the same step."""
        attendance.set_record(date_key, record)
        return self.refresh(attendance, profile)

    def verify(self, attendance: MonthlyAttendance, profile: Optional[UserScheduleProfile]) -> None:
        expected = self.aggregate(attendance.records, profile)
        if expected != attendance.summary:
            raise InvariantViolation(
                f"Stored summary for {attendance.user_id}/{attendance.month_year} disagrees with records: "
                f"stored={attendance.summary.to_dict()} expected={expected.to_dict()}"
            )
