from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..common.datetime_utils import hours_between, normalize_punch
from ..common.validators import require_attendance_value
from ..core.constants import HALF_DAY_CUTOFF, HALF_DAY_MIN_HOURS, STANDARD_WORK_HOURS
from ..core.enums import PunchSource
from ..leave.model import LeaveBalance
from ..schedules.resolver import ScheduleResolver
from ..users.model import UserScheduleProfile
from .factory import ValueStrategyFactory
from .model import DailyRecord, RawPunch
from .presence import ABSENT, MANUAL, THUMB_MACHINE, is_leave_type


@dataclass(frozen=True)
class Classification:
    record: DailyRecord
    late: bool
    is_paid_leave: bool = False


def is_half_day(checkin: Optional[str], total_hour: float, profile: Optional[UserScheduleProfile]) -> bool:
    """Arriving at/after 13:00 is a half day; non-article staff also need < 6h worked."""
    if not checkin:
        return False
    after_cutoff = checkin >= HALF_DAY_CUTOFF
    if profile is not None and profile.is_article:
        return after_cutoff
    return after_cutoff and total_hour < HALF_DAY_MIN_HOURS


@dataclass
class DailyClassifier:
    """Turns raw punches plus a requested/overridden status into a DailyRecord."""

    resolver: ScheduleResolver = field(default_factory=ScheduleResolver)
    strategies: ValueStrategyFactory = field(default_factory=ValueStrategyFactory)

    def classify(
        self,
        raw_punch: Optional[RawPunch],
        presence_type_override: Optional[str],
        profile: Optional[UserScheduleProfile],
        on_date: date,
        leave_balance: Optional[LeaveBalance] = None,
        *,
        manual_value=None,
        remarks: Optional[str] = None,
    ) -> Classification:
        raw_punch = raw_punch or RawPunch()
        checkin, checkout = normalize_punch(raw_punch.checkin, raw_punch.checkout)

        total_hour = hours_between(checkin, checkout)
        excess_hour = round(max(0.0, total_hour - STANDARD_WORK_HOURS), 2)

        presence_type = (presence_type_override or "").strip()
        if not presence_type:
            if not checkin and not checkout:
                presence_type = ABSENT
            elif raw_punch.source is PunchSource.MACHINE:
                presence_type = THUMB_MACHINE
            else:
                presence_type = MANUAL
            # no approved status to pay against
            leave_balance = None

        half_day = is_half_day(checkin, total_hour, profile)
        is_paid_leave = False

        if manual_value is not None and manual_value != "":
            value = require_attendance_value(manual_value)
            half_day = 0 < value < 1
            is_paid_leave = is_leave_type(presence_type) and value > 0
        else:
            decision = self.strategies.for_presence(presence_type).decide(
                presence_type=presence_type, total_hour=total_hour, leave_balance=leave_balance
            )
            value = decision.value
            if decision.half_day is not None:
                half_day = decision.half_day
            is_paid_leave = decision.is_paid_leave

        record = DailyRecord(
            checkin=checkin,
            checkout=checkout,
            total_hour=total_hour,
            excess_hour=excess_hour,
            presence_type=presence_type,
            half_day=half_day,
            value=value,
            remarks=remarks,
        )
        late = self.resolver.is_late(profile, on_date, checkin)
        return Classification(record=record, late=late, is_paid_leave=is_paid_leave)

    def reclassify(
        self,
        record: DailyRecord,
        presence_type: str,
        profile: Optional[UserScheduleProfile],
        on_date: date,
        leave_balance: Optional[LeaveBalance] = None,
    ) -> DailyRecord:
        """Re-run classification for an existing record under a new status, keeping its punches."""
        return self.classify(
            RawPunch(checkin=record.checkin, checkout=record.checkout),
            presence_type,
            profile,
            on_date,
            leave_balance,
            remarks=record.remarks,
        ).record
