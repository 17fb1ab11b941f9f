from datetime import date

import pytest

from attendance_ledger.attendance.classifier import DailyClassifier, is_half_day
from attendance_ledger.attendance.model import RawPunch
from attendance_ledger.core.enums import PunchSource
from attendance_ledger.core.exceptions import ValidationError
from attendance_ledger.leave.model import LeaveBalance
from attendance_ledger.schedules.model import ScheduleTime
from attendance_ledger.users.model import UserScheduleProfile

MONDAY = date(2024, 7, 1)
SUNDAY = date(2024, 7, 7)

ASSOCIATE = UserScheduleProfile(user_id="u1", designation="associate", regular=ScheduleTime.of("09:00", "18:00"))
ARTICLE = UserScheduleProfile(user_id="a1", designation="article", regular=ScheduleTime.of("09:00", "18:00"))


def _classify(punch=None, override=None, profile=ASSOCIATE, on=MONDAY, balance=None, **kwargs):
    return DailyClassifier().classify(punch, override, profile, on, balance, **kwargs)


def test_zero_punch_pair_is_no_punch_and_absent():
    result = _classify(RawPunch("00:00", "00:00", PunchSource.MACHINE))

    assert result.record.checkin is None
    assert result.record.checkout is None
    assert result.record.total_hour == 0
    assert result.record.presence_type == "Absent"
    assert result.record.value == 0
    assert result.late is False


def test_machine_punch_is_thumb_machine_with_hours():
    result = _classify(RawPunch("8:00", "19:30:15", PunchSource.MACHINE))

    assert result.record.checkin == "08:00"
    assert result.record.checkout == "19:30"
    assert result.record.presence_type == "ThumbMachine"
    assert result.record.total_hour == 11.5
    assert result.record.excess_hour == 2.5
    assert result.record.value == 1


def test_manual_punch_without_override_is_manual():
    result = _classify(RawPunch("09:00", "18:00"))

    assert result.record.presence_type == "Manual"
    assert result.record.excess_hour == 0


def test_checkout_before_checkin_yields_zero_hours():
    result = _classify(RawPunch("18:00", "09:00", PunchSource.MACHINE))

    assert result.record.total_hour == 0
    assert result.record.value == 0


def test_malformed_time_names_the_field():
    with pytest.raises(ValidationError) as exc:
        _classify(RawPunch("25:99", "18:00"))

    assert exc.value.field == "checkin"

    with pytest.raises(ValidationError) as exc:
        _classify(RawPunch("09:00", "six pm"))

    assert exc.value.field == "checkout"


@pytest.mark.parametrize(
    "profile, checkout, expected",
    [
        (ARTICLE, "18:30", True),
        (ASSOCIATE, "18:30", True),
        (ARTICLE, "20:30", True),
        (ASSOCIATE, "20:30", False),
    ],
)
def test_half_day_depends_on_designation(profile, checkout, expected):
    result = _classify(RawPunch("13:30", checkout, PunchSource.MACHINE), profile=profile)

    assert result.record.half_day is expected


def test_half_day_needs_checkin():
    assert is_half_day(None, 0, ARTICLE) is False
    assert is_half_day("12:59", 2, ASSOCIATE) is False


def test_override_always_wins_over_inferred_type():
    result = _classify(RawPunch("09:00", "18:00", PunchSource.MACHINE), "Work From Home (WFH)")

    assert result.record.presence_type == "Work From Home (WFH)"
    assert result.record.value == 1


def test_half_day_type_forces_flag_and_value():
    result = _classify(RawPunch("09:00", "18:00"), "Half Day (HD)")

    assert result.record.value == 0.75
    assert result.record.half_day is True


def test_leave_is_paid_when_balance_covers_a_day():
    result = _classify(None, "On leave", balance=LeaveBalance(user_id="u1", earned=2, remaining=2))

    assert result.record.value == 1
    assert result.is_paid_leave is True


def test_leave_is_unpaid_without_a_full_day_of_balance():
    result = _classify(None, "On leave", balance=LeaveBalance(user_id="u1", earned=0.5, remaining=0.5))

    assert result.record.value == 0
    assert result.is_paid_leave is False


def test_inferred_absent_never_consumes_leave():
    result = _classify(None, None, balance=LeaveBalance(user_id="u1", earned=5, remaining=5))

    assert result.record.presence_type == "Absent"
    assert result.record.value == 0
    assert result.is_paid_leave is False


def test_holiday_and_outstation_values():
    assert _classify(None, "Holiday").record.value == 0
    assert _classify(None, "Week Off").record.value == 0
    assert _classify(RawPunch("09:00", "18:00"), "Present - outstation").record.value == 1.2


def test_present_like_type_without_hours_is_worth_nothing():
    result = _classify(None, "ThumbMachine")

    assert result.record.presence_type == "ThumbMachine"
    assert result.record.value == 0


def test_unrecognized_type_is_accepted_with_zero_value():
    result = _classify(RawPunch("09:00", "18:00"), "Team offsite")

    assert result.record.presence_type == "Team offsite"
    assert result.record.value == 0


def test_manual_value_overrides_and_rederives_half_day():
    result = _classify(RawPunch("09:00", "18:00"), "Manual", manual_value=0.5)

    assert result.record.value == 0.5
    assert result.record.half_day is True

    result = _classify(RawPunch("13:30", "15:00"), "Manual", manual_value=1)

    assert result.record.half_day is False


def test_manual_value_out_of_range_is_rejected():
    with pytest.raises(ValidationError) as exc:
        _classify(None, "Manual", manual_value=1.5)

    assert exc.value.field == "value"


def test_manual_value_on_leave_decides_paid():
    assert _classify(None, "On leave", manual_value=1).is_paid_leave is True
    assert _classify(None, "On leave", manual_value=0).is_paid_leave is False


def test_late_flag_uses_schedule_and_skips_sunday():
    assert _classify(RawPunch("09:15", "18:00")).late is True
    assert _classify(RawPunch("08:55", "18:00")).late is False
    assert _classify(RawPunch("11:00", "18:00"), on=SUNDAY).late is False


def test_reclassify_keeps_punches():
    classifier = DailyClassifier()
    record = classifier.classify(RawPunch("09:00", "18:00"), None, ASSOCIATE, MONDAY).record

    updated = classifier.reclassify(record, "On leave", ASSOCIATE, MONDAY)

    assert updated.presence_type == "On leave"
    assert updated.checkin == "09:00"
    assert updated.total_hour == 9
    assert updated.value == 0
