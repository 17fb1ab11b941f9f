from datetime import date

import pytest

from attendance_ledger.attendance.model import DailyRecord, Holiday, MonthlyAttendance, Summary
from attendance_ledger.attendance.service import PunchRow
from attendance_ledger.core.exceptions import InvariantViolation, NotFoundError


def test_ingest_classifies_machine_rows_and_accrues(container):
    result = container.attendance_service.ingest_punches(
        [
            ("u1", "2024-07-01", "09:05", "18:00"),
            {"user_id": "u1", "date": "2024-07-02", "checkin": "00:00", "checkout": "00:00"},
            PunchRow(user_id="a1", date="2024-07-01", checkin="13:30", checkout="17:00"),
        ]
    )

    assert len(result.processed) == 3
    assert result.errors == []
    assert sorted(result.accrued) == [("a1", "2024-07"), ("u1", "2024-07")]

    month = container.store.load_monthly_attendance("u1", "2024-07")
    assert month.records["2024-07-01"].presence_type == "ThumbMachine"
    assert month.records["2024-07-01"].value == 1
    assert month.records["2024-07-02"].presence_type == "Absent"
    assert month.summary.total_present == 1
    assert month.summary.total_absent == 1
    assert month.summary.total_late_arrival == 1

    article_day = container.store.load_monthly_attendance("a1", "2024-07").records["2024-07-01"]
    assert article_day.half_day is True

    assert container.leave_ledger.get_balance("u1").earned == 2


def test_ingest_twice_accrues_once(container):
    rows = [("u1", "2024-07-01", "09:00", "18:00")]
    container.attendance_service.ingest_punches(rows)
    second = container.attendance_service.ingest_punches(rows)

    assert second.accrued == []
    assert container.leave_ledger.get_balance("u1").earned == 2


def test_bad_rows_are_reported_and_skipped(container):
    result = container.attendance_service.ingest_punches(
        [
            ("ghost", "2024-07-01", "09:00", "18:00"),
            ("u1", "2024-07-01", "9am", "18:00"),
            ("u1", "not-a-date", "09:00", "18:00"),
            ("u1", "2024-07-03"),
            ("u1", "2024-07-04", "09:00", "18:00"),
        ]
    )

    assert [e.row for e in result.errors] == [0, 1, 2, 3]
    assert "User not found" in result.errors[0].reason
    assert [p["date"] for p in result.processed] == ["2024-07-04"]


def test_approved_leave_overrides_an_empty_machine_day(container, give_balance):
    give_balance("u1", 2)
    req = container.request_service.submit_correction(user_id="u1", date="2024-07-02", requested_status="On leave")
    container.request_service.approve(req.request_id)

    result = container.attendance_service.ingest_punches([("u1", "2024-07-02", "00:00", "00:00")])

    assert result.processed[0]["overridden"] is True
    record = container.store.load_monthly_attendance("u1", "2024-07").records["2024-07-02"]
    assert record.presence_type == "On leave"
    assert record.value == 1
    assert record.checkin is None
    assert record.remarks == "Overridden by approved request: On leave"
    # the approval already debited; ingestion must not touch the ledger again
    assert container.leave_ledger.get_balance("u1").used == 1


def test_approved_time_range_replaces_machine_punches(container):
    req = container.request_service.submit_correction(
        user_id="u1",
        date="2024-07-03",
        requested_status="Work From Home (WFH)",
        start_time="09:00",
        end_time="18:00",
    )
    container.request_service.approve(req.request_id)

    container.attendance_service.ingest_punches([("u1", "2024-07-03", "10:00", "12:00")])

    record = container.store.load_monthly_attendance("u1", "2024-07").records["2024-07-03"]
    assert record.presence_type == "Work From Home (WFH)"
    assert (record.checkin, record.checkout, record.total_hour) == ("09:00", "18:00", 9)


def test_machine_hours_beyond_request_win(container):
    req = container.request_service.submit_correction(user_id="u1", date="2024-07-04", requested_status="On leave")
    container.request_service.approve(req.request_id)

    container.attendance_service.ingest_punches([("u1", "2024-07-04", "09:00", "14:00")])

    record = container.store.load_monthly_attendance("u1", "2024-07").records["2024-07-04"]
    assert record.presence_type == "Present"
    assert record.value == 1
    assert record.total_hour == 5
    assert record.remarks == "Present (machine 5.0h > request 0.0h)"


def test_apply_holidays_fills_only_missing_days_in_month(container):
    container.attendance_service.ingest_punches([("u1", "2024-07-01", "09:00", "18:00")])

    added = container.attendance_service.apply_holidays(
        "u1",
        "2024-07",
        [
            Holiday(date=date(2024, 7, 1), name="Should not replace"),
            Holiday(date=date(2024, 7, 17), name="Muharram"),
            Holiday(date=date(2024, 8, 15), name="Independence Day"),
        ],
    )

    assert added == 1
    month = container.store.load_monthly_attendance("u1", "2024-07")
    assert month.records["2024-07-01"].presence_type == "ThumbMachine"
    assert month.records["2024-07-17"].presence_type == "Holiday"
    assert month.records["2024-07-17"].remarks == "Muharram"
    assert month.summary.total_present == 1
    assert month.summary.total_absent == 0


def test_apply_holidays_needs_an_existing_month(container):
    assert container.attendance_service.apply_holidays("u1", "2024-07", [Holiday(date(2024, 7, 17), "x")]) == 0


def test_apply_holidays_requires_a_known_user(container):
    with pytest.raises(NotFoundError):
        container.attendance_service.apply_holidays("ghost", "2024-07", [Holiday(date(2024, 7, 17), "x")])


def test_bulk_update_status_rewrites_existing_records_only(container):
    container.attendance_service.ingest_punches(
        [("u1", "2024-07-01", "00:00", "00:00"), ("u1", "2024-07-02", "00:00", "00:00")]
    )

    updated = container.attendance_service.bulk_update_status(
        [("u1", "2024-07-01"), {"user_id": "u1", "date": "2024-07-02"}, ("u1", "2024-07-09")]
    )

    assert updated == 2
    month = container.store.load_monthly_attendance("u1", "2024-07")
    assert {r.presence_type for r in month.records.values()} == {"On leave"}
    assert month.summary.total_leave == 2
    assert month.summary.total_absent == 0
    assert "2024-07-09" not in month.records


def test_get_month_sorts_and_reports_missing(container):
    container.attendance_service.ingest_punches(
        [("u1", "2024-07-09", "09:00", "18:00"), ("u1", "2024-07-02", "09:00", "18:00")]
    )

    month = container.attendance_service.get_month("u1", "2024-07")

    assert list(month.records) == ["2024-07-02", "2024-07-09"]
    with pytest.raises(NotFoundError):
        container.attendance_service.get_month("u1", "2024-06")


def test_audit_month_flags_tampered_summary(container):
    container.attendance_service.ingest_punches([("u1", "2024-07-01", "09:00", "18:00")])
    container.attendance_service.audit_month("u1", "2024-07")

    tampered = container.store.load_monthly_attendance("u1", "2024-07")
    tampered.records["2024-07-02"] = DailyRecord(presence_type="On leave")
    container.store.save_monthly_attendance(MonthlyAttendance(tampered.user_id, "2024-07", tampered.records, Summary()))

    with pytest.raises(InvariantViolation):
        container.attendance_service.audit_month("u1", "2024-07")


def test_expected_hours(container):
    assert container.attendance_service.expected_hours("u1", "2024-07") == 27 * 9.0
    with pytest.raises(NotFoundError):
        container.attendance_service.expected_hours("ghost", "2024-07")
