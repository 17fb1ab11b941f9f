import threading

import pytest

from attendance_ledger.attendance.model import DailyRecord, MonthlyAttendance
from attendance_ledger.container import build_container
from attendance_ledger.core.enums import ApproverRole, RequestStatus
from attendance_ledger.core.exceptions import AlreadyProcessedError, NotFoundError, ValidationError
from attendance_ledger.leave.model import LeaveBalance
from attendance_ledger.store.memory import InMemoryStore


class FlakyApprovalStore(InMemoryStore):
    """Fails the first save of an approved request."""

    def __init__(self):
        super().__init__()
        self.failures_left = 1

    def save_request(self, request):
        if request.status is RequestStatus.APPROVED and self.failures_left:
            self.failures_left -= 1
            raise RuntimeError("connection lost")
        super().save_request(request)


class ExplodingNotifier:
    def __init__(self):
        self.calls = 0

    def notify_request_decision(self, request, action, remarks):
        self.calls += 1
        raise RuntimeError("smtp down")


def _submit(container, date="2024-07-02", status="On leave", **kwargs):
    return container.request_service.submit_correction(user_id="u1", date=date, requested_status=status, **kwargs)


def test_submit_correction_records_context(container):
    attendance = MonthlyAttendance.empty("u1", "2024-07")
    attendance.set_record("2024-07-02", DailyRecord(presence_type="ThumbMachine"))
    container.store.save_monthly_attendance(attendance)

    req = _submit(container, reason=" sick ")

    assert req.status is RequestStatus.PENDING
    assert req.month_year == "2024-07"
    assert req.original_status == "ThumbMachine"
    assert req.partner_name == "P1"
    assert req.user_name == "Asha"
    assert req.reason == "sick"
    assert container.store.load_request(req.request_id) == req


def test_submit_defaults_original_status_to_absent(container):
    assert _submit(container).original_status == "Absent"


def test_second_open_request_for_same_day_is_refused(container):
    _submit(container)

    with pytest.raises(ValidationError) as exc:
        _submit(container, status="Work From Home (WFH)")
    assert exc.value.field == "date"


def test_rejected_request_can_be_resubmitted(container):
    first = _submit(container)
    container.request_service.reject(first.request_id, ApproverRole.PARTNER, "no")

    second = _submit(container)

    assert container.store.load_request(first.request_id) is None
    assert container.store.load_request(second.request_id).status is RequestStatus.PENDING


def test_time_range_needs_both_ends(container):
    with pytest.raises(ValidationError) as exc:
        _submit(container, status="Work From Home (WFH)", start_time="09:00")
    assert exc.value.field == "end_time"


def test_submission_validates_inputs(container):
    with pytest.raises(ValidationError):
        _submit(container, date="2024-13-01")
    with pytest.raises(ValidationError):
        _submit(container, status="  ")
    with pytest.raises(NotFoundError):
        container.request_service.submit_correction(user_id="ghost", date="2024-07-02", requested_status="On leave")


def test_approving_paid_leave_updates_month_and_debits_once(container, give_balance):
    give_balance("u1", 2)
    req = _submit(container)

    outcome = container.request_service.approve(req.request_id, ApproverRole.PARTNER, "enjoy")

    assert outcome.leave_debited is True
    assert outcome.record.presence_type == "On leave"
    assert outcome.record.value == 1
    assert outcome.request.status is RequestStatus.APPROVED
    assert outcome.request.approved_by is ApproverRole.PARTNER
    assert outcome.request.partner_remarks == "enjoy"

    stored = container.store.load_monthly_attendance("u1", "2024-07")
    assert stored.summary.total_leave == 1
    assert stored.records["2024-07-02"].value == 1

    balance = container.leave_ledger.get_balance("u1")
    assert (balance.used, balance.remaining) == (1, 1)
    assert balance.debit_references == {f"{req.request_id}:Approved"}


def test_retry_after_failed_request_save_keeps_day_paid(clock, associate):
    store = FlakyApprovalStore()
    c = build_container(store=store, clock=clock)
    store.save_user_profile(associate)
    store.save_leave_balance(LeaveBalance(user_id="u1", earned=1, remaining=1))
    req = c.request_service.submit_correction(user_id="u1", date="2024-07-02", requested_status="On leave")

    with pytest.raises(RuntimeError):
        c.request_service.approve(req.request_id)
    assert store.load_request(req.request_id).status is RequestStatus.PENDING

    outcome = c.request_service.approve(req.request_id)

    assert outcome.request.status is RequestStatus.APPROVED
    assert outcome.request.approved_value is None
    assert outcome.record.value == 1
    assert outcome.leave_debited is False
    assert store.load_monthly_attendance("u1", "2024-07").records["2024-07-02"].value == 1
    balance = c.leave_ledger.get_balance("u1")
    assert (balance.used, balance.remaining) == (1, 0)


def test_approving_leave_without_balance_is_unpaid(container):
    req = _submit(container)

    outcome = container.request_service.approve(req.request_id)

    assert outcome.leave_debited is False
    assert outcome.record.value == 0
    assert container.leave_ledger.get_balance("u1").used == 0


def test_explicit_value_overrides_and_sets_half_day(container, give_balance):
    give_balance("u1", 3)
    req = _submit(container)

    outcome = container.request_service.approve(req.request_id, "HR", "half paid", explicit_value=0.5)

    assert outcome.record.value == 0.5
    assert outcome.record.half_day is True
    assert outcome.leave_debited is True
    assert outcome.request.hr_remarks == "half paid"
    assert outcome.request.partner_remarks is None
    assert outcome.request.approved_value == 0.5


def test_explicit_zero_on_leave_does_not_debit(container, give_balance):
    give_balance("u1", 3)
    req = _submit(container)

    outcome = container.request_service.approve(req.request_id, explicit_value=0)

    assert outcome.leave_debited is False
    assert container.leave_ledger.get_balance("u1").remaining == 3


def test_time_range_request_supplies_the_punch(container):
    req = _submit(container, status="Work From Home (WFH)", start_time="9:30", end_time="18:30")

    outcome = container.request_service.approve(req.request_id)

    assert outcome.record.checkin == "09:30"
    assert outcome.record.total_hour == 9
    assert outcome.record.value == 1
    assert outcome.attendance.summary.total_present == 1
    assert outcome.attendance.summary.total_late_arrival == 1


def test_approval_without_times_keeps_existing_punches(container):
    attendance = MonthlyAttendance.empty("u1", "2024-07")
    attendance.set_record(
        "2024-07-02", DailyRecord(checkin="09:00", checkout="17:00", total_hour=8.0, presence_type="ThumbMachine", value=1)
    )
    container.store.save_monthly_attendance(attendance)
    req = _submit(container, status="Onsite Presence (OS-P)")

    outcome = container.request_service.approve(req.request_id)

    assert outcome.record.checkin == "09:00"
    assert outcome.record.total_hour == 8
    assert outcome.record.presence_type == "Onsite Presence (OS-P)"


def test_approving_rejected_request_fails_without_side_effects(container, give_balance):
    give_balance("u1", 2)
    req = _submit(container)
    container.request_service.reject(req.request_id, ApproverRole.PARTNER, "no")

    with pytest.raises(AlreadyProcessedError) as exc:
        container.request_service.approve(req.request_id)

    assert exc.value.status is RequestStatus.REJECTED
    assert container.store.load_monthly_attendance("u1", "2024-07") is None
    assert container.leave_ledger.get_balance("u1").remaining == 2


def test_second_approval_is_refused_and_does_not_debit_again(container, give_balance):
    give_balance("u1", 2)
    req = _submit(container)
    container.request_service.approve(req.request_id)

    with pytest.raises(AlreadyProcessedError):
        container.request_service.approve(req.request_id)
    with pytest.raises(AlreadyProcessedError):
        container.request_service.reject(req.request_id)

    assert container.leave_ledger.get_balance("u1").used == 1


def test_unknown_request_is_not_found(container):
    with pytest.raises(NotFoundError):
        container.request_service.approve("missing")


def test_bad_role_or_value_is_rejected_before_mutation(container):
    req = _submit(container)

    with pytest.raises(ValidationError):
        container.request_service.approve(req.request_id, "Intern")
    with pytest.raises(ValidationError):
        container.request_service.approve(req.request_id, explicit_value=2)

    assert container.store.load_request(req.request_id).status is RequestStatus.PENDING


def test_notifier_failure_does_not_roll_back(clock, associate):
    notifier = ExplodingNotifier()
    container = build_container(clock=clock, notifier=notifier)
    container.store.save_user_profile(associate)
    container.store.save_leave_balance(LeaveBalance(user_id="u1", earned=1, remaining=1))
    req = _submit(container)

    outcome = container.request_service.approve(req.request_id)

    assert notifier.calls == 1
    assert outcome.request.status is RequestStatus.APPROVED
    assert container.store.load_request(req.request_id).status is RequestStatus.APPROVED
    assert container.leave_ledger.get_balance("u1").remaining == 0


def test_reject_only_changes_the_request(container):
    req = _submit(container)

    rejected = container.request_service.reject(req.request_id, ApproverRole.HR, "not eligible")

    assert rejected.status is RequestStatus.REJECTED
    assert rejected.rejected_by is ApproverRole.HR
    assert rejected.hr_remarks == "not eligible"
    assert container.store.load_monthly_attendance("u1", "2024-07") is None


def test_concurrent_approvals_for_one_user_cannot_both_be_paid(container, give_balance):
    give_balance("u1", 1)
    ids = [_submit(container, date=f"2024-07-0{d}").request_id for d in (2, 3, 4, 5)]
    barrier = threading.Barrier(len(ids))
    errors = []

    def approve(request_id):
        barrier.wait()
        try:
            container.request_service.approve(request_id)
        except Exception as exc:  # collected for the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=approve, args=(rid,)) for rid in ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    month = container.store.load_monthly_attendance("u1", "2024-07")
    assert sorted(r.value for r in month.records.values()) == [0, 0, 0, 1]
    assert month.summary.total_leave == 4
    balance = container.leave_ledger.get_balance("u1")
    assert (balance.used, balance.remaining) == (1, 0)


def test_future_leave_skips_sundays(container):
    created = container.request_service.submit_future_leave(
        user_id="u1", start_date="2024-07-05", end_date="2024-07-08", request_type="On leave", reason="trip"
    )

    assert [r.date for r in created] == ["2024-07-05", "2024-07-06", "2024-07-08"]
    assert {r.original_status for r in created} == {"Future Request"}
    assert all(r.status is RequestStatus.PENDING for r in created)


def test_future_outstation_uses_scheduled_times(container):
    created = container.request_service.submit_future_leave(
        user_id="a1", start_date="2024-07-05", end_date="2024-07-06", request_type="Present - outstation"
    )

    assert [(r.start_time, r.end_time) for r in created] == [("10:00", "18:00"), ("10:00", "14:00")]


def test_future_leave_rejects_reversed_range(container):
    with pytest.raises(ValidationError) as exc:
        container.request_service.submit_future_leave(
            user_id="u1", start_date="2024-07-08", end_date="2024-07-05", request_type="On leave"
        )
    assert exc.value.field == "end_date"


def test_list_requests_newest_first_and_filtered(container):
    first = _submit(container, date="2024-07-02")
    second = _submit(container, date="2024-07-03")
    container.request_service.reject(first.request_id)

    assert [r.request_id for r in container.request_service.list_requests(user_id="u1")] == [
        second.request_id,
        first.request_id,
    ]
    assert [r.request_id for r in container.request_service.list_requests(status="Pending")] == [second.request_id]
    assert container.request_service.list_requests(partner_name="P2") == []


def test_monthly_leave_summary_reports_paid_and_unpaid_days(container, give_balance):
    give_balance("u1", 1)
    paid = _submit(container, date="2024-07-02")
    unpaid = _submit(container, date="2024-07-03")
    wfh = _submit(container, date="2024-07-04", status="Remote", start_time="09:00", end_time="18:00")
    for r in (paid, unpaid, wfh):
        container.request_service.approve(r.request_id)

    summary = container.request_service.monthly_leave_summary("u1", "2024-07")

    assert (summary.earned, summary.used, summary.remaining) == (1, 1, 0)
    assert summary.leave_requests == [
        {"date": "2024-07-02", "status": "On leave", "is_paid_leave": True, "value": 1.0},
        {"date": "2024-07-03", "status": "On leave", "is_paid_leave": False, "value": 0.0},
    ]
