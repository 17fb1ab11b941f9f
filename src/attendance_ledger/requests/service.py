from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..attendance.aggregator import MonthlyAggregator
from ..attendance.classifier import DailyClassifier
from ..attendance.model import DailyRecord, MonthlyAttendance, RawPunch
from ..attendance.presence import ABSENT, PRESENT_OUTSTATION, is_leave_type
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock, SystemClock, date_range, iso, month_year_of, normalize_time, parse_iso_date, parse_month_year
from ..common.locks import KeyedLocks
from ..common.validators import optional_text, require_attendance_value, require_non_empty
from ..core.constants import FULL_DAY_VALUE, FUTURE_REQUEST_STATUS
from ..core.enums import ApproverRole, BulkAction, RequestStatus
from ..core.exceptions import AlreadyProcessedError, NotFoundError, ValidationError
from ..leave.service import LeaveLedger
from ..notifications.digest import DigestRow, build_pending_digest
from ..notifications.notifier import LoggingNotifier, Notifier
from ..users.model import UserScheduleProfile
from ..users.repository import UserRepository
from .model import CorrectionRequest
from .repository import RequestRepository

logger = logging.getLogger(__name__)

SUNDAY = 6


@dataclass(frozen=True)
class ApprovalOutcome:
    request: CorrectionRequest
    record: DailyRecord
    attendance: MonthlyAttendance
    leave_debited: bool


@dataclass(frozen=True)
class MonthlyLeaveSummary:
    earned: float
    used: float
    remaining: float
    leave_requests: list[dict]


def _as_role(value) -> ApproverRole:
    if isinstance(value, ApproverRole):
        return value
    v = (value or "").strip()
    for role in ApproverRole:
        if v.lower() == role.value.lower():
            return role
    raise ValidationError(f"Unknown approver role {value!r}", field="approver_role")


def _as_status(value) -> RequestStatus:
    if isinstance(value, RequestStatus):
        return value
    v = str(value).strip().lower()
    for status in RequestStatus:
        if v == status.value.lower():
            return status
    raise ValidationError(f"Unknown request status {value!r}", field="status")


class RequestService:
    """Correction-request lifecycle: Pending -> Approved | Rejected.

    Approval is one unit of work per user (classify the day, rewrite the month
    aggregate, debit leave) and is serialized on the user's lock.
    """

    def __init__(
        self,
        requests: RequestRepository,
        attendance: AttendanceRepository,
        users: UserRepository,
        ledger: LeaveLedger,
        *,
        classifier: Optional[DailyClassifier] = None,
        aggregator: Optional[MonthlyAggregator] = None,
        notifier: Optional[Notifier] = None,
        clock: Optional[Clock] = None,
        locks: Optional[KeyedLocks] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._requests = requests
        self._attendance = attendance
        self._users = users
        self._ledger = ledger
        self._classifier = classifier or DailyClassifier()
        self._aggregator = aggregator or MonthlyAggregator(self._classifier.resolver)
        self._notifier = notifier or LoggingNotifier()
        self._clock = clock or SystemClock()
        self._locks = locks or KeyedLocks()
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)

    def _require_user(self, user_id: str) -> UserScheduleProfile:
        profile = self._users.load_user_profile(str(user_id))
        if profile is None:
            raise NotFoundError("User", user_id)
        return profile

    def get_request(self, request_id: str) -> CorrectionRequest:
        req = self._requests.load_request(str(request_id))
        if req is None:
            raise NotFoundError("Request", request_id)
        return req

    @staticmethod
    def _parse_time_range(start_time, end_time) -> tuple[Optional[str], Optional[str]]:
        start = normalize_time(start_time, "start_time")
        end = normalize_time(end_time, "end_time")
        if bool(start) != bool(end):
            raise ValidationError("Provide both start_time and end_time, or neither", field="end_time" if start else "start_time")
        return start, end

    # Submission

    def submit_correction(
        self,
        *,
        user_id: str,
        date,
        requested_status: str,
        reason: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        partner_name: Optional[str] = None,
    ) -> CorrectionRequest:
        work_date = parse_iso_date(date)
        status = require_non_empty(requested_status, "requested_status")
        start, end = self._parse_time_range(start_time, end_time)
        profile = self._require_user(user_id)
        date_key = iso(work_date)

        existing = self._requests.list_requests(user_id=profile.user_id, date=date_key)
        if any(r.status is not RequestStatus.REJECTED for r in existing):
            raise ValidationError("A correction request for this date is already pending or approved", field="date")
        for old in existing:
            self._requests.delete_request(old.request_id)

        month_year = month_year_of(work_date)
        attendance = self._attendance.load_monthly_attendance(profile.user_id, month_year)
        current = attendance.records.get(date_key) if attendance else None

        req = CorrectionRequest(
            request_id=self._new_id(),
            user_id=profile.user_id,
            user_name=profile.name,
            partner_name=optional_text(partner_name) or profile.working_under_partner,
            date=date_key,
            month_year=month_year,
            requested_status=status,
            original_status=current.presence_type if current else ABSENT,
            reason=optional_text(reason),
            start_time=start,
            end_time=end,
            created_at=self._clock.now(),
        )
        self._requests.save_request(req)
        logger.info("correction submitted", extra={"request_id": req.request_id, "user_id": req.user_id, "date": date_key})
        return req

    def submit_future_leave(
        self,
        *,
        user_id: str,
        start_date,
        end_date,
        request_type: str,
        reason: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> list[CorrectionRequest]:
        start_d = parse_iso_date(start_date, "start_date")
        end_d = parse_iso_date(end_date, "end_date")
        if end_d < start_d:
            raise ValidationError("End date must be on or after start date", field="end_date")
        status = require_non_empty(request_type, "request_type")
        start, end = self._parse_time_range(start_time, end_time)
        profile = self._require_user(user_id)

        created: list[CorrectionRequest] = []
        for d in date_range(start_d, end_d):
            if d.weekday() == SUNDAY:
                continue
            req_start, req_end = start, end
            if status == PRESENT_OUTSTATION:
                sched = self._classifier.resolver.resolve(profile, d)
                if sched is not None:
                    req_start, req_end = sched.in_time, sched.out_time

            req = CorrectionRequest(
                request_id=self._new_id(),
                user_id=profile.user_id,
                user_name=profile.name,
                partner_name=profile.working_under_partner,
                date=iso(d),
                month_year=month_year_of(d),
                requested_status=status,
                original_status=FUTURE_REQUEST_STATUS,
                reason=optional_text(reason),
                start_time=req_start,
                end_time=req_end,
                created_at=self._clock.now(),
            )
            self._requests.save_request(req)
            created.append(req)

        logger.info("future requests submitted", extra={"user_id": profile.user_id, "count": len(created)})
        return created

    # Transitions

    def approve(
        self,
        request_id: str,
        approver_role=ApproverRole.PARTNER,
        remarks: Optional[str] = None,
        explicit_value=None,
    ) -> ApprovalOutcome:
        role = _as_role(approver_role)
        value = None if explicit_value is None or explicit_value == "" else require_attendance_value(explicit_value)
        remarks = optional_text(remarks)

        req = self.get_request(request_id)
        with self._locks.hold(req.user_id):
            outcome = self._approve_locked(str(request_id), role, remarks, value)

        self._notify(outcome.request, BulkAction.APPROVE, remarks)
        return outcome

    def _approve_locked(
        self, request_id: str, role: ApproverRole, remarks: Optional[str], value: Optional[float]
    ) -> ApprovalOutcome:
        # re-read under the lock so a concurrent decision is seen
        req = self.get_request(request_id)
        if req.status.is_terminal:
            raise AlreadyProcessedError(req.status)

        profile = self._require_user(req.user_id)
        work_date = parse_iso_date(req.date)
        now = self._clock.now()

        attendance = self._attendance.load_monthly_attendance(req.user_id, req.month_year)
        if attendance is None:
            attendance = MonthlyAttendance.empty(req.user_id, req.month_year)
        existing = attendance.get(req.date) or DailyRecord()

        if req.has_time_range:
            punch = RawPunch(checkin=req.start_time, checkout=req.end_time)
        else:
            punch = RawPunch(checkin=existing.checkin, checkout=existing.checkout)

        reference = f"{req.request_id}:{RequestStatus.APPROVED.value}"
        balance = self._ledger.get_balance(req.user_id)
        day_value = value
        if day_value is None and is_leave_type(req.requested_status) and reference in balance.debit_references:
            # an earlier attempt already debited this approval; the day stays paid
            day_value = FULL_DAY_VALUE
        result = self._classifier.classify(
            punch,
            req.requested_status,
            profile,
            work_date,
            balance,
            manual_value=day_value,
            remarks=remarks or existing.remarks,
        )

        approved = req.with_changes(
            status=RequestStatus.APPROVED,
            approved_by=role,
            approved_at=now,
            updated_at=now,
            approved_value=value,
            hr_remarks=remarks if role is ApproverRole.HR and remarks else req.hr_remarks,
            partner_remarks=remarks if role is ApproverRole.PARTNER and remarks else req.partner_remarks,
        )

        self._aggregator.apply(attendance, req.date, result.record, profile)
        self._attendance.save_monthly_attendance(attendance)

        debited = False
        if is_leave_type(req.requested_status) and result.is_paid_leave:
            debited = self._ledger.apply_approval(req.user_id, 1, reference=reference)

        self._requests.save_request(approved)
        logger.info(
            "request approved",
            extra={
                "request_id": req.request_id,
                "user_id": req.user_id,
                "date": req.date,
                "role": role.value,
                "value": result.record.value,
                "leave_debited": debited,
            },
        )
        return ApprovalOutcome(request=approved, record=result.record, attendance=attendance, leave_debited=debited)

    def reject(self, request_id: str, approver_role=ApproverRole.PARTNER, remarks: Optional[str] = None) -> CorrectionRequest:
        role = _as_role(approver_role)
        remarks = optional_text(remarks)

        req = self.get_request(request_id)
        with self._locks.hold(req.user_id):
            req = self.get_request(request_id)
            if req.status.is_terminal:
                raise AlreadyProcessedError(req.status)
            now = self._clock.now()
            rejected = req.with_changes(
                status=RequestStatus.REJECTED,
                rejected_by=role,
                rejected_at=now,
                updated_at=now,
                hr_remarks=remarks if role is ApproverRole.HR and remarks else req.hr_remarks,
                partner_remarks=remarks if role is ApproverRole.PARTNER and remarks else req.partner_remarks,
            )
            self._requests.save_request(rejected)

        logger.info("request rejected", extra={"request_id": req.request_id, "user_id": req.user_id, "role": role.value})
        self._notify(rejected, BulkAction.REJECT, remarks)
        return rejected

    def _notify(self, req: CorrectionRequest, action: BulkAction, remarks: Optional[str]) -> None:
        try:
            self._notifier.notify_request_decision(req, action, remarks)
        except Exception:
            logger.exception("request notification failed", extra={"request_id": req.request_id, "action": action.value})

    # Queries

    def list_requests(
        self,
        *,
        user_id: Optional[str] = None,
        status=None,
        partner_name: Optional[str] = None,
    ) -> Sequence[CorrectionRequest]:
        st = _as_status(status) if status else None
        return self._requests.list_requests(user_id=user_id, status=st, partner_name=partner_name)

    def pending_digest(self, partner_name: Optional[str] = None) -> list[DigestRow]:
        pending = self._requests.list_requests(status=RequestStatus.PENDING, partner_name=partner_name)
        return build_pending_digest(pending)

    def monthly_leave_summary(self, user_id: str, month_year: str) -> MonthlyLeaveSummary:
        parse_month_year(month_year)
        balance = self._ledger.get_balance(user_id)
        attendance = self._attendance.load_monthly_attendance(user_id, month_year)
        approved = self._requests.list_requests(user_id=user_id, status=RequestStatus.APPROVED, month_year=month_year)

        rows: list[dict] = []
        for req in sorted(approved, key=lambda r: r.date):
            if not is_leave_type(req.requested_status):
                continue
            record = attendance.records.get(req.date) if attendance else None
            value = record.value if record else 0.0
            rows.append(
                {"date": req.date, "status": req.requested_status, "is_paid_leave": value > 0, "value": value}
            )
        return MonthlyLeaveSummary(earned=balance.earned, used=balance.used, remaining=balance.remaining, leave_requests=rows)
