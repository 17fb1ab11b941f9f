from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import hours_between, iso, month_year_of, normalize_punch, parse_iso_date, parse_month_year
from ..common.locks import KeyedLocks
from ..common.validators import require_non_empty
from ..core.enums import PunchSource, RequestStatus
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..leave.service import LeaveLedger
from ..requests.model import CorrectionRequest
from ..requests.repository import RequestRepository
from ..users.model import UserScheduleProfile
from ..users.repository import UserRepository
from .aggregator import MonthlyAggregator
from .classifier import DailyClassifier
from .model import DailyRecord, Holiday, MonthlyAttendance, RawPunch
from .presence import HOLIDAY, ON_LEAVE, PRESENT, is_leave_type
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PunchRow:
    """One punch-machine line: who, which day, first in, last out."""

    user_id: str
    date: str
    checkin: Optional[str] = None
    checkout: Optional[str] = None

    @classmethod
    def coerce(cls, row) -> "PunchRow":
        if isinstance(row, PunchRow):
            return row
        if isinstance(row, dict):
            return cls(
                user_id=str(row.get("user_id") or row.get("userId") or ""),
                date=row.get("date"),
                checkin=row.get("checkin") or row.get("in_time"),
                checkout=row.get("checkout") or row.get("out_time"),
            )
        user_id, date, checkin, checkout = row
        return cls(user_id=str(user_id), date=date, checkin=checkin, checkout=checkout)


@dataclass(frozen=True)
class IngestError:
    row: int
    user_id: str
    reason: str


@dataclass
class IngestResult:
    processed: list[dict] = field(default_factory=list)
    errors: list[IngestError] = field(default_factory=list)
    accrued: list[tuple[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "processed": list(self.processed),
            "errors": [{"row": e.row, "user_id": e.user_id, "reason": e.reason} for e in self.errors],
            "accrued": [{"user_id": u, "month_year": m} for u, m in self.accrued],
        }


class AttendanceService:
    """Writes to monthly aggregates that don't come from the request workflow."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        requests: RequestRepository,
        ledger: LeaveLedger,
        *,
        classifier: Optional[DailyClassifier] = None,
        aggregator: Optional[MonthlyAggregator] = None,
        locks: Optional[KeyedLocks] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._requests = requests
        self._ledger = ledger
        self._classifier = classifier or DailyClassifier()
        self._aggregator = aggregator or MonthlyAggregator(self._classifier.resolver)
        self._locks = locks or KeyedLocks()

    def _require_user(self, user_id: str) -> UserScheduleProfile:
        profile = self._users.load_user_profile(str(user_id))
        if profile is None:
            raise NotFoundError("User", user_id)
        return profile

    def _load_or_create(self, user_id: str, month_year: str) -> MonthlyAttendance:
        return self._attendance.load_monthly_attendance(user_id, month_year) or MonthlyAttendance.empty(
            user_id, month_year
        )

    # Reads

    def get_month(self, user_id: str, month_year: str) -> MonthlyAttendance:
        parse_month_year(month_year)
        attendance = self._attendance.load_monthly_attendance(str(user_id), month_year)
        if attendance is None:
            raise NotFoundError("Attendance", f"{user_id}/{month_year}")
        attendance.records = dict(attendance.sorted_records())
        return attendance

    def audit_month(self, user_id: str, month_year: str) -> MonthlyAttendance:
        attendance = self.get_month(user_id, month_year)
        profile = self._users.load_user_profile(str(user_id))
        self._aggregator.verify(attendance, profile)
        return attendance

    def expected_hours(self, user_id: str, month_year: str) -> float:
        profile = self._require_user(user_id)
        return self._classifier.resolver.expected_hours_for_month(profile, month_year)

    # Punch ingestion

    def ingest_punches(self, rows: Iterable) -> IngestResult:
        result = IngestResult()
        touched: dict[tuple[str, str], None] = {}

        for index, raw in enumerate(rows):
            user_id = ""
            try:
                row = PunchRow.coerce(raw)
                user_id = require_non_empty(row.user_id, "user_id")
                processed = self._ingest_one(row)
            except DomainError as exc:
                logger.warning("punch row rejected", extra={"row": index, "user_id": user_id, "error": str(exc)})
                result.errors.append(IngestError(row=index, user_id=user_id, reason=str(exc)))
                continue
            except (TypeError, ValueError) as exc:
                logger.warning("punch row malformed", extra={"row": index, "error": str(exc)})
                result.errors.append(IngestError(row=index, user_id=user_id, reason=f"Malformed row: {exc}"))
                continue
            result.processed.append(processed)
            touched[(processed["user_id"], processed["month_year"])] = None

        for user_id, month_year in touched:
            if self._ledger.accrue_monthly(user_id, month_year):
                result.accrued.append((user_id, month_year))

        logger.info(
            "punch ingestion finished",
            extra={"processed": len(result.processed), "errors": len(result.errors), "accrued": len(result.accrued)},
        )
        return result

    def _approved_request_for(self, user_id: str, date_key: str) -> Optional[CorrectionRequest]:
        approved = self._requests.list_requests(user_id=user_id, status=RequestStatus.APPROVED, date=date_key)
        return approved[0] if approved else None

    def _ingest_one(self, row: PunchRow) -> dict:
        work_date = parse_iso_date(row.date)
        date_key = iso(work_date)
        month_year = month_year_of(work_date)
        profile = self._require_user(row.user_id)
        checkin, checkout = normalize_punch(row.checkin, row.checkout)

        with self._locks.hold(profile.user_id):
            attendance = self._load_or_create(profile.user_id, month_year)
            existing = attendance.get(date_key)
            approved = self._approved_request_for(profile.user_id, date_key)
            record = self._merge_with_request(profile, work_date, checkin, checkout, approved, existing)
            self._aggregator.apply(attendance, date_key, record, profile)
            self._attendance.save_monthly_attendance(attendance)

        return {
            "user_id": profile.user_id,
            "date": date_key,
            "month_year": month_year,
            "presence_type": record.presence_type,
            "overridden": approved is not None,
        }

    def _merge_with_request(
        self,
        profile: UserScheduleProfile,
        work_date,
        checkin: Optional[str],
        checkout: Optional[str],
        approved: Optional[CorrectionRequest],
        existing: Optional[DailyRecord],
    ) -> DailyRecord:
        machine = RawPunch(checkin=checkin, checkout=checkout, source=PunchSource.MACHINE)
        if approved is None:
            return self._classifier.classify(machine, None, profile, work_date).record

        machine_hours = hours_between(checkin, checkout)
        request_hours = hours_between(approved.start_time, approved.end_time)
        if machine_hours > request_hours:
            return self._classifier.classify(
                machine,
                PRESENT,
                profile,
                work_date,
                remarks=f"Present (machine {machine_hours}h > request {request_hours}h)",
            ).record

        status = approved.requested_status
        if approved.has_time_range:
            punch = RawPunch(checkin=approved.start_time, checkout=approved.end_time)
        elif is_leave_type(status):
            punch = RawPunch()
        else:
            punch = machine

        # the approval already settled the value (and any leave debit)
        manual_value = approved.approved_value
        if manual_value is None and existing is not None and existing.presence_type == status:
            manual_value = existing.value

        return self._classifier.classify(
            punch,
            status,
            profile,
            work_date,
            manual_value=manual_value,
            remarks=f"Overridden by approved request: {status}",
        ).record

    # Administrative updates

    def apply_holidays(self, user_id: str, month_year: str, holidays: Sequence[Holiday]) -> int:
        """Fill holiday dates that have no record yet; returns how many were added."""
        parse_month_year(month_year)
        profile = self._require_user(str(user_id))

        with self._locks.hold(str(user_id)):
            attendance = self._attendance.load_monthly_attendance(str(user_id), month_year)
            if attendance is None:
                return 0

            added = 0
            for holiday in holidays:
                day = parse_iso_date(holiday.date)
                key = iso(day)
                if not key.startswith(month_year + "-") or key in attendance.records:
                    continue
                result = self._classifier.classify(
                    RawPunch(), HOLIDAY, profile, day, remarks=holiday.name
                )
                attendance.set_record(key, result.record)
                added += 1

            if added:
                self._aggregator.refresh(attendance, profile)
                self._attendance.save_monthly_attendance(attendance)

        logger.info("holidays applied", extra={"user_id": user_id, "month_year": month_year, "added": added})
        return added

    def bulk_update_status(self, updates: Iterable, new_status: Optional[str] = None) -> int:
        """Rewrite the presence type of existing records; missing days are ignored.

        ``updates`` holds ``(user_id, date)`` pairs or dicts with those keys.
        """
        status = (new_status or "").strip() or ON_LEAVE
        groups: dict[tuple[str, str], list[str]] = {}
        for item in updates:
            if isinstance(item, dict):
                user_id, date_value = item.get("user_id") or item.get("userId"), item.get("date")
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                user_id, date_value = item
            else:
                raise ValidationError(f"Expected a (user_id, date) pair, got {item!r}", field="updates")
            user_id = require_non_empty(str(user_id or ""), "user_id")
            d = parse_iso_date(date_value)
            groups.setdefault((user_id, month_year_of(d)), []).append(iso(d))

        updated = 0
        for (user_id, month_year), dates in groups.items():
            profile = self._users.load_user_profile(user_id)
            with self._locks.hold(user_id):
                attendance = self._attendance.load_monthly_attendance(user_id, month_year)
                if attendance is None:
                    continue
                changed = 0
                for key in dates:
                    record = attendance.records.get(key)
                    if record is None:
                        continue
                    attendance.set_record(
                        key, self._classifier.reclassify(record, status, profile, parse_iso_date(key))
                    )
                    changed += 1
                if changed:
                    self._aggregator.refresh(attendance, profile)
                    self._attendance.save_monthly_attendance(attendance)
                    updated += changed

        logger.info("status updated", extra={"status": status, "updated": updated})
        return updated
