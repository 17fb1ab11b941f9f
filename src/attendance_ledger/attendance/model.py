from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..common.datetime_utils import parse_iso_date, parse_month_year
from ..core.constants import MAX_ATTENDANCE_VALUE
from ..core.enums import PunchSource
from ..core.exceptions import ValidationError
from .presence import ABSENT


@dataclass(frozen=True)
class RawPunch:
    checkin: Optional[str] = None
    checkout: Optional[str] = None
    source: PunchSource = PunchSource.MANUAL


@dataclass(frozen=True)
class DailyRecord:
    """Thực thể miền (domain): Bản ghi chấm công của một ngày."""

    checkin: Optional[str] = None
    checkout: Optional[str] = None
    total_hour: float = 0.0
    excess_hour: float = 0.0
    presence_type: str = ABSENT
    half_day: bool = False
    value: float = 0.0
    remarks: Optional[str] = None

    def __post_init__(self):
        if self.total_hour < 0:
            raise ValidationError("total_hour must not be negative", field="total_hour")
        if not 0 <= self.value <= MAX_ATTENDANCE_VALUE:
            raise ValidationError(f"value must be between 0 and {MAX_ATTENDANCE_VALUE}", field="value")
        if (not self.checkin or not self.checkout or self.checkin == self.checkout) and self.total_hour != 0:
            raise ValidationError("total_hour must be 0 without a checkin/checkout span", field="total_hour")

    @classmethod
    def from_dict(cls, data: dict) -> "DailyRecord":
        return cls(
            checkin=data.get("checkin") or None,
            checkout=data.get("checkout") or None,
            total_hour=float(data.get("total_hour") or 0),
            excess_hour=float(data.get("excess_hour") or 0),
            presence_type=data.get("presence_type") or ABSENT,
            half_day=bool(data.get("half_day", False)),
            value=float(data.get("value") or 0),
            remarks=data.get("remarks") or None,
        )

    def to_dict(self) -> dict:
        return {
            "checkin": self.checkin,
            "checkout": self.checkout,
            "total_hour": self.total_hour,
            "excess_hour": self.excess_hour,
            "presence_type": self.presence_type,
            "half_day": self.half_day,
            "value": self.value,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class Summary:
    """Derived monthly counters. Never authored directly."""

    total_hour: float = 0.0
    total_late_arrival: int = 0
    excess_hour: float = 0.0
    total_half_day: int = 0
    total_present: int = 0
    total_absent: int = 0
    total_leave: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Summary":
        data = data or {}
        return cls(
            total_hour=float(data.get("total_hour") or 0),
            total_late_arrival=int(data.get("total_late_arrival") or 0),
            excess_hour=float(data.get("excess_hour") or 0),
            total_half_day=int(data.get("total_half_day") or 0),
            total_present=int(data.get("total_present") or 0),
            total_absent=int(data.get("total_absent") or 0),
            total_leave=int(data.get("total_leave") or 0),
        )

    def to_dict(self) -> dict:
        return {
            "total_hour": self.total_hour,
            "total_late_arrival": self.total_late_arrival,
            "excess_hour": self.excess_hour,
            "total_half_day": self.total_half_day,
            "total_present": self.total_present,
            "total_absent": self.total_absent,
            "total_leave": self.total_leave,
        }


@dataclass
class MonthlyAttendance:
    """One (user, YYYY-MM) aggregate: records keyed by ISO date plus a derived summary.

    Records are only written through ``set_record`` which validates the key;
    the summary is recomputed by MonthlyAggregator after every write.
    """

    user_id: str
    month_year: str
    records: dict[str, DailyRecord] = field(default_factory=dict)
    summary: Summary = field(default_factory=Summary)

    def __post_init__(self):
        parse_month_year(self.month_year)

    @classmethod
    def empty(cls, user_id: str, month_year: str) -> "MonthlyAttendance":
        return cls(user_id=user_id, month_year=month_year)

    def validate_key(self, date_key) -> str:
        d = parse_iso_date(date_key)
        key = d.strftime("%Y-%m-%d")
        if not key.startswith(self.month_year + "-"):
            raise ValidationError(f"Date {key} is outside month {self.month_year}", field="date")
        return key

    def get(self, date_key) -> Optional[DailyRecord]:
        return self.records.get(self.validate_key(date_key))

    def set_record(self, date_key, record: DailyRecord) -> str:
        key = self.validate_key(date_key)
        self.records[key] = record
        return key

    def sorted_records(self) -> list[tuple[str, DailyRecord]]:
        return sorted(self.records.items())

    @staticmethod
    def key_date(date_key: str) -> date:
        return parse_iso_date(date_key)

    @classmethod
    def from_dict(cls, data: dict) -> "MonthlyAttendance":
        return cls(
            user_id=str(data["user_id"]),
            month_year=data["month_year"],
            records={k: DailyRecord.from_dict(v) for k, v in (data.get("records") or {}).items()},
            summary=Summary.from_dict(data.get("summary")),
        )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "month_year": self.month_year,
            "records": {k: r.to_dict() for k, r in self.sorted_records()},
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class Holiday:
    date: date
    name: str
