from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.datetime_utils import normalize_time
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ScheduleTime:
    """Giờ vào/ra theo lịch (HH:mm, 24h)."""

    in_time: str
    out_time: str

    @classmethod
    def of(cls, in_time: str, out_time: str) -> "ScheduleTime":
        cin = normalize_time(in_time, "in_time")
        cout = normalize_time(out_time, "out_time")
        if not cin or not cout:
            raise ValidationError("Schedule needs both in_time and out_time", field="in_time" if not cin else "out_time")
        return cls(in_time=cin, out_time=cout)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["ScheduleTime"]:
        if not data:
            return None
        in_time = data.get("in_time") or data.get("inTime")
        out_time = data.get("out_time") or data.get("outTime")
        if not in_time or not out_time:
            return None
        return cls.of(in_time, out_time)

    def to_dict(self) -> dict:
        return {"in_time": self.in_time, "out_time": self.out_time}


@dataclass(frozen=True)
class YearlySchedule:
    regular: Optional[ScheduleTime] = None
    saturday: Optional[ScheduleTime] = None
    monthly: Optional[ScheduleTime] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "YearlySchedule":
        data = data or {}
        return cls(
            regular=ScheduleTime.from_dict(data.get("regular")),
            saturday=ScheduleTime.from_dict(data.get("saturday")),
            monthly=ScheduleTime.from_dict(data.get("monthly")),
        )

    def to_dict(self) -> dict:
        return {
            "regular": self.regular.to_dict() if self.regular else None,
            "saturday": self.saturday.to_dict() if self.saturday else None,
            "monthly": self.monthly.to_dict() if self.monthly else None,
        }
