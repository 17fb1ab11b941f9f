from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.constants import ARTICLE_DESIGNATION
from ..schedules.model import ScheduleTime, YearlySchedule


@dataclass(frozen=True)
class UserScheduleProfile:
    """Thực thể miền (domain): hồ sơ lịch làm việc của nhân viên.

    Lưu ý: Đây là đối tượng dữ liệu thuần, engine chỉ đọc, không sửa.
    ``schedules`` is keyed by year ("2025") and takes precedence over the
    top-level ``regular``/``saturday``/``monthly`` fields.
    """

    user_id: str
    name: str = ""
    email: Optional[str] = None
    designation: Optional[str] = None
    working_under_partner: Optional[str] = None
    regular: Optional[ScheduleTime] = None
    saturday: Optional[ScheduleTime] = None
    monthly: Optional[ScheduleTime] = None
    schedules: dict[str, YearlySchedule] = field(default_factory=dict)
    is_active: bool = True

    @property
    def is_article(self) -> bool:
        return (self.designation or "").strip().lower() == ARTICLE_DESIGNATION

    @classmethod
    def from_dict(cls, data: dict) -> "UserScheduleProfile":
        return cls(
            user_id=str(data["user_id"]),
            name=data.get("name") or "",
            email=data.get("email"),
            designation=data.get("designation"),
            working_under_partner=data.get("working_under_partner"),
            regular=ScheduleTime.from_dict(data.get("regular")),
            saturday=ScheduleTime.from_dict(data.get("saturday")),
            monthly=ScheduleTime.from_dict(data.get("monthly")),
            schedules={str(y): YearlySchedule.from_dict(s) for y, s in (data.get("schedules") or {}).items()},
            is_active=bool(data.get("is_active", True)),
        )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "designation": self.designation,
            "working_under_partner": self.working_under_partner,
            "regular": self.regular.to_dict() if self.regular else None,
            "saturday": self.saturday.to_dict() if self.saturday else None,
            "monthly": self.monthly.to_dict() if self.monthly else None,
            "schedules": {y: s.to_dict() for y, s in self.schedules.items()},
            "is_active": self.is_active,
        }
