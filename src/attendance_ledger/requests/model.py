from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.enums import ApproverRole, RequestStatus


@dataclass(frozen=True)
class CorrectionRequest:
    """Yêu cầu điều chỉnh chấm công / nghỉ phép của nhân viên cho một ngày."""

    request_id: str
    user_id: str
    date: str
    month_year: str
    requested_status: str
    original_status: str
    created_at: datetime
    user_name: str = ""
    partner_name: Optional[str] = None
    reason: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: RequestStatus = RequestStatus.PENDING
    partner_remarks: Optional[str] = None
    hr_remarks: Optional[str] = None
    approved_value: Optional[float] = None
    approved_by: Optional[ApproverRole] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[ApproverRole] = None
    rejected_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_time_range(self) -> bool:
        return bool(self.start_time and self.end_time)

    def with_changes(self, **changes) -> "CorrectionRequest":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict) -> "CorrectionRequest":
        def _dt(v):
            return datetime.fromisoformat(v) if isinstance(v, str) and v else v

        def _role(v):
            return ApproverRole(v) if v else None

        return cls(
            request_id=str(data["request_id"]),
            user_id=str(data["user_id"]),
            date=data["date"],
            month_year=data["month_year"],
            requested_status=data["requested_status"],
            original_status=data.get("original_status") or "",
            created_at=_dt(data["created_at"]),
            user_name=data.get("user_name") or "",
            partner_name=data.get("partner_name"),
            reason=data.get("reason"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            status=RequestStatus(data.get("status") or RequestStatus.PENDING.value),
            partner_remarks=data.get("partner_remarks"),
            hr_remarks=data.get("hr_remarks"),
            approved_value=data.get("approved_value"),
            approved_by=_role(data.get("approved_by")),
            approved_at=_dt(data.get("approved_at")),
            rejected_by=_role(data.get("rejected_by")),
            rejected_at=_dt(data.get("rejected_at")),
            updated_at=_dt(data.get("updated_at")),
        )

    def to_dict(self) -> dict:
        def _dt(v):
            return v.isoformat() if v else None

        return {
            "request_id": self.request_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "partner_name": self.partner_name,
            "date": self.date,
            "month_year": self.month_year,
            "requested_status": self.requested_status,
            "original_status": self.original_status,
            "reason": self.reason,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "status": self.status.value,
            "partner_remarks": self.partner_remarks,
            "hr_remarks": self.hr_remarks,
            "approved_value": self.approved_value,
            "approved_by": self.approved_by.value if self.approved_by else None,
            "approved_at": _dt(self.approved_at),
            "rejected_by": self.rejected_by.value if self.rejected_by else None,
            "rejected_at": _dt(self.rejected_at),
            "created_at": _dt(self.created_at),
            "updated_at": _dt(self.updated_at),
        }
