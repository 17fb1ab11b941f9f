from __future__ import annotations

from enum import Enum


class PresenceFamily(str, Enum):
    """Nhóm trạng thái có mặt dùng chung quy tắc tổng hợp."""

    PRESENT = "PRESENT"
    LEAVE = "LEAVE"
    HOLIDAY = "HOLIDAY"
    HALF_DAY = "HALF_DAY"
    OUTSTATION = "OUTSTATION"
    UNRECOGNIZED = "UNRECOGNIZED"


class RequestStatus(str, Enum):
    """Trạng thái luồng duyệt yêu cầu điều chỉnh chấm công/nghỉ phép."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class ApproverRole(str, Enum):
    PARTNER = "Partner"
    HR = "HR"


class BulkAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class PunchSource(str, Enum):
    """Nguồn dữ liệu giờ vào/ra của một ngày."""

    MACHINE = "machine"
    MANUAL = "manual"
