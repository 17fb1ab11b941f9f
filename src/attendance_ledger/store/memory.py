from __future__ import annotations

import threading
from typing import Optional, Sequence

from ..attendance.model import MonthlyAttendance
from ..core.enums import RequestStatus
from ..leave.model import LeaveBalance
from ..requests.model import CorrectionRequest
from ..users.model import UserScheduleProfile


class InMemoryStore:
    """Implements every repository protocol over plain dicts.

    Documents are kept serialized so each load hands out an independent copy,
    the same way a database round trip would.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._users: dict[str, dict] = {}
        self._attendance: dict[tuple[str, str], dict] = {}
        self._balances: dict[str, dict] = {}
        self._requests: dict[str, dict] = {}

    # Users

    def load_user_profile(self, user_id: str) -> Optional[UserScheduleProfile]:
        with self._lock:
            doc = self._users.get(str(user_id))
        return UserScheduleProfile.from_dict(doc) if doc else None

    def save_user_profile(self, profile: UserScheduleProfile) -> None:
        with self._lock:
            self._users[profile.user_id] = profile.to_dict()

    # Attendance

    def load_monthly_attendance(self, user_id: str, month_year: str) -> Optional[MonthlyAttendance]:
        with self._lock:
            doc = self._attendance.get((str(user_id), month_year))
        return MonthlyAttendance.from_dict(doc) if doc else None

    def save_monthly_attendance(self, attendance: MonthlyAttendance) -> None:
        with self._lock:
            self._attendance[(attendance.user_id, attendance.month_year)] = attendance.to_dict()

    def list_user_ids_with_attendance(self, month_year: str) -> Sequence[str]:
        with self._lock:
            return sorted(u for (u, m), doc in self._attendance.items() if m == month_year and doc.get("records"))

    # Leave

    def load_leave_balance(self, user_id: str) -> Optional[LeaveBalance]:
        with self._lock:
            doc = self._balances.get(str(user_id))
        return LeaveBalance.from_dict(doc) if doc else None

    def save_leave_balance(self, balance: LeaveBalance) -> None:
        with self._lock:
            self._balances[balance.user_id] = balance.to_dict()

    # Requests

    def load_request(self, request_id: str) -> Optional[CorrectionRequest]:
        with self._lock:
            doc = self._requests.get(str(request_id))
        return CorrectionRequest.from_dict(doc) if doc else None

    def save_request(self, request: CorrectionRequest) -> None:
        with self._lock:
            self._requests[request.request_id] = request.to_dict()

    def delete_request(self, request_id: str) -> bool:
        with self._lock:
            return self._requests.pop(str(request_id), None) is not None

    def list_requests(
        self,
        *,
        user_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
        partner_name: Optional[str] = None,
        date: Optional[str] = None,
        month_year: Optional[str] = None,
    ) -> Sequence[CorrectionRequest]:
        with self._lock:
            docs = list(self._requests.values())

        def keep(doc: dict) -> bool:
            if user_id is not None and doc["user_id"] != str(user_id):
                return False
            if status is not None and doc["status"] != RequestStatus(status).value:
                return False
            if partner_name is not None and doc.get("partner_name") != partner_name:
                return False
            if date is not None and doc["date"] != date:
                return False
            if month_year is not None and doc["month_year"] != month_year:
                return False
            return True

        rows = [CorrectionRequest.from_dict(d) for d in docs if keep(d)]
        rows.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return rows
