from __future__ import annotations

from typing import Optional, Sequence

from ..attendance.model import MonthlyAttendance
from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_document, fetchall, fetchone, load_document
from ..leave.model import LeaveBalance
from ..requests.model import CorrectionRequest
from ..users.model import UserScheduleProfile


class MySQLStore:
    """Repository protocols over mysql-connector; each entity is one JSON row."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Users --------
    def load_user_profile(self, user_id: str) -> Optional[UserScheduleProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT doc FROM user_profiles WHERE user_id=%s", (str(user_id),))
            r = fetchone(cur)
        return UserScheduleProfile.from_dict(load_document(r["doc"])) if r else None

    def save_user_profile(self, profile: UserScheduleProfile) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_profiles(user_id, doc, is_active)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE doc=VALUES(doc), is_active=VALUES(is_active)
                """,
                (profile.user_id, dump_document(profile.to_dict()), 1 if profile.is_active else 0),
            )

    # -------- Attendance --------
    def load_monthly_attendance(self, user_id: str, month_year: str) -> Optional[MonthlyAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc FROM monthly_attendance WHERE user_id=%s AND month_year=%s",
                (str(user_id), month_year),
            )
            r = fetchone(cur)
        return MonthlyAttendance.from_dict(load_document(r["doc"])) if r else None

    def save_monthly_attendance(self, attendance: MonthlyAttendance) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO monthly_attendance(user_id, month_year, record_count, doc)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE record_count=VALUES(record_count), doc=VALUES(doc)
                """,
                (
                    attendance.user_id,
                    attendance.month_year,
                    len(attendance.records),
                    dump_document(attendance.to_dict()),
                ),
            )

    def list_user_ids_with_attendance(self, month_year: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id FROM monthly_attendance
                WHERE month_year=%s AND record_count > 0
                ORDER BY user_id
                """,
                (month_year,),
            )
            return [str(r["user_id"]) for r in fetchall(cur)]

    # -------- Leave balances --------
    def load_leave_balance(self, user_id: str) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT doc FROM leave_balances WHERE user_id=%s", (str(user_id),))
            r = fetchone(cur)
        return LeaveBalance.from_dict(load_document(r["doc"])) if r else None

    def save_leave_balance(self, balance: LeaveBalance) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(user_id, doc) VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE doc=VALUES(doc)
                """,
                (balance.user_id, dump_document(balance.to_dict())),
            )

    # -------- Correction requests --------
    def load_request(self, request_id: str) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT doc FROM correction_requests WHERE request_id=%s", (str(request_id),))
            r = fetchone(cur)
        return CorrectionRequest.from_dict(load_document(r["doc"])) if r else None

    def save_request(self, request: CorrectionRequest) -> None:
        doc = request.to_dict()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO correction_requests(
                    request_id, user_id, work_date, month_year, status, partner_name, created_at, doc
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), partner_name=VALUES(partner_name), doc=VALUES(doc)
                """,
                (
                    request.request_id,
                    request.user_id,
                    request.date,
                    request.month_year,
                    request.status.value,
                    request.partner_name,
                    doc["created_at"],
                    dump_document(doc),
                ),
            )

    def delete_request(self, request_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM correction_requests WHERE request_id=%s", (str(request_id),))
            return cur.rowcount > 0

    def list_requests(
        self,
        *,
        user_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
        partner_name: Optional[str] = None,
        date: Optional[str] = None,
        month_year: Optional[str] = None,
    ) -> Sequence[CorrectionRequest]:
        where: list[str] = []
        params: list = []
        for column, value in (
            ("user_id", user_id),
            ("status", RequestStatus(status).value if status else None),
            ("partner_name", partner_name),
            ("work_date", date),
            ("month_year", month_year),
        ):
            if value is not None:
                where.append(f"{column}=%s")
                params.append(str(value))

        sql = "SELECT doc FROM correction_requests"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at DESC, request_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
        return [CorrectionRequest.from_dict(load_document(r["doc"])) for r in rows]
