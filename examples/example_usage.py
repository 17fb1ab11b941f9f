"""Ví dụ: dùng service layer (không qua Flask), với store trong bộ nhớ.

Submit a leave request, approve it and print the month plus the balance.
"""

from attendance_ledger.container import build_container
from attendance_ledger.core.enums import ApproverRole
from attendance_ledger.schedules.model import ScheduleTime
from attendance_ledger.users.model import UserScheduleProfile


def main():
    container = build_container()
    container.store.save_user_profile(
        UserScheduleProfile(
            user_id="u1",
            name="Asha",
            designation="associate",
            working_under_partner="Partner One",
            regular=ScheduleTime.of("09:30", "18:30"),
        )
    )

    container.attendance_service.ingest_punches([("u1", "2024-07-01", "09:25", "18:40")])
    print(container.leave_ledger.get_balance("u1").to_dict())

    req = container.request_service.submit_correction(
        user_id="u1", date="2024-07-02", requested_status="On leave", reason="family"
    )
    outcome = container.request_service.approve(req.request_id, ApproverRole.PARTNER, "ok")

    print(outcome.attendance.to_dict())
    print(container.leave_ledger.get_balance("u1").to_dict())


if __name__ == "__main__":
    main()
