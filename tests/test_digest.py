from attendance_ledger.notifications.digest import group_dates_into_ranges


def test_consecutive_dates_collapse_into_ranges():
    dates = ["2024-07-05", "2024-07-01", "2024-07-02", "2024-07-03", "2024-07-03"]

    assert group_dates_into_ranges(dates) == ["2024-07-01 to 2024-07-03", "2024-07-05"]


def test_ranges_cross_month_boundaries():
    assert group_dates_into_ranges(["2024-07-31", "2024-08-01"]) == ["2024-07-31 to 2024-08-01"]
    assert group_dates_into_ranges([]) == []


def test_pending_digest_groups_by_user_and_status(container):
    container.request_service.submit_future_leave(
        user_id="u1", start_date="2024-07-01", end_date="2024-07-03", request_type="On leave", reason="wedding"
    )
    container.request_service.submit_correction(
        user_id="u1", date="2024-07-05", requested_status="On leave", reason="later"
    )
    container.request_service.submit_correction(
        user_id="a1",
        date="2024-07-01",
        requested_status="Work From Home (WFH)",
        start_time="10:00",
        end_time="18:00",
    )
    decided = container.request_service.submit_correction(
        user_id="a1", date="2024-07-02", requested_status="On leave"
    )
    container.request_service.reject(decided.request_id)

    rows = container.request_service.pending_digest("P1")

    assert [(r.user_name, r.requested_status, r.dates) for r in rows] == [
        ("Asha", "On leave", "2024-07-01 to 2024-07-03, 2024-07-05"),
        ("Ravi", "Work From Home (WFH)", "2024-07-01"),
    ]
    assert rows[0].reason == "wedding"
    assert rows[0].time_range == "-"
    assert len(rows[0].request_ids) == 4
    assert rows[1].time_range == "10:00 - 18:00"
    assert container.request_service.pending_digest("Someone else") == []
