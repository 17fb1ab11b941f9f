from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from attendance_ledger.container import build_container
from attendance_ledger.leave.model import LeaveBalance
from attendance_ledger.schedules.model import ScheduleTime
from attendance_ledger.users.model import UserScheduleProfile


class FixedClock:
    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class TickingClock(FixedClock):
    """Moves one second per call so created_at ordering is deterministic."""

    def now(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock():
    return TickingClock(datetime(2024, 7, 31, 12, 0, 0))


@pytest.fixture
def associate():
    return UserScheduleProfile(
        user_id="u1",
        name="Asha",
        email="asha@example.com",
        designation="associate",
        working_under_partner="P1",
        regular=ScheduleTime.of("09:00", "18:00"),
    )


@pytest.fixture
def article():
    return UserScheduleProfile(
        user_id="a1",
        name="Ravi",
        designation="Article",
        working_under_partner="P1",
        regular=ScheduleTime.of("10:00", "18:00"),
        saturday=ScheduleTime.of("10:00", "14:00"),
    )


@pytest.fixture
def container(clock, associate, article):
    c = build_container(clock=clock)
    c.store.save_user_profile(associate)
    c.store.save_user_profile(article)
    return c


@pytest.fixture
def give_balance(container):
    def _give(user_id: str, remaining: float) -> None:
        container.store.save_leave_balance(LeaveBalance(user_id=user_id, earned=remaining, remaining=remaining))

    return _give
