from __future__ import annotations

from typing import Optional, Protocol

from .model import UserScheduleProfile


class UserRepository(Protocol):
    def load_user_profile(self, user_id: str) -> Optional[UserScheduleProfile]:
        raise NotImplementedError

    def save_user_profile(self, profile: UserScheduleProfile) -> None:
        raise NotImplementedError
