from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import PresenceFamily
from .presence import family_of
from .strategies.base import ValueStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.holiday_strategy import HolidayStrategy
from .strategies.leave_strategy import LeaveStrategy
from .strategies.outstation_strategy import OutstationStrategy
from .strategies.present_strategy import PresentStrategy
from .strategies.unrecognized_strategy import UnrecognizedStrategy


def _default_strategies() -> dict[PresenceFamily, ValueStrategy]:
    return {
        PresenceFamily.HALF_DAY: HalfDayStrategy(),
        PresenceFamily.LEAVE: LeaveStrategy(),
        PresenceFamily.HOLIDAY: HolidayStrategy(),
        PresenceFamily.OUTSTATION: OutstationStrategy(),
        PresenceFamily.PRESENT: PresentStrategy(),
        PresenceFamily.UNRECOGNIZED: UnrecognizedStrategy(),
    }


@dataclass
class ValueStrategyFactory:
    """Factory Pattern: choose the value strategy for a presence type's family."""

    strategies: dict[PresenceFamily, ValueStrategy] = field(default_factory=_default_strategies)

    def for_presence(self, presence_type: str) -> ValueStrategy:
        return self.strategies[family_of(presence_type)]
