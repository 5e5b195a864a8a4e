from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_HALF_DAY_HOURS
from ..schedules.model import WorkHours
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.holiday_strategy import HolidayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    Check-in priority: holiday, then day off / no schedule / no fixed start
    (present), then the grace threshold.
    """

    half_day_hours: float = DEFAULT_HALF_DAY_HOURS

    def for_checkin(
        self,
        *,
        now: datetime,
        is_holiday: bool,
        expected: Optional[WorkHours],
        grace_minutes: int,
    ) -> AttendanceStrategy:
        if is_holiday:
            return HolidayStrategy()
        if expected is None or not expected.is_work_day or expected.start_time is None:
            return NormalStrategy()

        if now > expected.start_time + timedelta(minutes=grace_minutes):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, work_hours: float) -> AttendanceStrategy:
        if work_hours < self.half_day_hours:
            return HalfDayStrategy()
        return NormalStrategy()
