from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.model import WorkHours
from .base import AttendanceStrategy, StatusDecision


class HolidayStrategy(AttendanceStrategy):
    """Check-in on a holiday: the day is classified as holiday whatever the schedule says."""

    def decide_checkin(self, *, now: datetime, expected: Optional[WorkHours], grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HOLIDAY)
