from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.model import WorkHours
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, expected: Optional[WorkHours], grace_minutes: int) -> StatusDecision:
        if expected is None or expected.start_time is None:
            return StatusDecision(status=AttendanceStatus.LATE)
        minutes = int((now - expected.start_time).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {minutes} min")
