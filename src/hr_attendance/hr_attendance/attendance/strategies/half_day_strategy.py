from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.model import WorkHours
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Short day on check-out. Replaces whatever status the check-in recorded."""

    def decide_checkin(self, *, now: datetime, expected: Optional[WorkHours], grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, current: AttendanceStatus, work_hours: float) -> StatusDecision:
        note = f"Half day ({work_hours:.2f}h), was {current.value}" if current != AttendanceStatus.HALF_DAY else None
        return StatusDecision(status=AttendanceStatus.HALF_DAY, note=note)
