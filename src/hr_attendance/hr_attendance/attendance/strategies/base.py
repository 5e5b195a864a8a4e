from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.model import WorkHours


@dataclass(frozen=True)
class StatusDecision:
    """Status to store plus an optional line appended to the record notes."""

    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status.

    expected is None when the employee has no schedule on that date.
    """

    @abstractmethod
    def decide_checkin(self, *, now: datetime, expected: Optional[WorkHours], grace_minutes: int) -> StatusDecision:
        raise NotImplementedError

    def decide_checkout(self, *, current: AttendanceStatus, work_hours: float) -> StatusDecision:
        return StatusDecision(status=current)
