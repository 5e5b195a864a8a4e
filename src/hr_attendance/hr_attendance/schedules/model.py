from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Mapping, Optional

from ..common.validators import require_non_empty, require_weekdays
from ..core.constants import DEFAULT_BREAK_MINUTES, DEFAULT_WORK_DAYS, DEFAULT_WORK_HOURS
from ..core.enums import ResolutionSource, ScheduleKind
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ShiftDefinition:
    """Thực thể miền (domain): Ca làm việc trong một lịch dạng `shift`.

    end_time may be earlier than start_time: the shift then ends on the next day.
    """

    name: str
    start_time: time
    end_time: time
    break_minutes: int = DEFAULT_BREAK_MINUTES

    @property
    def is_overnight(self) -> bool:
        return self.end_time < self.start_time


@dataclass(frozen=True)
class FlexibleHours:
    core_hours_start: Optional[time] = None
    core_hours_end: Optional[time] = None
    minimum_work_hours: float = DEFAULT_WORK_HOURS


@dataclass(frozen=True)
class WorkScheduleDefinition:
    """Thực thể miền (domain): Lịch làm việc.

    Only the payload matching `kind` is meaningful:
    - fixed: start_time / end_time / break_minutes
    - shift: shifts (at least one)
    - flexible: flexible
    """

    schedule_id: int
    name: str
    kind: ScheduleKind
    work_days: tuple[int, ...] = DEFAULT_WORK_DAYS
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    break_minutes: int = DEFAULT_BREAK_MINUTES
    shifts: tuple[ShiftDefinition, ...] = ()
    flexible: Optional[FlexibleHours] = None
    description: Optional[str] = None
    is_active: bool = True
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    def validate(self) -> "WorkScheduleDefinition":
        require_non_empty(self.name, "name")
        require_weekdays(self.work_days)
        if self.break_minutes is not None and int(self.break_minutes) < 0:
            raise ValidationError("break_minutes must not be negative")

        if self.kind == ScheduleKind.FIXED:
            if self.start_time is None or self.end_time is None:
                raise ValidationError("fixed schedule requires start_time and end_time")
        elif self.kind == ScheduleKind.SHIFT:
            if not self.shifts:
                raise ValidationError("shift schedule requires at least one shift")
            names = [require_non_empty(s.name, "shift name") for s in self.shifts]
            if len(set(names)) != len(names):
                raise ValidationError("shift names must be unique within a schedule")
            if any(int(s.break_minutes) < 0 for s in self.shifts):
                raise ValidationError("shift break_minutes must not be negative")
        elif self.kind == ScheduleKind.FLEXIBLE:
            if self.flexible is None:
                raise ValidationError("flexible schedule requires flexible hours")
            if float(self.flexible.minimum_work_hours) < 0:
                raise ValidationError("minimum_work_hours must not be negative")
        return self

    def find_shift(self, name: Optional[str]) -> Optional[ShiftDefinition]:
        if not self.shifts:
            return None
        if name is None:
            return self.shifts[0]
        for s in self.shifts:
            if s.name == name:
                return s
        return None


@dataclass(frozen=True)
class ScheduleOverride:
    on: date
    schedule_id: Optional[int]
    reason: Optional[str]
    created_by: Optional[int]
    created_at: datetime
    shift_name: Optional[str] = None


@dataclass(frozen=True)
class ScheduleAssignment:
    """Effective-dated schedule assignment.

    Covers every date d with effective_date <= d <= expiry_date (inclusive);
    expiry_date=None means open-ended. Overrides are keyed by date.
    """

    assignment_id: int
    employee_id: int
    schedule_id: int
    effective_date: date
    expiry_date: Optional[date] = None
    overrides: Mapping[date, ScheduleOverride] = field(default_factory=dict)
    shift_name: Optional[str] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    def covers(self, on: date) -> bool:
        return self.effective_date <= on and (self.expiry_date is None or self.expiry_date >= on)


@dataclass(frozen=True)
class ResolvedSchedule:
    schedule: WorkScheduleDefinition
    source: ResolutionSource
    assignment_id: int
    shift_name: Optional[str] = None


@dataclass(frozen=True)
class WorkHours:
    is_work_day: bool
    work_hours: float
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    break_minutes: int

    @classmethod
    def day_off(cls) -> "WorkHours":
        return cls(is_work_day=False, work_hours=0.0, start_time=None, end_time=None, break_minutes=0)
