from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import hours_between, weekday_index
from ..core.constants import DEFAULT_WORK_HOURS
from ..core.enums import ScheduleKind
from ..core.exceptions import ValidationError
from .model import WorkHours, WorkScheduleDefinition


class WorkHourCalculator:
    """Expected working hours of a schedule on a given date.

    All durations are float hours; breaks are subtracted as minutes / 60.
    """

    def __init__(self, *, default_work_hours: float = DEFAULT_WORK_HOURS):
        self._default_work_hours = float(default_work_hours)
        self._by_kind: dict[ScheduleKind, Callable[..., Optional[WorkHours]]] = {
            ScheduleKind.FIXED: self._fixed,
            ScheduleKind.SHIFT: self._shift,
            ScheduleKind.FLEXIBLE: self._flexible,
        }

    def compute_hours(
        self,
        schedule: WorkScheduleDefinition,
        on: date,
        *,
        shift_name: Optional[str] = None,
    ) -> WorkHours:
        if weekday_index(on) not in schedule.work_days:
            return WorkHours.day_off()

        handler = self._by_kind.get(schedule.kind)
        result = handler(schedule, on, shift_name) if handler else None
        if result is None:
            return self._fallback()
        return result

    def _fixed(self, schedule: WorkScheduleDefinition, on: date, shift_name: Optional[str]) -> Optional[WorkHours]:
        if schedule.start_time is None or schedule.end_time is None:
            return None

        start = datetime.combine(on, schedule.start_time)
        end = datetime.combine(on, schedule.end_time)
        break_minutes = int(schedule.break_minutes or 0)
        return WorkHours(
            is_work_day=True,
            work_hours=hours_between(start, end) - break_minutes / 60,
            start_time=start,
            end_time=end,
            break_minutes=break_minutes,
        )

    def _shift(self, schedule: WorkScheduleDefinition, on: date, shift_name: Optional[str]) -> Optional[WorkHours]:
        if not schedule.shifts:
            return None

        # Without a rostered shift the first one applies.
        shift = schedule.find_shift(shift_name)
        if shift is None:
            raise ValidationError(f"schedule {schedule.name!r} has no shift named {shift_name!r}")

        start = datetime.combine(on, shift.start_time)
        end = datetime.combine(on, shift.end_time)
        if end < start:
            end += timedelta(days=1)

        break_minutes = int(shift.break_minutes or 0)
        return WorkHours(
            is_work_day=True,
            work_hours=hours_between(start, end) - break_minutes / 60,
            start_time=start,
            end_time=end,
            break_minutes=break_minutes,
        )

    def _flexible(self, schedule: WorkScheduleDefinition, on: date, shift_name: Optional[str]) -> Optional[WorkHours]:
        if schedule.flexible is None:
            return None

        return WorkHours(
            is_work_day=True,
            work_hours=float(schedule.flexible.minimum_work_hours),
            start_time=None,
            end_time=None,
            break_minutes=int(schedule.break_minutes or 0),
        )

    def _fallback(self) -> WorkHours:
        return WorkHours(
            is_work_day=True,
            work_hours=self._default_work_hours,
            start_time=None,
            end_time=None,
            break_minutes=0,
        )
