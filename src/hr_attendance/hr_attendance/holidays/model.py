from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.validators import require_non_empty, require_range
from ..core.enums import GenerationStatus, HolidayType
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class RecurringPattern:
    """Yearly rule: either a fixed month/day, or the Nth weekday of a month.

    month is 1-12; day_of_week follows the schedule convention (0=Sunday).
    """

    month: int
    day: Optional[int] = None
    nth_occurrence: Optional[int] = None
    day_of_week: Optional[int] = None

    @property
    def is_fixed_date(self) -> bool:
        return self.day is not None

    def validate(self) -> "RecurringPattern":
        require_range(self.month, "recurring_pattern.month", 1, 12)
        if self.day is not None:
            require_range(self.day, "recurring_pattern.day", 1, 31)
            if self.nth_occurrence is not None or self.day_of_week is not None:
                raise ValidationError("recurring pattern takes either day or nth_occurrence/day_of_week, not both")
            return self

        if self.nth_occurrence is None or self.day_of_week is None:
            raise ValidationError("recurring pattern requires day, or nth_occurrence with day_of_week")
        require_range(self.nth_occurrence, "recurring_pattern.nth_occurrence", 1, 5)
        require_range(self.day_of_week, "recurring_pattern.day_of_week", 0, 6)
        return self


@dataclass(frozen=True)
class Holiday:
    """Thực thể miền (domain): Ngày nghỉ lễ.

    A recurring holiday is a template; generated yearly instances are plain
    (non-recurring) holidays. Empty branch_ids means the holiday is global.
    """

    holiday_id: int
    name: str
    on: date
    type: HolidayType
    end_date: Optional[date] = None
    description: Optional[str] = None
    is_recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None
    branch_ids: tuple[int, ...] = ()
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    @property
    def last_day(self) -> date:
        return self.end_date or self.on

    @property
    def span_days(self) -> int:
        return (self.last_day - self.on).days

    def applies_to_branch(self, branch_id: Optional[int]) -> bool:
        return branch_id is None or not self.branch_ids or branch_id in self.branch_ids

    def validate(self) -> "Holiday":
        require_non_empty(self.name, "name")
        if self.end_date is not None and self.end_date < self.on:
            raise ValidationError("end_date must be on or after the holiday date")
        if self.is_recurring and self.recurring_pattern is None:
            raise ValidationError("recurring holiday requires a recurring pattern")
        if not self.is_recurring and self.recurring_pattern is not None:
            raise ValidationError("recurring pattern is only allowed on recurring holidays")
        if self.recurring_pattern is not None:
            self.recurring_pattern.validate()
        return self


@dataclass(frozen=True)
class GenerationResult:
    status: GenerationStatus
    name: str
    on: Optional[date] = None
    holiday_id: Optional[int] = None
    error: Optional[str] = None
