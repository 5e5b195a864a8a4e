from datetime import date, datetime, time

import pytest

from src.hr_attendance.hr_attendance.core.enums import ScheduleKind
from src.hr_attendance.hr_attendance.core.exceptions import ValidationError
from src.hr_attendance.hr_attendance.schedules.calculator import WorkHourCalculator
from src.hr_attendance.hr_attendance.schedules.model import FlexibleHours, ShiftDefinition, WorkScheduleDefinition

MONDAY = date(2025, 1, 6)
SATURDAY = date(2025, 1, 4)
SUNDAY = date(2025, 1, 5)


def _office(**kwargs):
    params = dict(
        schedule_id=1,
        name="Office",
        kind=ScheduleKind.FIXED,
        work_days=(1, 2, 3, 4, 5),
        start_time=time(9, 0),
        end_time=time(18, 0),
        break_minutes=60,
    )
    params.update(kwargs)
    return WorkScheduleDefinition(**params)


def _rotation():
    return WorkScheduleDefinition(
        schedule_id=2,
        name="Rotation",
        kind=ScheduleKind.SHIFT,
        work_days=(0, 1, 2, 3, 4, 5, 6),
        shifts=(
            ShiftDefinition(name="Morning", start_time=time(6, 0), end_time=time(14, 0), break_minutes=30),
            ShiftDefinition(name="Night", start_time=time(22, 0), end_time=time(6, 0), break_minutes=30),
        ),
    )


def test_fixed_schedule_subtracts_break():
    hours = WorkHourCalculator().compute_hours(_office(), MONDAY)

    assert hours.is_work_day is True
    assert hours.work_hours == pytest.approx(8.0)
    assert hours.start_time == datetime(2025, 1, 6, 9, 0)
    assert hours.end_time == datetime(2025, 1, 6, 18, 0)
    assert hours.break_minutes == 60


def test_nine_to_five_with_hour_break_is_seven_hours():
    hours = WorkHourCalculator().compute_hours(_office(end_time=time(17, 0)), MONDAY)

    assert hours.work_hours == pytest.approx(7.0)
    assert hours.end_time == datetime(2025, 1, 6, 17, 0)


def test_day_outside_work_days_is_day_off():
    hours = WorkHourCalculator().compute_hours(_office(), SATURDAY)

    assert hours.is_work_day is False
    assert hours.work_hours == 0
    assert hours.start_time is None and hours.end_time is None
    assert hours.break_minutes == 0


def test_weekday_zero_is_sunday():
    hours = WorkHourCalculator().compute_hours(_office(work_days=(0,)), SUNDAY)

    assert hours.is_work_day is True
    assert WorkHourCalculator().compute_hours(_office(work_days=(0,)), MONDAY).is_work_day is False


def test_overnight_shift_ends_next_day():
    hours = WorkHourCalculator().compute_hours(_rotation(), MONDAY, shift_name="Night")

    assert hours.start_time == datetime(2025, 1, 6, 22, 0)
    assert hours.end_time == datetime(2025, 1, 7, 6, 0)
    assert hours.work_hours == pytest.approx(7.5)
    assert _rotation().shifts[1].is_overnight


def test_shift_schedule_without_roster_uses_first_shift():
    hours = WorkHourCalculator().compute_hours(_rotation(), MONDAY)

    assert hours.start_time == datetime(2025, 1, 6, 6, 0)
    assert hours.end_time == datetime(2025, 1, 6, 14, 0)


def test_unknown_shift_name_is_rejected():
    with pytest.raises(ValidationError):
        WorkHourCalculator().compute_hours(_rotation(), MONDAY, shift_name="Evening")


def test_flexible_schedule_uses_minimum_hours():
    schedule = WorkScheduleDefinition(
        schedule_id=3,
        name="Flex",
        kind=ScheduleKind.FLEXIBLE,
        break_minutes=45,
        flexible=FlexibleHours(core_hours_start=time(10, 0), core_hours_end=time(15, 0), minimum_work_hours=7.5),
    )

    hours = WorkHourCalculator().compute_hours(schedule, MONDAY)

    assert hours.is_work_day is True
    assert hours.work_hours == 7.5
    assert hours.start_time is None and hours.end_time is None
    assert hours.break_minutes == 45


def test_missing_payload_falls_back_to_default_hours():
    broken = _office(start_time=None, end_time=None)

    hours = WorkHourCalculator().compute_hours(broken, MONDAY)

    assert hours.is_work_day is True
    assert hours.work_hours == 8.0
    assert hours.start_time is None


def test_fallback_hours_are_configurable():
    broken = WorkScheduleDefinition(schedule_id=4, name="Empty", kind=ScheduleKind.SHIFT, work_days=(1,))

    hours = WorkHourCalculator(default_work_hours=6).compute_hours(broken, MONDAY)

    assert hours.work_hours == 6.0
