from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from types import SimpleNamespace
from typing import Optional

import pytest

from src.hr_attendance.hr_attendance.attendance.factory import AttendanceStrategyFactory
from src.hr_attendance.hr_attendance.attendance.model import AttendanceRecord
from src.hr_attendance.hr_attendance.attendance.service import AttendanceService
from src.hr_attendance.hr_attendance.core.enums import CorrectionStatus, ScheduleKind
from src.hr_attendance.hr_attendance.core.exceptions import DuplicateCheckInError, StorageError
from src.hr_attendance.hr_attendance.corrections.model import AttendanceCorrection
from src.hr_attendance.hr_attendance.corrections.service import CorrectionService
from src.hr_attendance.hr_attendance.employees.model import Employee
from src.hr_attendance.hr_attendance.holidays.model import Holiday
from src.hr_attendance.hr_attendance.holidays.service import HolidayService
from src.hr_attendance.hr_attendance.schedules.model import (
    FlexibleHours,
    ScheduleAssignment,
    ScheduleOverride,
    ShiftDefinition,
    WorkScheduleDefinition,
)
from src.hr_attendance.hr_attendance.schedules.service import ScheduleAssignmentService, WorkScheduleService

FIXED_NOW = datetime(2025, 1, 6, 8, 0)


class InMemoryEmployees:
    def __init__(self, employees: list[Employee]):
        self._by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(employee_id)


class InMemoryWorkSchedules:
    def __init__(self):
        self._by_id: dict[int, WorkScheduleDefinition] = {}
        self._id = 0

    def get_by_id(self, schedule_id: int) -> Optional[WorkScheduleDefinition]:
        return self._by_id.get(schedule_id)

    def get_by_name(self, name: str) -> Optional[WorkScheduleDefinition]:
        return next((s for s in self._by_id.values() if s.name == name), None)

    def list(self, *, kind=None, is_active=None):
        items = [
            s
            for s in self._by_id.values()
            if (kind is None or s.kind == kind) and (is_active is None or s.is_active == is_active)
        ]
        return sorted(items, key=lambda s: s.name)

    def create(self, schedule: WorkScheduleDefinition) -> int:
        self._id += 1
        self._by_id[self._id] = replace(schedule, schedule_id=self._id)
        return self._id

    def update(self, schedule: WorkScheduleDefinition) -> bool:
        if schedule.schedule_id not in self._by_id:
            return False
        self._by_id[schedule.schedule_id] = schedule
        return True

    def delete(self, schedule_id: int) -> bool:
        return self._by_id.pop(schedule_id, None) is not None


class InMemoryAssignments:
    def __init__(self):
        self.by_id: dict[int, ScheduleAssignment] = {}
        self._id = 0

    def get_by_id(self, assignment_id: int) -> Optional[ScheduleAssignment]:
        return self.by_id.get(assignment_id)

    def list_for_employee(self, employee_id: int):
        return [a for a in self.by_id.values() if a.employee_id == employee_id]

    def list_covering(self, employee_id: int, on: date):
        return [a for a in self.list_for_employee(employee_id) if a.covers(on)]

    def find_override(self, employee_id: int, on: date) -> Optional[ScheduleOverride]:
        for a in self.list_for_employee(employee_id):
            if on in a.overrides:
                return a.overrides[on]
        return None

    def count_for_schedule(self, schedule_id: int) -> int:
        count = 0
        for a in self.by_id.values():
            count += a.schedule_id == schedule_id
            count += sum(1 for o in a.overrides.values() if o.schedule_id == schedule_id)
        return count

    def rostered_shift_names(self, schedule_id: int) -> set[str]:
        names = {a.shift_name for a in self.by_id.values() if a.schedule_id == schedule_id and a.shift_name}
        for a in self.by_id.values():
            names.update(o.shift_name for o in a.overrides.values() if o.schedule_id == schedule_id and o.shift_name)
        return names

    def create(self, *, employee_id, schedule_id, effective_date, expiry_date, shift_name=None, created_by=None) -> int:
        self._id += 1
        self.by_id[self._id] = ScheduleAssignment(
            assignment_id=self._id,
            employee_id=employee_id,
            schedule_id=schedule_id,
            effective_date=effective_date,
            expiry_date=expiry_date,
            overrides={},
            shift_name=shift_name,
            created_by=created_by,
            updated_by=created_by,
        )
        return self._id

    def update_interval(self, *, assignment_id, effective_date, expiry_date, updated_by=None) -> bool:
        current = self.by_id.get(assignment_id)
        if not current:
            return False
        self.by_id[assignment_id] = replace(
            current, effective_date=effective_date, expiry_date=expiry_date, updated_by=updated_by
        )
        return True

    def delete(self, assignment_id: int) -> bool:
        return self.by_id.pop(assignment_id, None) is not None

    def put_override(self, *, assignment_id: int, employee_id: int, override: ScheduleOverride) -> None:
        # One override per (employee, date), whichever assignment holds it.
        self.delete_override(employee_id=employee_id, on=override.on)
        current = self.by_id[assignment_id]
        self.by_id[assignment_id] = replace(current, overrides={**current.overrides, override.on: override})

    def delete_override(self, *, employee_id: int, on: date) -> bool:
        for a in self.list_for_employee(employee_id):
            if on in a.overrides:
                remaining = {d: o for d, o in a.overrides.items() if d != on}
                self.by_id[a.assignment_id] = replace(a, overrides=remaining)
                return True
        return False


class InMemoryHolidays:
    def __init__(self):
        self.by_id: dict[int, Holiday] = {}
        self._id = 0

    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        return self.by_id.get(holiday_id)

    def list_recurring(self):
        return [h for h in self.by_id.values() if h.is_recurring]

    def find_instance(self, *, name: str, start: date, end: date) -> Optional[Holiday]:
        return next(
            (h for h in self.by_id.values() if h.name == name and not h.is_recurring and start <= h.on <= end),
            None,
        )

    def find_by_name_and_date(self, name: str, on: date) -> Optional[Holiday]:
        return next((h for h in self.by_id.values() if h.name == name and h.on == on), None)

    def list_overlapping(self, *, start: date, end: date, branch_id=None):
        items = [
            h
            for h in self.by_id.values()
            if h.on <= end and h.last_day >= start and h.applies_to_branch(branch_id)
        ]
        return sorted(items, key=lambda h: h.on)

    def create(self, holiday: Holiday) -> int:
        self._id += 1
        self.by_id[self._id] = replace(holiday, holiday_id=self._id)
        return self._id

    def update(self, holiday: Holiday) -> bool:
        if holiday.holiday_id not in self.by_id:
            return False
        self.by_id[holiday.holiday_id] = holiday
        return True

    def delete(self, holiday_id: int) -> bool:
        return self.by_id.pop(holiday_id, None) is not None


class InMemoryAttendance:
    def __init__(self):
        self.by_id: dict[int, AttendanceRecord] = {}
        self._id = 0
        self.fail_updates = False

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.by_id.get(attendance_id)

    def find_checked_in_between(self, employee_id: int, start: datetime, end: datetime):
        return next(
            (r for r in self.by_id.values() if r.employee_id == employee_id and start <= r.check_in_time < end),
            None,
        )

    def list_for_employee(self, employee_id: int, *, start: date, end: date):
        items = [r for r in self.by_id.values() if r.employee_id == employee_id and start <= r.work_date <= end]
        return sorted(items, key=lambda r: r.work_date)

    def create(self, record: AttendanceRecord) -> int:
        if any(r.employee_id == record.employee_id and r.work_date == record.work_date for r in self.by_id.values()):
            raise DuplicateCheckInError("duplicate (employee_id, work_date)")
        self._id += 1
        self.by_id[self._id] = replace(record, attendance_id=self._id)
        return self._id

    def update(self, record: AttendanceRecord) -> bool:
        if self.fail_updates:
            raise StorageError("connection lost")
        if record.attendance_id not in self.by_id:
            return False
        self.by_id[record.attendance_id] = record
        return True

    def delete(self, attendance_id: int) -> bool:
        return self.by_id.pop(attendance_id, None) is not None


class InMemoryCorrections:
    def __init__(self):
        self.by_id: dict[int, AttendanceCorrection] = {}
        self._id = 0

    def get_by_id(self, correction_id: int) -> Optional[AttendanceCorrection]:
        return self.by_id.get(correction_id)

    def create(self, correction: AttendanceCorrection) -> int:
        self._id += 1
        self.by_id[self._id] = replace(correction, correction_id=self._id)
        return self._id

    def update(self, correction: AttendanceCorrection) -> bool:
        if correction.correction_id not in self.by_id:
            return False
        self.by_id[correction.correction_id] = correction
        return True

    def list_by_status(self, status: CorrectionStatus):
        return sorted((c for c in self.by_id.values() if c.status == status), key=lambda c: c.correction_id)

    def list_for_employee(self, employee_id, *, status=None, start=None, end=None, request_type=None):
        items = [
            c
            for c in self.by_id.values()
            if c.employee_id == employee_id
            and (status is None or c.status == status)
            and (request_type is None or c.request_type == request_type)
            and (start is None or start <= c.work_date <= end)
        ]
        return sorted(items, key=lambda c: (c.created_at, c.correction_id), reverse=True)


def office_schedule(**changes) -> WorkScheduleDefinition:
    schedule = WorkScheduleDefinition(
        schedule_id=0,
        name="Office",
        kind=ScheduleKind.FIXED,
        work_days=(1, 2, 3, 4, 5),
        start_time=time(9, 0),
        end_time=time(18, 0),
        break_minutes=60,
    )
    return replace(schedule, **changes)


def rotation_schedule(**changes) -> WorkScheduleDefinition:
    schedule = WorkScheduleDefinition(
        schedule_id=0,
        name="Rotation",
        kind=ScheduleKind.SHIFT,
        work_days=(0, 1, 2, 3, 4, 5, 6),
        shifts=(
            ShiftDefinition(name="Morning", start_time=time(6, 0), end_time=time(14, 0), break_minutes=30),
            ShiftDefinition(name="Night", start_time=time(22, 0), end_time=time(6, 0), break_minutes=30),
        ),
    )
    return replace(schedule, **changes)


def flex_schedule(**changes) -> WorkScheduleDefinition:
    schedule = WorkScheduleDefinition(
        schedule_id=0,
        name="Flex",
        kind=ScheduleKind.FLEXIBLE,
        work_days=(1, 2, 3, 4, 5),
        break_minutes=45,
        flexible=FlexibleHours(core_hours_start=time(10, 0), core_hours_end=time(15, 0), minimum_work_hours=7.5),
    )
    return replace(schedule, **changes)


@pytest.fixture
def engine():
    """Services wired to in-memory repositories.

    Employees: 1 (branch 10), 2 (branch 20), 3 (no branch).
    Schedules: 1 Office (fixed 09-18, Mon-Fri), 2 Rotation (shifts), 3 Flex.
    """

    employees = InMemoryEmployees(
        [
            Employee(employee_id=1, full_name="An Nguyen", branch_id=10),
            Employee(employee_id=2, full_name="Binh Tran", branch_id=20),
            Employee(employee_id=3, full_name="Chi Le"),
        ]
    )
    schedules = InMemoryWorkSchedules()
    assignments = InMemoryAssignments()
    holidays = InMemoryHolidays()
    attendance = InMemoryAttendance()
    corrections = InMemoryCorrections()

    for s in (office_schedule(), rotation_schedule(), flex_schedule()):
        schedules.create(s)

    clock = lambda: FIXED_NOW  # noqa: E731
    assignment_service = ScheduleAssignmentService(assignments, schedules, employees, clock=clock)
    holiday_service = HolidayService(holidays)

    return SimpleNamespace(
        employees=employees,
        schedules=schedules,
        assignments=assignments,
        holidays=holidays,
        attendance=attendance,
        corrections=corrections,
        work_schedule_service=WorkScheduleService(schedules, assignments),
        assignment_service=assignment_service,
        holiday_service=holiday_service,
        attendance_service=AttendanceService(
            attendance,
            employees,
            assignment_service,
            holiday_service,
            strategy_factory=AttendanceStrategyFactory(half_day_hours=4.0),
            grace_minutes=15,
            clock=clock,
        ),
        correction_service=CorrectionService(corrections, attendance, clock=clock),
    )
