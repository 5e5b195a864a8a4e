from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import day_window, hours_between, now_local
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, WORK_HOURS_PRECISION
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadyCheckedOutError,
    DuplicateCheckInError,
    NoCheckInError,
    NotFoundError,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..holidays.service import HolidayService
from ..schedules.service import ScheduleAssignmentService
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceStats, Location
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset(
    {
        "check_in_time",
        "check_out_time",
        "status",
        "notes",
        "check_in_location",
        "check_out_location",
        "device_id",
        "check_out_device_id",
    }
)


def _join_notes(*parts: Optional[str]) -> Optional[str]:
    text = "\n".join(p for p in parts if p)
    return text or None


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        schedules: ScheduleAssignmentService,
        holidays: HolidayService,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._employees = employees
        self._schedules = schedules
        self._holidays = holidays
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._grace_minutes = int(grace_minutes)
        self._clock = clock

    def check_in(
        self,
        employee_id: int,
        *,
        now: datetime | None = None,
        location: Optional[Location] = None,
        device_id: Optional[str] = None,
        notes: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()
        employee = self._require_employee(employee_id)

        # Not atomic with the insert below; the storage key on (employee, day) catches the race.
        if self._find_today(employee.employee_id, now):
            raise DuplicateCheckInError(f"employee {employee_id} has already checked in today")

        is_holiday = self._holidays.is_holiday(today, branch_id=employee.branch_id)
        expected = self._schedules.expected_hours(employee.employee_id, today)
        hours = expected[1] if expected else None

        strategy = self._factory.for_checkin(now=now, is_holiday=is_holiday, expected=hours, grace_minutes=self._grace_minutes)
        decision = strategy.decide_checkin(now=now, expected=hours, grace_minutes=self._grace_minutes)

        record = AttendanceRecord(
            attendance_id=0,
            employee_id=employee.employee_id,
            work_date=today,
            check_in_time=now,
            check_out_time=None,
            status=decision.status,
            check_in_location=location,
            device_id=device_id,
            notes=_join_notes(notes, decision.note),
            created_by=actor_id,
            updated_by=actor_id,
        )
        try:
            attendance_id = self._attendance.create(record)
        except DuplicateCheckInError:
            logger.warning("concurrent check-in for employee %s on %s rejected by storage", employee_id, today)
            raise

        logger.info("employee %s checked in at %s (%s)", employee_id, now.isoformat(), decision.status.value)
        return replace(record, attendance_id=attendance_id)

    def check_out(
        self,
        employee_id: int,
        *,
        now: datetime | None = None,
        location: Optional[Location] = None,
        device_id: Optional[str] = None,
        notes: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> AttendanceRecord:
        now = now or self._clock()

        record = self._find_today(int(employee_id), now)
        if not record:
            raise NoCheckInError(f"no check-in record for employee {employee_id} today")
        if record.check_out_time is not None:
            raise AlreadyCheckedOutError(f"employee {employee_id} has already checked out today")
        if now < record.check_in_time:
            raise ValidationError("check-out time cannot be before check-in time")

        work_hours = hours_between(record.check_in_time, now)
        strategy = self._factory.for_checkout(work_hours=work_hours)
        decision = strategy.decide_checkout(current=record.status, work_hours=work_hours)

        updated = replace(
            record,
            check_out_time=now,
            work_hours=round(work_hours, WORK_HOURS_PRECISION),
            status=decision.status,
            check_out_location=location or record.check_out_location,
            check_out_device_id=device_id or record.check_out_device_id,
            notes=_join_notes(record.notes, f"Check-out: {notes}" if notes else None, decision.note),
            updated_by=actor_id,
        )
        if not self._attendance.update(updated):
            raise NotFoundError("Attendance", record.attendance_id)

        logger.info(
            "employee %s checked out at %s after %.2fh (%s)",
            employee_id, now.isoformat(), work_hours, updated.status.value,
        )
        return updated

    def get(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance", attendance_id)
        return record

    def update(self, attendance_id: int, *, actor_id: Optional[int] = None, **changes) -> AttendanceRecord:
        """Administrative edit of a record, outside the correction workflow.

        Worked hours and the half-day downgrade are recomputed whenever both
        times are present after the edit.
        """

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"cannot edit attendance field(s): {', '.join(sorted(unknown))}")

        current = self.get(attendance_id)
        if "status" in changes:
            try:
                changes["status"] = AttendanceStatus(changes["status"])
            except ValueError as e:
                raise ValidationError(str(e)) from e

        updated = replace(current, **changes, updated_by=actor_id)
        if updated.check_in_time is None or updated.check_in_time.date() != updated.work_date:
            raise ValidationError("check-in time must fall on the record's work date")

        if updated.check_out_time is not None:
            if updated.check_out_time < updated.check_in_time:
                raise ValidationError("check-out time cannot be before check-in time")
            work_hours = hours_between(updated.check_in_time, updated.check_out_time)
            decision = self._factory.for_checkout(work_hours=work_hours).decide_checkout(
                current=updated.status, work_hours=work_hours
            )
            updated = replace(updated, work_hours=round(work_hours, WORK_HOURS_PRECISION), status=decision.status)
        else:
            updated = replace(updated, work_hours=0.0)

        if not self._attendance.update(updated):
            raise NotFoundError("Attendance", attendance_id)
        logger.info("attendance %s edited by %s (%s)", attendance_id, actor_id, ", ".join(sorted(changes)))
        return updated

    def delete(self, attendance_id: int) -> None:
        if not self._attendance.delete(int(attendance_id)):
            raise NotFoundError("Attendance", attendance_id)
        logger.info("attendance %s deleted", attendance_id)

    def get_today(self, employee_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        return self._find_today(int(employee_id), now or self._clock())

    def history(self, employee_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        if end < start:
            raise ValidationError("end must be on or after start")
        return self._attendance.list_for_employee(int(employee_id), start=start, end=end)

    def stats(self, employee_id: int, *, start: date, end: date) -> AttendanceStats:
        records = self.history(employee_id, start=start, end=end)
        return AttendanceStats(
            employee_id=int(employee_id),
            start=start,
            end=end,
            total_days=len(records),
            by_status=dict(Counter(r.status for r in records)),
            total_work_hours=round(sum(r.work_hours for r in records), WORK_HOURS_PRECISION),
        )

    def _find_today(self, employee_id: int, now: datetime) -> Optional[AttendanceRecord]:
        start, end = day_window(now)
        return self._attendance.find_checked_in_between(employee_id, start, end)

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee", employee_id)
        return employee
