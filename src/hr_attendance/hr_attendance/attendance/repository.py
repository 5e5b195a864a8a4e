from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_checked_in_between(self, employee_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        """Record whose check_in_time lies in [start, end)."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        """Records with work_date in [start, end], oldest first."""

        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> int:
        """Insert; record.attendance_id is ignored.

        Raises DuplicateCheckInError when storage already holds a record for
        (employee_id, work_date).
        """

        raise NotImplementedError

    def update(self, record: AttendanceRecord) -> bool:
        """Full-document update keyed by attendance_id."""

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        """Also drops the record's correction requests."""

        raise NotImplementedError
