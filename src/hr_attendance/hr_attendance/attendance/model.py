from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    address: Optional[str] = None
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công.

    One record per employee per calendar day; created on check-in, completed
    on check-out and later rewritten by approved corrections.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    work_hours: float = 0.0
    check_in_location: Optional[Location] = None
    check_out_location: Optional[Location] = None
    device_id: Optional[str] = None
    check_out_device_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    # Last approved correction written into this record.
    applied_correction_id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceStats:
    """Read-model: per-status day counts and worked hours over a date range."""

    employee_id: int
    start: date
    end: date
    total_days: int
    by_status: dict[AttendanceStatus, int] = field(default_factory=dict)
    total_work_hours: float = 0.0

    @property
    def average_work_hours(self) -> float:
        if not self.total_days:
            return 0.0
        return round(self.total_work_hours / self.total_days, 2)

    def count(self, status: AttendanceStatus) -> int:
        return self.by_status.get(status, 0)
