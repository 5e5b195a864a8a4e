from __future__ import annotations

from enum import Enum


class ScheduleKind(str, Enum):
    """Loại lịch làm việc."""

    FIXED = "fixed"
    SHIFT = "shift"
    FLEXIBLE = "flexible"


class HolidayType(str, Enum):
    NATIONAL = "national"
    RELIGIOUS = "religious"
    COMPANY = "company"


class AttendanceStatus(str, Enum):
    """Trạng thái chấm công chuẩn hoá lưu trong CSDL."""

    PRESENT = "present"
    LATE = "late"
    HALF_DAY = "half-day"
    ABSENT = "absent"
    LEAVE = "leave"
    HOLIDAY = "holiday"


class CorrectionType(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    BOTH = "both"
    STATUS = "status"


class CorrectionStatus(str, Enum):
    """Trạng thái luồng duyệt yêu cầu điều chỉnh chấm công."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ResolutionSource(str, Enum):
    OVERRIDE = "override"
    ASSIGNMENT = "assignment"


class GenerationStatus(str, Enum):
    GENERATED = "generated"
    ALREADY_EXISTS = "already_exists"
    ERROR = "error"
