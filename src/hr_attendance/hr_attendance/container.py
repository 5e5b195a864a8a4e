from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_HALF_DAY_HOURS, DEFAULT_LATE_GRACE_MINUTES
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.service import CorrectionService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.service import HolidayService
from .schedules.calculator import WorkHourCalculator
from .schedules.mysql_assignment_repository import MySQLAssignmentRepository
from .schedules.mysql_schedule_repository import MySQLWorkScheduleRepository
from .schedules.service import ScheduleAssignmentService, WorkScheduleService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    work_schedules_repo: MySQLWorkScheduleRepository
    assignments_repo: MySQLAssignmentRepository
    holidays_repo: MySQLHolidayRepository
    attendance_repo: MySQLAttendanceRepository
    corrections_repo: MySQLCorrectionRepository

    work_schedule_service: WorkScheduleService
    assignment_service: ScheduleAssignmentService
    holiday_service: HolidayService
    attendance_service: AttendanceService
    correction_service: CorrectionService


def build_container(
    *,
    db_config: dict,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    half_day_hours: float = DEFAULT_HALF_DAY_HOURS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    work_schedules_repo = MySQLWorkScheduleRepository(conn)
    assignments_repo = MySQLAssignmentRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    corrections_repo = MySQLCorrectionRepository(conn)

    work_schedule_service = WorkScheduleService(work_schedules_repo, assignments_repo)
    assignment_service = ScheduleAssignmentService(
        assignments_repo,
        work_schedules_repo,
        employees_repo,
        calculator=WorkHourCalculator(),
    )
    holiday_service = HolidayService(holidays_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        assignment_service,
        holiday_service,
        strategy_factory=AttendanceStrategyFactory(half_day_hours=half_day_hours),
        grace_minutes=grace_minutes,
    )
    correction_service = CorrectionService(corrections_repo, attendance_repo)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        work_schedules_repo=work_schedules_repo,
        assignments_repo=assignments_repo,
        holidays_repo=holidays_repo,
        attendance_repo=attendance_repo,
        corrections_repo=corrections_repo,
        work_schedule_service=work_schedule_service,
        assignment_service=assignment_service,
        holiday_service=holiday_service,
        attendance_service=attendance_service,
        correction_service=correction_service,
    )
