from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateCheckInError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, is_duplicate_key, load_json
from .model import AttendanceRecord, Location
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, check_in_time, check_out_time, status, work_hours,
    check_in_location, check_out_location, device_id, check_out_device_id, notes,
    created_by, updated_by, applied_correction_id
"""


def _to_location(value) -> Optional[Location]:
    raw = load_json(value)
    if not raw:
        return None
    return Location(
        latitude=float(raw["latitude"]),
        longitude=float(raw["longitude"]),
        address=raw.get("address"),
        accuracy=raw.get("accuracy"),
    )


def _location_json(location: Optional[Location]) -> Optional[str]:
    return dump_json(asdict(location)) if location else None


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        work_hours=float(r.get("work_hours") or 0),
        check_in_location=_to_location(r.get("check_in_location")),
        check_out_location=_to_location(r.get("check_out_location")),
        device_id=r.get("device_id"),
        check_out_device_id=r.get("check_out_device_id"),
        notes=r.get("notes"),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        applied_correction_id=r.get("applied_correction_id"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_checked_in_between(self, employee_id: int, start: datetime, end: datetime) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND check_in_time >= %s AND check_in_time < %s
                ORDER BY check_in_time
                LIMIT 1
                """,
                (int(employee_id), start, end),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_employee(self, employee_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(employee_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create(self, record: AttendanceRecord) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, check_in_time, check_out_time, status, work_hours,
                        check_in_location, check_out_location, device_id, check_out_device_id, notes,
                        created_by, updated_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(record.employee_id),
                        record.work_date,
                        record.check_in_time,
                        record.check_out_time,
                        record.status.value,
                        float(record.work_hours),
                        _location_json(record.check_in_location),
                        _location_json(record.check_out_location),
                        record.device_id,
                        record.check_out_device_id,
                        record.notes,
                        record.created_by,
                        record.updated_by,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateCheckInError(
                    f"employee {record.employee_id} already has a record for {record.work_date}"
                ) from e
            raise

    def update(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=%s, status=%s, work_hours=%s,
                    check_in_location=%s, check_out_location=%s, device_id=%s, check_out_device_id=%s,
                    notes=%s, updated_by=%s, applied_correction_id=%s
                WHERE attendance_id=%s
                """,
                (
                    record.check_in_time,
                    record.check_out_time,
                    record.status.value,
                    float(record.work_hours),
                    _location_json(record.check_in_location),
                    _location_json(record.check_out_location),
                    record.device_id,
                    record.check_out_device_id,
                    record.notes,
                    record.updated_by,
                    record.applied_correction_id,
                    int(record.attendance_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0
