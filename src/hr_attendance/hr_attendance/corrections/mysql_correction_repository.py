from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, CorrectionStatus, CorrectionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import ApprovalEntry, AttendanceCorrection
from .repository import CorrectionRepository

_COLUMNS = """
    correction_id, employee_id, attendance_id, request_type, work_date, reason, status,
    old_check_in_time, new_check_in_time, old_check_out_time, new_check_out_time,
    old_status, new_status, approval_history, created_by, updated_by, created_at
"""


def _history_to_json(history: tuple[ApprovalEntry, ...]) -> Optional[str]:
    return dump_json(
        [
            {
                "status": e.status.value,
                "approver_id": e.approver_id,
                "timestamp": e.timestamp.isoformat(),
                "comments": e.comments,
            }
            for e in history
        ]
    )


def _history_from_json(value) -> tuple[ApprovalEntry, ...]:
    return tuple(
        ApprovalEntry(
            status=CorrectionStatus(e["status"]),
            approver_id=int(e["approver_id"]),
            timestamp=datetime.fromisoformat(e["timestamp"]),
            comments=e.get("comments"),
        )
        for e in load_json(value, [])
    )


def _status_or_none(value) -> Optional[AttendanceStatus]:
    return AttendanceStatus(value) if value else None


def _to_correction(r: dict) -> AttendanceCorrection:
    return AttendanceCorrection(
        correction_id=int(r["correction_id"]),
        employee_id=int(r["employee_id"]),
        attendance_id=int(r["attendance_id"]),
        request_type=CorrectionType(r["request_type"]),
        work_date=r["work_date"],
        reason=r["reason"],
        status=CorrectionStatus(r["status"]),
        old_check_in_time=r.get("old_check_in_time"),
        new_check_in_time=r.get("new_check_in_time"),
        old_check_out_time=r.get("old_check_out_time"),
        new_check_out_time=r.get("new_check_out_time"),
        old_status=_status_or_none(r.get("old_status")),
        new_status=_status_or_none(r.get("new_status")),
        approval_history=_history_from_json(r.get("approval_history")),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        created_at=r.get("created_at"),
    )


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, correction_id: int) -> Optional[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_corrections WHERE correction_id=%s", (int(correction_id),))
            r = fetchone(cur)
            return _to_correction(r) if r else None

    def create(self, correction: AttendanceCorrection) -> int:
        c = correction
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_corrections(
                    employee_id, attendance_id, request_type, work_date, reason, status,
                    old_check_in_time, new_check_in_time, old_check_out_time, new_check_out_time,
                    old_status, new_status, approval_history, created_by, updated_by, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(c.employee_id),
                    int(c.attendance_id),
                    c.request_type.value,
                    c.work_date,
                    c.reason,
                    c.status.value,
                    c.old_check_in_time,
                    c.new_check_in_time,
                    c.old_check_out_time,
                    c.new_check_out_time,
                    c.old_status.value if c.old_status else None,
                    c.new_status.value if c.new_status else None,
                    _history_to_json(c.approval_history),
                    c.created_by,
                    c.updated_by,
                    c.created_at,
                ),
            )
            return int(cur.lastrowid)

    def update(self, correction: AttendanceCorrection) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_corrections
                SET status=%s, approval_history=%s, updated_by=%s
                WHERE correction_id=%s
                """,
                (
                    correction.status.value,
                    _history_to_json(correction.approval_history),
                    correction.updated_by,
                    int(correction.correction_id),
                ),
            )
            return cur.rowcount > 0

    def list_by_status(self, status: CorrectionStatus) -> Sequence[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_corrections WHERE status=%s ORDER BY correction_id",
                (CorrectionStatus(status).value,),
            )
            return [_to_correction(r) for r in fetchall(cur)]

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[CorrectionStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        request_type: Optional[CorrectionType] = None,
    ) -> Sequence[AttendanceCorrection]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(CorrectionStatus(status).value)
        if request_type is not None:
            clauses.append("request_type=%s")
            params.append(CorrectionType(request_type).value)
        if start is not None and end is not None:
            clauses.append("work_date BETWEEN %s AND %s")
            params.extend([start, end])

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_corrections WHERE {where} ORDER BY created_at DESC, correction_id DESC",
                tuple(params),
            )
            return [_to_correction(r) for r in fetchall(cur)]
