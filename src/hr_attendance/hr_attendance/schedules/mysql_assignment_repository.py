from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ScheduleAssignment, ScheduleOverride
from .repository import AssignmentRepository

_ASSIGNMENT_COLUMNS = """
    a.assignment_id, a.employee_id, a.schedule_id, a.effective_date, a.expiry_date,
    a.shift_name, a.created_by, a.updated_by
"""


def _to_override(r: dict) -> ScheduleOverride:
    return ScheduleOverride(
        on=r["override_date"],
        schedule_id=r.get("schedule_id"),
        reason=r.get("reason"),
        created_by=r.get("created_by"),
        created_at=r["created_at"],
        shift_name=r.get("shift_name"),
    )


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, rows: list[dict]) -> list[ScheduleAssignment]:
        if not rows:
            return []

        ids = [int(r["assignment_id"]) for r in rows]
        placeholders = ",".join(["%s"] * len(ids))
        cur.execute(
            f"""
            SELECT assignment_id, override_date, schedule_id, shift_name, reason, created_by, created_at
            FROM schedule_overrides
            WHERE assignment_id IN ({placeholders})
            ORDER BY override_date
            """,
            tuple(ids),
        )
        overrides: dict[int, dict[date, ScheduleOverride]] = {i: {} for i in ids}
        for o in fetchall(cur):
            ov = _to_override(o)
            overrides[int(o["assignment_id"])][ov.on] = ov

        return [
            ScheduleAssignment(
                assignment_id=int(r["assignment_id"]),
                employee_id=int(r["employee_id"]),
                schedule_id=int(r["schedule_id"]),
                effective_date=r["effective_date"],
                expiry_date=r.get("expiry_date"),
                overrides=overrides[int(r["assignment_id"])],
                shift_name=r.get("shift_name"),
                created_by=r.get("created_by"),
                updated_by=r.get("updated_by"),
            )
            for r in rows
        ]

    def get_by_id(self, assignment_id: int) -> Optional[ScheduleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ASSIGNMENT_COLUMNS} FROM schedule_assignments a WHERE a.assignment_id=%s",
                (int(assignment_id),),
            )
            items = self._load(cur, fetchall(cur))
            return items[0] if items else None

    def list_for_employee(self, employee_id: int) -> Sequence[ScheduleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}
                FROM schedule_assignments a
                WHERE a.employee_id=%s
                ORDER BY a.effective_date
                """,
                (int(employee_id),),
            )
            return self._load(cur, fetchall(cur))

    def list_covering(self, employee_id: int, on: date) -> Sequence[ScheduleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}
                FROM schedule_assignments a
                WHERE a.employee_id=%s
                  AND a.effective_date <= %s
                  AND (a.expiry_date IS NULL OR a.expiry_date >= %s)
                """,
                (int(employee_id), on, on),
            )
            return self._load(cur, fetchall(cur))

    def find_override(self, employee_id: int, on: date) -> Optional[ScheduleOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT override_date, schedule_id, shift_name, reason, created_by, created_at
                FROM schedule_overrides
                WHERE employee_id=%s AND override_date=%s
                """,
                (int(employee_id), on),
            )
            r = fetchone(cur)
            return _to_override(r) if r else None

    def count_for_schedule(self, schedule_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    (SELECT COUNT(*) FROM schedule_assignments WHERE schedule_id=%s)
                  + (SELECT COUNT(*) FROM schedule_overrides WHERE schedule_id=%s) AS n
                """,
                (int(schedule_id), int(schedule_id)),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def rostered_shift_names(self, schedule_id: int) -> set[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT shift_name FROM schedule_assignments
                WHERE schedule_id=%s AND shift_name IS NOT NULL
                UNION
                SELECT shift_name FROM schedule_overrides
                WHERE schedule_id=%s AND shift_name IS NOT NULL
                """,
                (int(schedule_id), int(schedule_id)),
            )
            return {r["shift_name"] for r in fetchall(cur)}

    def create(
        self,
        *,
        employee_id: int,
        schedule_id: int,
        effective_date: date,
        expiry_date: Optional[date],
        shift_name: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_assignments(
                    employee_id, schedule_id, effective_date, expiry_date, shift_name, created_by, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), int(schedule_id), effective_date, expiry_date, shift_name, created_by, created_by),
            )
            return int(cur.lastrowid)

    def update_interval(
        self,
        *,
        assignment_id: int,
        effective_date: date,
        expiry_date: Optional[date],
        updated_by: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE schedule_assignments
                SET effective_date=%s, expiry_date=%s, updated_by=%s
                WHERE assignment_id=%s
                """,
                (effective_date, expiry_date, updated_by, int(assignment_id)),
            )
            return cur.rowcount > 0

    def delete(self, assignment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedule_assignments WHERE assignment_id=%s", (int(assignment_id),))
            return cur.rowcount > 0

    def put_override(self, *, assignment_id: int, employee_id: int, override: ScheduleOverride) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_overrides(
                    employee_id, override_date, assignment_id, schedule_id, shift_name, reason, created_by, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    assignment_id=VALUES(assignment_id), schedule_id=VALUES(schedule_id),
                    shift_name=VALUES(shift_name), reason=VALUES(reason),
                    created_by=VALUES(created_by), created_at=VALUES(created_at)
                """,
                (
                    int(employee_id),
                    override.on,
                    int(assignment_id),
                    override.schedule_id,
                    override.shift_name,
                    override.reason,
                    override.created_by,
                    override.created_at,
                ),
            )

    def delete_override(self, *, employee_id: int, on: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM schedule_overrides WHERE employee_id=%s AND override_date=%s",
                (int(employee_id), on),
            )
            return cur.rowcount > 0
