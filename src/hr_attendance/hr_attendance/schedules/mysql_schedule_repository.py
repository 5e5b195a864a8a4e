from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ScheduleKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, normalize_mysql_time
from .model import FlexibleHours, ShiftDefinition, WorkScheduleDefinition
from .repository import WorkScheduleRepository

_COLUMNS = """
    schedule_id, name, kind, work_days, start_time, end_time, break_minutes,
    shifts, flexible, description, is_active, created_by, updated_by
"""


def _hhmm(value) -> Optional[str]:
    return value.strftime("%H:%M") if value is not None else None


def _shifts_to_json(shifts: Sequence[ShiftDefinition]) -> Optional[str]:
    if not shifts:
        return None
    return dump_json(
        [
            {
                "name": s.name,
                "start_time": _hhmm(s.start_time),
                "end_time": _hhmm(s.end_time),
                "break_minutes": int(s.break_minutes),
            }
            for s in shifts
        ]
    )


def _flexible_to_json(flexible: Optional[FlexibleHours]) -> Optional[str]:
    if flexible is None:
        return None
    return dump_json(
        {
            "core_hours_start": _hhmm(flexible.core_hours_start),
            "core_hours_end": _hhmm(flexible.core_hours_end),
            "minimum_work_hours": float(flexible.minimum_work_hours),
        }
    )


def _to_schedule(r: dict) -> WorkScheduleDefinition:
    shifts = tuple(
        ShiftDefinition(
            name=s["name"],
            start_time=normalize_mysql_time(s["start_time"]),
            end_time=normalize_mysql_time(s["end_time"]),
            break_minutes=int(s.get("break_minutes") or 0),
        )
        for s in load_json(r.get("shifts"), [])
    )

    flexible = None
    raw_flexible = load_json(r.get("flexible"))
    if raw_flexible:
        flexible = FlexibleHours(
            core_hours_start=normalize_mysql_time(raw_flexible.get("core_hours_start")),
            core_hours_end=normalize_mysql_time(raw_flexible.get("core_hours_end")),
            minimum_work_hours=float(raw_flexible.get("minimum_work_hours") or 0),
        )

    return WorkScheduleDefinition(
        schedule_id=int(r["schedule_id"]),
        name=r["name"],
        kind=ScheduleKind(r["kind"]),
        work_days=tuple(int(d) for d in load_json(r.get("work_days"), [])),
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        break_minutes=int(r.get("break_minutes") or 0),
        shifts=shifts,
        flexible=flexible,
        description=r.get("description"),
        is_active=bool(r.get("is_active", True)),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
    )


def _params(s: WorkScheduleDefinition) -> tuple:
    return (
        s.name,
        s.kind.value,
        dump_json(list(s.work_days)),
        s.start_time,
        s.end_time,
        int(s.break_minutes or 0),
        _shifts_to_json(s.shifts),
        _flexible_to_json(s.flexible),
        s.description,
        1 if s.is_active else 0,
    )


class MySQLWorkScheduleRepository(WorkScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: int) -> Optional[WorkScheduleDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_schedules WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def get_by_name(self, name: str) -> Optional[WorkScheduleDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_schedules WHERE name=%s", (name,))
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def list(
        self,
        *,
        kind: Optional[ScheduleKind] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[WorkScheduleDefinition]:
        clauses = ["1=1"]
        params: list[object] = []
        if kind is not None:
            clauses.append("kind=%s")
            params.append(kind.value)
        if is_active is not None:
            clauses.append("is_active=%s")
            params.append(1 if is_active else 0)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_schedules WHERE {where} ORDER BY name ASC", tuple(params))
            return [_to_schedule(r) for r in fetchall(cur)]

    def create(self, schedule: WorkScheduleDefinition) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_schedules(
                    name, kind, work_days, start_time, end_time, break_minutes,
                    shifts, flexible, description, is_active, created_by, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(schedule) + (schedule.created_by, schedule.updated_by),
            )
            return int(cur.lastrowid)

    def update(self, schedule: WorkScheduleDefinition) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_schedules
                SET name=%s, kind=%s, work_days=%s, start_time=%s, end_time=%s, break_minutes=%s,
                    shifts=%s, flexible=%s, description=%s, is_active=%s, updated_by=%s
                WHERE schedule_id=%s
                """,
                _params(schedule) + (schedule.updated_by, int(schedule.schedule_id)),
            )
            return cur.rowcount > 0

    def delete(self, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM work_schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0
