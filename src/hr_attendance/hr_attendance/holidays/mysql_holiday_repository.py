from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import HolidayType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Holiday, RecurringPattern
from .repository import HolidayRepository

_COLUMNS = """
    h.holiday_id, h.name, h.holiday_date, h.end_date, h.type, h.description, h.is_recurring,
    h.pattern_month, h.pattern_day, h.pattern_nth, h.pattern_day_of_week, h.branch_ids,
    h.created_by, h.updated_by
"""


def _to_holiday(r: dict) -> Holiday:
    pattern = None
    if r.get("pattern_month") is not None:
        pattern = RecurringPattern(
            month=int(r["pattern_month"]),
            day=r.get("pattern_day"),
            nth_occurrence=r.get("pattern_nth"),
            day_of_week=r.get("pattern_day_of_week"),
        )

    return Holiday(
        holiday_id=int(r["holiday_id"]),
        name=r["name"],
        on=r["holiday_date"],
        end_date=r.get("end_date"),
        type=HolidayType(r["type"]),
        description=r.get("description"),
        is_recurring=bool(r.get("is_recurring")),
        recurring_pattern=pattern,
        branch_ids=tuple(int(b) for b in load_json(r.get("branch_ids"), [])),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
    )


def _params(h: Holiday) -> tuple:
    p = h.recurring_pattern
    return (
        h.name,
        h.on,
        h.end_date,
        h.type.value,
        h.description,
        1 if h.is_recurring else 0,
        p.month if p else None,
        p.day if p else None,
        p.nth_occurrence if p else None,
        p.day_of_week if p else None,
        dump_json(list(h.branch_ids)) if h.branch_ids else None,
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM holidays h WHERE h.holiday_id=%s", (int(holiday_id),))
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def list_recurring(self) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM holidays h WHERE h.is_recurring=1 ORDER BY h.holiday_id")
            return [_to_holiday(r) for r in fetchall(cur)]

    def find_instance(self, *, name: str, start: date, end: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM holidays h
                WHERE h.name=%s AND h.is_recurring=0 AND h.holiday_date BETWEEN %s AND %s
                ORDER BY h.holiday_date
                LIMIT 1
                """,
                (name, start, end),
            )
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def find_by_name_and_date(self, name: str, on: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM holidays h WHERE h.name=%s AND h.holiday_date=%s LIMIT 1",
                (name, on),
            )
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def list_overlapping(self, *, start: date, end: date, branch_id: Optional[int] = None) -> Sequence[Holiday]:
        clauses = ["h.holiday_date <= %s", "COALESCE(h.end_date, h.holiday_date) >= %s"]
        params: list[object] = [end, start]
        if branch_id is not None:
            clauses.append(
                "(h.branch_ids IS NULL OR JSON_LENGTH(h.branch_ids)=0 OR JSON_CONTAINS(h.branch_ids, %s))"
            )
            params.append(dump_json(int(branch_id)))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM holidays h WHERE {where} ORDER BY h.holiday_date ASC",
                tuple(params),
            )
            return [_to_holiday(r) for r in fetchall(cur)]

    def create(self, holiday: Holiday) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(
                    name, holiday_date, end_date, type, description, is_recurring,
                    pattern_month, pattern_day, pattern_nth, pattern_day_of_week, branch_ids,
                    created_by, updated_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _params(holiday) + (holiday.created_by, holiday.updated_by),
            )
            return int(cur.lastrowid)

    def update(self, holiday: Holiday) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE holidays
                SET name=%s, holiday_date=%s, end_date=%s, type=%s, description=%s, is_recurring=%s,
                    pattern_month=%s, pattern_day=%s, pattern_nth=%s, pattern_day_of_week=%s, branch_ids=%s,
                    updated_by=%s
                WHERE holiday_id=%s
                """,
                _params(holiday) + (holiday.updated_by, int(holiday.holiday_id)),
            )
            return cur.rowcount > 0

    def delete(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            return cur.rowcount > 0
