from __future__ import annotations

from datetime import date, datetime, time, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def weekday_index(value: date) -> int:
    """Weekday as stored by the ERP: 0=Sunday ... 6=Saturday."""
    return (value.weekday() + 1) % 7


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def day_window(value: datetime) -> tuple[datetime, datetime]:
    """Half-open [start, end) window of the calendar day containing value."""
    start = start_of_day(value)
    return start, start + timedelta(days=1)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600
