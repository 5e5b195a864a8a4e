from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        raise NotImplementedError

    def list_recurring(self) -> Sequence[Holiday]:
        raise NotImplementedError

    def find_instance(self, *, name: str, start: date, end: date) -> Optional[Holiday]:
        """Non-recurring holiday with this name whose date falls in [start, end]."""

        raise NotImplementedError

    def find_by_name_and_date(self, name: str, on: date) -> Optional[Holiday]:
        raise NotImplementedError

    def list_overlapping(self, *, start: date, end: date, branch_id: Optional[int] = None) -> Sequence[Holiday]:
        """Holidays whose [date, end_date] span touches [start, end], sorted by date.

        branch_id=None applies no branch filter; otherwise global holidays and
        holidays scoped to that branch are returned.
        """

        raise NotImplementedError

    def create(self, holiday: Holiday) -> int:
        raise NotImplementedError

    def update(self, holiday: Holiday) -> bool:
        raise NotImplementedError

    def delete(self, holiday_id: int) -> bool:
        raise NotImplementedError
