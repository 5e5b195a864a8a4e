from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ScheduleKind
from .model import ScheduleAssignment, ScheduleOverride, WorkScheduleDefinition


class WorkScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[WorkScheduleDefinition]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[WorkScheduleDefinition]:
        raise NotImplementedError

    def list(
        self,
        *,
        kind: Optional[ScheduleKind] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[WorkScheduleDefinition]:
        """Sorted by name."""

        raise NotImplementedError

    def create(self, schedule: WorkScheduleDefinition) -> int:
        """Insert; schedule.schedule_id is ignored. Returns the new id."""

        raise NotImplementedError

    def update(self, schedule: WorkScheduleDefinition) -> bool:
        raise NotImplementedError

    def delete(self, schedule_id: int) -> bool:
        raise NotImplementedError


class AssignmentRepository(Protocol):
    def get_by_id(self, assignment_id: int) -> Optional[ScheduleAssignment]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int) -> Sequence[ScheduleAssignment]:
        """All assignments of the employee (with overrides), any order."""

        raise NotImplementedError

    def list_covering(self, employee_id: int, on: date) -> Sequence[ScheduleAssignment]:
        """Assignments with effective_date <= on and (expiry_date is NULL or >= on)."""

        raise NotImplementedError

    def find_override(self, employee_id: int, on: date) -> Optional[ScheduleOverride]:
        raise NotImplementedError

    def count_for_schedule(self, schedule_id: int) -> int:
        """Assignments or overrides that reference the schedule."""

        raise NotImplementedError

    def rostered_shift_names(self, schedule_id: int) -> set[str]:
        """Shift names that assignments or overrides of the schedule point at."""

        raise NotImplementedError

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
        raise NotImplementedError

    def update_interval(
        self,
        *,
        assignment_id: int,
        effective_date: date,
        expiry_date: Optional[date],
        updated_by: Optional[int] = None,
    ) -> bool:
        raise NotImplementedError

    def delete(self, assignment_id: int) -> bool:
        raise NotImplementedError

    def put_override(self, *, assignment_id: int, employee_id: int, override: ScheduleOverride) -> None:
        """Insert or replace the override for (employee_id, override.on)."""

        raise NotImplementedError

    def delete_override(self, *, employee_id: int, on: date) -> bool:
        raise NotImplementedError
