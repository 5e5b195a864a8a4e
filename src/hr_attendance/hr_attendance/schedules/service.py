from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import OPEN_ENDED_EXPIRY
from ..core.enums import ResolutionSource, ScheduleKind
from ..core.exceptions import DomainError, NoActiveScheduleError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .calculator import WorkHourCalculator
from .model import ResolvedSchedule, ScheduleAssignment, ScheduleOverride, WorkHours, WorkScheduleDefinition
from .repository import AssignmentRepository, WorkScheduleRepository

logger = logging.getLogger(__name__)


def assignment_precedence(assignment: ScheduleAssignment) -> tuple[date, date]:
    """Sort key for competing assignments: latest effective_date wins, then latest expiry.

    An open-ended assignment ranks after any dated expiry.
    """

    return assignment.effective_date, assignment.expiry_date or date.max


def pick_effective(assignments: Iterable[ScheduleAssignment]) -> Optional[ScheduleAssignment]:
    return max(assignments, key=assignment_precedence, default=None)


def _interval_end(expiry: Optional[date]) -> date:
    return expiry if expiry is not None else OPEN_ENDED_EXPIRY


class WorkScheduleService:
    """Catalogue of work schedule definitions (unique by name)."""

    def __init__(self, schedules: WorkScheduleRepository, assignments: AssignmentRepository):
        self._schedules = schedules
        self._assignments = assignments

    def get(self, schedule_id: int) -> WorkScheduleDefinition:
        schedule = self._schedules.get_by_id(int(schedule_id))
        if not schedule:
            raise NotFoundError("WorkSchedule", schedule_id)
        return schedule

    def list(self, *, kind: Optional[ScheduleKind] = None, is_active: Optional[bool] = None) -> Sequence[WorkScheduleDefinition]:
        return self._schedules.list(kind=kind, is_active=is_active)

    def create(self, schedule: WorkScheduleDefinition, *, actor_id: Optional[int] = None) -> WorkScheduleDefinition:
        schedule = replace(schedule, name=schedule.name.strip(), created_by=actor_id, updated_by=actor_id).validate()
        if self._schedules.get_by_name(schedule.name):
            raise ValidationError(f"work schedule named {schedule.name!r} already exists")

        schedule_id = self._schedules.create(schedule)
        logger.info("work schedule %s created (%s, kind=%s)", schedule_id, schedule.name, schedule.kind.value)
        return self.get(schedule_id)

    def update(self, schedule_id: int, *, actor_id: Optional[int] = None, **changes) -> WorkScheduleDefinition:
        current = self.get(schedule_id)
        changes.pop("schedule_id", None)
        updated = replace(current, **changes, updated_by=actor_id)
        updated = replace(updated, name=updated.name.strip()).validate()

        if updated.name != current.name:
            other = self._schedules.get_by_name(updated.name)
            if other and other.schedule_id != current.schedule_id:
                raise ValidationError(f"work schedule named {updated.name!r} already exists")

        available = {s.name for s in updated.shifts} if updated.kind == ScheduleKind.SHIFT else set()
        orphaned = self._assignments.rostered_shift_names(current.schedule_id) - available
        if orphaned:
            raise ValidationError(f"shifts still rostered on this schedule: {', '.join(sorted(orphaned))}")

        if not self._schedules.update(updated):
            raise NotFoundError("WorkSchedule", schedule_id)
        return updated

    def delete(self, schedule_id: int) -> None:
        self.get(schedule_id)
        in_use = self._assignments.count_for_schedule(int(schedule_id))
        if in_use > 0:
            raise ValidationError(f"cannot delete work schedule that is assigned {in_use} time(s)")
        self._schedules.delete(int(schedule_id))
        logger.info("work schedule %s deleted", schedule_id)


class ScheduleAssignmentService:
    """Effective-date resolution, assignment history and single-date overrides."""

    def __init__(
        self,
        assignments: AssignmentRepository,
        schedules: WorkScheduleRepository,
        employees: EmployeeRepository,
        *,
        calculator: WorkHourCalculator | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._assignments = assignments
        self._schedules = schedules
        self._employees = employees
        self._calculator = calculator or WorkHourCalculator()
        self._clock = clock

    # -------- Resolution --------
    def resolve_assignment(self, employee_id: int, on: date) -> Optional[ResolvedSchedule]:
        override = self._assignments.find_override(int(employee_id), on)
        if override and override.schedule_id:
            schedule = self._schedules.get_by_id(override.schedule_id)
            if schedule:
                owner = self._owner_of(int(employee_id), on)
                return ResolvedSchedule(
                    schedule=schedule,
                    source=ResolutionSource.OVERRIDE,
                    assignment_id=owner.assignment_id if owner else 0,
                    shift_name=override.shift_name,
                )
            logger.warning("override for employee %s on %s names missing schedule %s", employee_id, on, override.schedule_id)

        active = pick_effective(self._assignments.list_covering(int(employee_id), on))
        if not active:
            return None

        schedule = self._schedules.get_by_id(active.schedule_id)
        if not schedule:
            return None
        return ResolvedSchedule(
            schedule=schedule,
            source=ResolutionSource.ASSIGNMENT,
            assignment_id=active.assignment_id,
            shift_name=active.shift_name,
        )

    def resolve(self, employee_id: int, on: date) -> Optional[WorkScheduleDefinition]:
        resolved = self.resolve_assignment(employee_id, on)
        return resolved.schedule if resolved else None

    def compute_hours(self, schedule: WorkScheduleDefinition, on: date, *, shift_name: Optional[str] = None) -> WorkHours:
        return self._calculator.compute_hours(schedule, on, shift_name=shift_name)

    def expected_hours(self, employee_id: int, on: date) -> Optional[tuple[ResolvedSchedule, WorkHours]]:
        """Resolved schedule plus its expected hours, or None when nothing is assigned."""

        resolved = self.resolve_assignment(employee_id, on)
        if not resolved:
            return None
        return resolved, self._calculator.compute_hours(resolved.schedule, on, shift_name=resolved.shift_name)

    # -------- Assignment history --------
    def list_assignments(self, employee_id: int) -> Sequence[ScheduleAssignment]:
        self._require_employee(employee_id)
        items = list(self._assignments.list_for_employee(int(employee_id)))
        items.sort(key=assignment_precedence, reverse=True)
        return items

    def assign(
        self,
        employee_id: int,
        schedule_id: int,
        effective_date: date,
        expiry_date: Optional[date] = None,
        *,
        shift_name: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> ScheduleAssignment:
        """Insert a new assignment, trimming the ones it overlaps (last writer wins).

        Existing assignments that start before effective_date end the day before
        it. Existing assignments that start inside the new interval are moved
        past its expiry, or removed when they fall entirely inside it.
        """

        self._require_employee(employee_id)
        schedule = self._require_schedule(schedule_id)
        if expiry_date is not None and effective_date >= expiry_date:
            raise ValidationError("effective_date must be before expiry_date")
        self._require_shift(schedule, shift_name)

        new_end = _interval_end(expiry_date)
        superseded: list[ScheduleAssignment] = []

        for existing in self._assignments.list_for_employee(int(employee_id)):
            existing_end = _interval_end(existing.expiry_date)
            if existing.effective_date > new_end or existing_end < effective_date:
                continue

            if existing.effective_date < effective_date:
                truncated = effective_date - timedelta(days=1)
                self._assignments.update_interval(
                    assignment_id=existing.assignment_id,
                    effective_date=existing.effective_date,
                    expiry_date=truncated,
                    updated_by=actor_id,
                )
                logger.info(
                    "assignment %s of employee %s truncated to expire %s",
                    existing.assignment_id, employee_id, truncated,
                )
            elif existing_end > new_end:
                moved = new_end + timedelta(days=1)
                self._assignments.update_interval(
                    assignment_id=existing.assignment_id,
                    effective_date=moved,
                    expiry_date=existing.expiry_date,
                    updated_by=actor_id,
                )
                logger.info("assignment %s of employee %s now starts %s", existing.assignment_id, employee_id, moved)
            else:
                superseded.append(existing)

        assignment_id = self._assignments.create(
            employee_id=int(employee_id),
            schedule_id=int(schedule_id),
            effective_date=effective_date,
            expiry_date=expiry_date,
            shift_name=shift_name,
            created_by=actor_id,
        )

        for old in superseded:
            for override in old.overrides.values():
                self._assignments.put_override(assignment_id=assignment_id, employee_id=int(employee_id), override=override)
            self._assignments.delete(old.assignment_id)
            logger.info("assignment %s of employee %s superseded by %s", old.assignment_id, employee_id, assignment_id)

        logger.info(
            "employee %s assigned schedule %s from %s to %s",
            employee_id, schedule_id, effective_date, expiry_date or "open",
        )
        created = self._assignments.get_by_id(assignment_id)
        if not created:
            raise NotFoundError("ScheduleAssignment", assignment_id)
        return created

    def bulk_assign(
        self,
        employee_ids: Sequence[int],
        schedule_id: int,
        effective_date: date,
        expiry_date: Optional[date] = None,
        *,
        shift_name: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> list[dict]:
        self._require_schedule(schedule_id)
        if expiry_date is not None and effective_date >= expiry_date:
            raise ValidationError("effective_date must be before expiry_date")

        results: list[dict] = []
        for employee_id in employee_ids:
            try:
                self.assign(
                    employee_id, schedule_id, effective_date, expiry_date, shift_name=shift_name, actor_id=actor_id
                )
                results.append({"employee_id": employee_id, "success": True, "message": "Schedule assigned successfully"})
            except DomainError as e:
                results.append({"employee_id": employee_id, "success": False, "message": str(e)})
        return results

    # -------- Overrides --------
    def add_override(
        self,
        employee_id: int,
        on: date,
        schedule_id: int,
        reason: Optional[str] = None,
        *,
        shift_name: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> ScheduleAssignment:
        self._require_employee(employee_id)
        schedule = self._require_schedule(schedule_id)
        self._require_shift(schedule, shift_name)

        active = pick_effective(self._assignments.list_covering(int(employee_id), on))
        if not active:
            raise NoActiveScheduleError(f"no active schedule for employee {employee_id} on {on}")

        override = ScheduleOverride(
            on=on,
            schedule_id=int(schedule_id),
            reason=(reason or "").strip() or None,
            created_by=actor_id,
            created_at=self._clock(),
            shift_name=shift_name,
        )
        self._assignments.put_override(assignment_id=active.assignment_id, employee_id=int(employee_id), override=override)
        logger.info("override for employee %s on %s -> schedule %s", employee_id, on, schedule_id)

        updated = self._assignments.get_by_id(active.assignment_id)
        if not updated:
            raise NotFoundError("ScheduleAssignment", active.assignment_id)
        return updated

    def remove_override(self, employee_id: int, on: date, *, actor_id: Optional[int] = None) -> None:
        self._require_employee(employee_id)
        if not self._assignments.delete_override(employee_id=int(employee_id), on=on):
            raise NotFoundError("ScheduleOverride", f"{employee_id}@{on.isoformat()}")
        logger.info("override for employee %s on %s removed by %s", employee_id, on, actor_id)

    # -------- helpers --------
    def _owner_of(self, employee_id: int, on: date) -> Optional[ScheduleAssignment]:
        for a in self._assignments.list_for_employee(employee_id):
            if on in a.overrides:
                return a
        return None

    def _require_employee(self, employee_id: int) -> None:
        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee", employee_id)

    def _require_schedule(self, schedule_id: int) -> WorkScheduleDefinition:
        schedule = self._schedules.get_by_id(int(schedule_id))
        if not schedule:
            raise NotFoundError("WorkSchedule", schedule_id)
        return schedule

    @staticmethod
    def _require_shift(schedule: WorkScheduleDefinition, shift_name: Optional[str]) -> None:
        if shift_name is None:
            return
        if schedule.kind != ScheduleKind.SHIFT:
            raise ValidationError("shift_name is only valid for shift schedules")
        if schedule.find_shift(shift_name) is None:
            raise ValidationError(f"schedule {schedule.name!r} has no shift named {shift_name!r}")
