from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import parse_iso_date, weekday_index
from ..core.enums import GenerationStatus, HolidayType
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from .model import GenerationResult, Holiday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


def _as_date(value) -> date:
    return value if isinstance(value, date) else parse_iso_date(str(value))


def nth_weekday_of_month(year: int, month: int, day_of_week: int, n: int) -> Optional[date]:
    """Date of the n-th `day_of_week` (0=Sunday) in the month, or None if the month has fewer."""

    current = date(year, month, 1)
    while weekday_index(current) != day_of_week:
        current += timedelta(days=1)

    current += timedelta(days=(n - 1) * 7)
    if current.month != month:
        return None
    return current


def occurrence_for_year(holiday: Holiday, year: int) -> Optional[date]:
    pattern = holiday.recurring_pattern
    if pattern is None:
        raise ValidationError(f"holiday {holiday.name!r} has no recurring pattern")

    if pattern.is_fixed_date:
        try:
            return date(year, pattern.month, int(pattern.day))
        except ValueError as e:
            raise ValidationError(f"{holiday.name!r} has no date {pattern.month}/{pattern.day} in {year}") from e

    return nth_weekday_of_month(year, pattern.month, int(pattern.day_of_week), int(pattern.nth_occurrence))


class HolidayService:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    # -------- Lookup --------
    def is_holiday(self, on: date, *, branch_id: Optional[int] = None) -> bool:
        return bool(self.holidays_on(on, branch_id=branch_id))

    def holidays_on(self, on: date, *, branch_id: Optional[int] = None) -> Sequence[Holiday]:
        return self._holidays.list_overlapping(start=on, end=on, branch_id=branch_id)

    def list_in_range(self, start: date, end: date, *, branch_id: Optional[int] = None) -> Sequence[Holiday]:
        if end < start:
            raise ValidationError("end must be on or after start")
        return self._holidays.list_overlapping(start=start, end=end, branch_id=branch_id)

    # -------- CRUD --------
    def get(self, holiday_id: int) -> Holiday:
        holiday = self._holidays.get_by_id(int(holiday_id))
        if not holiday:
            raise NotFoundError("Holiday", holiday_id)
        return holiday

    def create(self, holiday: Holiday, *, actor_id: Optional[int] = None) -> Holiday:
        holiday = replace(holiday, name=holiday.name.strip(), created_by=actor_id, updated_by=actor_id).validate()
        if self._holidays.find_by_name_and_date(holiday.name, holiday.on):
            raise ValidationError("Holiday with this name and date already exists")

        holiday_id = self._holidays.create(holiday)
        logger.info("holiday %s created (%s on %s)", holiday_id, holiday.name, holiday.on)
        return self.get(holiday_id)

    def import_holidays(self, items: Iterable[dict], *, actor_id: Optional[int] = None) -> list[dict]:
        """Create one-off holidays from plain dicts, reporting per item.

        Each item takes name, date (YYYY-MM-DD or a date) and optionally
        end_date, type, description and branch_ids. A bad item is reported with
        success=False and does not stop the rest of the batch.
        """

        results: list[dict] = []
        for item in items:
            name = item.get("name")
            try:
                holiday = self.create(
                    Holiday(
                        holiday_id=0,
                        name=name or "",
                        on=_as_date(item["date"]),
                        end_date=_as_date(item["end_date"]) if item.get("end_date") else None,
                        type=HolidayType(item.get("type") or HolidayType.NATIONAL),
                        description=item.get("description"),
                        branch_ids=tuple(int(b) for b in item.get("branch_ids") or ()),
                    ),
                    actor_id=actor_id,
                )
                results.append({"name": holiday.name, "date": holiday.on, "success": True, "holiday_id": holiday.holiday_id})
            except (DomainError, KeyError, ValueError) as e:
                message = str(e) if isinstance(e, DomainError) else f"invalid holiday data: {e}"
                logger.warning("holiday %r not imported: %s", name, message)
                results.append({"name": name, "date": item.get("date"), "success": False, "message": message})

        logger.info("holiday import: %d of %d created", sum(1 for r in results if r["success"]), len(results))
        return results

    def update(self, holiday_id: int, *, actor_id: Optional[int] = None, **changes) -> Holiday:
        current = self.get(holiday_id)
        changes.pop("holiday_id", None)
        updated = replace(current, **changes, updated_by=actor_id).validate()
        other = self._holidays.find_by_name_and_date(updated.name, updated.on)
        if other and other.holiday_id != current.holiday_id:
            raise ValidationError("Holiday with this name and date already exists")
        if not self._holidays.update(updated):
            raise NotFoundError("Holiday", holiday_id)
        return updated

    def delete(self, holiday_id: int) -> None:
        if not self._holidays.delete(int(holiday_id)):
            raise NotFoundError("Holiday", holiday_id)

    # -------- Recurrence --------
    def generate(self, year: int, *, actor_id: Optional[int] = None) -> list[GenerationResult]:
        """Materialise every recurring template as a concrete holiday for `year`.

        Never creates duplicates: a template whose name already has a
        non-recurring instance in that year reports already_exists. A template
        that cannot produce a date is reported as an error entry; the rest of
        the batch still runs.
        """

        year_start, year_end = date(year, 1, 1), date(year, 12, 31)
        results: list[GenerationResult] = []

        for template in self._holidays.list_recurring():
            try:
                on = occurrence_for_year(template, year)
                if on is None:
                    raise ValidationError(f"{template.name!r} has no matching weekday occurrence in {year}")

                end_date = on + timedelta(days=template.span_days) if template.end_date else None

                existing = self._holidays.find_instance(name=template.name, start=year_start, end=year_end)
                if existing:
                    results.append(
                        GenerationResult(
                            status=GenerationStatus.ALREADY_EXISTS,
                            name=existing.name,
                            on=existing.on,
                            holiday_id=existing.holiday_id,
                        )
                    )
                    continue

                instance = Holiday(
                    holiday_id=0,
                    name=template.name,
                    on=on,
                    end_date=end_date,
                    type=template.type,
                    description=template.description,
                    is_recurring=False,
                    branch_ids=template.branch_ids,
                    created_by=actor_id,
                    updated_by=actor_id,
                )
                holiday_id = self._holidays.create(instance)
                results.append(
                    GenerationResult(status=GenerationStatus.GENERATED, name=template.name, on=on, holiday_id=holiday_id)
                )
            except DomainError as e:
                logger.warning("holiday %r not generated for %s: %s", template.name, year, e)
                results.append(GenerationResult(status=GenerationStatus.ERROR, name=template.name, error=str(e)))

        logger.info(
            "recurring holidays for %s: %d generated, %d already existed, %d failed",
            year,
            sum(1 for r in results if r.status == GenerationStatus.GENERATED),
            sum(1 for r in results if r.status == GenerationStatus.ALREADY_EXISTS),
            sum(1 for r in results if r.status == GenerationStatus.ERROR),
        )
        return results
