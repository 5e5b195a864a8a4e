from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import hours_between, now_local
from ..common.validators import require_non_empty
from ..core.constants import WORK_HOURS_PRECISION
from ..core.enums import AttendanceStatus, CorrectionStatus, CorrectionType
from ..core.exceptions import AlreadyProcessedError, NotFoundError, ValidationError
from .model import ApprovalEntry, AttendanceCorrection
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[CorrectionStatus, frozenset[CorrectionStatus]] = {
    CorrectionStatus.PENDING: frozenset({CorrectionStatus.APPROVED, CorrectionStatus.REJECTED}),
    CorrectionStatus.APPROVED: frozenset(),
    CorrectionStatus.REJECTED: frozenset(),
}

_TOUCHES_CHECK_IN = {CorrectionType.CHECK_IN, CorrectionType.BOTH}
_TOUCHES_CHECK_OUT = {CorrectionType.CHECK_OUT, CorrectionType.BOTH}


def apply_correction(record: AttendanceRecord, correction: AttendanceCorrection, *, actor_id: Optional[int] = None) -> AttendanceRecord:
    """Return the record with exactly the fields implied by the request type replaced."""

    changes: dict = {"updated_by": actor_id, "applied_correction_id": correction.correction_id}
    if correction.request_type in _TOUCHES_CHECK_IN:
        changes["check_in_time"] = correction.new_check_in_time
    if correction.request_type in _TOUCHES_CHECK_OUT:
        changes["check_out_time"] = correction.new_check_out_time
    if correction.request_type == CorrectionType.STATUS:
        changes["status"] = correction.new_status

    updated = replace(record, **changes)
    if correction.request_type != CorrectionType.STATUS and updated.check_out_time is not None:
        updated = replace(
            updated,
            work_hours=round(hours_between(updated.check_in_time, updated.check_out_time), WORK_HOURS_PRECISION),
        )
    return updated


class CorrectionService:
    """Approval workflow for retroactive attendance edits.

    pending -> approved | rejected; both outcomes are terminal. Approval writes
    the correction first and the attendance record second, with no transaction
    spanning both; reconcile() re-applies approvals whose second write is missing.
    """

    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._clock = clock

    def get(self, correction_id: int) -> AttendanceCorrection:
        correction = self._corrections.get_by_id(int(correction_id))
        if not correction:
            raise NotFoundError("AttendanceCorrection", correction_id)
        return correction

    def submit(
        self,
        employee_id: int,
        attendance_id: int,
        request_type: CorrectionType | str,
        *,
        reason: str,
        new_check_in_time: Optional[datetime] = None,
        new_check_out_time: Optional[datetime] = None,
        new_status: Optional[AttendanceStatus | str] = None,
        actor_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceCorrection:
        try:
            request_type = CorrectionType(request_type)
            new_status = AttendanceStatus(new_status) if new_status is not None else None
        except ValueError as e:
            raise ValidationError(str(e)) from e
        reason = require_non_empty(reason, "reason")

        if request_type in _TOUCHES_CHECK_IN and new_check_in_time is None:
            raise ValidationError(f"{request_type.value} correction requires new_check_in_time")
        if request_type in _TOUCHES_CHECK_OUT and new_check_out_time is None:
            raise ValidationError(f"{request_type.value} correction requires new_check_out_time")
        if request_type == CorrectionType.STATUS and new_status is None:
            raise ValidationError("status correction requires new_status")

        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance", attendance_id)
        if record.employee_id != int(employee_id):
            raise ValidationError("attendance record belongs to another employee")

        correction = AttendanceCorrection(
            correction_id=0,
            employee_id=int(employee_id),
            attendance_id=record.attendance_id,
            request_type=request_type,
            work_date=record.work_date,
            reason=reason,
            status=CorrectionStatus.PENDING,
            old_check_in_time=record.check_in_time,
            new_check_in_time=new_check_in_time or record.check_in_time,
            old_check_out_time=record.check_out_time,
            new_check_out_time=new_check_out_time or record.check_out_time,
            old_status=record.status,
            new_status=new_status or record.status,
            created_by=actor_id,
            updated_by=actor_id,
            created_at=now or self._clock(),
        )

        preview = apply_correction(record, correction)
        if preview.check_out_time is not None and preview.check_out_time < preview.check_in_time:
            raise ValidationError("check-out time cannot be before check-in time")

        correction_id = self._corrections.create(correction)
        logger.info(
            "correction %s (%s) submitted for attendance %s by employee %s",
            correction_id, request_type.value, record.attendance_id, employee_id,
        )
        return replace(correction, correction_id=correction_id)

    def approve(
        self,
        correction_id: int,
        approver_id: int,
        comments: str = "",
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        correction = self._decide(correction_id, CorrectionStatus.APPROVED, approver_id, comments, now)

        record = self._attendance.get_by_id(correction.attendance_id)
        if not record:
            logger.warning("correction %s approved but attendance %s is gone", correction_id, correction.attendance_id)
            raise NotFoundError("Attendance", correction.attendance_id)

        updated = apply_correction(record, correction, actor_id=approver_id)
        if not self._attendance.update(updated):
            raise NotFoundError("Attendance", correction.attendance_id)

        logger.info("correction %s approved by %s; attendance %s updated", correction_id, approver_id, record.attendance_id)
        return updated

    def reject(
        self,
        correction_id: int,
        rejecter_id: int,
        comments: str = "",
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceCorrection:
        correction = self._decide(correction_id, CorrectionStatus.REJECTED, rejecter_id, comments, now)
        logger.info("correction %s rejected by %s", correction_id, rejecter_id)
        return correction

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[CorrectionStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        request_type: Optional[CorrectionType] = None,
    ) -> Sequence[AttendanceCorrection]:
        if (start is None) != (end is None):
            raise ValidationError("start and end must be given together")
        return self._corrections.list_for_employee(
            int(employee_id), status=status, start=start, end=end, request_type=request_type
        )

    # -------- Crash recovery --------
    def pending_reconciliation(self) -> list[AttendanceCorrection]:
        """Approved corrections whose attendance write never happened.

        Only the latest approval per attendance record is considered. A record
        counts as corrected once it carries that approval's id, whatever later
        check-outs or edits did to its fields.
        """

        latest: dict[int, AttendanceCorrection] = {}
        for c in self._corrections.list_by_status(CorrectionStatus.APPROVED):
            current = latest.get(c.attendance_id)
            if current is None or (c.decided_at, c.correction_id) > (current.decided_at, current.correction_id):
                latest[c.attendance_id] = c

        out: list[AttendanceCorrection] = []
        for c in latest.values():
            record = self._attendance.get_by_id(c.attendance_id)
            if record and record.applied_correction_id != c.correction_id:
                out.append(c)
        return sorted(out, key=lambda c: c.correction_id)

    def reconcile(self, *, actor_id: Optional[int] = None) -> list[int]:
        repaired: list[int] = []
        for c in self.pending_reconciliation():
            record = self._attendance.get_by_id(c.attendance_id)
            if not record:
                continue
            approver = c.approval_history[-1].approver_id if c.approval_history else actor_id
            self._attendance.update(apply_correction(record, c, actor_id=actor_id or approver))
            repaired.append(c.correction_id)
            logger.warning("re-applied approved correction %s to attendance %s", c.correction_id, c.attendance_id)
        return repaired

    # -------- helpers --------
    def _decide(
        self,
        correction_id: int,
        target: CorrectionStatus,
        actor_id: int,
        comments: str,
        now: Optional[datetime],
    ) -> AttendanceCorrection:
        correction = self.get(correction_id)
        if target not in ALLOWED_TRANSITIONS[correction.status]:
            raise AlreadyProcessedError(f"correction {correction_id} has already been {correction.status.value}")

        entry = ApprovalEntry(
            status=target,
            approver_id=int(actor_id),
            timestamp=now or self._clock(),
            comments=(comments or "").strip() or None,
        )
        decided = replace(
            correction,
            status=target,
            approval_history=correction.approval_history + (entry,),
            updated_by=int(actor_id),
        )
        if not self._corrections.update(decided):
            raise NotFoundError("AttendanceCorrection", correction_id)
        return decided
