from datetime import date, datetime

import pytest

from src.hr_attendance.hr_attendance.core.enums import AttendanceStatus, CorrectionStatus, CorrectionType
from src.hr_attendance.hr_attendance.core.exceptions import (
    AlreadyProcessedError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from src.hr_attendance.hr_attendance.corrections.service import ALLOWED_TRANSITIONS

MONDAY = date(2025, 1, 6)


def _at(hour, minute=0):
    return datetime(2025, 1, 6, hour, minute)


@pytest.fixture
def worked(engine):
    """Employee 1 checked in late at 09:20 and out at 18:00 on Monday."""

    engine.assignment_service.assign(1, 1, date(2025, 1, 1))
    engine.attendance_service.check_in(1, now=_at(9, 20))
    record = engine.attendance_service.check_out(1, now=_at(18, 0))
    engine.record = record
    return engine


def test_submit_snapshots_current_values(worked):
    c = worked.correction_service.submit(
        1, worked.record.attendance_id, "check_in", new_check_in_time=_at(9, 0), reason="badge reader down", actor_id=1
    )

    assert c.correction_id > 0
    assert c.status == CorrectionStatus.PENDING
    assert c.request_type == CorrectionType.CHECK_IN
    assert c.old_check_in_time == _at(9, 20)
    assert c.new_check_in_time == _at(9, 0)
    assert c.old_status == AttendanceStatus.LATE
    assert c.work_date == MONDAY
    assert c.approval_history == ()


@pytest.mark.parametrize(
    "request_type, kwargs",
    [
        (CorrectionType.CHECK_IN, {}),
        (CorrectionType.CHECK_OUT, {"new_check_in_time": _at(9, 0)}),
        (CorrectionType.BOTH, {"new_check_in_time": _at(9, 0)}),
        (CorrectionType.STATUS, {}),
        ("overtime", {}),
    ],
)
def test_submit_requires_fields_for_request_type(worked, request_type, kwargs):
    with pytest.raises(ValidationError):
        worked.correction_service.submit(1, worked.record.attendance_id, request_type, reason="fix", **kwargs)


def test_submit_rejects_bad_targets(worked):
    svc = worked.correction_service
    with pytest.raises(ValidationError):
        svc.submit(1, worked.record.attendance_id, "status", new_status="present", reason="  ")
    with pytest.raises(ValidationError):
        svc.submit(2, worked.record.attendance_id, "status", new_status="present", reason="not mine")
    with pytest.raises(NotFoundError):
        svc.submit(1, 999, "status", new_status="present", reason="missing")
    with pytest.raises(ValidationError):
        svc.submit(1, worked.record.attendance_id, "check_out", new_check_out_time=_at(9, 0), reason="too early")


def test_status_correction_leaves_times_untouched(worked):
    svc = worked.correction_service
    c = svc.submit(1, worked.record.attendance_id, "status", new_status="present", reason="meeting offsite")

    updated = svc.approve(c.correction_id, approver_id=50, comments="ok")

    assert updated.status == AttendanceStatus.PRESENT
    assert updated.check_in_time == worked.record.check_in_time
    assert updated.check_out_time == worked.record.check_out_time
    assert updated.work_hours == worked.record.work_hours
    assert worked.attendance.get_by_id(c.attendance_id) == updated

    stored = svc.get(c.correction_id)
    assert stored.status == CorrectionStatus.APPROVED
    assert [(e.status, e.approver_id, e.comments) for e in stored.approval_history] == [
        (CorrectionStatus.APPROVED, 50, "ok")
    ]


def test_time_correction_recomputes_hours_but_keeps_status(worked):
    svc = worked.correction_service
    c = svc.submit(1, worked.record.attendance_id, "both", new_check_in_time=_at(8, 0), new_check_out_time=_at(17, 30), reason="fix")

    updated = svc.approve(c.correction_id, approver_id=50)

    assert updated.check_in_time == _at(8, 0)
    assert updated.check_out_time == _at(17, 30)
    assert updated.work_hours == 9.5
    assert updated.status == AttendanceStatus.LATE


def test_second_approval_is_rejected_and_record_unchanged(worked):
    svc = worked.correction_service
    c = svc.submit(1, worked.record.attendance_id, "check_in", new_check_in_time=_at(9, 0), reason="fix")
    svc.approve(c.correction_id, approver_id=50)
    after_first = worked.attendance.get_by_id(c.attendance_id)

    with pytest.raises(AlreadyProcessedError):
        svc.approve(c.correction_id, approver_id=51)
    with pytest.raises(AlreadyProcessedError):
        svc.reject(c.correction_id, rejecter_id=51)

    assert worked.attendance.get_by_id(c.attendance_id) == after_first
    assert len(svc.get(c.correction_id).approval_history) == 1


def test_reject_never_touches_the_record(worked):
    svc = worked.correction_service
    c = svc.submit(1, worked.record.attendance_id, "status", new_status="present", reason="fix")

    rejected = svc.reject(c.correction_id, rejecter_id=60, comments="no proof")

    assert rejected.status == CorrectionStatus.REJECTED
    assert rejected.approval_history[-1].comments == "no proof"
    assert worked.attendance.get_by_id(c.attendance_id) == worked.record
    with pytest.raises(AlreadyProcessedError):
        svc.approve(c.correction_id, approver_id=60)


def test_unknown_correction(worked):
    with pytest.raises(NotFoundError):
        worked.correction_service.approve(404, approver_id=1)


def test_terminal_states_have_no_transitions():
    assert ALLOWED_TRANSITIONS[CorrectionStatus.APPROVED] == frozenset()
    assert ALLOWED_TRANSITIONS[CorrectionStatus.REJECTED] == frozenset()
    assert ALLOWED_TRANSITIONS[CorrectionStatus.PENDING] == {CorrectionStatus.APPROVED, CorrectionStatus.REJECTED}


def test_reconcile_reapplies_interrupted_approval(worked):
    svc = worked.correction_service
    c = svc.submit(1, worked.record.attendance_id, "status", new_status="present", reason="fix")

    worked.attendance.fail_updates = True
    with pytest.raises(StorageError):
        svc.approve(c.correction_id, approver_id=50)
    worked.attendance.fail_updates = False

    assert svc.get(c.correction_id).status == CorrectionStatus.APPROVED
    assert [p.correction_id for p in svc.pending_reconciliation()] == [c.correction_id]

    assert svc.reconcile() == [c.correction_id]
    record = worked.attendance.get_by_id(c.attendance_id)
    assert record.status == AttendanceStatus.PRESENT
    assert record.updated_by == 50

    assert svc.pending_reconciliation() == []
    assert svc.reconcile() == []


def test_reconcile_only_considers_latest_approval(worked):
    svc = worked.correction_service
    first = svc.submit(1, worked.record.attendance_id, "check_in", new_check_in_time=_at(9, 0), reason="a")
    svc.approve(first.correction_id, approver_id=50, now=_at(19, 0))
    second = svc.submit(1, worked.record.attendance_id, "check_in", new_check_in_time=_at(9, 5), reason="b")
    svc.approve(second.correction_id, approver_id=50, now=_at(20, 0))

    assert svc.pending_reconciliation() == []
    assert worked.attendance.get_by_id(worked.record.attendance_id).check_in_time == _at(9, 5)


def test_list_for_employee_newest_first(worked):
    svc = worked.correction_service
    older = svc.submit(1, worked.record.attendance_id, "status", new_status="present", reason="a", now=_at(19, 0))
    newer = svc.submit(1, worked.record.attendance_id, "check_in", new_check_in_time=_at(9, 0), reason="b", now=_at(20, 0))
    svc.reject(older.correction_id, rejecter_id=60)

    assert [c.correction_id for c in svc.list_for_employee(1)] == [newer.correction_id, older.correction_id]
    assert [c.correction_id for c in svc.list_for_employee(1, status=CorrectionStatus.PENDING)] == [newer.correction_id]
    assert [c.correction_id for c in svc.list_for_employee(1, request_type=CorrectionType.STATUS)] == [older.correction_id]
    assert svc.list_for_employee(1, start=date(2025, 2, 1), end=date(2025, 2, 28)) == []
    with pytest.raises(ValidationError):
        svc.list_for_employee(1, start=MONDAY)


def test_reconcile_keeps_later_check_out(engine):
    engine.assignment_service.assign(1, 1, date(2025, 1, 1))
    opened = engine.attendance_service.check_in(1, now=_at(9, 20))
    svc = engine.correction_service
    c = svc.submit(1, opened.attendance_id, "status", new_status="present", reason="traffic")
    svc.approve(c.correction_id, approver_id=50, now=_at(10, 0))

    closed = engine.attendance_service.check_out(1, now=_at(12, 0))

    assert closed.status == AttendanceStatus.HALF_DAY
    assert closed.applied_correction_id == c.correction_id
    assert svc.pending_reconciliation() == []
    assert svc.reconcile() == []
    assert engine.attendance.get_by_id(opened.attendance_id).status == AttendanceStatus.HALF_DAY
