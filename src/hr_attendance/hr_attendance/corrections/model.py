from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, CorrectionStatus, CorrectionType


@dataclass(frozen=True)
class ApprovalEntry:
    status: CorrectionStatus
    approver_id: int
    timestamp: datetime
    comments: Optional[str] = None


@dataclass(frozen=True)
class AttendanceCorrection:
    """Yêu cầu điều chỉnh chấm công.

    old_* fields snapshot the record at submission time; new_* fields hold the
    proposed values. Only the fields implied by request_type are applied on
    approval. approval_history is append-only.
    """

    correction_id: int
    employee_id: int
    attendance_id: int
    request_type: CorrectionType
    work_date: date
    reason: str
    status: CorrectionStatus
    old_check_in_time: Optional[datetime] = None
    new_check_in_time: Optional[datetime] = None
    old_check_out_time: Optional[datetime] = None
    new_check_out_time: Optional[datetime] = None
    old_status: Optional[AttendanceStatus] = None
    new_status: Optional[AttendanceStatus] = None
    approval_history: tuple[ApprovalEntry, ...] = ()
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def decided_at(self) -> Optional[datetime]:
        return self.approval_history[-1].timestamp if self.approval_history else None
