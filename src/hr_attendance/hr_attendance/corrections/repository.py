from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import CorrectionStatus, CorrectionType
from .model import AttendanceCorrection


class CorrectionRepository(Protocol):
    def get_by_id(self, correction_id: int) -> Optional[AttendanceCorrection]:
        raise NotImplementedError

    def create(self, correction: AttendanceCorrection) -> int:
        raise NotImplementedError

    def update(self, correction: AttendanceCorrection) -> bool:
        """Full-document update, approval history included."""

        raise NotImplementedError

    def list_by_status(self, status: CorrectionStatus) -> Sequence[AttendanceCorrection]:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[CorrectionStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        request_type: Optional[CorrectionType] = None,
    ) -> Sequence[AttendanceCorrection]:
        """Newest first."""

        raise NotImplementedError
