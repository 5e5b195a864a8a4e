from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Thực thể miền (domain): Nhân viên.

    Only the fields the engine needs: branch scoping for holidays and the
    active flag. Profile data lives in the employee service.
    """

    employee_id: int
    full_name: str
    branch_id: Optional[int] = None
    is_active: bool = True
