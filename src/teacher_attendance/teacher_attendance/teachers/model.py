from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Teacher:
    """Teacher identity as provided by the school directory.

    Only what attendance needs: which school's hours apply.
    """

    teacher_id: int
    school_id: int
    full_name: str
    is_active: bool = True
