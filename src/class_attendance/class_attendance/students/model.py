from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, Cohort


@dataclass(frozen=True)
class AttendanceEntry:
    """One recorded session for one subject on one (UTC) day.

    Several entries may share ``(subject_id, day)``: each one is a separate
    occurrence, ordered by ``recorded_at`` and then by insertion.
    """

    subject_id: int
    day: date
    status: AttendanceStatus
    recorded_at: Optional[datetime] = None
    entry_id: Optional[int] = None

    @property
    def is_present(self) -> bool:
        return self.status is AttendanceStatus.PRESENT


@dataclass(frozen=True)
class Student:
    """Domain entity: a regular or D2D student with its attendance log."""

    student_id: int
    roll_num: str
    name: str
    email: str
    class_id: int
    cohort: Cohort
    attendance: tuple[AttendanceEntry, ...] = ()
    school_id: Optional[int] = None

    @property
    def is_d2d(self) -> bool:
        return self.cohort is Cohort.D2D
