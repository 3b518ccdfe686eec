from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import Cohort
from .model import AttendanceEntry, Student


class StudentRepository(Protocol):
    def list_by_class(self, class_id: int, cohort: Cohort, *, school_id: Optional[int] = None) -> Sequence[Student]:
        """Students of one cohort in a class, attendance loaded, in store order."""

        raise NotImplementedError

    def get_by_id(self, student_id: int, cohort: Optional[Cohort] = None) -> Optional[Student]:
        raise NotImplementedError

    def exists(self, student_id: int, cohort: Cohort) -> bool:
        raise NotImplementedError

    def append_entries(self, items: Sequence[tuple[int, AttendanceEntry]]) -> int:
        """Append entries as one store operation. Returns the number written."""

        raise NotImplementedError

    def remove_matching_entries(self, student_id: int, subject_id: int, day: date) -> int:
        raise NotImplementedError

    def remove_subject_entries(self, subject_id: int, *, student_id: Optional[int] = None) -> int:
        raise NotImplementedError

    def remove_all_entries(self, *, student_id: Optional[int] = None, class_id: Optional[int] = None) -> int:
        """Clear every entry of one student, or of every student in a class."""

        raise NotImplementedError
