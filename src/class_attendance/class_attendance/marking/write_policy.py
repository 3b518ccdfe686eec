from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ..core.enums import WriteMode
from ..students.model import AttendanceEntry
from ..students.repository import StudentRepository


class WritePolicy(ABC):
    """Strategy Pattern: how planned entries reach the store."""

    mode: WriteMode

    @abstractmethod
    def apply(self, students: StudentRepository, planned: Sequence[tuple[int, AttendanceEntry]]) -> int:
        raise NotImplementedError


class AppendPolicy(WritePolicy):
    """Every mark is a new occurrence; earlier same-day entries are kept."""

    mode = WriteMode.APPEND

    def apply(self, students: StudentRepository, planned: Sequence[tuple[int, AttendanceEntry]]) -> int:
        if not planned:
            return 0
        return students.append_entries(list(planned))


class OverwritePolicy(WritePolicy):
    """Compatibility mode: at most one entry per student, subject and day.

    Matching entries are removed before the new one is appended. Within one
    call the last record for a key wins.
    """

    mode = WriteMode.OVERWRITE

    def apply(self, students: StudentRepository, planned: Sequence[tuple[int, AttendanceEntry]]) -> int:
        latest: dict[tuple[int, int, object], tuple[int, AttendanceEntry]] = {}
        for student_id, entry in planned:
            latest[(student_id, entry.subject_id, entry.day)] = (student_id, entry)
        if not latest:
            return 0

        for student_id, subject_id, day in latest:
            students.remove_matching_entries(student_id, subject_id, day)
        return students.append_entries(list(latest.values()))


_POLICIES: dict[WriteMode, type[WritePolicy]] = {
    WriteMode.APPEND: AppendPolicy,
    WriteMode.OVERWRITE: OverwritePolicy,
}


def policy_for(mode: WriteMode | str) -> WritePolicy:
    try:
        return _POLICIES[WriteMode(mode)]()
    except ValueError:
        raise ValueError(f"Unknown write mode: {mode!r}")
