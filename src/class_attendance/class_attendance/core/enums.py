from __future__ import annotations

from enum import Enum


class Cohort(str, Enum):
    """Student population a record belongs to."""

    REGULAR = "Regular"
    D2D = "D2D"


class AttendanceStatus(str, Enum):
    """Stored attendance status of a single session."""

    PRESENT = "Present"
    ABSENT = "Absent"

    @property
    def short(self) -> str:
        return "P" if self is AttendanceStatus.PRESENT else "A"

    @classmethod
    def from_mode(cls, mode: str) -> "AttendanceStatus":
        """Map a quick-mark mode ("present" / "absent") onto a status."""

        value = (mode or "").strip().lower()
        if value == "present":
            return cls.PRESENT
        if value == "absent":
            return cls.ABSENT
        raise ValueError(f"Unknown attendance mode: {mode!r}")

    def opposite(self) -> "AttendanceStatus":
        return AttendanceStatus.ABSENT if self is AttendanceStatus.PRESENT else AttendanceStatus.PRESENT


class WriteMode(str, Enum):
    """How a mark is persisted when same-day entries already exist."""

    APPEND = "append"
    OVERWRITE = "overwrite"


class OverallMode(str, Enum):
    """Formula used for a student's overall percentage."""

    SUBJECT_AVERAGE = "subject_average"
    ENTRY_WEIGHTED = "entry_weighted"


class ReportKind(str, Enum):
    SUBJECT_DATE_GRID = "subject-date-grid"
    SUBJECT_OVERVIEW = "subject-overview"
    MONTHLY = "monthly"
    DATE_RANGE = "date-range"
    SUBJECT_SHEETS = "subject-sheets"


class ColumnKind(str, Enum):
    TEXT = "text"
    STATUS = "status"
    PERCENT = "percent"
