from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Sequence

from ...attendance.batches import BatchMembershipFilter
from ...attendance.roster import ClassRoster
from ...attendance.stats import mean, round_percentage
from ...core.constants import D2D_NAME_SUFFIX, REPORT_DATE_FORMAT, SUMMARY_ROW_LABEL
from ...core.enums import ColumnKind, ReportKind
from ...students.model import Student
from ...subjects.model import LabBatch, Subject
from ..model import ColumnSpec, ReportTable

ROLL_COLUMN = ColumnSpec("roll_num", "Roll No")
NAME_COLUMN = ColumnSpec("name", "Name")
TYPE_COLUMN = ColumnSpec("type", "Type")
OVERALL_COLUMN = ColumnSpec("overall", "Overall %", ColumnKind.PERCENT)


@dataclass(frozen=True)
class ReportRequest:
    roster: ClassRoster
    subject: Optional[Subject] = None
    batch: Optional[LabBatch] = None
    start: Optional[date] = None
    end: Optional[date] = None


class ReportBuilder(ABC):
    """Strategy Pattern: one builder per report kind."""

    kind: ReportKind

    def __init__(self, batch_filter: BatchMembershipFilter, *, date_format: str = REPORT_DATE_FORMAT):
        self._batch_filter = batch_filter
        self._date_format = date_format

    @abstractmethod
    def build(self, request: ReportRequest) -> list[ReportTable]:
        raise NotImplementedError


def identity_cells(student: Student, *, with_type: bool, mark_d2d_name: bool = False) -> dict[str, Any]:
    name = student.name + D2D_NAME_SUFFIX if (mark_d2d_name and student.is_d2d) else student.name
    row: dict[str, Any] = {ROLL_COLUMN.key: student.roll_num, NAME_COLUMN.key: name}
    if with_type:
        row[TYPE_COLUMN.key] = student.cohort.value
    return row


def sort_by_roll(students: Sequence[Student]) -> list[Student]:
    # Roll numbers compare as strings ("10" < "9").
    return sorted(students, key=lambda s: str(s.roll_num))


def summary_row(columns: Sequence[ColumnSpec], rows: Sequence[dict[str, Any]]) -> dict[str, Any]:
    """Mean of each percent column's numeric (already rounded) cells."""

    out: dict[str, Any] = {}
    for c in columns:
        if c.kind is ColumnKind.PERCENT:
            values = [
                v for v in (row.get(c.key) for row in rows)
                if isinstance(v, (int, float)) and not isinstance(v, bool)
            ]
            out[c.key] = round_percentage(mean(values)) if values else 0.0
        else:
            out[c.key] = ""
    out[NAME_COLUMN.key] = SUMMARY_ROW_LABEL
    return out


def title_line(roster: ClassRoster, *parts: str) -> str:
    return " | ".join([f"Class: {roster.school_class.name}", *[p for p in parts if p]])
