from __future__ import annotations

from typing import Any, Sequence

from ...attendance.stats import compute_stats
from ...core.enums import ColumnKind, OverallMode, ReportKind
from ...core.exceptions import ValidationError
from ...students.model import AttendanceEntry, Student
from ..model import ColumnSpec, ReportTable
from .base import (
    NAME_COLUMN,
    OVERALL_COLUMN,
    ROLL_COLUMN,
    TYPE_COLUMN,
    ReportBuilder,
    ReportRequest,
    identity_cells,
    sort_by_roll,
    summary_row,
    title_line,
)


class SubjectOverviewBuilder(ReportBuilder):
    """Per-subject percentages for every student plus a subject-averaged overall."""

    kind = ReportKind.SUBJECT_OVERVIEW
    sheet_name = "Attendance Report"
    sort_rows_by_roll = False

    def _entries(self, student: Student, request: ReportRequest) -> Sequence[AttendanceEntry]:
        return student.attendance

    def _title(self, request: ReportRequest) -> str:
        return title_line(request.roster, "Report Type: Subject-wise Attendance")

    def _validate(self, request: ReportRequest) -> None:
        pass

    def build(self, request: ReportRequest) -> list[ReportTable]:
        self._validate(request)
        subjects = request.roster.subjects
        subject_columns = [
            ColumnSpec(f"subject:{s.subject_id}", s.name, ColumnKind.PERCENT) for s in subjects
        ]
        columns = (ROLL_COLUMN, NAME_COLUMN, TYPE_COLUMN, *subject_columns, OVERALL_COLUMN)

        students = request.roster.students
        if self.sort_rows_by_roll:
            students = sort_by_roll(students)

        rows: list[dict[str, Any]] = []
        for student in students:
            stats = compute_stats(self._entries(student, request), subjects, mode=OverallMode.SUBJECT_AVERAGE)
            row = identity_cells(student, with_type=True)
            for col, pct in zip(subject_columns, stats.per_subject):
                row[col.key] = pct
            row[OVERALL_COLUMN.key] = stats.overall
            rows.append(row)

        return [
            ReportTable(
                kind=self.kind,
                sheet_name=self.sheet_name,
                title_block=(self._title(request),),
                columns=columns,
                rows=rows,
                summary_rows=[summary_row(columns, rows)],
            )
        ]


class DateRangeBuilder(SubjectOverviewBuilder):
    """Overview restricted to entries whose day lies in ``[start, end]``."""

    kind = ReportKind.DATE_RANGE
    sheet_name = "Date Range Report"
    sort_rows_by_roll = True

    def _validate(self, request: ReportRequest) -> None:
        if request.start is None or request.end is None:
            raise ValidationError("start and end dates are required")
        if request.start > request.end:
            raise ValidationError("start date must not be after end date")

    def _entries(self, student: Student, request: ReportRequest) -> Sequence[AttendanceEntry]:
        return [e for e in student.attendance if request.start <= e.day <= request.end]

    def _title(self, request: ReportRequest) -> str:
        start = request.start.strftime(self._date_format)
        end = request.end.strftime(self._date_format)
        return title_line(request.roster, "Report Type: Date Range Attendance", f"From {start} to {end}")
