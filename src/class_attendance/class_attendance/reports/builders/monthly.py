from __future__ import annotations

from datetime import date
from typing import Any

from ...attendance.stats import round_percentage, tally
from ...common.datetime_utils import month_key
from ...core.constants import MONTH_LABEL_FORMAT, NOT_AVAILABLE
from ...core.enums import ColumnKind, ReportKind
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


class MonthlyBuilder(ReportBuilder):
    """Entry-weighted percentage per calendar month seen anywhere in the class."""

    kind = ReportKind.MONTHLY

    @staticmethod
    def _month_column(year: int, month: int) -> ColumnSpec:
        label = date(year, month, 1).strftime(MONTH_LABEL_FORMAT)
        return ColumnSpec(f"month:{year:04d}-{month:02d}", label, ColumnKind.PERCENT)

    def build(self, request: ReportRequest) -> list[ReportTable]:
        students = sort_by_roll(request.roster.students)
        months = sorted({month_key(e.day) for s in students for e in s.attendance})
        month_columns = [self._month_column(y, m) for y, m in months]
        columns = (ROLL_COLUMN, NAME_COLUMN, TYPE_COLUMN, *month_columns, OVERALL_COLUMN)

        rows: list[dict[str, Any]] = []
        for student in students:
            row = identity_cells(student, with_type=True)
            for (y, m), col in zip(months, month_columns):
                t = tally(e for e in student.attendance if month_key(e.day) == (y, m))
                row[col.key] = round_percentage(t.percentage) if t.total else NOT_AVAILABLE
            row[OVERALL_COLUMN.key] = round_percentage(tally(student.attendance).percentage)
            rows.append(row)

        return [
            ReportTable(
                kind=self.kind,
                sheet_name="Monthly Attendance",
                title_block=(title_line(request.roster, "Report Type: Monthly Attendance"),),
                columns=columns,
                rows=rows,
                summary_rows=[summary_row(columns, rows)],
            )
        ]
