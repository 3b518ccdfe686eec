from __future__ import annotations

from collections import Counter
from typing import Any, Optional

from ...attendance.occurrences import LectureSlot, resolve_occurrences, same_day_groups, status_at
from ...attendance.roster import ClassRoster
from ...attendance.stats import round_percentage, tally
from ...core.enums import ColumnKind, ReportKind
from ...core.exceptions import ValidationError
from ...subjects.model import LabBatch, Subject
from ..model import ColumnSpec, ReportTable
from .base import NAME_COLUMN, ROLL_COLUMN, ReportBuilder, ReportRequest, identity_cells, summary_row, title_line

PERCENT_COLUMN = ColumnSpec("percentage", "% Attendance", ColumnKind.PERCENT)


class SubjectDateGridBuilder(ReportBuilder):
    """One row per student, one P/A column per lecture slot of a subject."""

    kind = ReportKind.SUBJECT_DATE_GRID

    def build(self, request: ReportRequest) -> list[ReportTable]:
        if request.subject is None:
            raise ValidationError("subjectId is required for a date grid report")
        return [self.build_for_subject(request.roster, request.subject, request.batch)]

    def _slot_column(self, slot: LectureSlot, sessions_that_day: int) -> ColumnSpec:
        label = slot.day.strftime(self._date_format)
        if sessions_that_day > 1:
            label = f"{label} #{slot.occurrence}"
        return ColumnSpec(f"{slot.day.isoformat()}#{slot.occurrence}", label, ColumnKind.STATUS)

    def build_for_subject(
        self,
        roster: ClassRoster,
        subject: Subject,
        batch: Optional[LabBatch] = None,
        *,
        sheet_name: str = "Attendance",
    ) -> ReportTable:
        students = roster.students
        slots = resolve_occurrences([s.attendance for s in students], subject.subject_id)
        per_day = Counter(slot.day for slot in slots)
        slot_columns = [self._slot_column(slot, per_day[slot.day]) for slot in slots]

        rows: list[dict[str, Any]] = []
        for student in students:
            row = identity_cells(student, with_type=False, mark_d2d_name=True)
            if not self._batch_filter.is_visible(student, subject, batch):
                for col in slot_columns:
                    row[col.key] = ""
                row[PERCENT_COLUMN.key] = None
                rows.append(row)
                continue

            groups = same_day_groups(student.attendance, subject.subject_id)
            for slot, col in zip(slots, slot_columns):
                status = status_at(groups, slot)
                row[col.key] = status.short if status else ""
            row[PERCENT_COLUMN.key] = round_percentage(tally(student.attendance, subject.subject_id).percentage)
            rows.append(row)

        columns = (ROLL_COLUMN, NAME_COLUMN, *slot_columns, PERCENT_COLUMN)
        title = title_line(
            roster,
            f"Subject: {subject.name}",
            f"Batch: {batch.name}" if batch else "",
        )
        return ReportTable(
            kind=self.kind,
            sheet_name=sheet_name,
            title_block=(title,),
            columns=columns,
            rows=rows,
            summary_rows=[summary_row(columns, rows)],
        )
