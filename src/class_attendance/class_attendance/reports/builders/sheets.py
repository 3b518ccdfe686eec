from __future__ import annotations

import re

from ...core.constants import MAX_SHEET_NAME_LENGTH
from ...core.enums import ReportKind
from ..model import ReportTable
from .base import ReportRequest
from .date_grid import SubjectDateGridBuilder

_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def sheet_name_for(name: str, taken: set[str]) -> str:
    base = _INVALID_SHEET_CHARS.sub("-", name).strip() or "Sheet"
    base = base[:MAX_SHEET_NAME_LENGTH]
    candidate = base
    n = 2
    while candidate.lower() in taken:
        suffix = f" ({n})"
        candidate = base[: MAX_SHEET_NAME_LENGTH - len(suffix)] + suffix
        n += 1
    taken.add(candidate.lower())
    return candidate


class SubjectSheetsBuilder(SubjectDateGridBuilder):
    """One date-grid table per subject of the class, for a multi-sheet workbook."""

    kind = ReportKind.SUBJECT_SHEETS

    def build(self, request: ReportRequest) -> list[ReportTable]:
        taken: set[str] = set()
        return [
            self.build_for_subject(request.roster, subject, sheet_name=sheet_name_for(subject.name, taken))
            for subject in request.roster.subjects
        ]
