from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..attendance.batches import find_batch
from ..attendance.roster import RosterLoader
from ..core.enums import ReportKind
from ..core.exceptions import ValidationError
from .builders.base import ReportRequest
from .factory import ReportBuilderFactory
from .model import ReportTable

logger = logging.getLogger(__name__)

_SINGLE_SUBJECT_KINDS = {ReportKind.SUBJECT_DATE_GRID}


class ReportService:
    def __init__(self, roster: RosterLoader, *, factory: Optional[ReportBuilderFactory] = None):
        self._roster = roster
        self._factory = factory or ReportBuilderFactory()

    def build_report(
        self,
        kind: ReportKind | str,
        class_id: int,
        *,
        subject_id: Optional[int] = None,
        batch_name: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        school_id: Optional[int] = None,
    ) -> list[ReportTable]:
        try:
            kind = ReportKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown report kind: {kind}")

        if kind in _SINGLE_SUBJECT_KINDS and subject_id is None:
            raise ValidationError("subjectId is required for this report")

        roster = self._roster.load(class_id, school_id=school_id)
        subject = None
        batch = None
        if subject_id is not None:
            subject = self._roster.resolve_subject(roster, subject_id)
            batch = find_batch(subject, batch_name)

        tables = self._factory.for_kind(kind).build(
            ReportRequest(roster=roster, subject=subject, batch=batch, start=start, end=end)
        )
        logger.info(
            "Built %s report for class %s (%d table(s), %d student(s))",
            kind.value, roster.school_class.class_id, len(tables), len(roster.students),
        )
        return tables
