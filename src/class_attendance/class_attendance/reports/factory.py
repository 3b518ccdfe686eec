from __future__ import annotations

from dataclasses import dataclass, field

from ..attendance.batches import BatchMembershipFilter
from ..core.constants import REPORT_DATE_FORMAT
from ..core.enums import ReportKind
from .builders.base import ReportBuilder
from .builders.date_grid import SubjectDateGridBuilder
from .builders.monthly import MonthlyBuilder
from .builders.overview import DateRangeBuilder, SubjectOverviewBuilder
from .builders.sheets import SubjectSheetsBuilder

_BUILDERS: dict[ReportKind, type[ReportBuilder]] = {
    ReportKind.SUBJECT_DATE_GRID: SubjectDateGridBuilder,
    ReportKind.SUBJECT_OVERVIEW: SubjectOverviewBuilder,
    ReportKind.MONTHLY: MonthlyBuilder,
    ReportKind.DATE_RANGE: DateRangeBuilder,
    ReportKind.SUBJECT_SHEETS: SubjectSheetsBuilder,
}


@dataclass
class ReportBuilderFactory:
    """Factory Pattern: choose the builder strategy for a report kind."""

    batch_filter: BatchMembershipFilter = field(default_factory=BatchMembershipFilter)
    date_format: str = REPORT_DATE_FORMAT

    def for_kind(self, kind: ReportKind) -> ReportBuilder:
        return _BUILDERS[ReportKind(kind)](self.batch_filter, date_format=self.date_format)
