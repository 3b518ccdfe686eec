from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..core.enums import ColumnKind, ReportKind


@dataclass(frozen=True)
class ColumnSpec:
    key: str
    label: str
    kind: ColumnKind = ColumnKind.TEXT


@dataclass(frozen=True)
class ReportTable:
    """Logical report table handed to a serializer (one sheet).

    Cell conventions: status cells hold ``"P"``, ``"A"`` or ``""`` (no
    session / not applicable); percent cells hold a rounded float, ``None``
    (blank, not applicable) or ``"N/A"`` (no data for that column).
    """

    kind: ReportKind
    sheet_name: str
    title_block: tuple[str, ...]
    columns: tuple[ColumnSpec, ...]
    rows: list[dict[str, Any]] = field(default_factory=list)
    summary_rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def header_labels(self) -> list[str]:
        return [c.label for c in self.columns]

    @property
    def width(self) -> int:
        return len(self.columns)

    def column(self, key: str) -> ColumnSpec:
        for c in self.columns:
            if c.key == key:
                return c
        raise KeyError(key)

    def column_values(self, key: str) -> list[Any]:
        return [row.get(key) for row in self.rows]

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "sheetName": self.sheet_name,
            "title": list(self.title_block),
            "columns": [{"key": c.key, "label": c.label, "kind": c.kind.value} for c in self.columns],
            "rows": self.rows,
            "summaryRows": self.summary_rows,
        }
