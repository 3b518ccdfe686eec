from __future__ import annotations

import csv
import io
from typing import Any, Sequence

import pandas as pd
from openpyxl.styles import Alignment, Font

from ..core.enums import ColumnKind
from .model import ReportTable

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def format_cell(kind: ColumnKind, value: Any) -> str:
    if value is None:
        return ""
    if kind is ColumnKind.PERCENT and isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:.1f}%"
    return str(value)


def to_frame(table: ReportTable) -> pd.DataFrame:
    """Header + data rows + summary rows as display strings."""

    records = [
        [format_cell(c.kind, row.get(c.key)) for c in table.columns]
        for row in [*table.rows, *table.summary_rows]
    ]
    # Labels may repeat (two subjects with the same name), so keep them positional.
    return pd.DataFrame(records, columns=pd.Index(table.header_labels, tupleize_cols=False))


def write_workbook(tables: Sequence[ReportTable]) -> io.BytesIO:
    """Serialize tables to an .xlsx workbook, one sheet per table.

    Title lines go above the header row and are merged across the table width.
    """

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        for table in tables:
            start_row = len(table.title_block) + 1
            to_frame(table).to_excel(writer, sheet_name=table.sheet_name, index=False, startrow=start_row)

            ws = writer.sheets[table.sheet_name]
            for i, line in enumerate(table.title_block, start=1):
                cell = ws.cell(row=i, column=1, value=line)
                cell.font = Font(bold=True)
                cell.alignment = Alignment(horizontal="left")
                if table.width > 1:
                    ws.merge_cells(start_row=i, start_column=1, end_row=i, end_column=table.width)
    out.seek(0)
    return out


def write_csv(table: ReportTable) -> bytes:
    out = io.StringIO()
    for line in table.title_block:
        csv.writer(out).writerow([line])

    writer = csv.DictWriter(out, fieldnames=[c.key for c in table.columns])
    writer.writerow({c.key: c.label for c in table.columns})
    for row in [*table.rows, *table.summary_rows]:
        writer.writerow({c.key: format_cell(c.kind, row.get(c.key)) for c in table.columns})

    return out.getvalue().encode("utf-8-sig")
