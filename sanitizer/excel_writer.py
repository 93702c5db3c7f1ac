#!/usr/bin/env python3
"""
Excel report helpers for parse results.

Thin wrappers around openpyxl so the CLI and the evaluation harness render
parse results the same way: one row per input name, a fixed leading
"input"/"title" pair followed by one column per extracted field, auto-sized
columns and a styled table.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo


CellPredicate = Callable[[Any], bool]

LEADING_COLUMNS = ("input", "title")
MAX_COLUMN_WIDTH = 60


@dataclass(frozen=True)
class ReportSheet:
    """
    One worksheet of a report.

    Attributes:
        name: Sheet/tab name.
        headers: Ordered column headers.
        rows: Row values already ordered to match headers.
        highlight: Optional predicate; matching cells get a yellow fill.
    """

    name: str
    headers: Sequence[str]
    rows: Sequence[Sequence[Any]]
    highlight: Optional[CellPredicate] = None


def format_cell(value: Any) -> Any:
    """Render a field value for a cell: lists/dicts as JSON, None as blank."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value


def collect_field_names(results: Sequence[Mapping[str, Any]]) -> List[str]:
    """Field names present in any result, in first-seen order, excluding title."""
    seen: Dict[str, None] = {}
    for result in results:
        for key in result:
            if key != "title":
                seen.setdefault(key, None)
    return list(seen)


def results_sheet(
    name: str,
    entries: Sequence[Tuple[str, Mapping[str, Any]]],
    field_names: Optional[Sequence[str]] = None,
    highlight: Optional[CellPredicate] = None
) -> ReportSheet:
    """
    Build a sheet from (input, parse result) pairs.

    Args:
        name: Sheet name
        entries: Input string and its parse result, in report order
        field_names: Field columns to emit; defaults to every field seen
        highlight: Optional cell predicate for yellow highlighting
    """
    results = [result for _, result in entries]
    fields = list(field_names) if field_names is not None else collect_field_names(results)
    headers = list(LEADING_COLUMNS) + fields

    rows = []
    for raw, result in entries:
        row = [raw, result.get("title", "")]
        row.extend(format_cell(result.get(field)) for field in fields)
        rows.append(row)

    return ReportSheet(name=name, headers=headers, rows=rows, highlight=highlight)


def _write_sheet(ws, sheet: ReportSheet) -> None:
    ws.title = sheet.name

    header_font = Font(bold=True)
    for col_idx, header in enumerate(sheet.headers, 1):
        ws.cell(row=1, column=col_idx, value=header).font = header_font

    yellow_fill = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
    widths = [len(str(header)) for header in sheet.headers]

    for row_idx, row in enumerate(sheet.rows, 2):
        for col_idx, value in enumerate(row, 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if sheet.highlight and sheet.highlight(value):
                cell.fill = yellow_fill
            if col_idx <= len(widths):
                widths[col_idx - 1] = max(widths[col_idx - 1], len(str(value)))

    for col_idx, width in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = min(width + 2, MAX_COLUMN_WIDTH)

    if sheet.rows and sheet.headers:
        last_col = get_column_letter(len(sheet.headers))
        table = Table(
            displayName="".join(ch for ch in sheet.name if ch.isalnum()) + "Table",
            ref=f"A1:{last_col}{len(sheet.rows) + 1}",
        )
        table.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium9",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        ws.add_table(table)


def write_report_workbook(output_path: Path | str, sheets: Sequence[ReportSheet]) -> Path:
    """
    Write a workbook consisting of the provided sheets.

    Args:
        output_path: Destination path for the workbook.
        sheets: Ordered sheet definitions to render.

    Returns:
        Path to the written workbook.
    """
    if not sheets:
        raise ValueError("At least one sheet must be provided to write a workbook.")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    for idx, sheet in enumerate(sheets):
        ws = wb.active if idx == 0 else wb.create_sheet()
        _write_sheet(ws, sheet)

    wb.save(output_path)
    return output_path
