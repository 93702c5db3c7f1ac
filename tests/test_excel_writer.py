#!/usr/bin/env python3
"""
Tests for Excel report helpers.
"""

from __future__ import annotations

import pytest
from openpyxl import load_workbook

from sanitizer.excel_writer import (
    ReportSheet,
    collect_field_names,
    format_cell,
    results_sheet,
    write_report_workbook,
)


ENTRIES = [
    ("Inception.2010.1080p", {"year": 2010, "resolution": "1080p", "title": "Inception"}),
    ("Show S01E02", {"season": 1, "episode": 2, "title": "Show"}),
]


def test_format_cell():
    assert format_cell(None) == ""
    assert format_cell(["french", "german"]) == '["french", "german"]'
    assert format_cell(2010) == 2010


def test_collect_field_names_in_first_seen_order():
    results = [result for _, result in ENTRIES]
    assert collect_field_names(results) == ["year", "resolution", "season", "episode"]


def test_results_sheet_layout():
    sheet = results_sheet("Parse Results", ENTRIES)

    assert sheet.headers == ["input", "title", "year", "resolution", "season", "episode"]
    assert sheet.rows[0] == ["Inception.2010.1080p", "Inception", 2010, "1080p", "", ""]
    assert sheet.rows[1] == ["Show S01E02", "Show", "", "", 1, 2]


def test_results_sheet_with_explicit_fields():
    sheet = results_sheet("Parse Results", ENTRIES, field_names=["episode"])

    assert sheet.headers == ["input", "title", "episode"]
    assert sheet.rows[1] == ["Show S01E02", "Show", 2]


def test_workbook_written_with_bold_headers_and_highlight(tmp_path):
    output_path = tmp_path / "reports" / "out.xlsx"
    sheet = ReportSheet(
        name="Diff",
        headers=["input", "expected", "actual"],
        rows=[["a", "x", "x"], ["b", "y", "DIFF"]],
        highlight=lambda value: value == "DIFF",
    )

    written = write_report_workbook(output_path, [sheet, results_sheet("Parse Results", ENTRIES)])

    assert written == output_path
    wb = load_workbook(output_path)
    try:
        assert wb.sheetnames == ["Diff", "Parse Results"]
        ws = wb["Diff"]
        assert ws.cell(row=1, column=1).font.bold is True
        assert ws.cell(row=3, column=3).fill.start_color.rgb.endswith("FFFF00")
        assert ws.cell(row=2, column=3).fill.fill_type is None
        assert wb["Parse Results"].cell(row=2, column=2).value == "Inception"
    finally:
        wb.close()


def test_workbook_requires_sheets(tmp_path):
    with pytest.raises(ValueError):
        write_report_workbook(tmp_path / "empty.xlsx", [])
