#!/usr/bin/env python3
"""
Evaluation harness for the title sanitizer.

Provides two modes:
- blind: Coverage-first metrics without reference labels
- reference: Accuracy metrics vs expected labels from an Excel "Reference" sheet

Outputs:
- Excel workbook with parsed results (and Reference/Diff sheets in reference mode)
- JSON metrics file for automation
"""

import sys
import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from collections import Counter

# Add parent directory to path to import the sanitizer package
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from openpyxl import load_workbook

from sanitizer import TitleParser, build_default_parser
from sanitizer.excel_writer import (
    ReportSheet,
    collect_field_names,
    format_cell,
    results_sheet,
    write_report_workbook,
)

Entry = Tuple[str, Dict[str, Any]]


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Evaluate the title sanitizer with coverage or reference metrics'
    )
    parser.add_argument(
        '--mode',
        choices=['blind', 'reference'],
        default='blind',
        help='Evaluation mode: blind (coverage) or reference (vs labels)'
    )
    parser.add_argument(
        '--input',
        required=True,
        help='Input file containing names (one per line) or Excel reference'
    )
    parser.add_argument(
        '--handlers',
        default='handlers.json',
        help='Handler dictionary to evaluate'
    )
    parser.add_argument(
        '--output-excel',
        help='Output Excel file path (default: metrics/MODE-YYYYMMDD-HHMMSS.xlsx)'
    )
    parser.add_argument(
        '--output-json',
        help='Output JSON metrics file (default: metrics/MODE-YYYYMMDD-HHMMSS.json)'
    )
    parser.add_argument(
        '--limit',
        type=int,
        help='Limit number of names to process'
    )
    parser.add_argument(
        '--samples',
        type=int,
        default=10,
        help='Number of mismatch samples to capture per field (reference mode)'
    )
    parser.add_argument(
        '--no-write',
        action='store_true',
        help='Dry-run mode: skip writing output files'
    )
    parser.add_argument(
        '--skip-excel',
        action='store_true',
        help='Skip Excel output for faster CI runs'
    )

    return parser.parse_args()


def read_input_file(filepath: Union[str, Path], limit: Optional[int] = None) -> List[str]:
    """
    Read input names from a text file, or the 'input' column of an Excel file.
    """
    filepath = Path(filepath)

    if filepath.suffix == '.xlsx':
        return [row['input'] for row in load_reference_rows(filepath)][:limit]

    names = []
    with filepath.open('r', encoding='utf-8', errors='replace') as f:
        for line in f:
            line = line.strip()
            if line:
                names.append(line)
                if limit and len(names) >= limit:
                    break
    return names


def load_reference_rows(filepath: Union[str, Path], sheet_name: str = "Reference") -> List[Dict[str, str]]:
    """
    Load expected values from an Excel sheet.

    The sheet needs an 'input' column; every other non-empty header is a
    field (including 'title'). Blank cells mean "no value expected".
    """
    wb = load_workbook(Path(filepath), read_only=True)
    try:
        if sheet_name not in wb.sheetnames:
            raise ValueError(f"Could not find '{sheet_name}' sheet in Excel file. Sheets present: {wb.sheetnames}")
        ws = wb[sheet_name]

        rows_iter = ws.iter_rows(values_only=True)
        headers = [str(h).strip().lower() if h is not None else "" for h in next(rows_iter, ())]
        if 'input' not in headers:
            raise ValueError("Could not find 'input' column in Excel file")

        reference = []
        for row in rows_iter:
            values = {
                header: ("" if value is None else str(value))
                for header, value in zip(headers, row)
                if header
            }
            if values.get('input'):
                reference.append(values)
    finally:
        wb.close()
    return reference


def parse_names(parser: TitleParser, names: Sequence[str]) -> List[Entry]:
    """Parse every name, reporting progress every 100 names."""
    entries = []
    for idx, name in enumerate(names, 1):
        if idx % 100 == 0:
            print(f"  Processed {idx}/{len(names)}...")
        entries.append((name, parser.parse(name)))
    return entries


def cell_text(value: Any) -> str:
    """Comparable text form of a parsed value."""
    return str(format_cell(value))


def calculate_blind_metrics(entries: Sequence[Entry]) -> Dict[str, Any]:
    """
    Calculate coverage metrics for blind mode.

    Metrics include:
    - Field coverage (% of rows with each field populated)
    - Average number of fields extracted per name
    - Title histogram of the most repeated titles (often a sign of over-stripping)
    """
    total_rows = len(entries)
    results = [result for _, result in entries]
    fields = collect_field_names(results)

    field_coverage = {
        field: round(sum(1 for r in results if r.get(field) not in (None, "")) / total_rows, 4)
        for field in ['title'] + fields
    } if total_rows else {}

    avg_fields = (
        sum(len([k for k in r if k != 'title']) for r in results) / total_rows
    ) if total_rows else 0.0

    title_histogram = Counter(r.get('title', '') for r in results).most_common(20)

    return {
        'mode': 'blind',
        'total_rows': total_rows,
        'field_coverage': field_coverage,
        'avg_fields_per_name': round(avg_fields, 4),
        'empty_titles': sum(1 for r in results if not r.get('title')),
        'title_histogram': [{'title': t, 'count': c} for t, c in title_histogram if c > 1],
        'timestamp': datetime.now().isoformat()
    }


def calculate_reference_metrics(
    entries: Sequence[Entry],
    reference_rows: Sequence[Mapping[str, str]],
    samples: int = 10
) -> Dict[str, Any]:
    """
    Calculate accuracy metrics against reference labels.

    Per field:
    1. False negative rate: reference has a value, result is empty
    2. False positive rate: reference is empty, result has a value
    3. Accuracy rate: reference has a value and result matches it exactly
    Plus the perfect rate: names where every reference field matches.
    """
    total_rows = len(entries)
    if len(reference_rows) != total_rows:
        raise ValueError(f"Row count mismatch: {total_rows} parsed vs {len(reference_rows)} reference")

    fields = sorted({key for row in reference_rows for key in row if key != 'input'})
    field_metrics = {}
    mismatches = []
    perfect = [True] * total_rows

    for field in fields:
        fn_opps = fns = fp_opps = fps = acc = 0
        field_mismatches = []

        for i, (name, result) in enumerate(entries):
            expected = reference_rows[i].get(field, "")
            parsed = cell_text(result.get(field))

            if expected:
                fn_opps += 1
                if not parsed:
                    fns += 1
                    kind = 'false_negative'
                elif parsed == expected:
                    acc += 1
                    continue
                else:
                    kind = 'incorrect'
            else:
                fp_opps += 1
                if not parsed:
                    continue
                fps += 1
                kind = 'false_positive'

            perfect[i] = False
            field_mismatches.append({
                'input': name,
                'field': field,
                'type': kind,
                'parsed': parsed,
                'expected': expected
            })

        field_metrics[field] = {
            'false_negative_rate': round(fns / fn_opps * 100, 2) if fn_opps else 0.0,
            'false_negative_count': fns,
            'false_positive_rate': round(fps / fp_opps * 100, 2) if fp_opps else 0.0,
            'false_positive_count': fps,
            'accuracy_rate': round(acc / fn_opps * 100, 2) if fn_opps else 0.0,
            'accurate_count': acc,
            'opportunities': fn_opps,
        }
        mismatches.extend(field_mismatches[:samples])

    perfect_count = sum(perfect)
    return {
        'mode': 'reference',
        'total_rows': total_rows,
        'parsed_perfect_rate': round(perfect_count / total_rows * 100, 2) if total_rows else 0.0,
        'files_perfectly_parsed': perfect_count,
        'field_breakdown': field_metrics,
        'sample_mismatches': mismatches,
        'timestamp': datetime.now().isoformat()
    }


def create_diff_rows(entries: Sequence[Entry], reference_rows: Sequence[Mapping[str, str]],
                     fields: Sequence[str]) -> List[List[Any]]:
    """
    Diff rows: agreed values are kept, differing cells become
    {"expected": ..., "returned": ...}.
    """
    diff_rows = []
    for (name, result), reference in zip(entries, reference_rows):
        row: List[Any] = [name]
        for field in ['title'] + list(fields):
            parsed = cell_text(result.get(field))
            expected = reference.get(field, "")
            if parsed == expected:
                row.append(parsed)
            else:
                row.append(json.dumps({"expected": expected, "returned": parsed}, ensure_ascii=False))
        diff_rows.append(row)
    return diff_rows


def is_discrepancy_value(value: Any) -> bool:
    """Check if a cell value represents a discrepancy."""
    return value is not None and '"expected":' in str(value)


def write_excel_output(entries: Sequence[Entry], output_path: Union[str, Path],
                       reference_rows: Optional[Sequence[Mapping[str, str]]] = None):
    """
    Write parsed results to an Excel workbook.

    Blind mode: a single Results sheet.
    Reference mode: Results plus a Diff sheet with discrepancies highlighted.
    """
    fields = collect_field_names([result for _, result in entries])
    if reference_rows:
        for row in reference_rows:
            for key in row:
                if key not in ('input', 'title') and key not in fields:
                    fields.append(key)

    sheets = [results_sheet("Results", entries, fields)]
    if reference_rows:
        sheets.append(ReportSheet(
            name="Diff",
            headers=['input', 'title'] + fields,
            rows=create_diff_rows(entries, reference_rows, fields),
            highlight=is_discrepancy_value,
        ))

    write_report_workbook(output_path, sheets)


def write_json_metrics(metrics: Dict[str, Any], output_path: Union[str, Path]):
    """Write metrics to JSON file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open('w', encoding='utf-8') as f:
        json.dump(metrics, f, indent=2, ensure_ascii=False)


def main():
    """Main evaluation harness entry point."""
    args = parse_arguments()

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    output_excel = Path(args.output_excel) if args.output_excel else Path("metrics") / f"{args.mode}-{timestamp}.xlsx"
    output_json = Path(args.output_json) if args.output_json else Path("metrics") / f"{args.mode}-{timestamp}.json"

    print(f"=== Title Sanitizer Evaluation ({args.mode} mode) ===")
    print(f"Input: {args.input}")

    reference_rows = None
    if args.mode == 'reference':
        reference_rows = load_reference_rows(args.input)[:args.limit]
        names = [row['input'] for row in reference_rows]
    else:
        names = read_input_file(args.input, args.limit)
    print(f"Found {len(names)} names to process")

    parser = build_default_parser(args.handlers)
    print(f"\nParsing names with {len(parser.registry)} handlers...")
    entries = parse_names(parser, names)

    if args.mode == 'blind':
        metrics = calculate_blind_metrics(entries)
        print(f"\nTotal rows: {metrics['total_rows']}")
        print(f"Empty titles: {metrics['empty_titles']}")
        print("\nField coverage:")
        for field, coverage in metrics['field_coverage'].items():
            print(f"  {field}: {coverage:.2%}")
    else:
        metrics = calculate_reference_metrics(entries, reference_rows, args.samples)
        print(f"\nParsed Perfect Rate: {metrics['parsed_perfect_rate']:>6.2f}%")
        for field, data in metrics['field_breakdown'].items():
            print(f"\n{field.upper()}")
            print(f"  False Negative Rate: {data['false_negative_rate']:>6.2f}%")
            print(f"  False Positive Rate: {data['false_positive_rate']:>6.2f}%")
            print(f"  Accuracy Rate:       {data['accuracy_rate']:>6.2f}%  ({data['accurate_count']}/{data['opportunities']})")

    if args.no_write:
        print("\nDry-run complete (no files written)")
        return

    if not args.skip_excel:
        print(f"\nWriting Excel output to {output_excel}...")
        write_excel_output(entries, output_excel, reference_rows)

    print(f"Writing JSON metrics to {output_json}...")
    write_json_metrics(metrics, output_json)
    print("\nEvaluation complete!")


if __name__ == '__main__':
    main()
