#!/usr/bin/env python3
"""
Release title sanitizer - command line entry point.

Parses release-style names (torrent names, file names) into a clean title
plus the fields recognized by the configured handler catalog, and prints one
JSON object per name.

Usage as library:
    from sanitizer import build_default_parser
    parser = build_default_parser()
    result = parser.parse("Inception.2010.1080p.BluRay.x264-GROUP")

Usage from the shell:
    python sanitize.py "Inception.2010.1080p.BluRay.x264-GROUP"
    python sanitize.py --input names.txt --report reports/names.xlsx
    cat names.txt | python sanitize.py --no-handlers
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sanitizer import HandlerConfigurationError, HandlerRegistry, TitleParser, build_default_parser
from sanitizer.excel_writer import results_sheet, write_report_workbook
from sanitizer.handler_loader import DEFAULT_HANDLERS

logger = logging.getLogger("sanitize")


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Extract clean titles and metadata fields from release names'
    )
    parser.add_argument(
        'names',
        nargs='*',
        help='Names to parse (read from --input or stdin when omitted)'
    )
    parser.add_argument(
        '--input',
        help='Text file with one name per line'
    )
    parser.add_argument(
        '--handlers',
        default=DEFAULT_HANDLERS,
        help='Handler dictionary (bundled name or path to a JSON file)'
    )
    parser.add_argument(
        '--no-handlers',
        action='store_true',
        help='Skip field extraction and only normalize titles'
    )
    parser.add_argument(
        '--report',
        help='Also write an Excel report to this path'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    return parser.parse_args(argv)


def read_names(lines: Iterable[str]) -> List[str]:
    """Strip lines and drop blanks."""
    return [line.strip() for line in lines if line.strip()]


def collect_names(args: argparse.Namespace, stdin=None) -> List[str]:
    """Names from positional arguments, then the input file, else stdin."""
    if args.names:
        return list(args.names)
    if args.input:
        with Path(args.input).open('r', encoding='utf-8', errors='replace') as f:
            return read_names(f)
    return read_names(stdin if stdin is not None else sys.stdin)


def build_parser(args: argparse.Namespace) -> TitleParser:
    if args.no_handlers:
        return TitleParser(registry=HandlerRegistry())
    return build_default_parser(args.handlers)


def run(argv: Optional[Sequence[str]] = None, stdin=None, stdout=None) -> int:
    """
    Execute the CLI.

    Returns:
        Process exit code
    """
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )
    stdout = stdout if stdout is not None else sys.stdout

    try:
        parser = build_parser(args)
    except HandlerConfigurationError as exc:
        logger.error("Invalid handler dictionary %s: %s", args.handlers, exc)
        return 2
    names = collect_names(args, stdin)
    logger.info("Parsing %d names with %d handlers", len(names), len(parser.registry))

    entries: List[Tuple[str, Dict[str, Any]]] = []
    for name in names:
        result = parser.parse(name)
        entries.append((name, result))
        stdout.write(json.dumps({"input": name, **result}, ensure_ascii=False) + "\n")

    if args.report:
        if not entries:
            logger.warning("Nothing parsed; skipping report %s", args.report)
        else:
            path = write_report_workbook(args.report, [results_sheet("Parse Results", entries)])
            logger.info("Wrote Excel report to %s", path)

    return 0


if __name__ == '__main__':
    sys.exit(run())
