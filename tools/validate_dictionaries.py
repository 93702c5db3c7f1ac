#!/usr/bin/env python3
"""Validate sanitizer dictionaries against JSON Schemas and custom rules."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, Optional

from jsonschema import Draft7Validator

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from sanitizer.handler import HandlerConfigurationError  # noqa: E402
from sanitizer.handler_loader import register_entry  # noqa: E402
from sanitizer.normalizer import parse_ranges  # noqa: E402
from sanitizer.registry import HandlerRegistry  # noqa: E402

SCHEMA_DIR = ROOT / "schemas"
DICTIONARY_DIR = ROOT / "sanitizer" / "dictionaries"


def load_json(path: Path):
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def validate_with_schema(data, schema_path: Path, label: str) -> List[str]:
    schema = load_json(schema_path)
    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))

    messages = []
    for error in errors:
        location = " > ".join(str(p) for p in error.absolute_path) or "root"
        messages.append(f"{label}: {location}: {error.message}")
    return messages


def check_handlers(handlers) -> List[str]:
    """Every entry must build: pattern compiles, transformer and options exist."""
    errors: List[str] = []
    registry = HandlerRegistry()
    for idx, entry in enumerate(handlers or []):
        try:
            register_entry(registry, entry, idx)
        except HandlerConfigurationError as exc:
            errors.append(f"handlers[{idx}]: {exc}")
    return errors


def check_ranges(ranges) -> List[str]:
    errors: List[str] = []
    parsed = parse_ranges(ranges)
    if len(parsed) != len(ranges or []):
        errors.append("normalizer: some non_english_ranges entries are malformed or inverted")

    ordered = sorted(parsed, key=lambda r: r.start)
    for previous, current in zip(ordered, ordered[1:]):
        if current.start <= previous.end:
            errors.append(f"normalizer: range '{current.name}' overlaps '{previous.name}'")
    return errors


def main(handlers_path: Optional[Path] = None) -> int:
    failures: List[str] = []

    handlers_path = handlers_path or DICTIONARY_DIR / "handlers.json"
    normalizer_path = DICTIONARY_DIR / "normalizer.json"

    handlers = load_json(handlers_path)
    normalizer = load_json(normalizer_path)

    failures.extend(validate_with_schema(handlers, SCHEMA_DIR / "handlers.schema.json", "handlers"))
    failures.extend(validate_with_schema(normalizer, SCHEMA_DIR / "normalizer.schema.json", "normalizer"))

    if isinstance(handlers, dict):
        failures.extend(check_handlers(handlers.get("handlers")))
    if isinstance(normalizer, dict):
        failures.extend(check_ranges(normalizer.get("non_english_ranges")))

    if failures:
        print("Dictionary validation failed:")
        for failure in failures:
            print(f" - {failure}")
        return 1

    print("All dictionaries validated successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main(Path(sys.argv[1]) if len(sys.argv) > 1 else None))
