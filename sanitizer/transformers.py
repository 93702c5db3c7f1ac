#!/usr/bin/env python3
"""
Stock transformer functions for regex handlers.

A transformer receives the matched text and the value previously stored for
the field (or None) and returns the new value. Returning a falsy value vetoes
the match: the handler behaves as if the pattern never matched.

Plain transformers are used directly (``integer``, ``lowercase``...); the
factories (``value``, ``date``, ``array``, ``uniq_concat``) return one.
"""

import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

Transformer = Callable[[str, Any], Any]

_SEPARATORS = re.compile(r'[ .\-/\\]+')
_BRACKETS = re.compile(r'[()\[\]]')
_NON_DIGITS = re.compile(r'\D+')


def none(text: str, previous: Any = None) -> str:
    """Return the matched text unchanged."""
    return text


def value(fixed: Any) -> Transformer:
    """Always produce ``fixed`` regardless of what matched."""
    def transform(text: str, previous: Any = None) -> Any:
        return fixed
    return transform


def integer(text: str, previous: Any = None) -> Optional[int]:
    """Parse the match as an int; non-numeric text yields None."""
    try:
        return int(text)
    except (TypeError, ValueError):
        return None


def boolean(text: str, previous: Any = None) -> bool:
    return True


def lowercase(text: str, previous: Any = None) -> str:
    return text.lower()


def uppercase(text: str, previous: Any = None) -> str:
    return text.upper()


def date(*formats: str) -> Transformer:
    """
    Parse a date using strptime formats and return it as ISO 8601.

    Separators (space, dot, dash, slashes) and enclosing brackets are
    normalized before parsing, so formats are written with single spaces,
    e.g. ``date("%Y %m %d")`` accepts ``2019.05.27`` and ``[2019-05-27]``.

    Args:
        formats: strptime formats tried in order

    Returns:
        Transformer producing 'YYYY-MM-DD' or None when no format applies
    """
    def transform(text: str, previous: Any = None) -> Optional[str]:
        cleaned = _SEPARATORS.sub(' ', _BRACKETS.sub('', text)).strip()
        for fmt in formats:
            try:
                return datetime.strptime(cleaned, fmt).date().isoformat()
            except ValueError:
                continue
        return None
    return transform


def range_of(text: str, previous: Any = None) -> Optional[List[int]]:
    """
    Expand a numeric range like '1-3' or '01~05' into a list of ints.

    Lists of numbers ('1 2 3') are accepted when strictly consecutive.
    Descending or gapped sequences yield None.
    """
    numbers = [int(part) for part in _NON_DIGITS.split(text) if part]
    if not numbers:
        return None

    if len(numbers) == 2 and numbers[0] < numbers[1]:
        return list(range(numbers[0], numbers[1] + 1))

    if all(b - a == 1 for a, b in zip(numbers, numbers[1:])):
        return numbers

    return None


def year_range(text: str, previous: Any = None) -> Any:
    """
    Normalize a year or year span.

    '2005' -> 2005, '2000-2005' -> '2000-2005', '1999-03' -> '1999-2003'.
    A span that does not move forward yields None.
    """
    parts = [int(part) for part in _NON_DIGITS.split(text) if part]
    if not parts:
        return None

    start = parts[0]
    if len(parts) == 1:
        return start

    end = parts[1]
    if end < 100:
        end += start - start % 100
        if end < start:
            end += 100
    if end <= start:
        return None

    return f"{start}-{end}"


def array(chain: Optional[Transformer] = None) -> Transformer:
    """Wrap the (optionally chained) transformed value in a single-item list."""
    def transform(text: str, previous: Any = None) -> List[Any]:
        return [chain(text, None) if chain else text]
    return transform


def uniq_concat(chain: Optional[Transformer] = None) -> Transformer:
    """
    Append the transformed value to the field's existing list, skipping duplicates.

    Handlers using this normally set ``skip_if_already_found=False`` so several
    matches accumulate into one list.
    """
    def transform(text: str, previous: Any = None) -> List[Any]:
        current = list(previous or [])
        new_value = chain(text, None) if chain else text
        if not new_value or new_value in current:
            return current
        return current + [new_value]
    return transform


# Names usable from handler dictionaries
TRANSFORMERS: Dict[str, Transformer] = {
    "none": none,
    "integer": integer,
    "boolean": boolean,
    "lowercase": lowercase,
    "uppercase": uppercase,
    "range": range_of,
    "year_range": year_range,
}

TRANSFORMER_FACTORIES: Dict[str, Callable[..., Transformer]] = {
    "value": value,
    "date": date,
    "array": array,
    "uniq_concat": uniq_concat,
}
