#!/usr/bin/env python3
"""
Title normalizer: the fixed cleanup cascade applied to the title candidate.

The steps run in a fixed order and each works on the previous step's output.
Later steps depend on earlier ones (bracket balancing only makes sense once
alternate titles and empty pairs are gone), so the order is part of the
behaviour and must not be rearranged.

The "non-English" script ranges used by several steps are configuration data
loaded from dictionaries/normalizer.json.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import regex

from .dictionary_loader import DictionaryLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CharacterRange:
    """Inclusive code point range of a script treated as non-English."""
    name: str
    start: int
    end: int

    def as_class(self) -> str:
        return f"{regex.escape(chr(self.start))}-{regex.escape(chr(self.end))}"


# Mirrors dictionaries/normalizer.json; used when that file is unavailable
DEFAULT_NON_ENGLISH_RANGES: Tuple[CharacterRange, ...] = (
    CharacterRange("Japanese", 0x3040, 0x30FF),
    CharacterRange("Chinese (extension A)", 0x3400, 0x4DBF),
    CharacterRange("Chinese", 0x4E00, 0x9FFF),
    CharacterRange("CJK compatibility ideographs", 0xF900, 0xFAFF),
    CharacterRange("Halfwidth Katakana", 0xFF66, 0xFF9F),
    CharacterRange("Cyrillic", 0x0400, 0x04FF),
    CharacterRange("Arabic", 0x0600, 0x06FF),
    CharacterRange("Arabic supplement", 0x0750, 0x077F),
    CharacterRange("Kannada", 0x0C80, 0x0CFF),
    CharacterRange("Malayalam", 0x0D00, 0x0D7F),
    CharacterRange("Thai", 0x0E00, 0x0E7F),
)

CYRILLIC = r"\u0400-\u04ff"

BRACKET_PAIRS = (("{", "}"), ("[", "]"), ("(", ")"))

_MOVIE_MARKER = regex.compile(r'\[\(movie\)\]', regex.IGNORECASE)
_CAST_PARENTHETICAL = regex.compile(r'\([^)]*[' + CYRILLIC + r'][^)]*\)$|(?<=/.*)\(.*\)$')
_LEADING_SEGMENT = regex.compile(r'^[\[【★].*[\]】★][ .]?(.+)')
_TRAILING_SEGMENT = regex.compile(r'(.+)[ .]?[\[【★].*[\]】★]$')
_EMPTY_BRACKETS = regex.compile(r'\(\s*\)|\[\s*\]|\{\s*\}')
_REDUNDANT_AT_END = regex.compile(r'[ \-:./\\]+$')


def parse_ranges(entries: Optional[Iterable[dict]]) -> List[CharacterRange]:
    """
    Convert dictionary entries ({name, start, end} with hex code points) to ranges.

    Malformed entries are skipped with a warning.
    """
    ranges = []
    for entry in entries or []:
        try:
            start = int(str(entry["start"]), 16)
            end = int(str(entry["end"]), 16)
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed character range entry: %r", entry)
            continue
        if start > end:
            logger.warning("Skipping inverted character range %r", entry)
            continue
        ranges.append(CharacterRange(str(entry.get("name", "")), start, end))
    return ranges


def load_non_english_ranges(dictionary_name: str = "normalizer.json") -> List[CharacterRange]:
    """Load configured non-English ranges, falling back to the built-in set."""
    ranges = parse_ranges(DictionaryLoader.get_section("non_english_ranges", dictionary_name))
    if not ranges:
        logger.warning("No usable non_english_ranges in %s; using built-in ranges", dictionary_name)
        return list(DEFAULT_NON_ENGLISH_RANGES)
    return ranges


class TitleNormalizer:
    """Turns a resolved title prefix into a presentable title."""

    def __init__(self, non_english_ranges: Optional[Sequence[CharacterRange]] = None):
        """
        Args:
            non_english_ranges: Script ranges treated as non-English. Loaded
                from normalizer.json when omitted.
        """
        if non_english_ranges is None:
            non_english_ranges = load_non_english_ranges()
        if not non_english_ranges:
            raise ValueError("At least one non-English character range is required.")

        self.non_english_ranges = tuple(non_english_ranges)
        self._compile_patterns()

    def _compile_patterns(self) -> None:
        ne = "".join(r.as_class() for r in self.non_english_ranges)

        self.not_allowed_at_start_and_end = regex.compile(
            r'^[^\w' + ne + r'#\[【★]+|[ \-:/\\\[|{(#$&^]+$'
        )
        self.remaining_not_allowed = regex.compile(r'^[^\w' + ne + r'#]+|\]$')
        self.alt_titles = regex.compile(
            r'[^/|(]*[' + ne + r'][^/|]*[/|]|[/|][^/|(]*[' + ne + r'][^/|]*'
        )
        self.embedded_non_english = regex.compile(
            r'(?<=[a-zA-Z][^' + ne + r']+)[' + ne + r'].*[' + ne + r']'
            r'|[' + ne + r'].*[' + ne + r'](?=[^' + ne + r']+[a-zA-Z])'
        )

    @staticmethod
    def _dots_to_spaces(title: str) -> str:
        if ' ' not in title and '.' in title:
            return title.replace('.', ' ')
        return title

    @staticmethod
    def _remove_empty_brackets(title: str) -> str:
        changed = True
        while changed:
            title, count = _EMPTY_BRACKETS.subn('', title)
            changed = count > 0
        return title

    @staticmethod
    def _drop_unbalanced_brackets(title: str) -> str:
        for open_bracket, close_bracket in BRACKET_PAIRS:
            if title.count(open_bracket) != title.count(close_bracket):
                title = title.replace(open_bracket, '').replace(close_bracket, '')
        return title

    def clean(self, raw_title: str) -> str:
        """
        Clean up a title candidate by removing unwanted characters and patterns.

        The cascade is repeated until the title stops changing: dropping an
        unbalanced bracket can expose a symbol that only an earlier step strips.

        Args:
            raw_title: Title prefix left over after boundary resolution

        Returns:
            The cleaned title, stripped of surrounding whitespace
        """
        title = self._clean_once(raw_title)
        while True:
            cleaned = self._clean_once(title)
            if cleaned == title:
                return title
            title = cleaned

    def _clean_once(self, raw_title: str) -> str:
        title = self._dots_to_spaces(raw_title)
        title = title.replace('_', ' ')
        title = _MOVIE_MARKER.sub('', title)
        title = self.not_allowed_at_start_and_end.sub('', title)
        title = _CAST_PARENTHETICAL.sub('', title, count=1)
        title = _LEADING_SEGMENT.sub(r'\1', title, count=1)
        title = _TRAILING_SEGMENT.sub(r'\1', title, count=1)
        title = self.alt_titles.sub('', title, count=1)
        title = self.embedded_non_english.sub('', title, count=1)
        title = self.remaining_not_allowed.sub('', title)
        title = self._remove_empty_brackets(title)
        title = self._drop_unbalanced_brackets(title)
        title = self._dots_to_spaces(title)
        title = _REDUNDANT_AT_END.sub('', title)
        return title.strip()

    __call__ = clean


_default_normalizer: Optional[TitleNormalizer] = None


def clean_title(raw_title: str) -> str:
    """Clean a title with the shared, dictionary-configured normalizer."""
    global _default_normalizer
    if _default_normalizer is None:
        _default_normalizer = TitleNormalizer()
    return _default_normalizer.clean(raw_title)
