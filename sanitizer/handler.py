#!/usr/bin/env python3
"""
Handler types for the title extraction pipeline.

A handler is one named extraction rule. It is called with a HandlerContext
(the current working title plus the per-call result and matched registries)
and returns a MatchOutcome when it consumed something, or None.

Two variants share that contract:
- RegexHandler: pattern + transformer + HandlerOptions (the common case)
- FunctionHandler: an arbitrary callable supplied by the caller
"""

import logging
import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, Mapping, Optional, Union

import regex

from .transformers import Transformer, none

logger = logging.getLogger(__name__)

# Compiled pattern types accepted by the adapter
PATTERN_TYPES = (re.Pattern, type(regex.compile("")))

# A leading "[...]" block without nested brackets
_LEADING_BRACKET = re.compile(r'^\[([^\[\]]+)\]')


class HandlerConfigurationError(TypeError):
    """Raised when a handler cannot be built from the given configuration."""


@dataclass
class MatchedEntry:
    """First-seen match of a field within one parse call."""
    raw_match: str
    match_index: int


@dataclass
class MatchOutcome:
    """Result of a single handler invocation that consumed part of the title."""
    raw_match: str
    match_index: int
    remove: bool = False
    skip_from_title: bool = False


@dataclass
class HandlerContext:
    """Mutable state threaded through every handler during one parse call."""
    title: str
    result: Dict[str, Any] = field(default_factory=dict)
    matched: Dict[str, MatchedEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class HandlerOptions:
    """
    Behaviour switches for a regex handler.

    Attributes:
        skip_if_already_found: Skip when the field already holds a value.
        skip_from_title: Never let this match shrink the title boundary.
        skip_if_first: Suppress the match when it would be the earliest
            recognized token (likely part of the title itself).
        remove: Splice the raw match out of the working title.
        value: Stored instead of the transformer output when set.
    """
    skip_if_already_found: bool = True
    skip_from_title: bool = False
    skip_if_first: bool = False
    remove: bool = False
    value: Any = None

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "HandlerOptions":
        """Build options from a mapping, rejecting unknown option names."""
        if not options:
            return cls()

        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise HandlerConfigurationError(
                f"Unknown handler option(s): {', '.join(sorted(unknown))}"
            )
        return cls(**options)

    @classmethod
    def coerce(cls, options: Union["HandlerOptions", Mapping[str, Any], None]) -> "HandlerOptions":
        if isinstance(options, cls):
            return options
        if options is None or isinstance(options, Mapping):
            return cls.from_mapping(options)
        raise HandlerConfigurationError(
            f"Handler options should be HandlerOptions or a mapping. Got: {type(options).__name__}"
        )


class FunctionHandler:
    """Handler backed by an arbitrary callable taking a HandlerContext."""

    def __init__(self, name: str, func: Callable[[HandlerContext], Optional[MatchOutcome]]):
        self.name = name
        self.func = func

    def __call__(self, context: HandlerContext) -> Optional[MatchOutcome]:
        return self.func(context)

    def __repr__(self) -> str:
        return f"FunctionHandler({self.name!r}, {getattr(self.func, '__name__', self.func)!r})"


class RegexHandler:
    """Adapter turning a pattern, transformer and options into a handler."""

    def __init__(
        self,
        name: str,
        pattern: Union[str, "re.Pattern[str]"],
        transformer: Optional[Transformer] = None,
        options: Union[HandlerOptions, Mapping[str, Any], None] = None,
        group: int = 1
    ):
        self.name = name
        self.pattern = compile_pattern(pattern)
        self.transformer = transformer or none
        self.options = HandlerOptions.coerce(options)
        self.group = group

    def __repr__(self) -> str:
        return f"RegexHandler({self.name!r}, {self.pattern.pattern!r})"

    def _clean_match(self, match) -> str:
        """Prefer the designated capture group, fall back to the whole match."""
        if self.group and self.pattern.groups >= self.group:
            captured = match.group(self.group)
            if captured:
                return captured
        return match.group(0)

    def __call__(self, context: HandlerContext) -> Optional[MatchOutcome]:
        title, result, matched = context.title, context.result, context.matched
        options = self.options

        if options.skip_if_already_found and result.get(self.name):
            return None

        match = self.pattern.search(title)
        if not match:
            return None

        raw_match = match.group(0)
        if not raw_match:
            return None
        match_index = match.start()

        transformed = self.transformer(self._clean_match(match), result.get(self.name))
        if not transformed:
            logger.debug("Handler %s: transformer vetoed %r", self.name, raw_match)
            return None

        leading = _LEADING_BRACKET.match(title)
        is_before_title = bool(leading) and raw_match in leading.group(1)

        other_matches = [entry for key, entry in matched.items() if key != self.name]
        is_skip_if_first = (
            options.skip_if_first
            and bool(other_matches)
            and all(match_index < entry.match_index for entry in other_matches)
        )
        if is_skip_if_first:
            logger.debug("Handler %s: %r would be the first token, skipped", self.name, raw_match)
            return None

        if self.name not in matched:
            matched[self.name] = MatchedEntry(raw_match=raw_match, match_index=match_index)
        result[self.name] = options.value if options.value is not None else transformed

        return MatchOutcome(
            raw_match=raw_match,
            match_index=match_index,
            remove=options.remove,
            skip_from_title=options.skip_from_title or is_before_title
        )


def compile_pattern(pattern) -> Any:
    """Return a compiled pattern; strings are compiled with the regex module."""
    if isinstance(pattern, PATTERN_TYPES):
        return pattern
    if isinstance(pattern, str):
        try:
            return regex.compile(pattern)
        except regex.error as exc:
            raise HandlerConfigurationError(f"Invalid pattern {pattern!r}: {exc}") from exc
    raise HandlerConfigurationError(
        f"Expected a pattern, got {type(pattern).__name__}"
    )
