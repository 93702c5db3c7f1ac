#!/usr/bin/env python3
r"""
Title parser: runs registered handlers over one string and resolves the title.

Handlers run in registration order against a working title that shrinks
whenever a handler asks for its match to be removed. While they run, the
parser keeps a title boundary: the leftmost offset at which a non-title field
was recognized. Whatever sits before the boundary once every handler has run
is the title candidate, which is then passed through the normalizer.

Usage:
    parser = TitleParser()
    parser.add_handler("resolution", re.compile(r"\b\d{3,4}p\b"), lowercase, {"remove": True})
    parser.parse("Some.Movie.2019.1080p.mkv")
"""

import logging
import re
from typing import Any, Dict, Optional

from .handler import HandlerContext, MatchOutcome
from .normalizer import TitleNormalizer
from .registry import HandlerRegistry

_UNDERSCORES = re.compile(r'_+')


class TitleParser:
    """Boundary resolution over an ordered handler registry."""

    def __init__(
        self,
        registry: Optional[HandlerRegistry] = None,
        normalizer: Optional[TitleNormalizer] = None
    ):
        self.registry = registry if registry is not None else HandlerRegistry()
        self.normalizer = normalizer if normalizer is not None else TitleNormalizer()
        self.logger = logging.getLogger(__name__)

    def add_handler(self, *args, **kwargs):
        """Register a handler; see HandlerRegistry.add_handler."""
        return self.registry.add_handler(*args, **kwargs)

    def parse(self, raw_title: str) -> Dict[str, Any]:
        """
        Extract fields and a clean title from a release-style name.

        Args:
            raw_title: Name to parse (e.g. a torrent or file name)

        Returns:
            Mapping of field name to extracted value, with the cleaned title
            stored under "title"
        """
        title = _UNDERSCORES.sub(' ', raw_title)
        context = HandlerContext(title=title)
        end_of_title = len(title)

        for handler in self.registry:
            outcome: Optional[MatchOutcome] = handler(context)
            if outcome is None:
                continue

            self.logger.debug(
                "%s matched %r at %d (remove=%s, skip_from_title=%s)",
                handler.name, outcome.raw_match, outcome.match_index,
                outcome.remove, outcome.skip_from_title
            )

            match_end = outcome.match_index + len(outcome.raw_match)
            if outcome.remove:
                context.title = context.title[:outcome.match_index] + context.title[match_end:]

            # A match at offset 0 never moves the boundary here
            if (
                not outcome.skip_from_title
                and outcome.match_index
                and outcome.match_index < end_of_title
            ):
                end_of_title = outcome.match_index

            if outcome.remove and outcome.skip_from_title and outcome.match_index < end_of_title:
                # Removed text sat before the boundary; shift it left
                end_of_title = max(end_of_title - len(outcome.raw_match), 0)

        candidate = context.title[:end_of_title]
        self.logger.debug("Title candidate for %r: %r", raw_title, candidate)

        result = context.result
        result["title"] = self.normalizer.clean(candidate)
        return result
