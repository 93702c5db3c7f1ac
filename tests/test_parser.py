#!/usr/bin/env python3
"""
Tests for title boundary resolution in TitleParser.
"""

import logging
import re

import pytest

from sanitizer import MatchOutcome, TitleParser
from sanitizer.transformers import boolean, integer, lowercase


class IdentityNormalizer:
    """Returns the title candidate untouched so boundaries can be asserted directly."""

    def clean(self, raw_title):
        return raw_title


@pytest.fixture
def parser():
    """Fixture providing a parser with no handlers registered."""
    return TitleParser()


@pytest.fixture
def raw_parser():
    """Fixture providing a parser whose title is the unnormalized candidate."""
    return TitleParser(normalizer=IdentityNormalizer())


class TestWithoutHandlers:
    """Parsing with an empty registry only normalizes."""

    def test_dotted_name_is_normalized(self, parser):
        assert parser.parse("Movie.Title.2020.1080p") == {"title": "Movie Title 2020 1080p"}

    def test_cast_parenthetical_removed(self, parser):
        assert parser.parse("Title (Актёры)")["title"] == "Title"

    def test_alternate_language_title_removed(self, parser):
        assert parser.parse("Title / タイトル")["title"] == "Title"

    def test_empty_input(self, parser):
        assert parser.parse("") == {"title": ""}

    def test_underscores_become_spaces(self, raw_parser):
        assert raw_parser.parse("Some_Movie__Title")["title"] == "Some Movie Title"


def test_leading_bracket_group_is_removed_and_title_kept(parser):
    parser.add_handler("group", re.compile("ReleaseGroup"), {"remove": True})

    result = parser.parse("[ReleaseGroup] Anime Title (2021)")

    assert result == {"group": "ReleaseGroup", "title": "Anime Title (2021)"}


def test_leading_bracket_group_boundary_shifts_left(raw_parser):
    raw_parser.add_handler("group", re.compile("ReleaseGroup"), {"remove": True})

    result = raw_parser.parse("[ReleaseGroup] Anime Title (2021)")

    assert result["title"] == "[] Anime Title (2021)"


def test_earliest_match_sets_boundary(raw_parser):
    raw_parser.add_handler("resolution", re.compile(r"\b\d{3,4}p\b"), lowercase)
    raw_parser.add_handler("year", re.compile(r"\b\d{4}\b"), integer)

    result = raw_parser.parse("Movie 2019 1080p x264")

    assert result == {"resolution": "1080p", "year": 2019, "title": "Movie "}


@pytest.mark.parametrize("order", [("group", "year"), ("year", "group")])
def test_removed_before_title_match_is_order_independent(order):
    parser = TitleParser()
    handlers = {
        "group": (re.compile("Group"), {"remove": True}),
        "year": (re.compile(r"\b\d{4}\b"), integer),
    }
    for name in order:
        parser.add_handler(name, *handlers[name])

    result = parser.parse("[Group] Movie 2019")

    assert result == {"group": "Group", "year": 2019, "title": "Movie"}


def test_removed_match_is_spliced_out(raw_parser):
    raw_parser.add_handler("resolution", re.compile(r"\b1080p\b"), {"remove": True})
    raw_parser.add_handler("year", re.compile(r"\b\d{4}\b"), integer)

    result = raw_parser.parse("Movie 1080p 2019")

    assert result == {"resolution": "1080p", "year": 2019, "title": "Movie "}


def test_skip_from_title_does_not_move_boundary(parser):
    parser.add_handler("year", re.compile(r"\b\d{4}\b"), integer, {"skip_from_title": True})
    parser.add_handler("extended", re.compile(r"\bExtended\b"), boolean)

    result = parser.parse("Movie Title 2019 Extended")

    assert result == {"year": 2019, "extended": True, "title": "Movie Title 2019"}


def test_match_at_start_does_not_move_boundary(parser):
    parser.add_handler("year", re.compile(r"^\d{4}"), integer)

    result = parser.parse("2020 Title")

    assert result == {"year": 2020, "title": "2020 Title"}


def test_first_registered_value_wins_by_default(parser):
    parser.add_handler("year", re.compile(r"\b(19\d\d)\b"), integer)
    parser.add_handler("year", re.compile(r"\b(20\d\d)\b"), integer)

    result = parser.parse("Movie 1999 2005")

    assert result == {"year": 1999, "title": "Movie"}


def test_skip_if_first_keeps_number_in_title(parser):
    parser.add_handler("year", re.compile(r"\b\d{4}\b"), integer)
    parser.add_handler("episode", re.compile(r"\b\d\b"), integer, {"skip_if_first": True})

    result = parser.parse("Alien 3 1979")

    assert result == {"year": 1979, "title": "Alien 3"}


class TestFunctionHandlers:
    """Custom callables take part in boundary resolution like regex handlers."""

    @staticmethod
    def imdb_id(context):
        match = re.search(r"tt\d{7}", context.title)
        if not match:
            return None
        context.result["imdb"] = match.group(0)
        return MatchOutcome(raw_match=match.group(0), match_index=match.start(), remove=True)

    def test_function_outcome_sets_boundary(self, parser):
        parser.add_handler("imdb", self.imdb_id)

        result = parser.parse("Movie tt1234567 Extra")

        assert result == {"imdb": "tt1234567", "title": "Movie"}

    def test_function_without_outcome_is_ignored(self, parser):
        parser.add_handler(self.imdb_id)

        assert parser.parse("Movie Extra") == {"title": "Movie Extra"}

    def test_removal_at_start_keeps_rest_of_title(self, parser):
        parser.add_handler(lambda context: MatchOutcome(raw_match="Junk", match_index=0, remove=True))

        assert parser.parse("Junk Title 2019")["title"] == "Title 2019"


def test_parser_is_reusable_across_calls(parser):
    parser.add_handler("year", re.compile(r"\b\d{4}\b"), integer, {"remove": True})

    first = parser.parse("Movie 2019")
    second = parser.parse("Other Film")

    assert first == {"year": 2019, "title": "Movie"}
    assert second == {"title": "Other Film"}


@pytest.mark.parametrize(
    "raw",
    [
        "Movie Title 2019 1080p",
        "Movie_Title_1080p_2019",
        "1080p Movie",
        "Movie",
        "",
    ],
)
def test_candidate_is_prefix_of_working_title(raw_parser, raw):
    raw_parser.add_handler("resolution", re.compile(r"\b\d{3,4}p\b"), lowercase)
    raw_parser.add_handler("year", re.compile(r"\b\d{4}\b"), integer)

    title = raw_parser.parse(raw)["title"]

    assert raw.replace("_", " ").startswith(title)


@pytest.mark.parametrize(
    "raw",
    ["  Movie 2019  ", "[Group] Title 1080p", "--- 1080p", "Movie (2019)", "_Title_"],
)
def test_title_is_always_stripped(parser, raw):
    parser.add_handler("resolution", re.compile(r"\b\d{3,4}p\b"), lowercase, {"remove": True})
    parser.add_handler("year", re.compile(r"\b\d{4}\b"), integer)

    title = parser.parse(raw)["title"]

    assert title == title.strip()


def test_matches_are_logged(parser, caplog):
    parser.add_handler("year", re.compile(r"\b\d{4}\b"), integer)

    with caplog.at_level(logging.DEBUG, logger="sanitizer.parser"):
        parser.parse("Movie 2019")

    assert "year matched '2019' at 6" in caplog.text
