#!/usr/bin/env python3
"""
Tests for stock transformers.
"""

import pytest

from sanitizer.transformers import (
    TRANSFORMERS,
    array,
    boolean,
    date,
    integer,
    lowercase,
    none,
    range_of,
    uniq_concat,
    uppercase,
    value,
    year_range,
)


def test_simple_transformers():
    assert none("Some Text") == "Some Text"
    assert boolean("anything") is True
    assert lowercase("BluRay") == "bluray"
    assert uppercase("x264") == "X264"
    assert value("fixed")("ignored") == "fixed"


@pytest.mark.parametrize("text,expected", [("05", 5), ("2019", 2019), ("abc", None), ("0", 0)])
def test_integer(text, expected):
    assert integer(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("2019.05.27", "2019-05-27"),
        ("[2019-05-27]", "2019-05-27"),
        ("2019 05 27", "2019-05-27"),
        ("2019.13.45", None),
    ],
)
def test_date_year_first(text, expected):
    assert date("%Y %m %d")(text) == expected


def test_date_tries_formats_in_order():
    transform = date("%Y %m %d", "%d %m %Y")
    assert transform("27/05/2019") == "2019-05-27"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1-3", [1, 2, 3]),
        ("01~05", [1, 2, 3, 4, 5]),
        ("1 2 3", [1, 2, 3]),
        ("7", [7]),
        ("3-1", None),
        ("1 3 4", None),
        ("abc", None),
    ],
)
def test_range_of(text, expected):
    assert range_of(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("2005", 2005),
        ("2000-2005", "2000-2005"),
        ("1999-03", "1999-2003"),
        ("2010-15", "2010-2015"),
        ("2005-2000", None),
        ("2005-2005", None),
    ],
)
def test_year_range(text, expected):
    assert year_range(text) == expected


def test_array_wraps_chained_value():
    assert array()("French") == ["French"]
    assert array(lowercase)("French") == ["french"]


class TestUniqConcat:
    """Tests for the accumulating list transformer."""

    def test_starts_new_list(self):
        assert uniq_concat(lowercase)("FRENCH", None) == ["french"]

    def test_appends_to_previous(self):
        assert uniq_concat(lowercase)("German", ["french"]) == ["french", "german"]

    def test_skips_duplicates(self):
        assert uniq_concat(lowercase)("FRENCH", ["french"]) == ["french"]

    def test_does_not_mutate_previous(self):
        previous = ["french"]
        uniq_concat()("german", previous)
        assert previous == ["french"]


def test_named_transformers_cover_stock_functions():
    assert TRANSFORMERS["integer"] is integer
    assert TRANSFORMERS["range"] is range_of
    assert set(TRANSFORMERS) >= {"none", "integer", "boolean", "lowercase", "uppercase", "year_range"}
