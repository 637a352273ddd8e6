import math
from datetime import date, datetime

import pytest

from coerce import to_date, to_number
from lookup import as_list, first_text, first_value, resolve

TREE = {
    "personalinfo": {"name": "Priority"},
    "applicant": {"name": "Fallback"},
    "name": "Bare",
    "scalar": "x",
}
NAME_CANDIDATES = [("personalinfo", "name"), ("applicant", "name"), ("name",)]


def test_resolve_walks_nested_keys():
    assert resolve(TREE, ("personalinfo", "name")) == "Priority"


def test_resolve_returns_none_when_path_breaks():
    assert resolve(TREE, ("missing", "name")) is None
    assert resolve(TREE, ("scalar", "deeper")) is None
    assert resolve(None, ("name",)) is None
    assert resolve(TREE, ()) is None


def test_earlier_candidate_wins():
    assert first_value(TREE, NAME_CANDIDATES) == "Priority"
    assert first_value(TREE, list(reversed(NAME_CANDIDATES))) == "Bare"


def test_empty_values_fall_through_to_next_candidate():
    assert first_value({"a": "", "b": "x"}, [("a",), ("b",)]) == "x"
    assert first_value({"a": ""}, [("a",)]) is None


def test_first_text_reads_element_text():
    assert first_text({"name": {"lang": "en", "_": "Asha"}}, [("name",)]) == "Asha"
    assert first_text({"name": {"lang": "en"}, "alias": "Asha R"}, [("name",), ("alias",)]) == "Asha R"


def test_as_list():
    assert as_list(None) == []
    assert as_list({"a": "1"}) == [{"a": "1"}]
    assert as_list(["1", "2"]) == ["1", "2"]


def test_numbers_pass_through_unchanged():
    assert to_number(750) == 750
    assert to_number(12.5) == 12.5


def test_numeric_text_is_parsed():
    assert to_number(" 750 ") == 750.0
    assert to_number("-3.5e2") == -350.0
    assert to_number({"currency": "INR", "_": "420"}) == 420.0


@pytest.mark.parametrize("raw,expected", [
    ("750abc", 750.0),
    ("750 (CIBIL)", 750.0),
    ("12.5 lakh", 12.5),
    ("1,000", 1.0),
    (".5%", 0.5),
])
def test_only_the_leading_number_is_read(raw, expected):
    assert to_number(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "N/A", "--5", "1e999", {"x": "y"}, float("nan"), float("inf"), True])
def test_non_numeric_values_become_zero(raw):
    result = to_number(raw)
    assert result == 0
    assert not math.isnan(result)


def test_iso_date_round_trips():
    assert to_date("2021-03-15") == date(2021, 3, 15)
    assert to_date("20190115") == date(2019, 1, 15)


def test_date_objects_are_kept():
    assert to_date(date(2020, 1, 1)) == date(2020, 1, 1)
    assert to_date(datetime(2020, 1, 1, 10, 30)) == date(2020, 1, 1)


@pytest.mark.parametrize("raw", [None, "", "not a date", {"x": "y"}])
def test_unparsable_dates_are_none(raw):
    assert to_date(raw) is None
