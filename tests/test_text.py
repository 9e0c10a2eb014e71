"""Tests for the field normalizers."""

import copy
from datetime import date, datetime, timezone

import pytest

from paperkeeper.utils.text import (
    is_iso_datetime,
    normalize_authors,
    normalize_date,
    normalize_doi,
    normalize_keywords,
    parse_author_name,
)

from .conftest import FIXED_NOW_ISO


# ---------------------------------------------------------------------------
# Authors
# ---------------------------------------------------------------------------

def test_last_comma_first():
    assert normalize_authors("Doe, John") == [
        {"fullName": "John Doe", "firstName": "John", "lastName": "Doe"}
    ]


def test_semicolon_separated_keeps_order():
    assert normalize_authors("Jane Smith; John Doe") == [
        {"fullName": "Jane Smith", "firstName": "Jane", "lastName": "Smith"},
        {"fullName": "John Doe", "firstName": "John", "lastName": "Doe"},
    ]


@pytest.mark.parametrize(
    "raw",
    ["Alice Brown, and Bob White", "Alice Brown and Bob White", "Alice Brown AND Bob White"],
)
def test_and_separators(raw):
    names = [a["fullName"] for a in normalize_authors(raw)]
    assert names == ["Alice Brown", "Bob White"]


def test_and_inside_a_name_is_not_a_separator():
    names = [a["fullName"] for a in normalize_authors("Anderson Cooper; Sandy Banks")]
    assert names == ["Anderson Cooper", "Sandy Banks"]


def test_single_word_is_last_name_only():
    assert parse_author_name("  UNESCO ").to_dict() == {"fullName": "UNESCO", "lastName": "UNESCO"}


def test_middle_names_fold_into_full_name():
    person = parse_author_name("Ada B. King Lovelace")
    assert person.full_name == "Ada B. King Lovelace"
    assert person.first_name == "Ada"
    assert person.last_name == "Lovelace"


def test_comma_with_missing_first_name_is_single_name():
    assert parse_author_name("Doe,").to_dict() == {"fullName": "Doe", "lastName": "Doe"}


def test_list_of_strings_drops_empty_entries():
    assert normalize_authors(["Plato", "", "   ", "Grace Hopper"]) == [
        {"fullName": "Plato", "lastName": "Plato"},
        {"fullName": "Grace Hopper", "firstName": "Grace", "lastName": "Hopper"},
    ]


def test_person_objects_are_repaired_without_mutation():
    authors = [
        {"firstName": "Grace", "lastName": "Hopper", "orcid": "0000-0001"},
        {"fullName": "Alan Turing"},
        {"affiliation": "Nowhere"},
        {"fullName": "  ", "lastName": "Curie"},
    ]
    before = copy.deepcopy(authors)

    result = normalize_authors(authors)

    assert result == [
        {"firstName": "Grace", "lastName": "Hopper", "orcid": "0000-0001", "fullName": "Grace Hopper"},
        {"fullName": "Alan Turing"},
        {"fullName": "Curie", "lastName": "Curie"},
    ]
    assert authors == before
    assert result[1] is not authors[1]


def test_mixed_list_is_dispatched_per_entry():
    result = normalize_authors([{"fullName": "Alan Turing"}, "Doe, Jane", 17, None])
    assert [a["fullName"] for a in result] == ["Alan Turing", "Jane Doe"]


@pytest.mark.parametrize("raw", [None, 42, {"fullName": "x"}, ""])
def test_unrecognized_author_shapes_yield_empty_list(raw):
    assert normalize_authors(raw) == []


# ---------------------------------------------------------------------------
# DOIs
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("doi:10.1000/xyz123", "https://doi.org/10.1000/xyz123"),
        ("DOI: 10.1000/xyz123", "https://doi.org/10.1000/xyz123"),
        ("10.1000/xyz123", "https://doi.org/10.1000/xyz123"),
        ("http://dx.doi.org/10.1000/xyz123", "https://doi.org/10.1000/xyz123"),
        ("http://doi.org/10.1000/xyz123", "https://doi.org/10.1000/xyz123"),
        ("doi.org/10.1000/xyz123", "https://doi.org/10.1000/xyz123"),
    ],
)
def test_normalize_doi(raw, expected):
    assert normalize_doi(raw) == expected


def test_canonical_doi_is_unchanged():
    assert normalize_doi("https://doi.org/10.1/abc") == "https://doi.org/10.1/abc"


@pytest.mark.parametrize("raw", [None, ""])
def test_empty_doi(raw):
    assert normalize_doi(raw) == ""


def test_malformed_doi_is_not_rejected():
    assert normalize_doi("not-a-doi") == "https://doi.org/not-a-doi"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def test_absent_date_is_now(clock):
    assert normalize_date(None, clock=clock) == FIXED_NOW_ISO
    assert normalize_date("", clock=clock) == FIXED_NOW_ISO


def test_iso_like_string_is_unchanged(clock):
    assert normalize_date("2024-01-01T00:00:00.000Z", clock=clock) == "2024-01-01T00:00:00.000Z"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-01-15", "2024-01-15T00:00:00.000Z"),
        ("0999-05-05", "0999-05-05T00:00:00.000Z"),
        (datetime(1, 1, 1, tzinfo=timezone.utc), "0001-01-01T00:00:00.000Z"),
        ("March 5, 2023", "2023-03-05T00:00:00.000Z"),
        ("2024-01-15 10:00 +02:00", "2024-01-15T08:00:00.000Z"),
        (date(2022, 2, 2), "2022-02-02T00:00:00.000Z"),
        (datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc), "2024-05-06T07:08:09.123Z"),
        (1700000000000, "2023-11-14T22:13:20.000Z"),
    ],
)
def test_parseable_dates(raw, expected, clock):
    assert normalize_date(raw, clock=clock) == expected


def test_unparseable_date_falls_back_to_now_with_warning(clock):
    diagnostics = []
    assert normalize_date("garbage", diagnostics, clock=clock) == FIXED_NOW_ISO
    assert len(diagnostics) == 1
    assert diagnostics[0].level == "warning"
    assert diagnostics[0].field == "dateAdded"
    assert diagnostics[0].cause == "'garbage'"


@pytest.mark.parametrize("raw", [["2024"], True, object()])
def test_unsupported_date_types_fall_back_to_now(raw, clock):
    assert normalize_date(raw, clock=clock) == FIXED_NOW_ISO


def test_is_iso_datetime():
    assert is_iso_datetime("2024-01-01T00:00:00.000Z")
    assert is_iso_datetime("2024-01-01T10:30:00+05:30")
    assert not is_iso_datetime("2024-01-01")
    assert not is_iso_datetime("Tuesday")
    assert not is_iso_datetime("2024-13-45T00:00:00Z")
    assert not is_iso_datetime(20240101)


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------

def test_keyword_string_is_split_and_trimmed():
    assert normalize_keywords("ml; nlp,  vision ,") == ["ml", "nlp", "vision"]


def test_keyword_list_keeps_non_empty_strings():
    assert normalize_keywords(["a", "", 3, " ", None, "b"]) == ["a", "b"]


@pytest.mark.parametrize("raw", [None, 5, {"a": 1}])
def test_other_keyword_shapes_are_empty(raw):
    assert normalize_keywords(raw) == []
