"""Tests for record validation."""

import copy

import pytest

from paperkeeper.services.validation_service import PaperValidator


@pytest.fixture
def validator():
    return PaperValidator()


@pytest.fixture
def paper():
    """A complete, valid 2.0.0 record."""
    return {
        "_schemaVersion": "2.0.0",
        "_lastModified": "2025-03-01T12:00:00.000Z",
        "id": "p1",
        "title": "Deep Residual Learning for Image Recognition",
        "authors": [{"fullName": "Kaiming He", "firstName": "Kaiming", "lastName": "He"}],
        "doi": "https://doi.org/10.1109/CVPR.2016.90",
        "dateAdded": "2024-11-14T10:30:00.000Z",
        "year": "2016",
        "abstract": "Deeper neural networks are more difficult to train.",
        "keywords": ["residual networks"],
        "itemType": "inproceedings",
        "status": "read",
        "priority": "high",
        "language": "en",
    }


def fields(issues):
    return [issue.field for issue in issues]


def test_complete_record_is_clean(validator, paper):
    result = validator.validate(paper)
    assert result.valid
    assert result.errors == []
    assert result.warnings == []
    assert result.schema_version == "2.0.0"


def test_validation_does_not_modify_record(validator, paper):
    paper["doi"] = "10.1/abc"
    before = copy.deepcopy(paper)
    validator.validate(paper)
    assert paper == before


@pytest.mark.parametrize("record", [None, "paper", 12, ["a"]])
def test_non_mapping_record_is_an_error(validator, record):
    result = validator.validate(record)
    assert not result.valid
    assert fields(result.errors)[0] == "record"
    assert {"_schemaVersion", "id", "title", "dateAdded"} <= set(fields(result.errors))


def test_missing_required_fields(validator):
    result = validator.validate({})
    assert fields(result.errors) == ["_schemaVersion", "id", "title", "dateAdded"]
    assert set(fields(result.warnings)) == {"authors", "year", "abstract", "keywords"}


@pytest.mark.parametrize("id_value", [0, "", False])
def test_falsy_ids_are_accepted(validator, paper, id_value):
    paper["id"] = id_value
    assert "id" not in fields(validator.validate(paper).errors)


@pytest.mark.parametrize("title", ["", "   ", None])
def test_blank_title_is_an_error(validator, paper, title):
    paper["title"] = title
    result = validator.validate(paper)
    assert fields(result.errors) == ["title"]
    assert result.errors[0].message == "Title is required and cannot be empty"


def test_non_string_title_is_an_error(validator, paper):
    paper["title"] = 123
    result = validator.validate(paper)
    assert fields(result.errors) == ["title"]
    assert result.errors[0].value == 123


@pytest.mark.parametrize("date_added", ["2024-01-01", "yesterday", 1700000000000])
def test_non_iso_date_is_an_error(validator, paper, date_added):
    paper["dateAdded"] = date_added
    result = validator.validate(paper)
    assert fields(result.errors) == ["dateAdded"]
    assert result.errors[0].message == "Date added must be in ISO 8601 format"


def test_authors_must_be_a_list(validator, paper):
    paper["authors"] = "Kaiming He"
    result = validator.validate(paper)
    assert fields(result.errors) == ["authors"]


def test_author_entries_are_checked_individually(validator, paper):
    paper["authors"] = [
        {"fullName": "Kaiming He"},
        "Xiangyu Zhang",
        {"fullName": "  "},
        {"lastName": "Ren"},
    ]
    result = validator.validate(paper)
    assert fields(result.errors) == [
        "authors[1]",
        "authors[2].fullName",
        "authors[3].fullName",
    ]


def test_empty_author_list_is_accepted(validator, paper):
    paper["authors"] = []
    assert validator.validate(paper).valid


def test_missing_authors_is_a_warning(validator, paper):
    del paper["authors"]
    result = validator.validate(paper)
    assert result.valid
    assert fields(result.warnings) == ["authors"]


def test_short_doi_is_an_error_with_suggestion(validator, paper):
    paper["doi"] = "10.1109/CVPR.2016.90"
    result = validator.validate(paper)
    assert fields(result.errors) == ["doi"]
    assert result.errors[0].suggestion == "https://doi.org/10.1109/CVPR.2016.90"


def test_doi_registrant_must_use_ascii_digits(validator, paper):
    paper["doi"] = "https://doi.org/10.\u0661\u0661\u0660\u0669/CVPR.2016.90"
    result = validator.validate(paper)
    assert result.valid
    assert fields(result.warnings) == ["doi"]


def test_suspicious_doi_url_is_a_warning(validator, paper):
    paper["doi"] = "https://doi.org/not-a-doi"
    result = validator.validate(paper)
    assert result.valid
    assert fields(result.warnings) == ["doi"]
    assert result.warnings[0].severity == "warning"


@pytest.mark.parametrize("year", ["16", "2016a", 2016, "2016 ", "\u0662\u0660\u0662\u0664"])
def test_year_must_be_four_digit_string(validator, paper, year):
    paper["year"] = year
    assert fields(validator.validate(paper).errors) == ["year"]


@pytest.mark.parametrize(
    "field, value",
    [("itemType", "blogpost"), ("status", "done"), ("priority", "urgent"), ("status", 3)],
)
def test_enum_fields(validator, paper, field, value):
    paper[field] = value
    result = validator.validate(paper)
    assert fields(result.errors) == [field]
    assert result.errors[0].message.startswith(f"Invalid {field}. Must be one of: ")


def test_absent_enum_fields_are_fine(validator, paper):
    for key in ("itemType", "status", "priority"):
        del paper[key]
    assert validator.validate(paper).valid


@pytest.mark.parametrize("language", ["EN", "eng", "e"])
def test_language_code_is_a_warning(validator, paper, language):
    paper["language"] = language
    result = validator.validate(paper)
    assert result.valid
    assert fields(result.warnings) == ["language"]


def test_recommended_fields(validator, paper):
    del paper["year"]
    paper["abstract"] = ""
    paper["keywords"] = []
    result = validator.validate(paper)
    assert result.valid
    assert fields(result.warnings) == ["year", "abstract", "keywords"]


def test_result_serialization(validator, paper):
    paper["year"] = "16"
    data = validator.validate(paper).to_dict()
    assert data["valid"] is False
    assert data["schemaVersion"] == "2.0.0"
    assert data["errors"] == [
        {"field": "year", "message": "Year must be in YYYY format", "severity": "error", "value": "16"}
    ]


def test_injected_version_is_reported():
    result = PaperValidator("3.1.0").validate({})
    assert result.schema_version == "3.1.0"
