"""Utility functions."""

from paperkeeper.utils.text import (
    is_iso_datetime,
    normalize_authors,
    normalize_date,
    normalize_doi,
    normalize_keywords,
    now_iso,
    parse_author_name,
)

__all__ = [
    "is_iso_datetime",
    "normalize_authors",
    "normalize_date",
    "normalize_doi",
    "normalize_keywords",
    "now_iso",
    "parse_author_name",
]
