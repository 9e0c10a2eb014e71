"""Field normalizers for author names, DOIs, dates and keyword lists.

Each normalizer accepts every representation a field has had in older
record versions and returns the canonical one.  They are pure: inputs are
never modified and no normalizer raises for bad input.
"""

import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from dateutil import parser as dtparser

from paperkeeper.models.paper import Diagnostic, Person
from paperkeeper.models.schema import DOI_PREFIX

# Canonical DOI URL: https://doi.org/10.XXXX/...
DOI_URL_RE = re.compile(r"^https://doi\.org/10\.[0-9]{4,}/\S+$")

_DOI_SCHEME_RE = re.compile(r"^doi:", re.IGNORECASE)
_DOI_RESOLVER_RE = re.compile(r"^https?://(dx\.)?doi\.org/", re.IGNORECASE)
_DOI_BARE_HOST_RE = re.compile(r"^doi\.org/", re.IGNORECASE)

# "A; B", "A, and B", "A and B"
_AUTHOR_SPLIT_RE = re.compile(r";\s*|,\s*and\s+|\s+and\s+", re.IGNORECASE)

_KEYWORD_SPLIT_RE = re.compile(r"[;,]\s*")

# Fills components missing from partial dates ("2021" → 2021-01-01)
_PARSE_DEFAULT = datetime(1970, 1, 1)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def to_iso(dt: datetime) -> str:
    """Format *dt* as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (naive values are UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}T{dt:%H:%M:%S}"
        f".{dt.microsecond // 1000:03d}Z"
    )


def now_iso(clock: Optional[Clock] = None) -> str:
    """Return the current instant in canonical ISO-8601 form."""
    return to_iso((clock or _utcnow)())


def _parse_date(value: Any) -> Optional[datetime]:
    """Best-effort conversion of a legacy date value to a datetime."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        # Epoch milliseconds, as written by browser clients
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return dtparser.parse(value, default=_PARSE_DEFAULT)
        except (ValueError, OverflowError):
            return None
    return None


def normalize_date(
    value: Any,
    diagnostics: Optional[list[Diagnostic]] = None,
    clock: Optional[Clock] = None,
    field: str = "dateAdded",
) -> str:
    """Normalize a date to an ISO-8601 date-time string.

    Absent values become the current instant.  Strings containing a ``T``
    are assumed to be ISO-8601 already and returned unchanged.  Anything
    that cannot be parsed is replaced by the current instant; when
    *diagnostics* is given a warning is appended so the loss of the
    original value is visible to the caller.

    Args:
        value: Raw date value (string, datetime, date or epoch milliseconds)
        diagnostics: Optional list collecting fallback warnings
        clock: Callable returning "now" (defaults to UTC wall clock)
        field: Field name reported in diagnostics

    Returns:
        ISO-8601 string, never empty
    """
    if value is None or value == "":
        return now_iso(clock)

    if isinstance(value, str) and "T" in value:
        return value

    parsed = _parse_date(value)
    if parsed is not None:
        try:
            return to_iso(parsed)
        except (OverflowError, ValueError):
            pass

    if diagnostics is not None:
        diagnostics.append(
            Diagnostic(
                level="warning",
                message="Unparseable date replaced with the current time",
                field=field,
                cause=repr(value),
            )
        )
    return now_iso(clock)


def is_iso_datetime(value: Any) -> bool:
    """Return True for strings that are ISO-8601 date-times with a ``T``."""
    if not isinstance(value, str) or "T" not in value:
        return False
    try:
        dtparser.isoparse(value)
    except (ValueError, OverflowError):
        return False
    return True


# ---------------------------------------------------------------------------
# DOIs
# ---------------------------------------------------------------------------

def normalize_doi(doi: Any) -> str:
    """Normalize a DOI to ``https://doi.org/<doi>``.

    Strips ``doi:``, resolver URLs (``http(s)://(dx.)doi.org/``) and a bare
    ``doi.org/`` host before adding the canonical prefix.  The suffix is not
    checked; see ``DOI_URL_RE`` for the strict form.
    """
    if not doi:
        return ""
    doi = str(doi).strip()
    if doi.startswith(DOI_PREFIX):
        return doi

    doi = _DOI_SCHEME_RE.sub("", doi).strip()
    doi = _DOI_RESOLVER_RE.sub("", doi)
    doi = _DOI_BARE_HOST_RE.sub("", doi)
    return f"{DOI_PREFIX}{doi}"


# ---------------------------------------------------------------------------
# Authors
# ---------------------------------------------------------------------------

def parse_author_name(name: Any) -> Optional[Person]:
    """Parse a single author name.

    "Doe, John" → John Doe; "John Doe" → first/last; "Ada B. Lovelace" keeps
    the middle part in the full name only; one word is a surname or an
    organisation.

    Returns:
        Person, or None for empty / non-string input
    """
    if not isinstance(name, str):
        return None
    trimmed = name.strip()
    if not trimmed:
        return None

    if "," in trimmed:
        parts = [p.strip() for p in trimmed.split(",")]
        last, first = parts[0], parts[1]
        if first and last:
            return Person(full_name=f"{first} {last}", first_name=first, last_name=last)
        trimmed = first or last
        if not trimmed:
            return None

    words = trimmed.split()
    if len(words) == 1:
        return Person(full_name=trimmed, last_name=trimmed)
    return Person(full_name=trimmed, first_name=words[0], last_name=words[-1])


def _repair_person(author: Mapping) -> Optional[dict[str, Any]]:
    """Return a copy of *author* with ``fullName`` set, or None if underivable."""
    full_name = author.get("fullName")
    if isinstance(full_name, str) and full_name.strip():
        return dict(author)

    first = author.get("firstName")
    last = author.get("lastName")
    derived = " ".join(str(p).strip() for p in (first, last) if p).strip()
    if not derived:
        return None
    return {**author, "fullName": derived}


def normalize_authors(authors: Any) -> list[dict[str, Any]]:
    """Normalize any legacy author representation to a list of Person dicts.

    Accepted shapes:
        * list of Person-like mappings (``fullName`` repaired if missing)
        * list of name strings
        * a single string delimited by ``;``, ``, and`` or ``and``
        * None → ``[]``

    Entries that yield no full name are dropped; order is preserved.
    """
    if authors is None:
        return []

    if isinstance(authors, str):
        tokens = _AUTHOR_SPLIT_RE.split(authors)
        people = (parse_author_name(t) for t in tokens)
        return [p.to_dict() for p in people if p is not None]

    if isinstance(authors, (list, tuple)):
        result = []
        for author in authors:
            if isinstance(author, Mapping):
                repaired = _repair_person(author)
                if repaired is not None:
                    result.append(repaired)
            elif isinstance(author, str):
                person = parse_author_name(author)
                if person is not None:
                    result.append(person.to_dict())
        return result

    return []


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------

def normalize_keywords(keywords: Any) -> list[str]:
    """Normalize keywords to a list of non-empty strings.

    Lists keep their non-blank string entries; strings are split on ``;``
    or ``,``.  Other input yields an empty list.
    """
    if isinstance(keywords, (list, tuple)):
        return [k for k in keywords if isinstance(k, str) and k.strip()]

    if isinstance(keywords, str):
        pieces = (k.strip() for k in _KEYWORD_SPLIT_RE.split(keywords))
        return [k for k in pieces if k]

    return []
