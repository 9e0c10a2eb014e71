"""Canonical paper-record schema constants.

These describe the *shape* a record must have once migrated.  The version
string here is only a default: services receive the version they enforce
through their constructors (see ``Settings.schema_version``).
"""

CURRENT_SCHEMA_VERSION = "2.0.0"

# Records without ``_schemaVersion`` predate versioning.
LEGACY_SCHEMA_VERSION = "1.0.0"

DOI_PREFIX = "https://doi.org/"

ITEM_TYPES = (
    "article",
    "inproceedings",
    "inbook",
    "incollection",
    "phdthesis",
    "mastersthesis",
    "techreport",
    "misc",
    "book",
    "proceedings",
)

STATUSES = ("to-read", "reading", "read", "archived")

PRIORITIES = ("low", "medium", "high")

DEFAULT_ITEM_TYPE = "article"

DEFAULTS = {
    "status": "to-read",
    "priority": "medium",
    "language": "en",
}

# Descriptive fields copied verbatim when present and not None
PASSTHROUGH_FIELDS = (
    "url",
    "abstract",
    "journal",
    "volume",
    "issue",
    "pages",
    "publisher",
    "issn",
    "isbn",
    "chapter",
    "status",
    "priority",
    "rating",
    "relevance",
    "keyPoints",
    "notes",
    "language",
    "citation",
    "pdf",
    "pdfPath",
    "pdfFilename",
    "hasPDF",
    "pdfSource",
    "tags",
    "collections",
)

# Legacy ``publicationType`` (lowercased) → ``itemType``
PUBLICATION_TYPE_MAP = {
    "conference": "inproceedings",
    "conference paper": "inproceedings",
    "conference proceedings": "inproceedings",
    "book": "book",
    "book chapter": "inbook",
    "chapter": "incollection",
    "thesis": "phdthesis",
    "phd thesis": "phdthesis",
    "doctoral thesis": "phdthesis",
    "dissertation": "phdthesis",
    "masters thesis": "mastersthesis",
    "master's thesis": "mastersthesis",
    "report": "techreport",
    "technical report": "techreport",
    "preprint": "misc",
    "working paper": "misc",
    "journal": "article",
    "journal article": "article",
    "article": "article",
}
