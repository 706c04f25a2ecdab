from __future__ import annotations


class QueryValidationError(ValueError):
    """A caller passed an empty query, no owner, or an unusable limit or option."""


class NoteNotFoundError(KeyError):
    """No note with the given id belongs to the given owner."""


class UnsupportedDocumentError(ValueError):
    """The document extractor has no reader for the MIME type."""


__all__ = ["NoteNotFoundError", "QueryValidationError", "UnsupportedDocumentError"]
