"""Typed failures raised by the catalog, the store and the print engine."""
from __future__ import annotations

from typing import Optional


class DocumentError(Exception):
    """Base class; carries the offending document name when there is one."""

    def __init__(self, message: str, name: Optional[str] = None) -> None:
        super().__init__(message)
        self.name = name


class ValidationError(DocumentError, ValueError):
    """Malformed import payload or a model whose ``objects`` is not a list."""


class NotFoundError(DocumentError, LookupError):
    """Operation on a name absent from the merged set."""


class ReadOnlyDocumentError(DocumentError, PermissionError):
    """Delete or overwrite attempted on a bundled document."""


class PlatformError(DocumentError, OSError):
    """The printable output target could not be acquired."""


class ParseError(DocumentError, ValueError):
    """A single persisted record could not be decoded."""
