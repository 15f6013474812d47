"""Mutable persisted set of local document templates.

A store only knows how to read, write and remove raw records by key; decoding,
bundled-name protection and unique naming are shared by every backend through
:class:`DocumentStore`.
"""
from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote, unquote

from print_templates.model.document_model import DocumentModel
from print_templates.model.errors import ParseError, ReadOnlyDocumentError
from print_templates.parser.model_decoder import DecodeResult, decode_bytes, dump_model
from print_templates.store.catalog import DocumentCatalog
from print_templates.store.naming import SuffixPolicy, first_free_name
from print_templates.utils.logger import get_logger

LOGGER = get_logger(__name__)

KEY_PREFIX = "doc_model_"


def key_for(name: str) -> str:
    """Persisted key for ``name``; the name is used verbatim."""
    return f"{KEY_PREFIX}{name}"


def name_for(key: str) -> Optional[str]:
    if not key.startswith(KEY_PREFIX):
        return None
    return key[len(KEY_PREFIX):]


class DocumentStore(ABC):
    """Key-value record set holding local documents."""

    def __init__(self, catalog: DocumentCatalog) -> None:
        self.catalog = catalog

    # ------------------------------------------------------------------
    # Backend primitives
    @abstractmethod
    def keys(self) -> List[str]:
        """Return every persisted key in scan order."""

    @abstractmethod
    def read(self, key: str) -> Optional[bytes]:
        """Return the raw record for ``key`` or None when absent."""

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Atomically replace the record stored at ``key``."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove ``key``; absence is not an error."""

    # ------------------------------------------------------------------
    # Public API
    def list(self) -> List[Tuple[str, DocumentModel]]:
        """Return every decodable (name, model) pair; broken records are skipped."""
        documents: List[Tuple[str, DocumentModel]] = []
        for key in self.keys():
            name = name_for(key)
            if name is None:
                continue
            result = self._decode(key, name)
            if result is None:
                continue
            if not result.ok:
                LOGGER.warning("Skipping persisted document %r: %s", name, result.error)
                continue
            documents.append((name, result.model))
        return documents

    def get(self, name: str) -> Optional[DocumentModel]:
        result = self._decode(key_for(name), name)
        if result is None:
            return None
        if not result.ok:
            LOGGER.warning("Persisted document %r cannot be decoded: %s", name, result.error)
            return None
        return result.model

    def contains(self, name: str) -> bool:
        return self.read(key_for(name)) is not None

    def put(self, name: str, model: DocumentModel) -> None:
        """Overwrite the record stored under ``name`` with ``model``."""
        self.write(key_for(name), dump_model(model))
        LOGGER.info("Stored document %r", name)

    def delete(self, name: str) -> None:
        if self.catalog.is_bundled(name):
            raise ReadOnlyDocumentError(f"Document {name!r} is part of the system and cannot be deleted", name)
        self.remove(key_for(name))
        LOGGER.info("Deleted document %r", name)

    def generate_unique_name(self, base: str, suffix_policy: SuffixPolicy) -> str:
        """Return a name unused by both the catalog and this store."""
        return first_free_name(
            base,
            suffix_policy,
            lambda candidate: self.catalog.is_bundled(candidate) or self.contains(candidate),
        )

    def _decode(self, key: str, name: str) -> Optional[DecodeResult]:
        raw = self.read(key)
        if raw is None:
            return None
        return decode_bytes(raw, name, error_type=ParseError)


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed store; scan order is insertion order."""

    def __init__(self, catalog: DocumentCatalog, records: Optional[Dict[str, bytes]] = None) -> None:
        super().__init__(catalog)
        self._records: Dict[str, bytes] = dict(records or {})

    def keys(self) -> List[str]:
        return list(self._records)

    def read(self, key: str) -> Optional[bytes]:
        return self._records.get(key)

    def write(self, key: str, data: bytes) -> None:
        self._records[key] = bytes(data)

    def remove(self, key: str) -> None:
        self._records.pop(key, None)


class FileDocumentStore(DocumentStore):
    """One JSON file per key inside ``directory``; scan order is file-name order."""

    SUFFIX = ".json"

    def __init__(self, catalog: DocumentCatalog, directory: Path) -> None:
        super().__init__(catalog)
        self.directory = Path(directory)

    def keys(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return [
            unquote(path.name[: -len(self.SUFFIX)])
            for path in sorted(self.directory.iterdir())
            if path.is_file() and path.name.endswith(self.SUFFIX)
        ]

    def read(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def write(self, key: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    def _path_for(self, key: str) -> Path:
        # Percent-encoded so separators and non-ASCII survive any filesystem.
        return self.directory / f"{quote(key, safe=' ()')}{self.SUFFIX}"
