"""Combine bundled and local documents into one ordered, addressable set."""
from __future__ import annotations

import asyncio
from copy import deepcopy
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Union

from print_templates.model.document_model import (
    SOURCE_BUNDLED,
    SOURCE_LOCAL,
    DocumentInfo,
    DocumentModel,
)
from print_templates.model.errors import NotFoundError, ReadOnlyDocumentError, ValidationError
from print_templates.parser.model_decoder import decode_bytes, dump_model
from print_templates.store.catalog import DocumentCatalog
from print_templates.store.document_store import DocumentStore
from print_templates.store.naming import COPY_SUFFIX, IMPORT_SUFFIX
from print_templates.utils.logger import get_logger

LOGGER = get_logger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DEFAULT_BASE_NAME = "Documento"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def effective_timestamp(model: DocumentModel) -> datetime:
    """updatedAt, else createdAt, else the epoch start."""
    return parse_timestamp(model.updated_at) or parse_timestamp(model.created_at) or EPOCH


class CatalogMergeService:
    """Addressable view over the catalog and the store with bundled-wins precedence."""

    def __init__(
        self,
        catalog: DocumentCatalog,
        store: DocumentStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self._clock = clock

    # ------------------------------------------------------------------
    # Listing
    def merge(self) -> List[DocumentInfo]:
        """Bundled entries in catalog order, then local ones newest first."""
        bundled = [DocumentInfo(name, model, SOURCE_BUNDLED) for name, model in self.catalog.items()]
        local = [
            DocumentInfo(name, model, SOURCE_LOCAL)
            for name, model in self.store.list()
            if not self.catalog.is_bundled(name)
        ]
        # list.sort is stable, so equal timestamps keep the store's scan order.
        local.sort(key=lambda info: effective_timestamp(info.data), reverse=True)
        return bundled + local

    def filter(self, query: str) -> List[DocumentInfo]:
        """Case-insensitive substring match on name or title, in merge order."""
        needle = (query or "").casefold()
        return [
            info
            for info in self.merge()
            if needle in info.name.casefold() or needle in (info.data.title or "").casefold()
        ]

    def get(self, name: str) -> DocumentInfo:
        model = self.catalog.get(name)
        if model is not None:
            return DocumentInfo(name, model, SOURCE_BUNDLED)
        model = self.store.get(name)
        if model is None:
            raise NotFoundError(f"Document {name!r} not found", name)
        return DocumentInfo(name, model, SOURCE_LOCAL)

    # ------------------------------------------------------------------
    # Mutations
    def import_document(self, raw: Union[bytes, str], suggested_base_name: Optional[str] = None) -> str:
        """Store an interchange payload under a fresh name and return that name."""
        result = decode_bytes(raw, suggested_base_name)
        if not result.ok:
            raise result.error
        model = result.model
        base = model.title or _strip_json_suffix(suggested_base_name) or DEFAULT_BASE_NAME
        name = self.store.generate_unique_name(base, IMPORT_SUFFIX)
        self.store.put(name, model)
        LOGGER.info("Imported document %r", name)
        return name

    async def import_file(
        self,
        path: Union[str, Path],
        on_complete: Optional[Callable[[str], None]] = None,
    ) -> str:
        """Read ``path`` off the event loop, import it and notify ``on_complete``."""
        path = Path(path)
        raw = await asyncio.to_thread(path.read_bytes)
        name = self.import_document(raw, path.name)
        if on_complete is not None:
            on_complete(name)
        return name

    def duplicate(self, name: str) -> str:
        """Copy ``name`` (bundled or local) into a new editable local document."""
        source = self.get(name)
        copy = deepcopy(source.data)
        new_name = self.store.generate_unique_name(name, COPY_SUFFIX)
        stamp = format_timestamp(self._clock())
        copy.title = new_name
        copy.created_at = stamp
        copy.updated_at = stamp
        self.store.put(new_name, copy)
        LOGGER.info("Duplicated %r into %r", name, new_name)
        return new_name

    def export(self, name: str) -> bytes:
        return dump_model(self.get(name).data)

    def save(self, name: str, model: DocumentModel) -> None:
        """Overwrite a local document with ``model``, stamping updatedAt."""
        self._ensure_writable(name)
        stored = deepcopy(model)
        stored.updated_at = format_timestamp(self._clock())
        if stored.created_at is None:
            stored.created_at = stored.updated_at
        self.store.put(name, stored)

    def rename(self, old_name: str, new_name: str) -> None:
        if old_name == new_name:
            return
        self._ensure_writable(old_name)
        self._ensure_writable(new_name)
        if not new_name or not new_name.strip():
            raise ValidationError("Document name cannot be empty", new_name)
        model = self.store.get(old_name)
        if model is None:
            raise NotFoundError(f"Document {old_name!r} not found", old_name)
        if self.store.contains(new_name):
            raise ValidationError(f"Document {new_name!r} already exists", new_name)
        self.store.put(new_name, model)
        self.store.delete(old_name)
        LOGGER.info("Renamed %r to %r", old_name, new_name)

    def delete(self, name: str) -> None:
        self.store.delete(name)

    def _ensure_writable(self, name: str) -> None:
        if self.catalog.is_bundled(name):
            raise ReadOnlyDocumentError(f"Document {name!r} is part of the system and cannot be modified", name)


def _strip_json_suffix(name: Optional[str]) -> Optional[str]:
    if name and name.lower().endswith(".json"):
        return name[: -len(".json")]
    return name
