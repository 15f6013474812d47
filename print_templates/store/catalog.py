"""Read-only set of bundled document templates shipped with the package."""
from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from print_templates.model.document_model import DocumentModel
from print_templates.model.errors import ValidationError
from print_templates.parser.model_decoder import decode_bytes
from print_templates.utils.logger import get_logger

LOGGER = get_logger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
INDEX_FILENAME = "index.json"


class DocumentCatalog:
    """Ordered collection of bundled models keyed by document name."""

    def __init__(self, documents: Sequence[Tuple[str, DocumentModel]] = ()) -> None:
        self._documents: Dict[str, DocumentModel] = {}
        for name, model in documents:
            if name in self._documents:
                raise ValueError(f"Bundled document {name!r} is declared twice")
            self._documents[name] = deepcopy(model)

    @classmethod
    def load(cls, data_dir: Path) -> "DocumentCatalog":
        """Read the catalog index and every JSON template it lists."""
        index = json.loads((data_dir / INDEX_FILENAME).read_text(encoding="utf-8"))
        documents: List[Tuple[str, DocumentModel]] = []
        for entry in index.get("documents", []):
            name = entry["name"]
            result = decode_bytes((data_dir / entry["filename"]).read_bytes(), name)
            if not result.ok:
                raise ValidationError(f"Bundled document {name!r} is invalid: {result.error}", name)
            documents.append((name, result.model))
        LOGGER.debug("Loaded %d bundled documents from %s", len(documents), data_dir)
        return cls(documents)

    @classmethod
    def load_default(cls) -> "DocumentCatalog":
        return cls.load(DATA_DIR)

    def is_bundled(self, name: str) -> bool:
        return name in self._documents

    def get(self, name: str) -> Optional[DocumentModel]:
        """Return a copy of the bundled model, or None when ``name`` is not bundled."""
        model = self._documents.get(name)
        return deepcopy(model) if model is not None else None

    def names(self) -> List[str]:
        return list(self._documents)

    def items(self) -> Iterator[Tuple[str, DocumentModel]]:
        for name, model in self._documents.items():
            yield name, deepcopy(model)

    def __contains__(self, name: object) -> bool:
        return name in self._documents

    def __len__(self) -> int:
        return len(self._documents)
