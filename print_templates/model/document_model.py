"""Page template schema shared by the store, the catalog and the renderers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

PORTRAIT = "portrait"
LANDSCAPE = "landscape"

SOURCE_BUNDLED = "bundled"
SOURCE_LOCAL = "local"


@dataclass(slots=True)
class Geometry:
    """Page-local rectangle in pixels."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(slots=True)
class DocumentObject:
    """Positioned object on the page; text may carry ``{{placeholder}}`` tokens."""

    id: str
    type: str = "text"
    geometry: Geometry = field(default_factory=Geometry)
    bg_color: Optional[str] = None
    border_color: Optional[str] = None
    border_width: Optional[float] = None
    text: Optional[str] = None
    text_align: Optional[str] = None
    text_v_align: Optional[str] = None
    extra: Dict[str, object] = field(default_factory=dict)


@dataclass(slots=True)
class DocumentModel:
    """Printable page template as authored in the editor."""

    title: str = ""
    page_orientation: str = PORTRAIT
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    page_margin: Optional[float] = None
    background_image: Optional[str] = None
    background_opacity: Optional[float] = None
    content: str = ""
    objects: List[DocumentObject] = field(default_factory=list)
    total_pages: int = 1
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    version: Optional[str] = None
    extra: Dict[str, object] = field(default_factory=dict)


@dataclass(slots=True)
class DocumentInfo:
    """Named entry of the merged catalog."""

    name: str
    data: DocumentModel
    source: str

    @property
    def is_bundled(self) -> bool:
        return self.source == SOURCE_BUNDLED
