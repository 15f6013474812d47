"""Intermediate page description produced by assembly and consumed by outputs."""
from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import List, Optional

ALIGN_START = "start"
ALIGN_CENTER = "center"
ALIGN_END = "end"


@dataclass(slots=True)
class DrawCommand:
    """Absolute positioned box with substituted text, to be painted in order."""

    object_id: str
    object_type: str
    x: float
    y: float
    width: float
    height: float
    text: str = ""
    align: str = ALIGN_START
    vertical_align: str = ALIGN_CENTER
    bg_color: Optional[str] = None
    border_color: Optional[str] = None
    border_width: float = 0.0

    @property
    def markup(self) -> str:
        """Text escaped for embedding into HTML/XML markup."""
        return html.escape(self.text, quote=False)


@dataclass(slots=True)
class PageDescription:
    """One physical page: size, typography, background and draw commands."""

    title: str
    orientation: str
    width_mm: float
    height_mm: float
    font_family: str
    font_size: float
    background_image: Optional[str] = None
    background_opacity: float = 1.0
    commands: List[DrawCommand] = field(default_factory=list)
