"""Turn a document model plus a variable map into positioned draw commands."""
from __future__ import annotations

import math
from typing import Mapping, Optional, Tuple

from print_templates.model.document_model import LANDSCAPE, DocumentModel, DocumentObject
from print_templates.model.elements import (
    ALIGN_CENTER,
    ALIGN_END,
    ALIGN_START,
    DrawCommand,
    PageDescription,
)
from print_templates.model.errors import ValidationError
from print_templates.utils.logger import get_logger
from print_templates.utils.placeholders import find_placeholders, substitute

LOGGER = get_logger(__name__)

A4_SHORT_EDGE_MM = 210.0
A4_LONG_EDGE_MM = 297.0
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_FONT_SIZE_PX = 12.0
DEFAULT_TITLE = "Documento"


def page_size_mm(orientation: Optional[str]) -> Tuple[float, float]:
    """(width, height) of the single supported paper size for ``orientation``."""
    if orientation == LANDSCAPE:
        return A4_LONG_EDGE_MM, A4_SHORT_EDGE_MM
    return A4_SHORT_EDGE_MM, A4_LONG_EDGE_MM


def horizontal_alignment(text_align: Optional[str]) -> str:
    if text_align == "right":
        return ALIGN_END
    if text_align == "center":
        return ALIGN_CENTER
    return ALIGN_START


def vertical_alignment(text_v_align: Optional[str]) -> str:
    if text_v_align == "top":
        return ALIGN_START
    if text_v_align == "bottom":
        return ALIGN_END
    return ALIGN_CENTER


class PageAssembler:
    """Pure assembly step: no I/O, the same input always yields the same page."""

    def assemble(self, model: DocumentModel, variables: Optional[Mapping[str, str]] = None) -> PageDescription:
        objects = getattr(model, "objects", None)
        if not isinstance(objects, (list, tuple)):
            raise ValidationError("Invalid document: 'objects' is missing or not a list", getattr(model, "title", None))

        variables = variables or {}
        width_mm, height_mm = page_size_mm(model.page_orientation)
        page = PageDescription(
            title=model.title or DEFAULT_TITLE,
            orientation=LANDSCAPE if model.page_orientation == LANDSCAPE else "portrait",
            width_mm=width_mm,
            height_mm=height_mm,
            font_family=model.font_family or DEFAULT_FONT_FAMILY,
            font_size=_finite(model.font_size) or DEFAULT_FONT_SIZE_PX,
            background_image=model.background_image or None,
            background_opacity=_opacity(model.background_opacity),
        )
        for obj in objects:
            page.commands.append(self._command_for(obj, variables))

        LOGGER.debug("Assembled %r with %d draw commands", page.title, len(page.commands))
        return page

    def _command_for(self, obj: DocumentObject, variables: Mapping[str, str]) -> DrawCommand:
        text = substitute(obj.text, variables)
        unresolved = find_placeholders(text)
        if unresolved:
            LOGGER.debug("Object %s keeps unresolved placeholders %s", obj.id, unresolved)
        geometry = obj.geometry
        return DrawCommand(
            object_id=obj.id,
            object_type=obj.type,
            x=_finite(geometry.x) or 0.0,
            y=_finite(geometry.y) or 0.0,
            width=_finite(geometry.width) or 0.0,
            height=_finite(geometry.height) or 0.0,
            text=text,
            align=horizontal_alignment(obj.text_align),
            vertical_align=vertical_alignment(obj.text_v_align),
            bg_color=obj.bg_color,
            border_color=obj.border_color,
            border_width=_finite(obj.border_width) or 0.0,
        )


def _finite(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value


def _opacity(value: Optional[float]) -> float:
    value = _finite(value)
    if value is None:
        return 1.0
    return min(max(value, 0.0), 100.0) / 100.0
