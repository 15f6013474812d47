"""Render an assembled page into a PDF file using ReportLab."""
from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import unquote_to_bytes

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from print_templates.model.elements import ALIGN_CENTER, ALIGN_END, ALIGN_START, DrawCommand, PageDescription
from print_templates.renderer.base import PageOutput
from print_templates.renderer.utils import TEXT_PADDING_PX
from print_templates.utils.logger import get_logger
from print_templates.utils.units import mm_to_points, px_to_points

LOGGER = get_logger(__name__)

LINE_HEIGHT = 1.2

# Families the editor offers, mapped onto the PDF standard fonts.
STANDARD_FONTS = {
    "arial": "Helvetica",
    "inter": "Helvetica",
    "helvetica": "Helvetica",
    "times new roman": "Times-Roman",
    "georgia": "Times-Roman",
    "times": "Times-Roman",
    "courier new": "Courier",
    "courier": "Courier",
}


def standard_font(family: str) -> str:
    return STANDARD_FONTS.get(family.strip().strip("'\"").lower(), "Helvetica")


def parse_color(value: Optional[str]) -> Optional[colors.Color]:
    """ReportLab colour for a CSS colour string; None for empty or transparent."""
    if not value or value.strip().lower() == "transparent":
        return None
    try:
        return colors.toColor(value.strip())
    except ValueError:
        LOGGER.warning("Ignoring unsupported colour %r", value)
        return None


def image_source(uri: str) -> Union[io.BytesIO, str]:
    """Turn a data URI into a readable buffer; anything else is a path or URL."""
    if not uri.startswith("data:"):
        return uri
    header, _, data = uri.partition(",")
    if header.endswith(";base64"):
        return io.BytesIO(base64.b64decode(data))
    return io.BytesIO(unquote_to_bytes(data))


class PdfPageRenderer(PageOutput):
    """Draw the page onto a single-page PDF document."""

    def __init__(self, output_path: Path) -> None:
        self._output_path = Path(output_path)

    def render(self, page: PageDescription) -> None:
        self._output_path.parent.mkdir(parents=True, exist_ok=True)
        page_width = mm_to_points(page.width_mm)
        page_height = mm_to_points(page.height_mm)
        pdf = canvas.Canvas(str(self._output_path), pagesize=(page_width, page_height))
        pdf.setTitle(page.title)

        if page.background_image:
            self._draw_background(pdf, page, page_width, page_height)

        font_name = standard_font(page.font_family)
        font_size = px_to_points(page.font_size)
        for command in page.commands:
            self._draw_command(pdf, command, page_height, font_name, font_size)

        pdf.showPage()
        pdf.save()
        LOGGER.info("Wrote PDF page %s", self._output_path.name)

    def _draw_background(self, pdf: canvas.Canvas, page: PageDescription, width: float, height: float) -> None:
        try:
            image = ImageReader(image_source(page.background_image))
        except (OSError, ValueError, binascii.Error) as exc:
            LOGGER.warning("Background image of %r cannot be loaded: %s", page.title, exc)
            return
        pdf.saveState()
        pdf.setFillAlpha(page.background_opacity)
        pdf.drawImage(image, 0, 0, width=width, height=height, mask="auto")
        pdf.restoreState()

    def _draw_command(
        self,
        pdf: canvas.Canvas,
        command: DrawCommand,
        page_height: float,
        font_name: str,
        font_size: float,
    ) -> None:
        left = px_to_points(command.x)
        width = px_to_points(command.width)
        height = px_to_points(command.height)
        bottom = page_height - px_to_points(command.y) - height

        fill = parse_color(command.bg_color)
        stroke = parse_color(command.border_color) if command.border_width else None
        if fill is not None or stroke is not None:
            pdf.saveState()
            if fill is not None:
                pdf.setFillColor(fill)
            if stroke is not None:
                pdf.setStrokeColor(stroke)
                pdf.setLineWidth(px_to_points(command.border_width))
            pdf.rect(left, bottom, width, height, stroke=int(stroke is not None), fill=int(fill is not None))
            pdf.restoreState()

        if command.text:
            self._draw_text(pdf, command, left, bottom, width, height, font_name, font_size)

    def _draw_text(
        self,
        pdf: canvas.Canvas,
        command: DrawCommand,
        left: float,
        bottom: float,
        width: float,
        height: float,
        font_name: str,
        font_size: float,
    ) -> None:
        pad_y, pad_x = (px_to_points(value) for value in TEXT_PADDING_PX)
        inner_width = max(width - 2 * pad_x, font_size)
        lines: List[str] = []
        for paragraph in command.text.split("\n"):
            lines.extend(simpleSplit(paragraph, font_name, font_size, inner_width) or [""])

        leading = font_size * LINE_HEIGHT
        block_height = leading * len(lines)
        top = bottom + height
        if command.vertical_align == ALIGN_START:
            block_top = top - pad_y
        elif command.vertical_align == ALIGN_END:
            block_top = bottom + pad_y + block_height
        else:
            block_top = bottom + (height + block_height) / 2

        pdf.saveState()
        pdf.setFillColor(colors.black)
        pdf.setFont(font_name, font_size)
        baseline = block_top - font_size
        for line in lines:
            if command.align == ALIGN_CENTER:
                pdf.drawCentredString(left + width / 2, baseline, line)
            elif command.align == ALIGN_END:
                pdf.drawRightString(left + width - pad_x, baseline, line)
            else:
                pdf.drawString(left + pad_x, baseline, line)
            baseline -= leading
        pdf.restoreState()
