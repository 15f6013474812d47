"""Common helpers shared by renderer implementations."""
from __future__ import annotations

import re
from typing import Dict

from print_templates.model.elements import ALIGN_CENTER, ALIGN_END, DrawCommand

_FLEX_ALIGNMENT = {ALIGN_CENTER: "center", ALIGN_END: "flex-end"}

TEXT_PADDING_PX = (4, 8)

_UNSAFE_FONT_CHARS = re.compile(r"[^\w \-]")


def flex_alignment(alignment: str) -> str:
    return _FLEX_ALIGNMENT.get(alignment, "flex-start")


def command_to_css(command: DrawCommand) -> Dict[str, str]:
    """Convert a draw command into absolute-positioning CSS properties."""
    vertical_padding, horizontal_padding = TEXT_PADDING_PX
    return {
        "left": f"{command.x}px",
        "top": f"{command.y}px",
        "width": f"{command.width}px",
        "height": f"{command.height}px",
        "background-color": command.bg_color or "transparent",
        "border": f"{command.border_width}px solid {command.border_color or 'transparent'}",
        "align-items": flex_alignment(command.vertical_align),
        "justify-content": flex_alignment(command.align),
        "padding": f"{vertical_padding}px {horizontal_padding}px",
    }


def css_declarations(css: Dict[str, str]) -> str:
    return "; ".join(f"{key}: {value}" for key, value in css.items())


def css_font_family(family: str) -> str:
    """Quoted family name safe inside a CSS declaration, with a generic fallback.

    Only letters, digits, spaces, hyphens and underscores survive.
    """
    cleaned = " ".join(_UNSAFE_FONT_CHARS.sub("", family or "").split())
    if not cleaned:
        return "sans-serif"
    return f"'{cleaned}', sans-serif"
