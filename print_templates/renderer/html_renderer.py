"""Render an assembled page into a standalone HTML document."""
from __future__ import annotations

import html
from pathlib import Path

from print_templates.model.elements import DrawCommand, PageDescription
from print_templates.renderer.base import PageOutput
from print_templates.renderer.utils import command_to_css, css_declarations, css_font_family

AUTO_PRINT_SCRIPT = """
  <script>
    window.addEventListener("load", function () {
      setTimeout(function () { window.print(); }, %d);
    });
    window.addEventListener("afterprint", function () { window.close(); });
  </script>"""


def build_html(page: PageDescription, *, auto_print_delay_ms: int | None = None) -> str:
    """Produce an absolutely positioned HTML page sized to the physical paper."""
    width = f"{page.width_mm:g}mm"
    height = f"{page.height_mm:g}mm"
    font_family = css_font_family(page.font_family)
    layers = []
    if page.background_image:
        layers.append(
            f'    <img class="page-background" alt="" src="{html.escape(page.background_image)}"'
            f' style="opacity: {page.background_opacity:g}" />'
        )
    layers.extend(_command_to_div(command) for command in page.commands)
    body = "\n".join(layers)
    script = AUTO_PRINT_SCRIPT % auto_print_delay_ms if auto_print_delay_ms is not None else ""
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8" />
  <title>{html.escape(page.title)}</title>
  <style>
    @page {{ size: {width} {height}; margin: 0; }}
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    html, body {{ width: {width}; height: {height}; }}
    body {{ -webkit-print-color-adjust: exact; print-color-adjust: exact; }}
    .page {{ position: relative; width: {width}; height: {height}; overflow: hidden;
             font-family: {font_family}; font-size: {page.font_size:g}px; }}
    .page-background {{ position: absolute; left: 0; top: 0; width: 100%; height: 100%; object-fit: fill; }}
    .page-object {{ position: absolute; display: flex; white-space: pre-wrap; overflow: hidden; }}
    @media print {{ .page {{ page-break-after: avoid; }} }}
  </style>{script}
</head>
<body>
  <div class="page">
{body}
  </div>
</body>
</html>
"""


def _command_to_div(command: DrawCommand) -> str:
    style = html.escape(css_declarations(command_to_css(command)))
    return (
        f'    <div class="page-object" data-object-id="{html.escape(command.object_id)}"'
        f' style="{style}">{command.markup}</div>'
    )


class HtmlPageRenderer(PageOutput):
    """Write the page as an HTML file."""

    def __init__(self, output_path: Path) -> None:
        self._output_path = Path(output_path)

    def render(self, page: PageDescription) -> None:
        self._output_path.parent.mkdir(parents=True, exist_ok=True)
        self._output_path.write_text(build_html(page), encoding="utf-8")
