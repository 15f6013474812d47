"""Hand the page to the system print dialog through the default web browser."""
from __future__ import annotations

import os
import tempfile
import threading
import webbrowser
from pathlib import Path
from typing import Callable, Optional

from print_templates.model.elements import PageDescription
from print_templates.model.errors import PlatformError
from print_templates.renderer.base import PageOutput
from print_templates.renderer.html_renderer import build_html
from print_templates.utils.logger import get_logger

LOGGER = get_logger(__name__)

# The page calls window.print() this long after loading, then closes on afterprint.
PRINT_GRACE_DELAY_MS = 500
# The temporary page is removed once the browser has had time to load it.
CLEANUP_DELAY_SECONDS = 60.0


class BrowserPrintOutput(PageOutput):
    """Exclusive output target: one temporary HTML page per print request."""

    def __init__(
        self,
        browser: Optional[webbrowser.BaseBrowser] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        if browser is None:
            try:
                browser = webbrowser.get()
            except webbrowser.Error as exc:
                raise PlatformError(f"No browser available for printing: {exc}") from exc
        self._browser = browser
        self._timer_factory = timer_factory
        self._path: Optional[Path] = None

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def render(self, page: PageDescription) -> None:
        markup = build_html(page, auto_print_delay_ms=PRINT_GRACE_DELAY_MS)
        try:
            fd, name = tempfile.mkstemp(prefix="print-", suffix=".html")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(markup)
        except OSError as exc:
            raise PlatformError(f"Cannot prepare print page for {page.title!r}: {exc}", page.title) from exc
        self._path = Path(name)

        if not self._browser.open(self._path.as_uri(), new=1):
            self._remove()
            raise PlatformError(f"Browser refused to open the print page for {page.title!r}", page.title)
        LOGGER.info("Sent %r to the print dialog", page.title)

    def close(self) -> None:
        if self._path is None:
            return
        timer = self._timer_factory(CLEANUP_DELAY_SECONDS, self._remove)
        timer.daemon = True
        timer.start()

    def _remove(self) -> None:
        if self._path is not None:
            self._path.unlink(missing_ok=True)
            self._path = None
