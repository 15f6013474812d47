"""Dump assembled pages to disk for inspection."""
from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from print_templates.model.elements import PageDescription
from print_templates.utils.logger import get_logger

LOGGER = get_logger(__name__)

PAGE_DUMP_FILENAME = "page_description.json"


class DebugDumper:
    """Writes the page description handed to the outputs as JSON."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def dump(self, page: PageDescription) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / PAGE_DUMP_FILENAME
        # asdict recurses into the draw commands.
        target.write_text(json.dumps(asdict(page), indent=2, ensure_ascii=False), encoding="utf-8")
        LOGGER.debug("Dumped %r with %d commands to %s", page.title, len(page.commands), target)
        return target
