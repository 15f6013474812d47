"""Central logging configuration for the package."""
from __future__ import annotations

import logging
from typing import Optional, Union

_DEFAULT_LEVEL = logging.INFO
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=_DEFAULT_LEVEL, format=_FORMAT)
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Module logger; the root handler is installed on first use."""
    _configure_root()
    return logging.getLogger(name)


def set_level(level: Union[int, str]) -> None:
    """Adjust the root level, e.g. from the command line or environment.

    Unknown level names fall back to INFO.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = _DEFAULT_LEVEL
    _configure_root().setLevel(level)
