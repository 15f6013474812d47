"""Runtime settings resolved from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_STORE_DIR = Path("~/.print_templates/documents")
DEFAULT_LOG_LEVEL = "INFO"


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None or value.strip() == "" else value.strip()


@dataclass(frozen=True)
class Settings:
    store_dir: Path
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "Settings":
        store_dir = _getenv_str("PRINT_TEMPLATES_STORE_DIR", str(DEFAULT_STORE_DIR))
        return cls(
            store_dir=Path(store_dir).expanduser(),
            log_level=_getenv_str("PRINT_TEMPLATES_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
