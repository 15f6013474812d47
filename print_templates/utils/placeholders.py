"""Literal placeholder substitution for object text."""
from __future__ import annotations

import re
from typing import List, Mapping, Optional

PLACEHOLDER_PATTERN = re.compile(r"\{\{[^{}]+\}\}")


def substitute(text: Optional[str], variables: Mapping[str, str]) -> str:
    """Replace every occurrence of each key in ``text`` with its mapped value.

    Keys are matched literally (regex metacharacters escaped); keys are applied in
    mapping order and placeholders without a mapping are left untouched.
    """
    result = text or ""
    for key, value in variables.items():
        if not key:
            continue
        replacement = "" if value is None else str(value)
        result = re.sub(re.escape(key), lambda _match: replacement, result)
    return result


def find_placeholders(text: Optional[str]) -> List[str]:
    """Return the ``{{...}}`` tokens present in ``text`` in order of appearance."""
    return PLACEHOLDER_PATTERN.findall(text or "")
