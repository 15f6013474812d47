"""Collision-free name generation for imported and duplicated documents."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator


@dataclass(frozen=True, slots=True)
class SuffixPolicy:
    """How candidate names are spelled: an unnumbered first try, then a counter."""

    first: str
    numbered: str

    def candidates(self, base: str) -> Iterator[str]:
        yield self.first.format(base=base)
        counter = 1
        while True:
            yield self.numbered.format(base=base, n=counter)
            counter += 1


IMPORT_SUFFIX = SuffixPolicy(first="{base}", numbered="{base} ({n})")
COPY_SUFFIX = SuffixPolicy(first="{base} (cópia)", numbered="{base} (cópia {n})")


def first_free_name(base: str, policy: SuffixPolicy, is_taken: Callable[[str], bool]) -> str:
    """Return the first candidate of ``policy`` for which ``is_taken`` is false."""
    for candidate in policy.candidates(base):
        if not is_taken(candidate):
            return candidate
    raise AssertionError("unreachable: candidate generator is infinite")  # pragma: no cover
