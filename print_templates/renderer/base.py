"""Output target interface shared by every page back end."""
from __future__ import annotations

from abc import ABC, abstractmethod

from print_templates.model.elements import PageDescription


class PageOutput(ABC):
    """A printable destination for one assembled page."""

    @abstractmethod
    def render(self, page: PageDescription) -> None:
        """Emit ``page`` to the destination."""

    def close(self) -> None:
        """Release the destination; file outputs have nothing to release."""
