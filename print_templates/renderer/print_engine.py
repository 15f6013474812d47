"""Drive assembly and output for one print request."""
from __future__ import annotations

from typing import Callable, Mapping, Optional, Union

from print_templates.model.document_model import DocumentModel
from print_templates.model.elements import PageDescription
from print_templates.model.errors import PlatformError, ValidationError
from print_templates.parser.model_decoder import decode_payload
from print_templates.parser.page_assembler import PageAssembler
from print_templates.renderer.base import PageOutput
from print_templates.renderer.browser_print import BrowserPrintOutput
from print_templates.utils.logger import get_logger

LOGGER = get_logger(__name__)

OutputFactory = Callable[[], PageOutput]


class PrintEngine:
    """Assemble a page from a model and variables, then print it.

    Each call acquires its own output target from ``output_factory``; concurrent
    calls are not serialized here.
    """

    def __init__(
        self,
        output_factory: Optional[OutputFactory] = None,
        assembler: Optional[PageAssembler] = None,
    ) -> None:
        self.output_factory = output_factory or BrowserPrintOutput
        self.assembler = assembler or PageAssembler()

    def render(
        self,
        model: Union[DocumentModel, Mapping[str, object]],
        variables: Optional[Mapping[str, str]] = None,
    ) -> PageDescription:
        if isinstance(model, Mapping):
            result = decode_payload(model)
            if not result.ok:
                raise ValidationError(f"Invalid document: {result.error}")
            model = result.model

        page = self.assembler.assemble(model, variables or {})

        try:
            target = self.output_factory()
        except PlatformError:
            LOGGER.error("Output target unavailable for %r", page.title)
            raise
        except OSError as exc:
            LOGGER.error("Output target unavailable for %r: %s", page.title, exc)
            raise PlatformError(f"Cannot open output for {page.title!r}: {exc}", page.title) from exc

        try:
            target.render(page)
        finally:
            target.close()
        return page
