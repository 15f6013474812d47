"""Entry-point for managing and printing document templates."""
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, Optional, Sequence

from print_templates.config import Settings
from print_templates.model.elements import PageDescription
from print_templates.model.errors import DocumentError
from print_templates.parser.page_assembler import PageAssembler
from print_templates.renderer.html_renderer import HtmlPageRenderer
from print_templates.renderer.pdf_renderer import PdfPageRenderer
from print_templates.renderer.print_engine import PrintEngine
from print_templates.store.catalog import DocumentCatalog
from print_templates.store.document_store import FileDocumentStore
from print_templates.store.merge_service import CatalogMergeService
from print_templates.utils.debug import DebugDumper
from print_templates.utils.logger import get_logger, set_level

LOGGER = get_logger(__name__)


def build_service(store_dir: Path) -> CatalogMergeService:
    """Wire the bundled catalog and the on-disk store together."""
    catalog = DocumentCatalog.load_default()
    store = FileDocumentStore(catalog, store_dir)
    return CatalogMergeService(catalog, store)


def parse_variables(pairs: Sequence[str]) -> Dict[str, str]:
    """Turn ``KEY=VALUE`` arguments into a placeholder map; bare keys get braces."""
    variables: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {pair!r}")
        if not key.startswith("{{"):
            key = f"{{{{{key}}}}}"
        variables[key] = value
    return variables


def render_outputs(
    service: CatalogMergeService,
    name: str,
    variables: Dict[str, str],
    *,
    html: Optional[Path] = None,
    pdf: Optional[Path] = None,
    print_page: bool = False,
) -> PageDescription:
    """Render ``name`` into every requested output; prints only when asked."""
    model = service.get(name).data
    page: Optional[PageDescription] = None
    if html is not None:
        page = PrintEngine(output_factory=lambda: HtmlPageRenderer(html)).render(model, variables)
    if pdf is not None:
        page = PrintEngine(output_factory=lambda: PdfPageRenderer(pdf)).render(model, variables)
    if print_page:
        page = PrintEngine().render(model, variables)
    if page is None:
        page = PageAssembler().assemble(model, variables)
    return page


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="print-templates",
        description="Manage printable document templates and print them with patient data",
    )
    parser.add_argument("--store", help="Directory holding local documents")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="List bundled and local documents")
    list_cmd.add_argument("--query", default="", help="Filter by name or title")

    import_cmd = commands.add_parser("import", help="Import a JSON document")
    import_cmd.add_argument("file", help="Path to the JSON document")

    export_cmd = commands.add_parser("export", help="Export a document as JSON")
    export_cmd.add_argument("name")
    export_cmd.add_argument("--output", help="Destination file (defaults to stdout)")

    duplicate_cmd = commands.add_parser("duplicate", help="Copy a document into a new local one")
    duplicate_cmd.add_argument("name")

    rename_cmd = commands.add_parser("rename", help="Rename a local document")
    rename_cmd.add_argument("old_name")
    rename_cmd.add_argument("new_name")

    delete_cmd = commands.add_parser("delete", help="Delete a local document")
    delete_cmd.add_argument("name")

    render_cmd = commands.add_parser("render", help="Fill placeholders and output the page")
    render_cmd.add_argument("name")
    render_cmd.add_argument("--var", action="append", default=[], metavar="KEY=VALUE", help="Placeholder value")
    render_cmd.add_argument("--html", help="Write the page as HTML")
    render_cmd.add_argument("--pdf", help="Write the page as PDF")
    render_cmd.add_argument("--print", dest="print_page", action="store_true", help="Open the print dialog")
    render_cmd.add_argument("--debug-dir", help="Dump the assembled page description here")
    return parser


def run(args: argparse.Namespace, settings: Settings) -> int:
    service = build_service(Path(args.store).expanduser() if args.store else settings.store_dir)

    if args.command == "list":
        for info in service.filter(args.query):
            print(f"{info.name}\t{info.source}\t{info.data.title}")
    elif args.command == "import":
        name = asyncio.run(service.import_file(args.file))
        print(name)
    elif args.command == "export":
        payload = service.export(args.name)
        if args.output:
            Path(args.output).write_bytes(payload)
        else:
            sys.stdout.write(payload.decode("utf-8") + "\n")
    elif args.command == "duplicate":
        print(service.duplicate(args.name))
    elif args.command == "rename":
        service.rename(args.old_name, args.new_name)
    elif args.command == "delete":
        service.delete(args.name)
    elif args.command == "render":
        page = render_outputs(
            service,
            args.name,
            parse_variables(args.var),
            html=Path(args.html) if args.html else None,
            pdf=Path(args.pdf) if args.pdf else None,
            print_page=args.print_page,
        )
        if args.debug_dir:
            DebugDumper(Path(args.debug_dir)).dump(page)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()
    set_level(args.log_level or settings.log_level)
    try:
        return run(args, settings)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    except DocumentError as exc:
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
