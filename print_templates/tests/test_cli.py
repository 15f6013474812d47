"""End-to-end tests for the command line entry point."""
import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from print_templates.main import main, parse_variables


class CommandLineTest(unittest.TestCase):
    """Drive ``main`` against a throwaway store directory."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.store = str(self.root / "store")

    def run_cli(self, *args):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(["--store", self.store, "--log-level", "WARNING", *args])
        return code, stdout.getvalue(), stderr.getvalue()

    def test_list_shows_bundled_documents(self) -> None:
        code, out, _ = self.run_cli("list")

        self.assertEqual(code, 0)
        self.assertIn("RECEITA ESPECIAL 1.0\tbundled", out)

    def test_import_then_list_and_export(self) -> None:
        source = self.root / "atestado.json"
        source.write_text(json.dumps({"title": "Atestado", "objects": []}), encoding="utf-8")

        code, out, _ = self.run_cli("import", str(source))
        self.assertEqual((code, out.strip()), (0, "Atestado"))

        _, listing, _ = self.run_cli("list", "--query", "atest")
        self.assertEqual(listing.strip(), "Atestado\tlocal\tAtestado")

        target = self.root / "export.json"
        code, _, _ = self.run_cli("export", "Atestado", "--output", str(target))
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(target.read_text(encoding="utf-8"))["title"], "Atestado")

    def test_render_to_html_with_variables(self) -> None:
        target = self.root / "receita.html"

        code, _, _ = self.run_cli(
            "render", "RECEITA ESPECIAL 1.0", "--var", "paciente=MARIA", "--html", str(target)
        )

        self.assertEqual(code, 0)
        markup = target.read_text(encoding="utf-8")
        self.assertIn("MARIA", markup)
        self.assertNotIn("{{paciente}}", markup)
        self.assertIn("{{idade}}", markup)

    def test_debug_dump(self) -> None:
        debug_dir = self.root / "debug"

        code, _, _ = self.run_cli("render", "RECEITA ESPECIAL 1.0", "--debug-dir", str(debug_dir))

        self.assertEqual(code, 0)
        dumped = json.loads((debug_dir / "page_description.json").read_text(encoding="utf-8"))
        self.assertEqual(dumped["orientation"], "landscape")
        self.assertGreater(len(dumped["commands"]), 0)

    def test_deleting_bundled_document_fails(self) -> None:
        code, _, err = self.run_cli("delete", "RECEITA ESPECIAL 1.0")

        self.assertEqual(code, 1)
        self.assertIn("RECEITA ESPECIAL 1.0", err)

    def test_duplicate_bundled_document(self) -> None:
        code, out, _ = self.run_cli("duplicate", "RECEITA ESPECIAL 1.0")

        self.assertEqual((code, out.strip()), (0, "RECEITA ESPECIAL 1.0 (cópia)"))

    def test_unknown_document_fails(self) -> None:
        code, _, err = self.run_cli("export", "Nada")

        self.assertEqual(code, 1)
        self.assertIn("error:", err)


class ParseVariablesTest(unittest.TestCase):
    """``--var`` arguments."""

    def test_bare_keys_get_braces(self) -> None:
        self.assertEqual(
            parse_variables(["paciente=ANA", "{{idade}}=30", "receita=a=b"]),
            {"{{paciente}}": "ANA", "{{idade}}": "30", "{{receita}}": "a=b"},
        )


if __name__ == '__main__':
    unittest.main()
