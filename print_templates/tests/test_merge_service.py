"""Tests for the catalog merge service."""
import asyncio
import json
import tempfile
import unittest
from copy import deepcopy
from datetime import datetime, timezone
from pathlib import Path

from print_templates.model.document_model import (
    SOURCE_BUNDLED,
    SOURCE_LOCAL,
    DocumentModel,
    DocumentObject,
    Geometry,
)
from print_templates.model.errors import NotFoundError, ValidationError
from print_templates.parser.model_decoder import decode_bytes
from print_templates.store.catalog import DocumentCatalog
from print_templates.store.document_store import InMemoryDocumentStore
from print_templates.store.merge_service import (
    CatalogMergeService,
    effective_timestamp,
    format_timestamp,
    parse_timestamp,
)

FIXED_NOW = datetime(2026, 5, 4, 13, 30, 0, tzinfo=timezone.utc)


def bundled_model(title: str) -> DocumentModel:
    return DocumentModel(
        title=title,
        page_orientation="landscape",
        objects=[
            DocumentObject(
                id="paciente",
                type="rectangle",
                geometry=Geometry(10, 10, 200, 30),
                text="Paciente: {{paciente}}",
                extra={"mode": "floating"},
            )
        ],
        created_at="2025-01-01T00:00:00.000Z",
        updated_at="2025-01-01T00:00:00.000Z",
    )


class MergeServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.catalog = DocumentCatalog(
            [("RECEITA", bundled_model("RECEITA")), ("ATESTADO", bundled_model("ATESTADO"))]
        )
        self.store = InMemoryDocumentStore(self.catalog)
        self.service = CatalogMergeService(self.catalog, self.store, clock=lambda: FIXED_NOW)


class MergeTest(MergeServiceTestCase):
    """Union of catalog and store with bundled-wins precedence."""

    def test_bundled_first_in_catalog_order(self):
        self.store.put("Local", DocumentModel(title="Local", updated_at="2030-01-01T00:00:00Z"))

        merged = self.service.merge()

        self.assertEqual([info.name for info in merged], ["RECEITA", "ATESTADO", "Local"])
        self.assertEqual([info.source for info in merged], [SOURCE_BUNDLED, SOURCE_BUNDLED, SOURCE_LOCAL])

    def test_bundled_masks_local_with_same_name(self):
        self.store.put("RECEITA", DocumentModel(title="sombra"))

        merged = self.service.merge()
        names = [info.name for info in merged]

        self.assertEqual(len(names), len(set(names)))
        receita = merged[0]
        self.assertEqual(receita.source, SOURCE_BUNDLED)
        self.assertEqual(receita.data.title, "RECEITA")
        self.assertTrue(self.store.contains("RECEITA"))

    def test_local_sorted_by_effective_timestamp_descending(self):
        self.store.put("antigo", DocumentModel(created_at="2024-01-01T00:00:00Z"))
        self.store.put("sem data", DocumentModel())
        self.store.put("novo", DocumentModel(updated_at="2025-06-01T00:00:00Z", created_at="2020-01-01T00:00:00Z"))
        self.store.put("medio", DocumentModel(updated_at="2025-01-01T00:00:00Z"))

        local = [info.name for info in self.service.merge() if info.source == SOURCE_LOCAL]

        self.assertEqual(local, ["novo", "medio", "antigo", "sem data"])

    def test_ties_keep_scan_order(self):
        for name in ("b", "a", "c"):
            self.store.put(name, DocumentModel(updated_at="2025-01-01T00:00:00Z"))
        self.store.put("x", DocumentModel())
        self.store.put("y", DocumentModel(updated_at="nao e data"))

        local = [info.name for info in self.service.merge() if info.source == SOURCE_LOCAL]

        self.assertEqual(local, ["b", "a", "c", "x", "y"])

    def test_corrupted_record_does_not_break_merge(self):
        self.store.write("doc_model_Quebrado", b"][")
        self.store.put("Valido", DocumentModel(title="Valido"))

        with self.assertLogs("print_templates.store.document_store", level="WARNING"):
            names = [info.name for info in self.service.merge()]

        self.assertEqual(names, ["RECEITA", "ATESTADO", "Valido"])


class FilterTest(MergeServiceTestCase):
    """Case-insensitive search over name and title."""

    def test_matches_name_or_title_case_insensitively(self):
        self.store.put("meu laudo", DocumentModel(title="Exame"))
        self.store.put("outro", DocumentModel(title="Receita azul"))

        self.assertEqual([info.name for info in self.service.filter("LAUDO")], ["meu laudo"])
        self.assertEqual([info.name for info in self.service.filter("receita")], ["RECEITA", "outro"])

    def test_empty_query_returns_merge_order(self):
        self.store.put("x", DocumentModel())

        self.assertEqual(
            [info.name for info in self.service.filter("")],
            [info.name for info in self.service.merge()],
        )


class ImportTest(MergeServiceTestCase):
    """Importing interchange payloads."""

    PAYLOAD = json.dumps({"title": "Teste", "objects": []}).encode("utf-8")

    def test_import_uses_title(self):
        self.assertEqual(self.service.import_document(self.PAYLOAD, "arquivo.json"), "Teste")
        self.assertTrue(self.store.contains("Teste"))

    def test_repeated_imports_get_numbered_names(self):
        self.store.put("Teste", DocumentModel(title="Teste"))

        first = self.service.import_document(self.PAYLOAD, "Teste.json")
        second = self.service.import_document(self.PAYLOAD, "Teste.json")

        self.assertEqual(first, "Teste (1)")
        self.assertEqual(second, "Teste (2)")

    def test_import_never_overwrites_bundled_name(self):
        payload = json.dumps({"title": "RECEITA", "objects": []}).encode("utf-8")

        self.assertEqual(self.service.import_document(payload), "RECEITA (1)")

    def test_untitled_import_falls_back_to_file_name(self):
        payload = json.dumps({"objects": []}).encode("utf-8")

        self.assertEqual(self.service.import_document(payload, "modelo.json"), "modelo")
        self.assertEqual(self.service.import_document(payload), "Documento")

    def test_malformed_payloads_are_rejected(self):
        for raw in (b"{not json", b"[]", json.dumps({"title": "x", "objects": "nope"}).encode("utf-8")):
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError):
                    self.service.import_document(raw, "x.json")
        self.assertEqual(self.store.list(), [])

    def test_import_with_out_of_range_numbers_is_stored(self):
        raw = b'{"title": "Limite", "objects": [], "totalPages": 1e999, "fontSize": NaN}'

        name = self.service.import_document(raw, "limite.json")

        self.assertEqual(name, "Limite")
        self.assertEqual(self.store.get(name).total_pages, 1)
        self.assertNotIn(b"NaN", self.service.export(name))

    def test_export_of_import_round_trips(self):
        payload = json.dumps({
            "title": "Completo",
            "pageOrientation": "landscape",
            "objects": [{"id": "a", "type": "text", "x": 1, "y": 2, "width": 3, "height": 4, "text": "{{idade}}"}],
            "custom": {"nested": [1, 2]},
        }).encode("utf-8")

        name = self.service.import_document(payload)
        exported = self.service.export(name)

        self.assertEqual(decode_bytes(exported).model, self.store.get(name))
        self.assertEqual(json.loads(exported)["custom"], {"nested": [1, 2]})

    def test_import_file_reads_asynchronously_and_notifies(self):
        received = []
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "Modelo Novo.json"
            path.write_bytes(json.dumps({"objects": []}).encode("utf-8"))

            name = asyncio.run(self.service.import_file(path, on_complete=received.append))

        self.assertEqual(name, "Modelo Novo")
        self.assertEqual(received, ["Modelo Novo"])
        self.assertTrue(self.store.contains("Modelo Novo"))


class DuplicateExportTest(MergeServiceTestCase):
    """Duplicate and export by name."""

    def test_duplicate_bundled_creates_local_copy(self):
        new_name = self.service.duplicate("RECEITA")

        self.assertEqual(new_name, "RECEITA (cópia)")
        original = self.catalog.get("RECEITA")
        copy = self.store.get(new_name)
        self.assertEqual(copy.title, new_name)
        self.assertEqual(copy.created_at, "2026-05-04T13:30:00.000Z")
        self.assertEqual(copy.updated_at, copy.created_at)

        expected = deepcopy(original)
        expected.title = copy.title
        expected.created_at = copy.created_at
        expected.updated_at = copy.updated_at
        self.assertEqual(copy, expected)
        self.assertEqual(self.catalog.get("RECEITA"), original)

    def test_second_duplicate_is_numbered(self):
        self.service.duplicate("RECEITA")

        self.assertEqual(self.service.duplicate("RECEITA"), "RECEITA (cópia 1)")

    def test_duplicate_local_document(self):
        self.store.put("Meu", DocumentModel(title="Meu", content="texto"))

        new_name = self.service.duplicate("Meu")

        self.assertEqual(self.service.get(new_name).source, SOURCE_LOCAL)
        self.assertEqual(self.store.get(new_name).content, "texto")

    def test_duplicate_missing_raises_not_found(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.service.duplicate("Nada")
        self.assertEqual(ctx.exception.name, "Nada")

    def test_export_is_side_effect_free(self):
        before = self.store.keys()

        payload = self.service.export("RECEITA")

        self.assertEqual(json.loads(payload)["title"], "RECEITA")
        self.assertEqual(self.store.keys(), before)

    def test_export_missing_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.service.export("Nada")


class SaveRenameDeleteTest(MergeServiceTestCase):
    """Mutations delegated to the store."""

    def test_save_stamps_updated_at(self):
        self.service.save("Meu", DocumentModel(title="Meu"))

        stored = self.store.get("Meu")
        self.assertEqual(stored.updated_at, "2026-05-04T13:30:00.000Z")
        self.assertEqual(stored.created_at, stored.updated_at)

    def test_save_over_bundled_is_refused(self):
        with self.assertRaises(PermissionError):
            self.service.save("RECEITA", DocumentModel())

    def test_rename_moves_record(self):
        self.store.put("velho", DocumentModel(title="T"))

        self.service.rename("velho", "novo")

        self.assertFalse(self.store.contains("velho"))
        self.assertEqual(self.store.get("novo").title, "T")

    def test_rename_rules(self):
        self.store.put("a", DocumentModel())
        self.store.put("b", DocumentModel())

        with self.assertRaises(PermissionError):
            self.service.rename("RECEITA", "x")
        with self.assertRaises(PermissionError):
            self.service.rename("a", "ATESTADO")
        with self.assertRaises(NotFoundError):
            self.service.rename("inexistente", "x")
        with self.assertRaises(ValidationError):
            self.service.rename("a", "b")
        with self.assertRaises(ValidationError):
            self.service.rename("a", "  ")
        self.assertTrue(self.store.contains("a"))

    def test_delete_local(self):
        self.store.put("a", DocumentModel())

        self.service.delete("a")

        self.assertNotIn("a", [info.name for info in self.service.merge()])

    def test_delete_bundled_is_a_permission_error(self):
        with self.assertRaises(PermissionError) as ctx:
            self.service.delete("RECEITA")
        self.assertIn("RECEITA", str(ctx.exception))


class TimestampTest(unittest.TestCase):
    """Timestamp helpers used for ordering and stamping."""

    def test_format_matches_javascript_iso_strings(self):
        self.assertEqual(format_timestamp(FIXED_NOW), "2026-05-04T13:30:00.000Z")

    def test_parse_accepts_z_suffix_and_naive_values(self):
        self.assertEqual(parse_timestamp("2026-05-04T13:30:00.000Z"), FIXED_NOW)
        self.assertEqual(parse_timestamp("2026-05-04T13:30:00"), FIXED_NOW)
        self.assertIsNone(parse_timestamp("ontem"))
        self.assertIsNone(parse_timestamp(None))

    def test_effective_timestamp_falls_back_to_epoch(self):
        self.assertEqual(effective_timestamp(DocumentModel()).year, 1970)
        self.assertEqual(effective_timestamp(DocumentModel(created_at="2025-02-03T00:00:00Z")).month, 2)


if __name__ == '__main__':
    unittest.main()
