"""Export orchestration tests."""

import tempfile
import unittest
from pathlib import Path

from svgdeck.errors import UnknownBackendError
from svgdeck.export import NativeOoxmlBackend, SidecarBackend
from svgdeck.finalize import IconCatalog
from svgdeck.logging_utils import log_event, read_events
from svgdeck.models.config import ExportConfig
from svgdeck.pipeline import check_backends, export_project, get_backend

SLIDE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="128" height="72">'
    '<text x="10" y="40"><tspan>Hello</tspan> <tspan fill="red">world</tspan></text></svg>'
)


class UnavailableBackend:
    def __init__(self) -> None:
        self.exported = False

    def name(self) -> str:
        return "offline"

    def is_available(self) -> bool:
        return False

    def export(self, slides, output_path, config) -> None:
        self.exported = True


def _project(slide_count: int = 2) -> Path:
    root = Path(tempfile.mkdtemp())
    (root / "svg_final").mkdir()
    for index in range(1, slide_count + 1):
        (root / "svg_final" / f"{index:02d}_slide.svg").write_text(SLIDE_SVG, encoding="utf-8")
    return root


class TestBackendRegistry(unittest.TestCase):
    def test_get_backend(self) -> None:
        self.assertIsInstance(get_backend("native"), NativeOoxmlBackend)
        sidecar = get_backend("pptxgen", timeout=5)
        self.assertIsInstance(sidecar, SidecarBackend)
        self.assertEqual(sidecar.timeout, 5)

    def test_unknown_backend(self) -> None:
        with self.assertRaises(UnknownBackendError):
            get_backend("keynote")

    def test_check_backends(self) -> None:
        status = check_backends({"pptxgen": {"command": ("definitely-not-a-real-node", "x.js")}})
        self.assertEqual(status, {"native": True, "pptxgen": False})


class TestExportProject(unittest.TestCase):
    def test_successful_export(self) -> None:
        root = _project()
        result = export_project(root, icons=IconCatalog({}))
        self.assertTrue(result.success, result.error)
        self.assertEqual(result.backend, "native")
        self.assertEqual(result.slide_count, 2)
        self.assertEqual(Path(result.output_path), root / "output.pptx")
        self.assertTrue((root / "output.pptx").exists())

        events = [e["event_type"] for e in read_events(root / "export_log.jsonl")]
        self.assertEqual(events, ["EXPORT_START", "SLIDES_LOADED", "EXPORT_DONE"])

    def test_missing_slides_is_reported(self) -> None:
        root = Path(tempfile.mkdtemp())
        result = export_project(root, icons=IconCatalog({}))
        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, "input_missing")
        self.assertFalse((root / "output.pptx").exists())
        self.assertEqual(read_events(root / "export_log.jsonl")[-1]["event_type"], "EXPORT_FAILED")

    def test_unavailable_backend_is_reported_before_work(self) -> None:
        root = _project()
        backend = UnavailableBackend()
        result = export_project(root, backend=backend, icons=IconCatalog({}))
        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, "backend_unavailable")
        self.assertEqual(result.backend, "offline")
        self.assertFalse(backend.exported)

    def test_unknown_backend_name_is_reported(self) -> None:
        root = Path(tempfile.mkdtemp()) / "does_not_exist"
        result = export_project(root, backend="keynote")
        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, "unknown_backend")
        self.assertFalse(root.exists())

    def test_parse_error_is_reported_with_file_name(self) -> None:
        root = _project(1)
        (root / "svg_final" / "02_bad.svg").write_text("<svg>", encoding="utf-8")
        result = export_project(root, icons=IconCatalog({}))
        self.assertEqual(result.error_kind, "parse")
        self.assertIn("02_bad.svg", result.error)

    def test_unreadable_notes_are_reported(self) -> None:
        root = _project(1)
        (root / "notes").mkdir()
        (root / "notes" / "01_slide.md").write_bytes(b"caf\xe9")
        result = export_project(root, icons=IconCatalog({}))
        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, "input_read")
        self.assertIn("01_slide.md", result.error)
        self.assertFalse((root / "output.pptx").exists())

    def test_custom_output_and_config(self) -> None:
        root = _project(1)
        output = Path(tempfile.mkdtemp()) / "nested" / "talk.pptx"
        log_path = Path(tempfile.mkdtemp()) / "run.jsonl"
        result = export_project(
            root,
            output_path=output,
            config=ExportConfig(width=800, height=600),
            icons=IconCatalog({}),
            max_workers=2,
            log_path=log_path,
        )
        self.assertTrue(result.success, result.error)
        self.assertTrue(output.exists())
        start = read_events(log_path)[0]
        self.assertEqual(start["payload"]["config"]["width"], 800)


class TestLogEvent(unittest.TestCase):
    def test_log_event_appends_jsonl(self) -> None:
        log_path = Path(tempfile.mkdtemp()) / "logs" / "run.jsonl"
        log_event(log_path, "A", {"n": 1})
        log_event(log_path, "B", {"path": Path("/x")})
        events = read_events(log_path)
        self.assertEqual([e["event_type"] for e in events], ["A", "B"])
        self.assertTrue(events[0]["timestamp"].endswith("Z"))
        self.assertEqual(events[1]["payload"]["path"], "/x")

    def test_none_path_does_not_write(self) -> None:
        record = log_event(None, "A", {})
        self.assertEqual(record["event_type"], "A")


if __name__ == "__main__":
    unittest.main()
