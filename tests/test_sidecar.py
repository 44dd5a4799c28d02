"""External delegate backend tests.

A short Python script stands in for the Node.js process.
"""

import json
import sys
import tempfile
import textwrap
import unittest
from pathlib import Path

from svgdeck.errors import BackendUnavailableError, DelegateProtocolError
from svgdeck.export.sidecar import SidecarBackend
from svgdeck.models.config import ExportConfig
from svgdeck.models.slide import RasterContent, Slide, VectorContent

SLIDES = [
    Slide(number=1, title="cover", content=VectorContent(markup="<svg/>"), notes="hello"),
    Slide(number=2, title="chart", content=RasterContent(data=b"\x89PNG")),
]


def _script(body: str) -> Path:
    path = Path(tempfile.mkdtemp()) / "sidecar.py"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


def _backend(body: str, timeout: float = 30) -> SidecarBackend:
    return SidecarBackend(command=(sys.executable, str(_script(body))), timeout=timeout)


class TestSidecarBackend(unittest.TestCase):
    def test_name(self) -> None:
        self.assertEqual(SidecarBackend().name(), "pptxgen")

    def test_available_with_real_interpreter_and_script(self) -> None:
        self.assertTrue(_backend("print('')").is_available())

    def test_unavailable_when_executable_missing(self) -> None:
        backend = SidecarBackend(command=("definitely-not-a-real-node", "index.js"))
        self.assertFalse(backend.is_available())

    def test_unavailable_when_script_missing(self) -> None:
        backend = SidecarBackend(command=(sys.executable, "/nonexistent/sidecar/index.js"))
        self.assertFalse(backend.is_available())

    def test_export_sends_request_on_stdin(self) -> None:
        capture = Path(tempfile.mkdtemp()) / "request.json"
        backend = _backend(f"""
            import sys
            data = sys.stdin.read()
            with open({str(capture)!r}, "w", encoding="utf-8") as handle:
                handle.write(data)
            print('{{"success": true, "output": "deck.pptx"}}')
        """)
        backend.export(SLIDES, "/tmp/deck.pptx", ExportConfig(enable_transitions=False))

        request = json.loads(capture.read_text(encoding="utf-8"))
        self.assertEqual(request["output"], "/tmp/deck.pptx")
        self.assertEqual(
            request["config"],
            {"width": 1280, "height": 720, "enableTransitions": False, "transitionType": "fade"},
        )
        self.assertEqual(request["slides"][0]["content"], {"type": "svg", "data": "<svg/>"})
        self.assertEqual(request["slides"][0]["notes"], "hello")
        self.assertEqual(request["slides"][1]["content"]["type"], "png")
        self.assertEqual(request["slides"][1]["content"]["data"], "iVBORw==")
        self.assertIsNone(request["slides"][1]["notes"])

    def test_empty_stdout_is_success(self) -> None:
        _backend("import sys; sys.stdin.read()").export(SLIDES, "out.pptx", ExportConfig())

    def test_error_field_raises(self) -> None:
        backend = _backend("""
            import sys
            sys.stdin.read()
            print('{"error": "font missing"}')
        """)
        with self.assertRaises(DelegateProtocolError) as ctx:
            backend.export(SLIDES, "out.pptx", ExportConfig())
        self.assertIn("font missing", str(ctx.exception))
        self.assertEqual(ctx.exception.kind, "delegate_protocol")

    def test_non_zero_exit_keeps_diagnostics_verbatim(self) -> None:
        backend = _backend("""
            import sys
            sys.stdin.read()
            sys.stdout.write("partial output")
            sys.stderr.write("Error: pptxgenjs exploded")
            sys.exit(3)
        """)
        with self.assertRaises(DelegateProtocolError) as ctx:
            backend.export(SLIDES, "out.pptx", ExportConfig())
        self.assertIn("code 3", str(ctx.exception))
        self.assertIn("partial output", ctx.exception.diagnostics)
        self.assertIn("Error: pptxgenjs exploded", ctx.exception.diagnostics)

    def test_malformed_response_raises(self) -> None:
        backend = _backend("""
            import sys
            sys.stdin.read()
            print("this is not json")
        """)
        with self.assertRaises(DelegateProtocolError) as ctx:
            backend.export(SLIDES, "out.pptx", ExportConfig())
        self.assertIn("this is not json", ctx.exception.diagnostics)

    def test_undecodable_output_is_malformed_response(self) -> None:
        backend = _backend("""
            import sys
            sys.stdin.read()
            sys.stdout.buffer.write(b"\\xff\\xfe oops")
        """)
        with self.assertRaises(DelegateProtocolError) as ctx:
            backend.export(SLIDES, "out.pptx", ExportConfig())
        self.assertIn("Malformed sidecar response", str(ctx.exception))
        self.assertIn("oops", ctx.exception.diagnostics)

    def test_timeout_raises(self) -> None:
        backend = _backend("""
            import sys, time
            sys.stdin.read()
            time.sleep(10)
        """, timeout=0.5)
        with self.assertRaises(DelegateProtocolError) as ctx:
            backend.export(SLIDES, "out.pptx", ExportConfig())
        self.assertIn("timed out", str(ctx.exception))

    def test_missing_executable_on_export(self) -> None:
        backend = SidecarBackend(command=("definitely-not-a-real-node", "index.js"))
        with self.assertRaises(BackendUnavailableError):
            backend.export(SLIDES, "out.pptx", ExportConfig())


if __name__ == "__main__":
    unittest.main()
