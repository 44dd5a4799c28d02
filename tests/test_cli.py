"""CLI tests."""

import contextlib
import io
import tempfile
import unittest
from pathlib import Path

from pptx import Presentation

from svgdeck.cli import build_parser, cmd_backends, cmd_export, cmd_finalize, main

SLIDE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="128" height="72">'
    '<rect width="128" height="72" rx="4" fill="#eee"/></svg>'
)


def _run(argv):
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        code = main(argv)
    return code, buffer.getvalue()


class TestCLI(unittest.TestCase):
    def test_parser_defaults(self) -> None:
        args = build_parser().parse_args(["export"])
        self.assertIs(args.func, cmd_export)
        self.assertEqual((args.width, args.height), (1280, 720))
        self.assertEqual(args.backend, "native")
        self.assertTrue(args.fix_rounded)
        self.assertFalse(args.no_transitions)

    def test_pass_switches(self) -> None:
        args = build_parser().parse_args(["finalize", "--no-rounded-rect", "--no-embed-icons"])
        self.assertIs(args.func, cmd_finalize)
        self.assertFalse(args.fix_rounded)
        self.assertFalse(args.embed_icons)
        self.assertTrue(args.flatten_text)

    def test_rejects_non_positive_width(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(["export", "--width", "0"])

    def test_finalize_then_export(self) -> None:
        root = Path(tempfile.mkdtemp())
        (root / "svg_output").mkdir()
        (root / "svg_output" / "01_intro.svg").write_text(SLIDE_SVG, encoding="utf-8")
        (root / "notes").mkdir()
        (root / "notes" / "01.md").write_text("Say hi", encoding="utf-8")

        code, out = _run(["finalize", "--project-root", str(root)])
        self.assertEqual(code, 0, out)
        self.assertIn("Finalized 1 SVG files", out)

        code, out = _run([
            "export", "--project-root", str(root), "--width", "640", "--height", "360",
            "--transition", "wipe",
        ])
        self.assertEqual(code, 0, out)
        prs = Presentation(str(root / "output.pptx"))
        self.assertEqual(prs.slide_width, 640 * 9525)
        self.assertEqual(prs.slides[0].notes_slide.notes_text_frame.text, "Say hi")

    def test_finalize_missing_input(self) -> None:
        root = Path(tempfile.mkdtemp())
        code, out = _run(["finalize", "--project-root", str(root)])
        self.assertEqual(code, 1)
        self.assertTrue(out.startswith("ERROR:"))

    def test_export_failure_prints_kind(self) -> None:
        root = Path(tempfile.mkdtemp())
        code, out = _run(["export", "--project-root", str(root)])
        self.assertEqual(code, 1)
        self.assertIn("ERROR: [input_missing]", out)

    def test_export_missing_project_root(self) -> None:
        code, out = _run(["export", "--project-root", "/nonexistent/project"])
        self.assertEqual(code, 1)
        self.assertIn("project_root", out)

    def test_backends_command(self) -> None:
        args = build_parser().parse_args(["backends", "--node", "definitely-not-a-real-node"])
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            code = cmd_backends(args)
        self.assertEqual(code, 0)
        self.assertIn("native: available", buffer.getvalue())
        self.assertIn("pptxgen: unavailable", buffer.getvalue())


if __name__ == "__main__":
    unittest.main()
