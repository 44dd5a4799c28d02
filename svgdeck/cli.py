"""CLI entry point for svgdeck."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Tuple

from .config import load_config
from .errors import SvgDeckError
from .export.sidecar import DEFAULT_COMMAND, DEFAULT_TIMEOUT
from .finalize import IconCatalog, finalize_project
from .models.config import ExportConfig, FinalizeOptions
from .pipeline import BACKENDS, check_backends, export_project

PASS_FLAGS = (
    ("--no-rounded-rect", "fix_rounded", "Keep rounded <rect> elements"),
    ("--no-aspect-fix", "fix_aspect", "Skip image aspect-ratio repair"),
    ("--no-embed-images", "embed_images", "Keep external image references"),
    ("--no-embed-icons", "embed_icons", "Keep icon placeholders"),
    ("--no-flatten-text", "flatten_text", "Keep <tspan> elements"),
)


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project-root",
        type=str,
        default=None,
        help="Path to project root (default: current directory)",
    )
    parser.add_argument(
        "--icons-dir",
        type=str,
        default=None,
        help="Directory of icon SVGs (default: bundled icons)",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Print debug diagnostics"
    )


def _add_pass_args(parser: argparse.ArgumentParser) -> None:
    for flag, dest, help_text in PASS_FLAGS:
        parser.add_argument(flag, dest=dest, action="store_false", help=help_text)


def _finalize_options(args: argparse.Namespace) -> FinalizeOptions:
    return FinalizeOptions(**{dest: getattr(args, dest) for _, dest, _ in PASS_FLAGS})


def _configure_logging(args: argparse.Namespace) -> None:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _sidecar_command(args: argparse.Namespace) -> Tuple[str, str]:
    return (args.node, args.sidecar_script or DEFAULT_COMMAND[1])


def _backend_options(args: argparse.Namespace) -> Dict[str, Any]:
    if args.backend != "pptxgen":
        return {}
    return {"command": _sidecar_command(args), "timeout": args.timeout}


def cmd_finalize(args: argparse.Namespace) -> int:
    """Rewrite svg_output/*.svg into svg_final/."""
    _configure_logging(args)
    try:
        config = load_config(
            Path(args.project_root) if args.project_root else None,
            Path(args.icons_dir) if args.icons_dir else None,
        )
        icons = IconCatalog.from_directory(config.icons_dir)
        written = finalize_project(config.project_root, _finalize_options(args), icons)
    except (FileNotFoundError, SvgDeckError) as exc:
        print(f"ERROR: {exc}")
        return 1

    print(f"Finalized {len(written)} SVG files to: {config.svg_final_dir}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export svg_final/*.svg to a single PPTX."""
    _configure_logging(args)
    try:
        config = load_config(
            Path(args.project_root) if args.project_root else None,
            Path(args.icons_dir) if args.icons_dir else None,
        )
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}")
        return 1

    export_config = ExportConfig(
        width=args.width,
        height=args.height,
        enable_transitions=not args.no_transitions,
        transition_type=args.transition,
    )
    result = export_project(
        config.project_root,
        output_path=args.output or config.output_path,
        backend=args.backend,
        config=export_config,
        icons=IconCatalog.from_directory(config.icons_dir),
        options=_finalize_options(args),
        max_workers=args.workers,
        log_path=Path(config.log_path),
        backend_options=_backend_options(args),
    )
    if not result.success:
        print(f"ERROR: [{result.error_kind}] {result.error}")
        return 1

    print(f"Exported {result.slide_count} slides with '{result.backend}' to: {result.output_path}")
    print(f"Run log: {config.log_path}")
    return 0


def cmd_backends(args: argparse.Namespace) -> int:
    """List registered backends and whether they can run here."""
    options = {"pptxgen": {"command": _sidecar_command(args)}}
    for name, available in check_backends(options).items():
        print(f"{name}: {'available' if available else 'unavailable'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="svgdeck - SVG slides to PPTX exporter")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Finalize command
    finalize_parser = subparsers.add_parser(
        "finalize", help="Apply SVG rewrite passes: svg_output -> svg_final"
    )
    _add_common_args(finalize_parser)
    _add_pass_args(finalize_parser)
    finalize_parser.set_defaults(func=cmd_finalize)

    # Export command
    export_parser = subparsers.add_parser(
        "export", help="Export svg_final slides to a PPTX package"
    )
    _add_common_args(export_parser)
    _add_pass_args(export_parser)
    export_parser.add_argument(
        "--output", type=str, default=None, help="Output PPTX path (default: <project>/output.pptx)"
    )
    export_parser.add_argument(
        "--backend", choices=sorted(BACKENDS), default="native", help="Package backend"
    )
    export_parser.add_argument("--width", type=_positive_int, default=1280, help="Canvas width (px)")
    export_parser.add_argument("--height", type=_positive_int, default=720, help="Canvas height (px)")
    export_parser.add_argument(
        "--no-transitions", action="store_true", help="Do not emit slide transitions"
    )
    export_parser.add_argument(
        "--transition", type=str, default="fade",
        help="Transition type: fade, push, wipe, split, cover or cut",
    )
    export_parser.add_argument(
        "--workers", type=_positive_int, default=None, help="Prepare slides on N threads"
    )
    export_parser.add_argument(
        "--node", type=str, default="node", help="Executable running the sidecar script"
    )
    export_parser.add_argument(
        "--sidecar-script", type=str, default=None,
        help="Sidecar script (default: sidecars/pptxgen/index.js)",
    )
    export_parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT, help="Sidecar timeout in seconds"
    )
    export_parser.set_defaults(func=cmd_export)

    # Backends command
    backends_parser = subparsers.add_parser(
        "backends", help="Report which package backends are available"
    )
    backends_parser.add_argument("--node", type=str, default="node")
    backends_parser.add_argument("--sidecar-script", type=str, default=None)
    backends_parser.set_defaults(func=cmd_backends)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
