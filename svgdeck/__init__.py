"""svgdeck: export per-slide SVG projects to PPTX packages."""

__version__ = "0.1.0"
