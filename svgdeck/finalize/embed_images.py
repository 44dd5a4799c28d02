"""Inline external ``<image>`` files as base64 ``data:`` URIs."""

from __future__ import annotations

import base64
import logging
import re
from pathlib import Path
from typing import Optional, Union

from .xml_utils import href_key, iter_local, parse_svg, serialize_svg

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

# Scheme prefixes such as http:, https:, file:. Single letters are Windows drives.
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]+:")


def mime_type_for(filename: str) -> str:
    return MIME_TYPES.get(Path(filename).suffix.lstrip(".").lower(), DEFAULT_MIME_TYPE)


def resolve_image_path(reference: str, base_dir: Path) -> Optional[Path]:
    """Filesystem path for a reference, or ``None`` for data URIs and URLs."""
    if not reference or reference.startswith("data:") or reference.startswith("#"):
        return None
    if _SCHEME_RE.match(reference):
        return None
    path = Path(reference)
    return path if path.is_absolute() else base_dir / path


def data_uri_for(path: Path) -> str:
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type_for(path.name)};base64,{encoded}"


def embed_images(svg_content: str, base_dir: Union[str, Path]) -> str:
    """Replace file references with data URIs; unreadable files stay external."""
    base_dir = Path(base_dir)
    tree, has_declaration = parse_svg(svg_content)
    changed = False
    for image in iter_local(tree.getroot(), "image"):
        key = href_key(image)
        if key is None:
            continue
        path = resolve_image_path(image.get(key).strip(), base_dir)
        if path is None:
            continue
        try:
            image.set(key, data_uri_for(path))
        except OSError as exc:
            logger.warning("Image left as external reference %s: %s", path, exc)
            continue
        changed = True

    if not changed:
        return svg_content
    return serialize_svg(tree, has_declaration)
