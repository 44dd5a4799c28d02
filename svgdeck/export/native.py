"""Self-contained OOXML package writer."""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from ..errors import ArchiveWriteError, NoSlidesError
from ..models.config import ExportConfig
from ..models.manifest import PACKAGE_SOURCE, PackageManifest
from ..models.slide import RasterContent, Slide
from . import parts

logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = "[Content_Types].xml"
PRESENTATION_PART = "ppt/presentation.xml"
SLIDE_LAYOUT_PART = "ppt/slideLayouts/slideLayout1.xml"
SLIDE_MASTER_PART = "ppt/slideMasters/slideMaster1.xml"
NOTES_MASTER_PART = "ppt/notesMasters/notesMaster1.xml"
THEME_PART = "ppt/theme/theme1.xml"
NOTES_THEME_PART = "ppt/theme/theme2.xml"

# Builds the shape element standing for a vector slide's content.
VectorRenderer = Callable[[Slide, ExportConfig], object]


def slide_partname(index: int) -> str:
    return f"ppt/slides/slide{index}.xml"


def notes_partname(index: int) -> str:
    return f"ppt/notesSlides/notesSlide{index}.xml"


def media_partname(index: int) -> str:
    return f"ppt/media/image{index}.png"


class NativeOoxmlBackend:
    """Writes the package directly with zipfile and lxml; always available."""

    def __init__(self, vector_renderer: Optional[VectorRenderer] = None) -> None:
        self.vector_renderer = vector_renderer or parts.placeholder_shape

    def name(self) -> str:
        return "native"

    def is_available(self) -> bool:
        return True

    def export(
        self,
        slides: Sequence[Slide],
        output_path: Union[str, Path],
        config: ExportConfig,
    ) -> None:
        if not slides:
            raise NoSlidesError("No slides to export")
        _, package_parts = self.build_package(slides, config)
        write_package(package_parts, Path(output_path))
        logger.debug(
            "Wrote %d parts for %d slides to %s", len(package_parts), len(slides), output_path
        )

    def build_package(
        self, slides: Sequence[Slide], config: ExportConfig
    ) -> Tuple[PackageManifest, Dict[str, bytes]]:
        """Assemble every part in memory and verify the cross-references.

        Returns the manifest and an ordered ``part name -> bytes`` mapping with
        ``[Content_Types].xml`` first.
        """
        manifest = PackageManifest()
        manifest.add_default("rels", CT.OPC_RELATIONSHIPS)
        manifest.add_default("xml", CT.XML)
        if any(isinstance(slide.content, RasterContent) for slide in slides):
            manifest.add_default("png", CT.PNG)
        has_notes = any(slide.notes is not None for slide in slides)

        body: Dict[str, bytes] = {}

        manifest.relate(PACKAGE_SOURCE, RT.OFFICE_DOCUMENT, PRESENTATION_PART)
        master_r_id = manifest.relate(PRESENTATION_PART, RT.SLIDE_MASTER, SLIDE_MASTER_PART)
        slide_r_ids: List[str] = [
            manifest.relate(PRESENTATION_PART, RT.SLIDE, slide_partname(index))
            for index in range(1, len(slides) + 1)
        ]
        manifest.relate(PRESENTATION_PART, RT.THEME, THEME_PART)
        notes_master_r_id = None
        if has_notes:
            notes_master_r_id = manifest.relate(
                PRESENTATION_PART, RT.NOTES_MASTER, NOTES_MASTER_PART
            )

        manifest.add_part(PRESENTATION_PART, CT.PML_PRESENTATION_MAIN)
        body[PRESENTATION_PART] = parts.presentation_xml(
            config, master_r_id, slide_r_ids, notes_master_r_id
        )

        for index, slide in enumerate(slides, start=1):
            self._add_slide(manifest, body, index, slide, config)

        layout_r_id = manifest.relate(SLIDE_MASTER_PART, RT.SLIDE_LAYOUT, SLIDE_LAYOUT_PART)
        manifest.relate(SLIDE_MASTER_PART, RT.THEME, THEME_PART)
        manifest.add_part(SLIDE_MASTER_PART, CT.PML_SLIDE_MASTER)
        body[SLIDE_MASTER_PART] = parts.slide_master_xml(layout_r_id)

        manifest.relate(SLIDE_LAYOUT_PART, RT.SLIDE_MASTER, SLIDE_MASTER_PART)
        manifest.add_part(SLIDE_LAYOUT_PART, CT.PML_SLIDE_LAYOUT)
        body[SLIDE_LAYOUT_PART] = parts.slide_layout_xml()

        manifest.add_part(THEME_PART, CT.OFC_THEME)
        body[THEME_PART] = parts.theme_xml()

        if has_notes:
            manifest.relate(NOTES_MASTER_PART, RT.THEME, NOTES_THEME_PART)
            manifest.add_part(NOTES_MASTER_PART, CT.PML_NOTES_MASTER)
            body[NOTES_MASTER_PART] = parts.notes_master_xml()
            manifest.add_part(NOTES_THEME_PART, CT.OFC_THEME)
            body[NOTES_THEME_PART] = parts.theme_xml("Notes Theme")

        for source in manifest.relationships:
            body[manifest.rels_partname(source)] = parts.relationships_xml(manifest, source)

        manifest.verify(body)

        package_parts = {CONTENT_TYPES_PART: parts.content_types_xml(manifest)}
        root_rels = manifest.rels_partname(PACKAGE_SOURCE)
        package_parts[root_rels] = body.pop(root_rels)
        package_parts.update(body)
        return manifest, package_parts

    def _add_slide(
        self,
        manifest: PackageManifest,
        body: Dict[str, bytes],
        index: int,
        slide: Slide,
        config: ExportConfig,
    ) -> None:
        partname = slide_partname(index)
        manifest.relate(partname, RT.SLIDE_LAYOUT, SLIDE_LAYOUT_PART)

        if isinstance(slide.content, RasterContent):
            media = media_partname(index)
            image_r_id = manifest.relate(partname, RT.IMAGE, media)
            manifest.add_part(media)
            body[media] = slide.content.data
            shape = parts.picture_shape(slide, image_r_id, config)
        else:
            shape = self.vector_renderer(slide, config)

        if slide.notes is not None:
            notes_part = notes_partname(index)
            manifest.relate(partname, RT.NOTES_SLIDE, notes_part)
            manifest.relate(notes_part, RT.NOTES_MASTER, NOTES_MASTER_PART)
            manifest.relate(notes_part, RT.SLIDE, partname)
            manifest.add_part(notes_part, CT.PML_NOTES_SLIDE)
            body[notes_part] = parts.notes_slide_xml(slide.notes)

        manifest.add_part(partname, CT.PML_SLIDE)
        body[partname] = parts.slide_xml(shape, config)


def write_package(package_parts: Dict[str, bytes], output_path: Path) -> None:
    """Write the archive next to ``output_path`` and move it into place.

    A failed write leaves neither a partial archive nor the temporary file.
    """
    tmp_path: Optional[Path] = None
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output_path.name}.", suffix=".tmp", dir=str(output_path.parent)
        )
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as handle:
            with zipfile.ZipFile(handle, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for partname, data in package_parts.items():
                    archive.writestr(partname, data)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, output_path)
    except OSError as exc:
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
        raise ArchiveWriteError(f"Failed to write {output_path}: {exc}") from exc
