"""XML part builders for the self-contained OOXML writer.

Every builder returns serialized bytes ready to be stored in the archive.
Tags are spelled with python-pptx's ``qn`` helper; content and relationship
type URIs come from ``pptx.opc.constants``.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from lxml import etree
from pptx.opc.constants import NAMESPACE as NS
from pptx.oxml.ns import namespaces, qn

from ..models.config import ExportConfig
from ..models.manifest import PackageManifest
from ..models.slide import Slide

PML_NSMAP = namespaces("a", "r", "p")

NOTES_WIDTH_EMU = 6858000
NOTES_HEIGHT_EMU = 9144000
FIRST_SLIDE_ID = 256
SLIDE_MASTER_ID = 2147483648
SLIDE_LAYOUT_ID = 2147483649

TRANSITIONS = ("fade", "push", "wipe", "split", "cover", "cut")
DEFAULT_TRANSITION = "fade"

# Characters XML 1.0 cannot carry; tab, newline and carriage return are allowed.
_INVALID_XML_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")

_THEME_COLORS = (
    ("dk1", "000000"),
    ("lt1", "FFFFFF"),
    ("dk2", "44546A"),
    ("lt2", "E7E6E6"),
    ("accent1", "4472C4"),
    ("accent2", "ED7D31"),
    ("accent3", "A5A5A5"),
    ("accent4", "FFC000"),
    ("accent5", "5B9BD5"),
    ("accent6", "70AD47"),
    ("hlink", "0563C1"),
    ("folHlink", "954F72"),
)

_CLR_MAP = {
    "bg1": "lt1",
    "tx1": "dk1",
    "bg2": "lt2",
    "tx2": "dk2",
    "accent1": "accent1",
    "accent2": "accent2",
    "accent3": "accent3",
    "accent4": "accent4",
    "accent5": "accent5",
    "accent6": "accent6",
    "hlink": "hlink",
    "folHlink": "folHlink",
}


def to_xml(root) -> bytes:
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


def sub(parent, tag: str, **attrs):
    """SubElement spelled with a namespace prefix, e.g. ``sub(el, "a:off", x="0")``."""
    return etree.SubElement(parent, qn(tag), {k: str(v) for k, v in attrs.items()})


def _pml_root(tag: str, **attrs):
    return etree.Element(qn(tag), {k: str(v) for k, v in attrs.items()}, nsmap=PML_NSMAP)


def clean_text(text: str) -> str:
    """Drop characters that are not allowed in XML 1.0 documents."""
    return _INVALID_XML_CHARS_RE.sub("", text)


# --- package plumbing -----------------------------------------------------


def content_types_xml(manifest: PackageManifest) -> bytes:
    root = etree.Element(
        f"{{{NS.OPC_CONTENT_TYPES}}}Types", nsmap={None: NS.OPC_CONTENT_TYPES}
    )
    for extension, content_type in manifest.defaults.items():
        etree.SubElement(
            root,
            f"{{{NS.OPC_CONTENT_TYPES}}}Default",
            Extension=extension,
            ContentType=content_type,
        )
    for partname, content_type in manifest.overrides.items():
        etree.SubElement(
            root,
            f"{{{NS.OPC_CONTENT_TYPES}}}Override",
            PartName=f"/{partname}",
            ContentType=content_type,
        )
    return to_xml(root)


def relationships_xml(manifest: PackageManifest, source: str) -> bytes:
    root = etree.Element(
        f"{{{NS.OPC_RELATIONSHIPS}}}Relationships", nsmap={None: NS.OPC_RELATIONSHIPS}
    )
    for rel in manifest.rels_for(source):
        etree.SubElement(
            root,
            f"{{{NS.OPC_RELATIONSHIPS}}}Relationship",
            Id=rel.r_id,
            Type=rel.rel_type,
            Target=manifest.relative_target(source, rel.target),
        )
    return to_xml(root)


def presentation_xml(
    config: ExportConfig,
    master_r_id: str,
    slide_r_ids: Sequence[str],
    notes_master_r_id: Optional[str] = None,
) -> bytes:
    root = _pml_root("p:presentation", saveSubsetFonts="1")
    masters = sub(root, "p:sldMasterIdLst")
    sub(masters, "p:sldMasterId", id=SLIDE_MASTER_ID, **{qn("r:id"): master_r_id})
    if notes_master_r_id is not None:
        notes_masters = sub(root, "p:notesMasterIdLst")
        sub(notes_masters, "p:notesMasterId", **{qn("r:id"): notes_master_r_id})
    slide_ids = sub(root, "p:sldIdLst")
    for offset, r_id in enumerate(slide_r_ids):
        sub(slide_ids, "p:sldId", id=FIRST_SLIDE_ID + offset, **{qn("r:id"): r_id})
    sub(root, "p:sldSz", cx=config.width_emu, cy=config.height_emu)
    sub(root, "p:notesSz", cx=NOTES_WIDTH_EMU, cy=NOTES_HEIGHT_EMU)
    return to_xml(root)


# --- slide content ----------------------------------------------------------


def _shape_tree(c_sld, cx: Optional[int] = None, cy: Optional[int] = None):
    sp_tree = sub(c_sld, "p:spTree")
    nv_grp = sub(sp_tree, "p:nvGrpSpPr")
    sub(nv_grp, "p:cNvPr", id=1, name="")
    sub(nv_grp, "p:cNvGrpSpPr")
    sub(nv_grp, "p:nvPr")
    grp_sp_pr = sub(sp_tree, "p:grpSpPr")
    if cx is not None and cy is not None:
        xfrm = sub(grp_sp_pr, "a:xfrm")
        sub(xfrm, "a:off", x=0, y=0)
        sub(xfrm, "a:ext", cx=cx, cy=cy)
        sub(xfrm, "a:chOff", x=0, y=0)
        sub(xfrm, "a:chExt", cx=cx, cy=cy)
    return sp_tree


def _rect_geometry(sp_pr, x: int, y: int, cx: int, cy: int) -> None:
    xfrm = sub(sp_pr, "a:xfrm")
    sub(xfrm, "a:off", x=x, y=y)
    sub(xfrm, "a:ext", cx=cx, cy=cy)
    geom = sub(sp_pr, "a:prstGeom", prst="rect")
    sub(geom, "a:avLst")


def _paragraphs(tx_body, lines: List[str]) -> None:
    for line in lines or [""]:
        paragraph = sub(tx_body, "a:p")
        if line:
            run = sub(paragraph, "a:r")
            sub(run, "a:rPr", lang="en-US", dirty="0")
            sub(run, "a:t").text = line


def placeholder_shape(slide: Slide, config: ExportConfig):
    """Text box naming the slide, inset by a tenth of the canvas on each side.

    Stands in for vector content until a geometry translator is plugged in
    through ``NativeOoxmlBackend(vector_renderer=...)``.
    """
    cx, cy = config.width_emu, config.height_emu
    shape = etree.Element(qn("p:sp"), nsmap=PML_NSMAP)
    nv_sp_pr = sub(shape, "p:nvSpPr")
    sub(nv_sp_pr, "p:cNvPr", id=2, name=clean_text(slide.title), descr=clean_text(slide.title))
    sub(nv_sp_pr, "p:cNvSpPr", txBox="1")
    sub(nv_sp_pr, "p:nvPr")
    _rect_geometry(sub(shape, "p:spPr"), cx // 10, cy // 10, cx * 8 // 10, cy * 8 // 10)
    tx_body = sub(shape, "p:txBody")
    sub(tx_body, "a:bodyPr", anchor="ctr")
    sub(tx_body, "a:lstStyle")
    _paragraphs(tx_body, [clean_text(slide.title)])
    return shape


def picture_shape(slide: Slide, image_r_id: str, config: ExportConfig):
    """Full-bleed picture filling the canvas with the slide's raster image."""
    pic = etree.Element(qn("p:pic"), nsmap=PML_NSMAP)
    nv_pic_pr = sub(pic, "p:nvPicPr")
    sub(
        nv_pic_pr,
        "p:cNvPr",
        id=2,
        name=f"Image {slide.number}",
        descr=clean_text(slide.title),
    )
    c_nv_pic_pr = sub(nv_pic_pr, "p:cNvPicPr")
    sub(c_nv_pic_pr, "a:picLocks", noChangeAspect="1")
    sub(nv_pic_pr, "p:nvPr")
    blip_fill = sub(pic, "p:blipFill")
    sub(blip_fill, "a:blip", **{qn("r:embed"): image_r_id})
    stretch = sub(blip_fill, "a:stretch")
    sub(stretch, "a:fillRect")
    _rect_geometry(sub(pic, "p:spPr"), 0, 0, config.width_emu, config.height_emu)
    return pic


def transition_name(transition_type: Optional[str]) -> str:
    name = (transition_type or "").strip().lower()
    return name if name in TRANSITIONS else DEFAULT_TRANSITION


def slide_xml(shape, config: ExportConfig) -> bytes:
    root = _pml_root("p:sld")
    c_sld = sub(root, "p:cSld")
    sp_tree = _shape_tree(c_sld, config.width_emu, config.height_emu)
    sp_tree.append(shape)
    clr_map_ovr = sub(root, "p:clrMapOvr")
    sub(clr_map_ovr, "a:masterClrMapping")
    if config.enable_transitions:
        transition = sub(root, "p:transition", spd="med")
        sub(transition, f"p:{transition_name(config.transition_type)}")
    etree.cleanup_namespaces(root)
    return to_xml(root)


def notes_slide_xml(notes: str) -> bytes:
    """Notes page with a body placeholder holding one paragraph per line."""
    root = _pml_root("p:notes")
    c_sld = sub(root, "p:cSld")
    sp_tree = _shape_tree(c_sld, NOTES_WIDTH_EMU, NOTES_HEIGHT_EMU)
    shape = sub(sp_tree, "p:sp")
    nv_sp_pr = sub(shape, "p:nvSpPr")
    sub(nv_sp_pr, "p:cNvPr", id=2, name="Notes Placeholder 1")
    c_nv_sp_pr = sub(nv_sp_pr, "p:cNvSpPr")
    sub(c_nv_sp_pr, "a:spLocks", noGrp="1")
    nv_pr = sub(nv_sp_pr, "p:nvPr")
    sub(nv_pr, "p:ph", type="body", idx="1")
    sub(shape, "p:spPr")
    tx_body = sub(shape, "p:txBody")
    sub(tx_body, "a:bodyPr")
    sub(tx_body, "a:lstStyle")
    _paragraphs(tx_body, clean_text(notes).splitlines())
    clr_map_ovr = sub(root, "p:clrMapOvr")
    sub(clr_map_ovr, "a:masterClrMapping")
    return to_xml(root)


# --- masters, layout and theme ----------------------------------------------


def slide_layout_xml() -> bytes:
    root = _pml_root("p:sldLayout", type="blank", preserve="1")
    c_sld = sub(root, "p:cSld", name="Blank")
    _shape_tree(c_sld)
    clr_map_ovr = sub(root, "p:clrMapOvr")
    sub(clr_map_ovr, "a:masterClrMapping")
    return to_xml(root)


def slide_master_xml(layout_r_id: str) -> bytes:
    root = _pml_root("p:sldMaster")
    c_sld = sub(root, "p:cSld")
    _shape_tree(c_sld)
    sub(root, "p:clrMap", **_CLR_MAP)
    layouts = sub(root, "p:sldLayoutIdLst")
    sub(layouts, "p:sldLayoutId", id=SLIDE_LAYOUT_ID, **{qn("r:id"): layout_r_id})
    return to_xml(root)


def notes_master_xml() -> bytes:
    root = _pml_root("p:notesMaster")
    c_sld = sub(root, "p:cSld")
    _shape_tree(c_sld)
    sub(root, "p:clrMap", **_CLR_MAP)
    return to_xml(root)


def theme_xml(name: str = "Office Theme") -> bytes:
    root = etree.Element(qn("a:theme"), {"name": name}, nsmap=namespaces("a"))
    elements = sub(root, "a:themeElements")

    colors = sub(elements, "a:clrScheme", name="Office")
    for slot, value in _THEME_COLORS:
        sub(sub(colors, f"a:{slot}"), "a:srgbClr", val=value)

    fonts = sub(elements, "a:fontScheme", name="Office")
    for group, latin in (("a:majorFont", "Calibri Light"), ("a:minorFont", "Calibri")):
        font = sub(fonts, group)
        sub(font, "a:latin", typeface=latin)
        sub(font, "a:ea", typeface="")
        sub(font, "a:cs", typeface="")

    formats = sub(elements, "a:fmtScheme", name="Office")
    fills = sub(formats, "a:fillStyleLst")
    for _ in range(3):
        sub(sub(fills, "a:solidFill"), "a:schemeClr", val="phClr")
    lines = sub(formats, "a:lnStyleLst")
    for width in (6350, 12700, 19050):
        line = sub(lines, "a:ln", w=width)
        sub(sub(line, "a:solidFill"), "a:schemeClr", val="phClr")
    effects = sub(formats, "a:effectStyleLst")
    for _ in range(3):
        sub(sub(effects, "a:effectStyle"), "a:effectLst")
    backgrounds = sub(formats, "a:bgFillStyleLst")
    for _ in range(3):
        sub(sub(backgrounds, "a:solidFill"), "a:schemeClr", val="phClr")
    return to_xml(root)
