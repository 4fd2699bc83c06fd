"""Minimal OOXML package writer for PPTX and XLSX exports.

Only the parts an office suite needs to recognise the package are written:
every PDF page becomes one picture slide, or one spreadsheet row.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, Sequence
from xml.etree.ElementTree import Element, SubElement, register_namespace, tostring
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo

from .utils import get_logger

LOGGER = get_logger("pdfsuite.container")

ZIP_TIMESTAMP = (2023, 1, 1, 0, 0, 0)
EMU_PER_POINT = 12700
MAX_CELL_LENGTH = 32767

XML_NS = {
    "ct": "http://schemas.openxmlformats.org/package/2006/content-types",
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "s": "http://schemas.openxmlformats.org/spreadsheetml/2006/main",
}

REL_OFFICE_DOCUMENT = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
REL_SLIDE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slide"
REL_SLIDE_MASTER = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slideMaster"
REL_SLIDE_LAYOUT = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slideLayout"
REL_THEME = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/theme"
REL_IMAGE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"
REL_WORKSHEET = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet"

CT_PRESENTATION = "application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml"
CT_SLIDE = "application/vnd.openxmlformats-officedocument.presentationml.slide+xml"
CT_SLIDE_MASTER = "application/vnd.openxmlformats-officedocument.presentationml.slideMaster+xml"
CT_SLIDE_LAYOUT = "application/vnd.openxmlformats-officedocument.presentationml.slideLayout+xml"
CT_THEME = "application/vnd.openxmlformats-officedocument.theme+xml"
CT_WORKBOOK = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"
CT_WORKSHEET = "application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"
CT_RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"

XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

_ILLEGAL_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

for _prefix in ("ct", "rel", "r", "p", "a", "s"):
    register_namespace(_prefix, XML_NS[_prefix])


@dataclass(frozen=True)
class PackagePart:
    """A single entry of the ZIP package."""

    path: str
    content: bytes | str
    content_type: str | None = None


@dataclass(frozen=True)
class SlideImage:
    """A rendered page destined for one slide."""

    data: bytes
    width: float
    height: float
    extension: str = "png"


def _normalise_bytes(data: bytes | bytearray | str) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    raise TypeError(f"Unsupported payload type: {type(data)!r}")


def _zipinfo(name: str) -> ZipInfo:
    info = ZipInfo(name)
    info.date_time = ZIP_TIMESTAMP
    info.compress_type = ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    return info


def _serialize(root: Element) -> bytes:
    return tostring(root, encoding="UTF-8", xml_declaration=True)


def _content_types_xml(defaults: Iterable[tuple[str, str]], overrides: Iterable[tuple[str, str]]) -> bytes:
    ns = f"{{{XML_NS['ct']}}}"
    root = Element(f"{ns}Types")
    for extension, content_type in defaults:
        SubElement(root, f"{ns}Default", {"Extension": extension, "ContentType": content_type})
    for part_name, content_type in overrides:
        SubElement(root, f"{ns}Override", {"PartName": f"/{part_name}", "ContentType": content_type})
    return _serialize(root)


def _relationships_xml(relationships: Iterable[tuple[str, str, str]]) -> bytes:
    ns = f"{{{XML_NS['rel']}}}"
    root = Element(f"{ns}Relationships")
    for rid, rel_type, target in relationships:
        SubElement(root, f"{ns}Relationship", {"Id": rid, "Type": rel_type, "Target": target})
    return _serialize(root)


def build_package(parts: Sequence[PackagePart], *, extra_defaults: Iterable[tuple[str, str]] = ()) -> bytes:
    """Assemble ``parts`` into a ZIP archive with a generated ``[Content_Types].xml``."""

    names = [part.path for part in parts]
    duplicates = {name for name in names if names.count(name) > 1}
    if duplicates:
        raise ValueError(f"Duplicate part names: {sorted(duplicates)}")

    defaults = [("rels", CT_RELATIONSHIPS), ("xml", "application/xml"), *extra_defaults]
    overrides = [(part.path, part.content_type) for part in parts if part.content_type]
    buffer = BytesIO()
    with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
        archive.writestr(_zipinfo("[Content_Types].xml"), _content_types_xml(defaults, overrides))
        for part in parts:
            archive.writestr(_zipinfo(part.path), _normalise_bytes(part.content))
    LOGGER.debug("Built package with %d part(s)", len(parts) + 1)
    return buffer.getvalue()


# -- PPTX -------------------------------------------------------------------


def _presentation_xml(slide_count: int, cx: int, cy: int) -> bytes:
    p, r = f"{{{XML_NS['p']}}}", f"{{{XML_NS['r']}}}"
    root = Element(f"{p}presentation")
    masters = SubElement(root, f"{p}sldMasterIdLst")
    SubElement(masters, f"{p}sldMasterId", {"id": "2147483648", f"{r}id": "rId1"})
    slides = SubElement(root, f"{p}sldIdLst")
    for index in range(slide_count):
        SubElement(slides, f"{p}sldId", {"id": str(256 + index), f"{r}id": f"rId{index + 2}"})
    SubElement(root, f"{p}sldSz", {"cx": str(cx), "cy": str(cy)})
    SubElement(root, f"{p}notesSz", {"cx": str(cy), "cy": str(cx)})
    return _serialize(root)


def _empty_shape_tree(parent: Element) -> Element:
    p, a = f"{{{XML_NS['p']}}}", f"{{{XML_NS['a']}}}"
    tree = SubElement(parent, f"{p}spTree")
    nv = SubElement(tree, f"{p}nvGrpSpPr")
    SubElement(nv, f"{p}cNvPr", {"id": "1", "name": ""})
    SubElement(nv, f"{p}cNvGrpSpPr")
    SubElement(nv, f"{p}nvPr")
    grp = SubElement(tree, f"{p}grpSpPr")
    xfrm = SubElement(grp, f"{a}xfrm")
    SubElement(xfrm, f"{a}off", {"x": "0", "y": "0"})
    SubElement(xfrm, f"{a}ext", {"cx": "0", "cy": "0"})
    SubElement(xfrm, f"{a}chOff", {"x": "0", "y": "0"})
    SubElement(xfrm, f"{a}chExt", {"cx": "0", "cy": "0"})
    return tree


def _slide_master_xml() -> bytes:
    p, r = f"{{{XML_NS['p']}}}", f"{{{XML_NS['r']}}}"
    root = Element(f"{p}sldMaster")
    c_sld = SubElement(root, f"{p}cSld")
    _empty_shape_tree(c_sld)
    SubElement(
        root,
        f"{p}clrMap",
        {
            "bg1": "lt1", "tx1": "dk1", "bg2": "lt2", "tx2": "dk2",
            "accent1": "accent1", "accent2": "accent2", "accent3": "accent3",
            "accent4": "accent4", "accent5": "accent5", "accent6": "accent6",
            "hlink": "hlink", "folHlink": "folHlink",
        },
    )
    layouts = SubElement(root, f"{p}sldLayoutIdLst")
    SubElement(layouts, f"{p}sldLayoutId", {"id": "2147483649", f"{r}id": "rId1"})
    return _serialize(root)


def _slide_layout_xml() -> bytes:
    p = f"{{{XML_NS['p']}}}"
    root = Element(f"{p}sldLayout", {"type": "blank", "preserve": "1"})
    c_sld = SubElement(root, f"{p}cSld", {"name": "Blank"})
    _empty_shape_tree(c_sld)
    clr = SubElement(root, f"{p}clrMapOvr")
    SubElement(clr, f"{{{XML_NS['a']}}}masterClrMapping")
    return _serialize(root)


def _theme_xml() -> bytes:
    a = f"{{{XML_NS['a']}}}"
    root = Element(f"{a}theme", {"name": "Office Theme"})
    elements = SubElement(root, f"{a}themeElements")
    colors = SubElement(elements, f"{a}clrScheme", {"name": "Office"})
    palette = [
        ("dk1", "000000"), ("lt1", "FFFFFF"), ("dk2", "1F497D"), ("lt2", "EEECE1"),
        ("accent1", "4F81BD"), ("accent2", "C0504D"), ("accent3", "9BBB59"),
        ("accent4", "8064A2"), ("accent5", "4BACC6"), ("accent6", "F79646"),
        ("hlink", "0000FF"), ("folHlink", "800080"),
    ]
    for name, value in palette:
        SubElement(SubElement(colors, f"{a}{name}"), f"{a}srgbClr", {"val": value})
    fonts = SubElement(elements, f"{a}fontScheme", {"name": "Office"})
    for group in ("majorFont", "minorFont"):
        font_group = SubElement(fonts, f"{a}{group}")
        SubElement(font_group, f"{a}latin", {"typeface": "Calibri"})
        SubElement(font_group, f"{a}ea", {"typeface": ""})
        SubElement(font_group, f"{a}cs", {"typeface": ""})
    fmt = SubElement(elements, f"{a}fmtScheme", {"name": "Office"})
    for list_name, child in (
        ("fillStyleLst", "solidFill"),
        ("lnStyleLst", "ln"),
        ("effectStyleLst", "effectStyle"),
        ("bgFillStyleLst", "solidFill"),
    ):
        style_list = SubElement(fmt, f"{a}{list_name}")
        for _ in range(3):
            item = SubElement(style_list, f"{a}{child}")
            if child == "solidFill":
                SubElement(item, f"{a}schemeClr", {"val": "phClr"})
            elif child == "ln":
                SubElement(SubElement(item, f"{a}solidFill"), f"{a}schemeClr", {"val": "phClr"})
            else:
                SubElement(item, f"{a}effectLst")
    return _serialize(root)


def _slide_xml(index: int, frame: tuple[int, int, int, int]) -> bytes:
    x, y, cx, cy = frame
    p, a, r = f"{{{XML_NS['p']}}}", f"{{{XML_NS['a']}}}", f"{{{XML_NS['r']}}}"
    root = Element(f"{p}sld")
    c_sld = SubElement(root, f"{p}cSld")
    tree = _empty_shape_tree(c_sld)
    pic = SubElement(tree, f"{p}pic")
    nv = SubElement(pic, f"{p}nvPicPr")
    SubElement(nv, f"{p}cNvPr", {"id": "2", "name": f"Page {index}"})
    c_nv = SubElement(nv, f"{p}cNvPicPr")
    SubElement(c_nv, f"{a}picLocks", {"noChangeAspect": "1"})
    SubElement(nv, f"{p}nvPr")
    fill = SubElement(pic, f"{p}blipFill")
    SubElement(fill, f"{a}blip", {f"{r}embed": "rId2"})
    SubElement(SubElement(fill, f"{a}stretch"), f"{a}fillRect")
    sp_pr = SubElement(pic, f"{p}spPr")
    xfrm = SubElement(sp_pr, f"{a}xfrm")
    SubElement(xfrm, f"{a}off", {"x": "0", "y": "0"})
    SubElement(xfrm, f"{a}ext", {"cx": str(cx), "cy": str(cy)})
    SubElement(SubElement(sp_pr, f"{a}prstGeom", {"prst": "rect"}), f"{a}avLst")
    clr = SubElement(root, f"{p}clrMapOvr")
    SubElement(clr, f"{a}masterClrMapping")
    return _serialize(root)


def _fit_frame(slide: SlideImage, cx: int, cy: int) -> tuple[int, int, int, int]:
    """Centre ``slide`` in a ``cx`` x ``cy`` slide keeping its aspect ratio."""

    scale = min(cx / (slide.width * EMU_PER_POINT), cy / (slide.height * EMU_PER_POINT))
    width = int(round(slide.width * EMU_PER_POINT * scale))
    height = int(round(slide.height * EMU_PER_POINT * scale))
    return (cx - width) // 2, (cy - height) // 2, width, height


def build_pptx(slides: Sequence[SlideImage]) -> bytes:
    """Return a PPTX package with one picture slide per entry.

    A deck has a single slide size, taken from the first entry; pages of
    another shape are scaled to fit and centred.
    """

    if not slides:
        raise ValueError("At least one slide image is required")

    first = slides[0]
    cx = int(round(first.width * EMU_PER_POINT))
    cy = int(round(first.height * EMU_PER_POINT))

    parts: list[PackagePart] = [
        PackagePart("_rels/.rels", _relationships_xml([("rId1", REL_OFFICE_DOCUMENT, "ppt/presentation.xml")])),
        PackagePart("ppt/presentation.xml", _presentation_xml(len(slides), cx, cy), CT_PRESENTATION),
        PackagePart(
            "ppt/_rels/presentation.xml.rels",
            _relationships_xml(
                [("rId1", REL_SLIDE_MASTER, "slideMasters/slideMaster1.xml")]
                + [(f"rId{i + 2}", REL_SLIDE, f"slides/slide{i + 1}.xml") for i in range(len(slides))]
                + [(f"rId{len(slides) + 2}", REL_THEME, "theme/theme1.xml")]
            ),
        ),
        PackagePart("ppt/slideMasters/slideMaster1.xml", _slide_master_xml(), CT_SLIDE_MASTER),
        PackagePart(
            "ppt/slideMasters/_rels/slideMaster1.xml.rels",
            _relationships_xml(
                [
                    ("rId1", REL_SLIDE_LAYOUT, "../slideLayouts/slideLayout1.xml"),
                    ("rId2", REL_THEME, "../theme/theme1.xml"),
                ]
            ),
        ),
        PackagePart("ppt/slideLayouts/slideLayout1.xml", _slide_layout_xml(), CT_SLIDE_LAYOUT),
        PackagePart(
            "ppt/slideLayouts/_rels/slideLayout1.xml.rels",
            _relationships_xml([("rId1", REL_SLIDE_MASTER, "../slideMasters/slideMaster1.xml")]),
        ),
        PackagePart("ppt/theme/theme1.xml", _theme_xml(), CT_THEME),
    ]

    extensions: set[str] = set()
    for index, slide in enumerate(slides, start=1):
        extension = slide.extension.lower().lstrip(".")
        extensions.add(extension)
        media = f"image{index}.{extension}"
        slide_xml = _slide_xml(index, _fit_frame(slide, cx, cy))
        parts.append(PackagePart(f"ppt/slides/slide{index}.xml", slide_xml, CT_SLIDE))
        parts.append(
            PackagePart(
                f"ppt/slides/_rels/slide{index}.xml.rels",
                _relationships_xml(
                    [
                        ("rId1", REL_SLIDE_LAYOUT, "../slideLayouts/slideLayout1.xml"),
                        ("rId2", REL_IMAGE, f"../media/{media}"),
                    ]
                ),
            )
        )
        parts.append(PackagePart(f"ppt/media/{media}", slide.data))

    image_types = {"png": "image/png", "jpg": "image/jpeg", "jpeg": "image/jpeg"}
    defaults = [(ext, image_types.get(ext, "application/octet-stream")) for ext in sorted(extensions)]
    LOGGER.debug("Writing PPTX with %d slide(s)", len(slides))
    return build_package(parts, extra_defaults=defaults)


# -- XLSX -------------------------------------------------------------------


def _column_letter(index: int) -> str:
    letters = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


def _clean_cell(value: object) -> str:
    text = _ILLEGAL_XML_CHARS.sub("", "" if value is None else str(value))
    return text[:MAX_CELL_LENGTH]


def _worksheet_xml(rows: Sequence[Sequence[object]]) -> bytes:
    s = f"{{{XML_NS['s']}}}"
    root = Element(f"{s}worksheet")
    data = SubElement(root, f"{s}sheetData")
    for row_index, row in enumerate(rows, start=1):
        row_el = SubElement(data, f"{s}row", {"r": str(row_index)})
        for col_index, value in enumerate(row):
            ref = f"{_column_letter(col_index)}{row_index}"
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                cell = SubElement(row_el, f"{s}c", {"r": ref})
                SubElement(cell, f"{s}v").text = str(value)
                continue
            cell = SubElement(row_el, f"{s}c", {"r": ref, "t": "inlineStr"})
            inline = SubElement(cell, f"{s}is")
            text_el = SubElement(inline, f"{s}t", {XML_SPACE: "preserve"})
            text_el.text = _clean_cell(value)
    return _serialize(root)


def _workbook_xml(sheet_name: str) -> bytes:
    s, r = f"{{{XML_NS['s']}}}", f"{{{XML_NS['r']}}}"
    root = Element(f"{s}workbook")
    sheets = SubElement(root, f"{s}sheets")
    SubElement(sheets, f"{s}sheet", {"name": sheet_name[:31], "sheetId": "1", f"{r}id": "rId1"})
    return _serialize(root)


def build_xlsx(rows: Sequence[Sequence[object]], *, sheet_name: str = "Sheet1") -> bytes:
    """Return an XLSX package holding ``rows`` in a single worksheet."""

    parts = [
        PackagePart("_rels/.rels", _relationships_xml([("rId1", REL_OFFICE_DOCUMENT, "xl/workbook.xml")])),
        PackagePart("xl/workbook.xml", _workbook_xml(sheet_name), CT_WORKBOOK),
        PackagePart(
            "xl/_rels/workbook.xml.rels",
            _relationships_xml([("rId1", REL_WORKSHEET, "worksheets/sheet1.xml")]),
        ),
        PackagePart("xl/worksheets/sheet1.xml", _worksheet_xml(rows), CT_WORKSHEET),
    ]
    LOGGER.debug("Writing XLSX with %d row(s)", len(rows))
    return build_package(parts)


__all__ = [
    "PackagePart",
    "SlideImage",
    "build_package",
    "build_pptx",
    "build_xlsx",
    "EMU_PER_POINT",
]
