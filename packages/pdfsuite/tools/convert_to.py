"""Tools that build a PDF out of images, text documents or a QR code."""

from __future__ import annotations

from io import BytesIO
from typing import List, Tuple

import markdown as md_lib
import qrcode
from bs4 import BeautifulSoup
from docx import Document
from openpyxl import load_workbook
from PIL import Image
from pillow_heif import register_heif_opener
from pptx import Presentation

from ..core.document import ImageRef, PdfDocumentHandle
from ..core.exceptions import ProcessingError, UnsupportedFormatError, ValidationError
from ..core.layout import MARGINS, fit_image, page_dimensions, wrap_text_to_pages
from ..core.raster import rasterize_svg
from ..core.types import InputFile, ResultDescriptor, pdf_result
from ..core.utils import get_logger
from .common.interfaces import BaseTool
from .common.options import ImageLayoutOptions, QrOptions, TextDocumentOptions
from .common.pipeline import register_tool

register_heif_opener()

LOGGER = get_logger("pdfsuite.tools.convert_to")

LEGACY_SUFFIXES = (".doc", ".xls", ".ppt")
LEGACY_MESSAGE = (
    "Legacy formats (.doc, .xls, .ppt) are binary and strictly require server-side conversion. "
    "Please save as .docx/.xlsx or PDF."
)
SVG_SCALE = 2.0
QR_DISPLAY_SCALE = 0.5
QR_CAPTION_LIMIT = 50

IMAGE_TOOL_IDS = (
    "jpg-to-pdf",
    "png-to-pdf",
    "bmp-to-pdf",
    "webp-to-pdf",
    "tiff-to-pdf",
    "heic-to-pdf",
    "svg-to-pdf",
    "scan-pdf",
)


def _is_svg(file: InputFile) -> bool:
    return file.suffix == ".svg" or file.mime_type == "image/svg+xml" or file.data.lstrip()[:5] in (b"<svg ", b"<?xml")


def load_image(document: PdfDocumentHandle, file: InputFile) -> Tuple[ImageRef, float, float]:
    """Embed ``file`` and return it with its layout size in points."""

    if _is_svg(file):
        png, width, height = rasterize_svg(file.data, SVG_SCALE, name=file.name)
        return document.embed_image(png, "PNG"), width, height
    image = document.embed_image(file.data)
    return image, float(image.width), float(image.height)


@register_tool(*IMAGE_TOOL_IDS)
class ImagesToPdfTool(BaseTool):
    """One page per image; files that fail to decode are skipped."""

    name = "jpg-to-pdf"
    options_class = ImageLayoutOptions

    def run(self) -> list[ResultDescriptor]:
        options: ImageLayoutOptions = self.options
        margin = MARGINS[options.margin]
        document = PdfDocumentHandle.create()
        failures: List[ProcessingError] = []
        for file in self.files:
            try:
                image, width, height = load_image(document, file)
            except ProcessingError as exc:
                LOGGER.warning("Skipping %s: %s", file.name, exc.message)
                failures.append(exc)
                continue
            page_width, page_height = page_dimensions(options.page_size, options.orientation, (width, height))
            index = document.add_page((page_width, page_height)).index
            placement = fit_image(width, height, page_width, page_height, margin)
            document.draw_image(
                index,
                image,
                x=placement.x,
                y=placement.y,
                width=placement.width,
                height=placement.height,
            )
        if document.page_count == 0:
            raise failures[0]
        LOGGER.info("Converted %d of %d image(s)", document.page_count, len(self.files))
        return [pdf_result("images_converted.pdf", document.save())]


def _reject_legacy(file: InputFile) -> None:
    if file.suffix in LEGACY_SUFFIXES:
        raise UnsupportedFormatError(LEGACY_MESSAGE)


def _html_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup.get_text("\n").strip()


def _docx_text(file: InputFile) -> str:
    try:
        document = Document(BytesIO(file.data))
    except Exception as exc:
        raise UnsupportedFormatError(f"{file.name} is not a readable Word document") from exc
    paragraphs = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            paragraphs.append("\t".join(cell.text for cell in row.cells))
    return "\n".join(paragraphs)


def _xlsx_text(file: InputFile) -> str:
    try:
        workbook = load_workbook(BytesIO(file.data), read_only=True, data_only=True)
    except Exception as exc:
        raise UnsupportedFormatError(f"{file.name} is not a readable Excel workbook") from exc
    lines: List[str] = []
    try:
        for sheet in workbook.worksheets:
            lines.append(f"[{sheet.title}]")
            for row in sheet.iter_rows(values_only=True):
                if any(value is not None for value in row):
                    lines.append("\t".join("" if value is None else str(value) for value in row))
            lines.append("")
    finally:
        workbook.close()
    return "\n".join(lines)


def _pptx_text(file: InputFile) -> str:
    try:
        presentation = Presentation(BytesIO(file.data))
    except Exception as exc:
        raise UnsupportedFormatError(f"{file.name} is not a readable PowerPoint file") from exc
    lines: List[str] = []
    for number, slide in enumerate(presentation.slides, start=1):
        lines.append(f"Slide {number}")
        for shape in slide.shapes:
            if shape.has_text_frame and shape.text_frame.text.strip():
                lines.append(shape.text_frame.text)
        lines.append("")
    return "\n".join(lines)


def extract_source_text(tool_id: str, file: InputFile) -> str:
    """Return the plain text a text-family tool should lay out."""

    _reject_legacy(file)
    if file.suffix == ".docx":
        text = _docx_text(file)
        if not text.strip():
            raise ValidationError(
                "Could not extract text from this Word document. It might be empty or contain only images."
            )
        return text
    if file.suffix == ".xlsx":
        return _xlsx_text(file)
    if file.suffix == ".pptx":
        return _pptx_text(file)
    if tool_id == "markdown-to-pdf" or file.suffix in {".md", ".markdown"}:
        return _html_text(md_lib.markdown(file.text(), extensions=["tables", "fenced_code"]))
    if tool_id == "html-to-pdf" or file.suffix in {".html", ".htm"}:
        return _html_text(file.text())
    return file.text()


@register_tool("txt-to-pdf", "markdown-to-pdf", "html-to-pdf", "word-to-pdf", "excel-to-pdf", "powerpoint-to-pdf")
class TextToPdfTool(BaseTool):
    name = "txt-to-pdf"
    options_class = TextDocumentOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        text = extract_source_text(self.name, file)
        document = PdfDocumentHandle.create()
        font = document.embed_font(self.options.font)
        pages = wrap_text_to_pages(document, text, font_size=self.options.font_size, font=font)
        LOGGER.debug("Laid out %d characters from %s on %d page(s)", len(text), file.name, pages)
        return [pdf_result(f"{file.stem}_converted.pdf", document.save())]


def render_qr_png(options: QrOptions) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction={
            "L": qrcode.constants.ERROR_CORRECT_L,
            "M": qrcode.constants.ERROR_CORRECT_M,
            "Q": qrcode.constants.ERROR_CORRECT_Q,
            "H": qrcode.constants.ERROR_CORRECT_H,
        }[options.error_correction],
        box_size=10,
        border=2,
    )
    qr.add_data(options.text)
    qr.make(fit=True)
    raw = BytesIO()
    qr.make_image(fill_color=options.color, back_color=options.background).save(raw, "PNG")
    raw.seek(0)
    with Image.open(raw) as image:
        resized = image.convert("RGB").resize((options.size, options.size), Image.NEAREST)
    buffer = BytesIO()
    resized.save(buffer, "PNG")
    return buffer.getvalue()


@register_tool("qr-to-pdf")
class QrToPdfTool(BaseTool):
    name = "qr-to-pdf"
    min_files = 0
    options_class = QrOptions

    def run(self) -> list[ResultDescriptor]:
        options: QrOptions = self.options
        document = PdfDocumentHandle.create()
        index = document.add_page("a4").index
        width, height = document.page(index).size
        image = document.embed_image(render_qr_png(options), "PNG")
        draw_width = image.width * QR_DISPLAY_SCALE
        draw_height = image.height * QR_DISPLAY_SCALE
        bottom = (height - draw_height) / 2
        document.draw_image(index, image, x=(width - draw_width) / 2, y=bottom, width=draw_width, height=draw_height)
        if options.include_text:
            caption = options.text if len(options.text) <= QR_CAPTION_LIMIT else options.text[:QR_CAPTION_LIMIT] + "..."
            document.draw_text(index, caption, x=50, y=bottom - 30, size=12, font=document.embed_font("Helvetica"))
        return [pdf_result("qrcode.pdf", document.save())]


__all__ = [
    "ImagesToPdfTool",
    "TextToPdfTool",
    "QrToPdfTool",
    "IMAGE_TOOL_IDS",
    "LEGACY_MESSAGE",
    "extract_source_text",
    "load_image",
    "render_qr_png",
]
