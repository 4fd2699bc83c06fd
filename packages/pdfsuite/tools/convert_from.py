"""Tools that turn a PDF into images, text formats or Office packages."""

from __future__ import annotations

import csv
import html
import io
import json
from typing import List
from xml.etree.ElementTree import Element, SubElement, tostring

from ..core.container import SlideImage, build_pptx, build_xlsx
from ..core.document import PdfDocumentHandle
from ..core.exceptions import ValidationError
from ..core.ranges import parse_ranges
from ..core.raster import (
    DEFAULT_SCALE,
    IMAGE_FORMATS,
    render_page_to_surface,
    stitch_vertical,
    surface_to_image_bytes,
)
from ..core.types import (
    CSV_MIME,
    HTML_MIME,
    JSON_MIME,
    PNG_MIME,
    PPTX_MIME,
    TEXT_MIME,
    XLSX_MIME,
    XML_MIME,
    InputFile,
    ResultDescriptor,
)
from ..core.utils import get_logger
from .common.interfaces import BaseTool
from .common.options import PasswordOptions, RasterExportOptions
from .common.pipeline import register_tool

LOGGER = get_logger("pdfsuite.tools.convert_from")

JPEG_QUALITY = {"low": 60, "medium": 75, "high": 90}
LONG_IMAGE_SCALE = 1.5

_FORMAT_BY_TOOL = {
    "pdf-to-jpg": "jpeg",
    "pdf-to-png": "png",
    "pdf-to-bmp": "bmp",
    "pdf-to-tiff": "tiff",
}


def page_texts(document: PdfDocumentHandle) -> List[str]:
    return [view.extract_text() for view in document.pages()]


class _PdfSourceTool(BaseTool):
    options_class = PasswordOptions

    def _load(self) -> tuple[InputFile, PdfDocumentHandle]:
        file = self.files[0]
        return file, self.open_document(file)


@register_tool(*_FORMAT_BY_TOOL)
class PdfToImageTool(BaseTool):
    """Render pages to one image file each."""

    name = "pdf-to-jpg"
    options_class = RasterExportOptions

    def run(self) -> list[ResultDescriptor]:
        options: RasterExportOptions = self.options
        file = self.files[0]
        fmt = _FORMAT_BY_TOOL[self.name]
        _, extension, mime = IMAGE_FORMATS[fmt]
        password = options.password or None
        total = self.context.raster.page_count(file.data, password)
        if options.page_range == "specific":
            indices = parse_ranges(options.pages, total)
            if not indices:
                raise ValidationError("Select at least one existing page to convert")
        else:
            indices = list(range(total))

        results = []
        for index in indices:
            surface = render_page_to_surface(
                file.data, index, DEFAULT_SCALE, backend=self.context.raster, password=password
            )
            data = surface_to_image_bytes(surface, fmt, JPEG_QUALITY[options.quality])
            results.append(ResultDescriptor(f"{file.stem}_page_{index + 1}.{extension}", data, mime))
        LOGGER.info("Rendered %d page(s) of %s as %s", len(results), file.name, extension)
        return results


@register_tool("pdf-to-long-img")
class PdfToLongImageTool(BaseTool):
    name = "pdf-to-long-img"
    options_class = RasterExportOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        password = self.options.password or None
        backend = self.context.raster
        surfaces = [
            render_page_to_surface(file.data, index, LONG_IMAGE_SCALE, backend=backend, password=password)
            for index in range(backend.page_count(file.data, password))
        ]
        data = surface_to_image_bytes(stitch_vertical(surfaces), "png")
        return [ResultDescriptor(f"{file.stem}_long.png", data, PNG_MIME)]


@register_tool("pdf-to-text")
class PdfToTextTool(_PdfSourceTool):
    name = "pdf-to-text"

    def run(self) -> list[ResultDescriptor]:
        file, document = self._load()
        chunks = [f"--- Page {number} ---\n{text.strip()}\n" for number, text in enumerate(page_texts(document), start=1)]
        return [ResultDescriptor(f"{file.stem}.txt", "\n".join(chunks).encode("utf-8"), TEXT_MIME)]


@register_tool("pdf-to-html")
class PdfToHtmlTool(_PdfSourceTool):
    name = "pdf-to-html"

    def run(self) -> list[ResultDescriptor]:
        file, document = self._load()
        sections = []
        for number, text in enumerate(page_texts(document), start=1):
            paragraphs = "\n".join(f"    <p>{html.escape(line)}</p>" for line in text.splitlines() if line.strip())
            sections.append(f'  <section class="page" id="page-{number}">\n    <h2>Page {number}</h2>\n{paragraphs}\n  </section>')
        title = html.escape(document.metadata.get("/Title") or file.stem)
        body = "\n".join(sections)
        markup = (
            "<!DOCTYPE html>\n<html>\n<head>\n"
            f'<meta charset="utf-8">\n<title>{title}</title>\n'
            "</head>\n<body>\n"
            f"{body}\n"
            "</body>\n</html>\n"
        )
        return [ResultDescriptor(f"{file.stem}.html", markup.encode("utf-8"), HTML_MIME)]


@register_tool("convert-pdf-json")
class PdfToJsonTool(_PdfSourceTool):
    name = "convert-pdf-json"

    def run(self) -> list[ResultDescriptor]:
        file, document = self._load()
        payload = {
            "file": file.name,
            "pageCount": document.page_count,
            "metadata": {key.lstrip("/"): value for key, value in document.metadata.items()},
            "pages": [
                {
                    "number": view.index + 1,
                    "width": round(view.width, 2),
                    "height": round(view.height, 2),
                    "rotation": view.rotation,
                    "text": view.extract_text(),
                }
                for view in document.pages()
            ],
        }
        data = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
        return [ResultDescriptor(f"{file.stem}.json", data, JSON_MIME)]


@register_tool("pdf-to-csv")
class PdfToCsvTool(_PdfSourceTool):
    """One CSV row per non-empty text line."""

    name = "pdf-to-csv"

    def run(self) -> list[ResultDescriptor]:
        file, document = self._load()
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(["page", "line", "text"])
        for number, text in enumerate(page_texts(document), start=1):
            lines = [line for line in text.splitlines() if line.strip()]
            for line_number, line in enumerate(lines, start=1):
                writer.writerow([number, line_number, line.strip()])
        return [ResultDescriptor(f"{file.stem}.csv", buffer.getvalue().encode("utf-8"), CSV_MIME)]


@register_tool("convert-pdf-xml")
class PdfToXmlTool(_PdfSourceTool):
    name = "convert-pdf-xml"

    def run(self) -> list[ResultDescriptor]:
        file, document = self._load()
        root = Element("document", {"name": file.name, "pages": str(document.page_count)})
        info = SubElement(root, "metadata")
        for key, value in document.metadata.items():
            SubElement(info, "entry", {"key": key.lstrip("/")}).text = value
        for view in document.pages():
            page = SubElement(
                root,
                "page",
                {"number": str(view.index + 1), "width": f"{view.width:.2f}", "height": f"{view.height:.2f}"},
            )
            for line in view.extract_text().splitlines():
                if line.strip():
                    SubElement(page, "line").text = line.strip()
        data = tostring(root, encoding="utf-8", xml_declaration=True)
        return [ResultDescriptor(f"{file.stem}.xml", data, XML_MIME)]


@register_tool("pdf-to-powerpoint")
class PdfToPowerPointTool(BaseTool):
    """One picture slide per page."""

    name = "pdf-to-powerpoint"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        password = self.options.password or None
        document = self.open_document(file)
        backend = self.context.raster
        slides = []
        for view in document.pages():
            surface = render_page_to_surface(file.data, view.index, DEFAULT_SCALE, backend=backend, password=password)
            slides.append(SlideImage(surface_to_image_bytes(surface, "png"), view.width, view.height))
        return [ResultDescriptor(f"{file.stem}.pptx", build_pptx(slides), PPTX_MIME)]


@register_tool("pdf-to-excel")
class PdfToExcelTool(_PdfSourceTool):
    """One worksheet row per page with its extracted text."""

    name = "pdf-to-excel"

    def run(self) -> list[ResultDescriptor]:
        file, document = self._load()
        rows: List[List[object]] = [["Page", "Text"]]
        rows.extend([number, text.strip()] for number, text in enumerate(page_texts(document), start=1))
        return [ResultDescriptor(f"{file.stem}.xlsx", build_xlsx(rows, sheet_name="Pages"), XLSX_MIME)]


__all__ = [
    "PdfToImageTool",
    "PdfToLongImageTool",
    "PdfToTextTool",
    "PdfToHtmlTool",
    "PdfToJsonTool",
    "PdfToCsvTool",
    "PdfToXmlTool",
    "PdfToPowerPointTool",
    "PdfToExcelTool",
    "page_texts",
]
