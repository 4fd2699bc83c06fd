"""Repair, comparison, inspection and optimisation tools."""

from __future__ import annotations

import difflib
import json
from datetime import datetime
from typing import Any, Dict, List

from ..core.document import PdfDocumentHandle, RepairMode, open_reader
from ..core.exceptions import ProcessingError, ValidationError
from ..core.inspection import collect_fonts, collect_images, document_summary
from ..core.raster import difference_ratio, render_page_to_surface
from ..core.types import JSON_MIME, OCTET_STREAM_MIME, ResultDescriptor, pdf_result
from ..core.utils import format_file_size, get_logger
from .common.interfaces import BaseTool
from .common.options import (
    AnalyzeOptions,
    BatchOptions,
    CompareOptions,
    PasswordOptions,
    RepairOptions,
    WatermarkOptions,
    WebOptimizeOptions,
)
from .common.pipeline import register_tool
from .edit import add_watermark
from .organize import rotate_document

LOGGER = get_logger("pdfsuite.tools.advanced")

COMPARE_SCALE = 1.0
WEB_IMAGE_QUALITY = 50


def _json_result(name: str, payload: Dict[str, Any]) -> ResultDescriptor:
    return ResultDescriptor(name, json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8"), JSON_MIME)


@register_tool("repair-pdf")
class RepairTool(BaseTool):
    """Best-effort recovery: copy every readable page into a fresh document.

    ``minimal`` keeps the document information untouched, ``standard``
    rewrites producer and modification date, ``aggressive`` additionally
    recompresses content streams and drops active content.
    """

    name = "repair-pdf"
    options_class = RepairOptions

    def run(self) -> list[ResultDescriptor]:
        options: RepairOptions = self.options
        file = self.files[0]
        mode = RepairMode.REMOVE if options.remove_corrupted else RepairMode.PLACEHOLDER
        document = PdfDocumentHandle.load(file.data, options.password or None, repair=mode, name=file.name)
        if options.mode in ("standard", "aggressive"):
            document.set_metadata(producer="pdfsuite repair", modification_date=datetime.now())
        if options.mode == "aggressive":
            document.strip_active_content()
            document.compress_streams()
        LOGGER.info("Repaired %s in %s mode: %d page(s)", file.name, options.mode, document.page_count)
        return [pdf_result(f"repaired_{file.name}", document.save())]


@register_tool("compare-pdf")
class CompareTool(BaseTool):
    """Page-by-page text and/or visual comparison of the first two files."""

    name = "compare-pdf"
    min_files = 2
    options_class = CompareOptions

    def run(self) -> list[ResultDescriptor]:
        options: CompareOptions = self.options
        first, second = self.files[0], self.files[1]
        left = self.open_document(first)
        right = self.open_document(second)
        pages: List[Dict[str, Any]] = []
        for index in range(max(left.page_count, right.page_count)):
            entry: Dict[str, Any] = {"page": index + 1}
            if index >= left.page_count or index >= right.page_count:
                entry["status"] = "only-in-first" if index < left.page_count else "only-in-second"
                pages.append(entry)
                continue
            if options.mode in ("text", "both"):
                before = left.page(index).extract_text().splitlines()
                after = right.page(index).extract_text().splitlines()
                entry["textSimilarity"] = round(difflib.SequenceMatcher(None, before, after).ratio(), 4)
                entry["textDiff"] = list(difflib.unified_diff(before, after, first.name, second.name, lineterm=""))
            if options.mode in ("visual", "both"):
                password = options.password or None
                ratio = difference_ratio(
                    render_page_to_surface(first.data, index, COMPARE_SCALE, backend=self.context.raster, password=password),
                    render_page_to_surface(second.data, index, COMPARE_SCALE, backend=self.context.raster, password=password),
                )
                entry["pixelDifference"] = round(ratio, 6)
            entry["status"] = "identical" if self._identical(entry) else "different"
            pages.append(entry)
        report = {
            "first": first.name,
            "second": second.name,
            "mode": options.mode,
            "pageCount": [left.page_count, right.page_count],
            "identical": all(page["status"] == "identical" for page in pages),
            "pages": pages,
        }
        return [_json_result("comparison_report.json", report)]

    @staticmethod
    def _identical(entry: Dict[str, Any]) -> bool:
        return entry.get("textSimilarity", 1.0) == 1.0 and entry.get("pixelDifference", 0.0) == 0.0


@register_tool("overlay-pdf")
class OverlayTool(BaseTool):
    """Stamp the pages of the second file over the first, repeating the overlay's last page."""

    name = "overlay-pdf"
    min_files = 2
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        base_file = self.files[0]
        document = self.open_document(base_file)
        overlay = self.open_document(self.files[1])
        for view in document.pages():
            source_index = min(view.index, overlay.page_count - 1)
            document.place_page(view.index, overlay, source_index)
        return [pdf_result(f"overlay_{base_file.name}", document.save())]


def compress_document(document: PdfDocumentHandle, original: bytes) -> bytes:
    """Deflate streams and deduplicate objects; never return something larger."""

    document.compress_streams()
    data = document.save(compact=True)
    if len(data) >= len(original):
        LOGGER.debug("Compression did not shrink the file; keeping the original bytes")
        return original
    return data


@register_tool("compress-pdf")
class CompressTool(BaseTool):
    name = "compress-pdf"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        data = compress_document(document, file.data)
        LOGGER.info("Compressed %s from %s to %s", file.name, format_file_size(file.size), format_file_size(len(data)))
        return [pdf_result(f"compressed_{file.name}", data)]


@register_tool("optimize-web")
class OptimizeWebTool(BaseTool):
    """Shrink a PDF for online delivery.

    ``high`` compression also re-encodes embedded raster images as JPEG.
    """

    name = "optimize-web"
    options_class = WebOptimizeOptions

    def run(self) -> list[ResultDescriptor]:
        options: WebOptimizeOptions = self.options
        file = self.files[0]
        document = self.open_document(file)
        if options.remove_metadata:
            document.clear_metadata()
        if options.compression == "high":
            replaced = document.recompress_images(WEB_IMAGE_QUALITY)
            LOGGER.info("Re-encoded %d image(s) in %s", replaced, file.name)
        if options.compression == "low":
            document.compress_streams()
            data = document.save(compact=False)
        else:
            data = compress_document(document, file.data)
        return [pdf_result(f"web_{file.name}", data)]


@register_tool("extract-fonts")
class ExtractFontsTool(BaseTool):
    """Report every font and export the embedded font programs."""

    name = "extract-fonts"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        reader = open_reader(file.data, self.options.password or None, name=file.name)
        fonts = collect_fonts(reader, include_programs=True)
        results = [_json_result(f"{file.stem}_fonts.json", {"file": file.name, "fonts": [font.as_dict() for font in fonts]})]
        for font in fonts:
            if font.program:
                results.append(
                    ResultDescriptor(f"{font.name}.{font.program_extension}", font.program, OCTET_STREAM_MIME)
                )
        return results


@register_tool("extract-images")
class ExtractImagesTool(BaseTool):
    name = "extract-images"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        reader = open_reader(file.data, self.options.password or None, name=file.name)
        images = collect_images(reader)
        if not images:
            raise ValidationError(f"No images found in {file.name}")
        return [
            ResultDescriptor(f"{file.stem}_page{image.page}_{image.name}", image.data, image.mime_type)
            for image in images
        ]


@register_tool("analyze-pdf")
class AnalyzeTool(BaseTool):
    name = "analyze-pdf"
    options_class = AnalyzeOptions

    def run(self) -> list[ResultDescriptor]:
        options: AnalyzeOptions = self.options
        file = self.files[0]
        reader = open_reader(file.data, options.password or None, name=file.name)
        report = document_summary(reader, size=file.size)
        report["file"] = file.name
        report["fileSizeLabel"] = format_file_size(file.size)
        if options.fonts:
            report["fonts"] = [font.as_dict() for font in collect_fonts(reader)]
        if options.images:
            images = collect_images(reader)
            report["images"] = {"count": len(images), "pages": sorted({image.page for image in images})}
        if options.text:
            texts = [page.extract_text() or "" for page in reader.pages]
            report["text"] = {
                "characters": sum(len(text) for text in texts),
                "words": sum(len(text.split()) for text in texts),
                "pagesWithoutText": [number for number, text in enumerate(texts, start=1) if not text.strip()],
            }
        return [_json_result(f"{file.stem}_analysis.json", report)]


@register_tool("batch-process")
class BatchTool(BaseTool):
    """Apply one action to every PDF; files that fail are skipped."""

    name = "batch-process"
    options_class = BatchOptions

    def run(self) -> list[ResultDescriptor]:
        action = self.options.action
        results: list[ResultDescriptor] = []
        failures: list[ProcessingError] = []
        for file in self.files:
            try:
                if not file.is_pdf():
                    raise ValidationError(f"{file.name} is not a PDF")
                results.append(pdf_result(f"batch_{file.name}", self._apply(action, file)))
            except ProcessingError as exc:
                LOGGER.warning("Skipping %s in batch: %s", file.name, exc.message)
                failures.append(exc)
        if not results:
            raise failures[0]
        LOGGER.info("Batch %s processed %d of %d file(s)", action, len(results), len(self.files))
        return results

    def _apply(self, action: str, file) -> bytes:
        password = self.context.options.get("password") or None
        document = PdfDocumentHandle.load(file.data, password, name=file.name)
        if action == "compress":
            return compress_document(document, file.data)
        if action == "rotate":
            angle = int(self.context.options.get("rotation", 90))
            if angle % 90:
                raise ValidationError("Rotation must be a multiple of 90 degrees")
            rotate_document(document, angle, range(document.page_count))
        else:
            add_watermark(document, WatermarkOptions.from_bag(self.context.options, self.settings))
        return document.save()


__all__ = [
    "RepairTool",
    "CompareTool",
    "OverlayTool",
    "CompressTool",
    "OptimizeWebTool",
    "ExtractFontsTool",
    "ExtractImagesTool",
    "AnalyzeTool",
    "BatchTool",
    "compress_document",
]
