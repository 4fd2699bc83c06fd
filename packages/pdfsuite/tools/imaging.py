"""Raster-based page transforms."""

from __future__ import annotations

from ..core.document import PdfDocumentHandle
from ..core.raster import QUALITY_SCALES, Surface, deskew, enhance_contrast, grayscale, soft_proof_cmyk
from ..core.types import ResultDescriptor, pdf_result
from ..core.utils import get_logger
from .common.interfaces import BaseTool
from .common.options import ContrastOptions, GrayscaleOptions, OcrOptions, PasswordOptions, PrintOptions
from .common.pipeline import register_tool
from .common.rerender import rerender

LOGGER = get_logger("pdfsuite.tools.imaging")

OCR_SCALE = QUALITY_SCALES["high"]
OCR_TEXT_SIZE = 10
CROP_MARK_LENGTH = 12.0
CROP_MARK_GAP = 3.0
MIN_MARK_AREA = 18.0


@register_tool("grayscale-pdf")
class GrayscaleTool(BaseTool):
    name = "grayscale-pdf"
    options_class = GrayscaleOptions

    def run(self) -> list[ResultDescriptor]:
        options: GrayscaleOptions = self.options
        file = self.files[0]
        document = rerender(
            file,
            backend=self.context.raster,
            scale=QUALITY_SCALES[options.quality],
            password=options.password or None,
            transform=lambda surface: grayscale(surface, options.method),
        )
        return [pdf_result(f"grayscale_{file.name}", document.save())]


@register_tool("contrast-pdf")
class ContrastTool(BaseTool):
    name = "contrast-pdf"
    options_class = ContrastOptions

    def run(self) -> list[ResultDescriptor]:
        options: ContrastOptions = self.options
        file = self.files[0]
        document = rerender(
            file,
            backend=self.context.raster,
            scale=QUALITY_SCALES[options.quality],
            password=options.password or None,
            transform=lambda surface: enhance_contrast(surface, options.factor),
        )
        return [pdf_result(f"contrast_{file.name}", document.save())]


@register_tool("deskew-pdf")
class DeskewTool(BaseTool):
    name = "deskew-pdf"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        angles: list[float] = []

        def straighten(surface: Surface) -> Surface:
            result, angle = deskew(surface)
            angles.append(angle)
            return result

        document = rerender(
            file,
            backend=self.context.raster,
            scale=QUALITY_SCALES["high"],
            password=self.options.password or None,
            transform=straighten,
        )
        LOGGER.info("Deskewed %s with corrections %s", file.name, angles)
        return [pdf_result(f"deskewed_{file.name}", document.save())]


@register_tool("ocr-pdf")
class OcrTool(BaseTool):
    """Searchable-image output: page images plus an invisible text layer.

    Recognition is not performed; the text layer carries whatever text the
    source pages already expose.
    """

    name = "ocr-pdf"
    options_class = OcrOptions

    def run(self) -> list[ResultDescriptor]:
        options: OcrOptions = self.options
        file = self.files[0]
        source = self.open_document(file)
        texts = [view.extract_text() for view in source.pages()]

        def prepare(surface: Surface) -> Surface:
            if options.deskew:
                surface = deskew(surface)[0]
            if options.enhance:
                surface = enhance_contrast(surface, 1.2)
            return surface

        document = rerender(
            file,
            backend=self.context.raster,
            scale=OCR_SCALE,
            password=options.password or None,
            transform=prepare,
        )
        font = document.embed_font("Helvetica")
        for view, text in zip(document.pages(), texts):
            y = view.height - 40
            for line in text.splitlines():
                if y < 20:
                    break
                if line.strip():
                    document.draw_text(view.index, line.strip(), x=40, y=y, size=OCR_TEXT_SIZE, font=font, invisible=True)
                y -= OCR_TEXT_SIZE + 2
        document.set_metadata(keywords=[f"ocr-language:{options.language}"])
        LOGGER.info("Built text layer for %s (%s)", file.name, options.language)
        return [pdf_result(f"ocr_{file.name}", document.save())]


def draw_crop_marks(document: PdfDocumentHandle, index: int, offset: float) -> None:
    """Draw corner marks outside the trim box that sits ``offset`` in from each edge."""

    view = document.page(index)
    left, bottom = offset, offset
    right, top = view.width - offset, view.height - offset
    length = min(CROP_MARK_LENGTH, max(offset - CROP_MARK_GAP, 1.0))
    for x, y, dx, dy in ((left, bottom, -1, -1), (right, bottom, 1, -1), (left, top, -1, 1), (right, top, 1, 1)):
        document.draw_line(index, x + dx * CROP_MARK_GAP, y, x + dx * (CROP_MARK_GAP + length), y, thickness=0.5)
        document.draw_line(index, x, y + dy * CROP_MARK_GAP, x, y + dy * (CROP_MARK_GAP + length), thickness=0.5)


@register_tool("print-ready")
class PrintReadyTool(BaseTool):
    name = "print-ready"
    options_class = PrintOptions

    def run(self) -> list[ResultDescriptor]:
        options: PrintOptions = self.options
        file = self.files[0]
        if options.color_profile == "cmyk":
            transform = soft_proof_cmyk
        else:
            transform = lambda surface: grayscale(surface, "luminosity")  # noqa: E731
        offset = options.bleed
        if options.crop_marks:
            offset = max(offset, MIN_MARK_AREA)
        document = rerender(
            file,
            backend=self.context.raster,
            scale=QUALITY_SCALES["high"],
            password=options.password or None,
            transform=transform,
            offset=offset,
        )
        if options.crop_marks:
            for view in document.pages():
                draw_crop_marks(document, view.index, offset)
        return [pdf_result(f"print_ready_{file.name}", document.save())]


__all__ = ["GrayscaleTool", "ContrastTool", "DeskewTool", "OcrTool", "PrintReadyTool", "draw_crop_marks"]
