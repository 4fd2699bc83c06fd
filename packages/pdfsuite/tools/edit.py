"""Tools that draw on or restyle existing pages."""

from __future__ import annotations

from datetime import datetime

from ..core.annotations import annotation_from_dict, flatten_annotations
from ..core.document import PAGE_SIZES, PdfDocumentHandle
from ..core.exceptions import ValidationError
from ..core.raster import QUALITY_SCALES
from ..core.types import ResultDescriptor, pdf_result
from ..core.utils import get_logger
from .common.interfaces import BaseTool
from .common.options import (
    AnnotationOptions,
    CropOptions,
    HeaderFooterOptions,
    MetadataOptions,
    PageNumberOptions,
    PasswordOptions,
    ResizeOptions,
    TimestampOptions,
    ViewerOptions,
    WatermarkOptions,
)
from .common.pipeline import register_tool
from .common.rerender import rerender

LOGGER = get_logger("pdfsuite.tools.edit")

EDGE_MARGIN = 40.0
BASELINE_MARGIN = 30.0


def anchor(position: str, width: float, height: float, size: float) -> tuple[float, float, str]:
    """Return ``(x, y, align)`` for a named page position such as ``bottom-center``."""

    vertical, horizontal = position.split("-", 1)
    y = BASELINE_MARGIN if vertical == "bottom" else height - BASELINE_MARGIN - size
    if horizontal == "left":
        return EDGE_MARGIN, y, "left"
    if horizontal == "right":
        return width - EDGE_MARGIN, y, "right"
    return width / 2, y, "center"


def add_watermark(document: PdfDocumentHandle, options: WatermarkOptions) -> None:
    font = document.embed_font("Helvetica-Bold")
    for view in document.pages():
        document.draw_text(
            view.index,
            options.text,
            x=view.width / 2,
            y=view.height / 2 - options.size / 3,
            size=options.size,
            font=font,
            color=options.color,
            opacity=options.opacity,
            rotation=options.rotation,
            align="center",
        )


@register_tool("watermark-pdf")
class WatermarkTool(BaseTool):
    name = "watermark-pdf"
    options_class = WatermarkOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        add_watermark(document, self.options)
        return [pdf_result(f"watermarked_{file.name}", document.save())]


@register_tool("page-numbers")
class PageNumbersTool(BaseTool):
    name = "page-numbers"
    options_class = PageNumberOptions

    def run(self) -> list[ResultDescriptor]:
        options: PageNumberOptions = self.options
        file = self.files[0]
        document = self.open_document(file)
        font = document.embed_font(self.settings.default_font)
        last = options.start + document.page_count - 1
        for view in document.pages():
            number = options.start + view.index
            label = str(number) if options.format == "number" else f"Page {number} of {last}"
            x, y, align = anchor(options.position, view.width, view.height, options.size)
            document.draw_text(view.index, label, x=x, y=y, size=options.size, font=font, align=align)
        return [pdf_result(f"numbered_{file.name}", document.save())]


@register_tool("add-header-footer")
class HeaderFooterTool(BaseTool):
    name = "add-header-footer"
    options_class = HeaderFooterOptions

    def run(self) -> list[ResultDescriptor]:
        options: HeaderFooterOptions = self.options
        file = self.files[0]
        document = self.open_document(file)
        font = document.embed_font(self.settings.default_font)
        for view in document.pages():
            if options.header.strip():
                x, y, align = anchor("top-center", view.width, view.height, options.size)
                document.draw_text(view.index, options.header, x=x, y=y, size=options.size, font=font, align=align)
            if options.footer.strip():
                x, y, align = anchor("bottom-center", view.width, view.height, options.size)
                document.draw_text(view.index, options.footer, x=x, y=y, size=options.size, font=font, align=align)
        return [pdf_result(f"header_footer_{file.name}", document.save())]


@register_tool("timestamp-pdf")
class TimestampTool(BaseTool):
    name = "timestamp-pdf"
    options_class = TimestampOptions

    def run(self) -> list[ResultDescriptor]:
        options: TimestampOptions = self.options
        file = self.files[0]
        document = self.open_document(file)
        now = self.context.resources.get("now") or datetime.now()
        label = now.strftime(options.format)
        font = document.embed_font(self.settings.default_font)
        for view in document.pages():
            x, y, align = anchor(options.position, view.width, view.height, options.size)
            document.draw_text(view.index, label, x=x, y=y, size=options.size, font=font, align=align)
        document.set_metadata(modification_date=now)
        return [pdf_result(f"timestamped_{file.name}", document.save())]


@register_tool("crop-pdf")
class CropTool(BaseTool):
    """Trim the same margin from every side of every page."""

    name = "crop-pdf"
    options_class = CropOptions

    def run(self) -> list[ResultDescriptor]:
        margin = self.options.margin
        file = self.files[0]
        document = self.open_document(file)
        for view in document.pages():
            left, bottom, width, height = view.crop_box
            if width - 2 * margin <= 0 or height - 2 * margin <= 0:
                raise ValidationError(f"Crop margin {margin:g} is larger than page {view.index + 1}")
            document.set_crop_box(view.index, left + margin, bottom + margin, width - 2 * margin, height - 2 * margin)
        return [pdf_result(f"cropped_{file.name}", document.save())]


@register_tool("resize-pdf")
class ResizeTool(BaseTool):
    """Re-render every page onto the target paper size, keeping orientation."""

    name = "resize-pdf"
    options_class = ResizeOptions

    def run(self) -> list[ResultDescriptor]:
        options: ResizeOptions = self.options
        file = self.files[0]
        paper_width, paper_height = PAGE_SIZES[options.target]

        def target(width: float, height: float) -> tuple[float, float]:
            if width > height:
                return paper_height, paper_width
            return paper_width, paper_height

        document = rerender(
            file,
            backend=self.context.raster,
            scale=QUALITY_SCALES[options.quality],
            password=options.password or None,
            page_size=target,
        )
        return [pdf_result(f"resized_{file.name}", document.save())]


@register_tool("meta-edit")
class MetadataTool(BaseTool):
    name = "meta-edit"
    options_class = MetadataOptions

    def run(self) -> list[ResultDescriptor]:
        options: MetadataOptions = self.options
        file = self.files[0]
        document = self.open_document(file)
        document.set_metadata(
            title=options.title or None,
            author=options.author or None,
            subject=options.subject or None,
            keywords=[word.strip() for word in options.keywords.split(",") if word.strip()] or None,
            creator=options.creator or None,
            modification_date=datetime.now(),
        )
        return [pdf_result(f"metadata_{file.name}", document.save())]


@register_tool("set-viewer")
class ViewerPreferencesTool(BaseTool):
    name = "set-viewer"
    options_class = ViewerOptions

    def run(self) -> list[ResultDescriptor]:
        options: ViewerOptions = self.options
        file = self.files[0]
        document = self.open_document(file)
        document.set_viewer_preferences(
            page_mode=options.page_mode,
            page_layout=options.page_layout,
            fit_window=options.fit_window,
            center_window=options.center_window,
            hide_toolbar=options.hide_toolbar,
            hide_menubar=options.hide_menubar,
        )
        return [pdf_result(f"viewer_{file.name}", document.save())]


@register_tool("delete-annotations")
class DeleteAnnotationsTool(BaseTool):
    name = "delete-annotations"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        document.remove_annotations()
        return [pdf_result(f"clean_{file.name}", document.save())]


@register_tool("annotation-pdf")
class AnnotateTool(BaseTool):
    """Flatten editor annotations onto the pages."""

    name = "annotation-pdf"
    options_class = AnnotationOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        annotations = [annotation_from_dict(raw) for raw in self.options.annotations]
        if not annotations:
            raise ValidationError("Add at least one annotation before saving")
        document = self.open_document(file)
        applied = flatten_annotations(document, annotations)
        LOGGER.info("Applied %d of %d annotation(s) to %s", applied, len(annotations), file.name)
        return [pdf_result(f"annotated_{file.name}", document.save())]


__all__ = [
    "WatermarkTool",
    "PageNumbersTool",
    "HeaderFooterTool",
    "TimestampTool",
    "CropTool",
    "ResizeTool",
    "MetadataTool",
    "ViewerPreferencesTool",
    "DeleteAnnotationsTool",
    "AnnotateTool",
    "add_watermark",
    "anchor",
]
