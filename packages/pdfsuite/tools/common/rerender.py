"""Rebuild a PDF from rendered page images."""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from ...core.document import PdfDocumentHandle
from ...core.raster import RasterBackend, Surface, render_page_to_surface, surface_to_image_bytes
from ...core.types import InputFile
from ...core.utils import get_logger

LOGGER = get_logger("pdfsuite.tools.rerender")

SurfaceTransform = Callable[[Surface], Surface]
PageSizeFn = Callable[[float, float], Tuple[float, float]]


def rerender(
    file: InputFile,
    *,
    backend: RasterBackend,
    scale: float,
    password: Optional[str] = None,
    transform: Optional[SurfaceTransform] = None,
    page_size: Optional[PageSizeFn] = None,
    offset: float = 0.0,
    image_format: str = "jpeg",
    quality: int = 92,
) -> PdfDocumentHandle:
    """Render every page of ``file``, transform it and place it on a new page.

    ``page_size`` maps the rendered page size in points to the output page
    size; the image is scaled to fit and centred. ``offset`` adds an empty
    border around the image on every side (used for bleed).
    """

    output = PdfDocumentHandle.create()
    count = backend.page_count(file.data, password)
    for index in range(count):
        surface = render_page_to_surface(file.data, index, scale, backend=backend, password=password)
        if transform is not None:
            surface = transform(surface)
        width, height = surface.width / scale, surface.height / scale
        target_width, target_height = page_size(width, height) if page_size else (width, height)
        fit = min(target_width / width, target_height / height)
        draw_width, draw_height = width * fit, height * fit
        image = output.embed_image(surface_to_image_bytes(surface, image_format, quality))
        page_index = output.add_page((target_width + 2 * offset, target_height + 2 * offset)).index
        output.draw_image(
            page_index,
            image,
            x=offset + (target_width - draw_width) / 2,
            y=offset + (target_height - draw_height) / 2,
            width=draw_width,
            height=draw_height,
        )
    LOGGER.debug("Re-rendered %d page(s) of %s at scale %.2f", count, file.name, scale)
    return output


__all__ = ["rerender", "SurfaceTransform", "PageSizeFn"]
