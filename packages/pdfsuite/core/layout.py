"""Text and image placement on fixed-size pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from reportlab.pdfbase.pdfmetrics import stringWidth

from .document import PAGE_SIZES, FontRef, PdfDocumentHandle, resolve_page_size, sanitize_glyphs
from .exceptions import ValidationError

MARGINS = {"none": 0.0, "small": 20.0, "big": 50.0}
TEXT_MARGIN = 50.0
TAB = "    "


@dataclass(frozen=True)
class Placement:
    x: float
    y: float
    width: float
    height: float


def wrap_line(text: str, font: str, size: float, max_width: float) -> List[str]:
    """Greedy word wrap of one paragraph; words wider than a line are broken."""

    words = text.split(" ")
    lines: List[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if stringWidth(candidate, font, size) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = ""
        while stringWidth(word, font, size) > max_width and len(word) > 1:
            cut = len(word)
            while cut > 1 and stringWidth(word[:cut], font, size) > max_width:
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    lines.append(current)
    return lines


def wrap_text_to_pages(
    handle: PdfDocumentHandle,
    text: str,
    *,
    font_size: float = 12,
    font: FontRef | None = None,
    margin: float = TEXT_MARGIN,
    page_size: tuple[float, float] | str = "a4",
) -> int:
    """Lay ``text`` out on new pages appended to ``handle``.

    Returns the number of pages added. Empty text still yields one page.
    """

    if font_size <= 0:
        raise ValidationError("Font size must be positive")
    font = font or handle.embed_font("Helvetica")
    width, height = resolve_page_size(page_size)
    max_width = width - 2 * margin
    line_height = font_size + 4

    first_page = handle.page_count
    page_index = handle.add_page((width, height)).index
    y = height - margin

    for paragraph in sanitize_glyphs(text.replace("\r\n", "\n").replace("\t", TAB)).split("\n"):
        for line in wrap_line(paragraph, font.name, font_size, max_width):
            if y < margin:
                page_index = handle.add_page((width, height)).index
                y = height - margin
            if line.strip():
                handle.draw_text(page_index, line, x=margin, y=y, size=font_size, font=font)
            y -= line_height
        y -= line_height * 0.5
    return handle.page_count - first_page


def page_dimensions(
    page_size: str,
    orientation: str = "portrait",
    image_size: tuple[float, float] | None = None,
) -> tuple[float, float]:
    """Resolve the page for one image.

    ``"fit"`` sizes the page to the image itself; named sizes honour
    ``orientation``.
    """

    if page_size == "fit":
        if image_size is None:
            raise ValidationError("Image size is required for fit pages")
        return float(image_size[0]), float(image_size[1])
    if page_size not in PAGE_SIZES:
        raise ValidationError(f"Unknown page size {page_size!r}")
    width, height = PAGE_SIZES[page_size]
    if orientation == "landscape":
        return height, width
    return width, height


def fit_image(
    image_width: float,
    image_height: float,
    page_width: float,
    page_height: float,
    margin: float = 0.0,
) -> Placement:
    """Scale to fit inside the margins without upscaling and centre the result."""

    if image_width <= 0 or image_height <= 0:
        raise ValidationError("Image has no pixels")
    available_width = max(page_width - 2 * margin, 1.0)
    available_height = max(page_height - 2 * margin, 1.0)
    scale = min(available_width / image_width, available_height / image_height, 1.0)
    width = image_width * scale
    height = image_height * scale
    return Placement(
        x=(page_width - width) / 2,
        y=(page_height - height) / 2,
        width=width,
        height=height,
    )


__all__ = [
    "MARGINS",
    "TEXT_MARGIN",
    "Placement",
    "wrap_line",
    "wrap_text_to_pages",
    "page_dimensions",
    "fit_image",
]
