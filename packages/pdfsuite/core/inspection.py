"""Read-only inspection of PDF resources: fonts, images and summary facts."""

from __future__ import annotations

import mimetypes
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List

from pypdf import PdfReader

from .utils import get_logger

LOGGER = get_logger("pdfsuite.inspection")

FONT_FILE_KEYS = {"/FontFile": "pfb", "/FontFile2": "ttf", "/FontFile3": "cff"}


@dataclass
class FontInfo:
    name: str
    subtype: str
    embedded: bool
    subset: bool
    pages: List[int] = field(default_factory=list)
    program: bytes | None = field(default=None, repr=False)
    program_extension: str | None = None

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("program")
        return data


@dataclass(frozen=True)
class ImageInfo:
    page: int
    name: str
    data: bytes = field(repr=False)

    @property
    def mime_type(self) -> str:
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed or "application/octet-stream"


def _font_dicts(page) -> Iterator[Any]:
    resources = page.get("/Resources")
    if resources is None:
        return
    font_dict = resources.get_object().get("/Font")
    if font_dict is None:
        return
    for font in font_dict.get_object().values():
        yield font.get_object()


def _descriptor(font) -> Any:
    descriptor = font.get("/FontDescriptor")
    if descriptor is None and "/DescendantFonts" in font:
        descendants = font["/DescendantFonts"].get_object()
        if descendants:
            descriptor = descendants[0].get_object().get("/FontDescriptor")
    return descriptor.get_object() if descriptor is not None else None


def collect_fonts(reader: PdfReader, *, include_programs: bool = False) -> List[FontInfo]:
    """Return one entry per distinct ``/BaseFont`` with the pages using it."""

    fonts: Dict[str, FontInfo] = {}
    for page_number, page in enumerate(reader.pages, start=1):
        for font in _font_dicts(page):
            base_font = str(font.get("/BaseFont", "/Unnamed")).lstrip("/")
            info = fonts.get(base_font)
            if info is None:
                descriptor = _descriptor(font)
                program = None
                extension = None
                if descriptor is not None:
                    for key, suffix in FONT_FILE_KEYS.items():
                        if key in descriptor:
                            extension = suffix
                            if include_programs:
                                program = descriptor[key].get_object().get_data()
                            break
                info = FontInfo(
                    name=base_font,
                    subtype=str(font.get("/Subtype", "")).lstrip("/"),
                    embedded=extension is not None,
                    subset=len(base_font) > 7 and base_font[6] == "+" and base_font[:6].isupper(),
                    program=program,
                    program_extension=extension,
                )
                fonts[base_font] = info
            if page_number not in info.pages:
                info.pages.append(page_number)
    return sorted(fonts.values(), key=lambda item: item.name)


def collect_images(reader: PdfReader) -> List[ImageInfo]:
    images: List[ImageInfo] = []
    for page_number, page in enumerate(reader.pages, start=1):
        try:
            page_images = list(page.images)
        except Exception as exc:
            LOGGER.warning("Could not decode images on page %d: %s", page_number, exc)
            continue
        for image in page_images:
            images.append(ImageInfo(page=page_number, name=image.name, data=image.data))
    return images


def document_summary(reader: PdfReader, *, size: int) -> Dict[str, Any]:
    first = reader.pages[0] if len(reader.pages) else None
    info = reader.metadata or {}
    return {
        "pdfVersion": reader.pdf_header.lstrip("%").replace("PDF-", ""),
        "pageCount": len(reader.pages),
        "fileSize": size,
        "encrypted": bool(reader.is_encrypted),
        "hasOutline": bool(reader.outline),
        "firstPageSize": [round(float(first.mediabox.width), 2), round(float(first.mediabox.height), 2)] if first else None,
        "metadata": {str(key).lstrip("/"): str(value) for key, value in info.items()},
    }


__all__ = ["FontInfo", "ImageInfo", "collect_fonts", "collect_images", "document_summary"]
