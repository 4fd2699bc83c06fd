from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Callable, Sequence
import sys

import pytest
from PIL import Image
from pypdf import PdfReader, PdfWriter
from pypdf.generic import NameObject, NumberObject
from reportlab.pdfgen import canvas

PROJECT_ROOT = Path(__file__).resolve().parents[1]
PACKAGES_DIR = PROJECT_ROOT / "packages"
if str(PACKAGES_DIR) not in sys.path:
    sys.path.insert(0, str(PACKAGES_DIR))

from pdfsuite.core.config import Settings  # noqa: E402
from pdfsuite.core.raster import Surface  # noqa: E402
from pdfsuite.core.types import InputFile  # noqa: E402


def build_pdf(
    pages: int = 1,
    *,
    size: tuple[float, float] = (200, 200),
    texts: Sequence[str] | None = None,
    title: str | None = None,
    password: str | None = None,
) -> bytes:
    """Create a PDF with one line of text per page ("Page N" unless given)."""

    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=size)
    for index in range(pages):
        label = texts[index] if texts is not None else f"Page {index + 1}"
        pdf.setFont("Helvetica", 12)
        pdf.drawString(20, size[1] / 2, label)
        pdf.showPage()
    pdf.save()
    if title is None and password is None:
        return buffer.getvalue()

    writer = PdfWriter(clone_from=PdfReader(BytesIO(buffer.getvalue())))
    if title is not None:
        writer.add_metadata({"/Title": title})
    if password is not None:
        writer.encrypt(user_password=password, owner_password=password, algorithm="AES-256")
    output = BytesIO()
    writer.write(output)
    return output.getvalue()


def read_pdf(data: bytes) -> PdfReader:
    return PdfReader(BytesIO(data))


def page_texts(data: bytes) -> list[str]:
    return [(page.extract_text() or "").strip() for page in read_pdf(data).pages]


def break_pages(data: bytes, indices: Sequence[int]) -> bytes:
    """Replace the content stream of the given pages with a bare number."""

    writer = PdfWriter(clone_from=read_pdf(data))
    for index in indices:
        writer.pages[index][NameObject("/Contents")] = NumberObject(0)
    output = BytesIO()
    writer.write(output)
    return output.getvalue()


def image_bytes(
    size: tuple[int, int] = (40, 20),
    color: tuple[int, ...] = (200, 30, 30),
    fmt: str = "PNG",
    mode: str = "RGB",
) -> bytes:
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeRaster:
    """Headless raster backend painting each page a flat colour."""

    def __init__(self, color: tuple[int, int, int] = (120, 60, 200)) -> None:
        self.color = color
        self.calls: list[tuple[int, float]] = []

    def page_count(self, pdf_bytes: bytes, password: str | None = None) -> int:
        reader = read_pdf(pdf_bytes)
        if reader.is_encrypted:
            reader.decrypt(password or "")
        return len(reader.pages)

    def render_page(self, pdf_bytes: bytes, page_index: int, scale: float, password: str | None = None) -> Surface:
        self.calls.append((page_index, scale))
        reader = read_pdf(pdf_bytes)
        if reader.is_encrypted:
            reader.decrypt(password or "")
        box = reader.pages[page_index].mediabox
        size = (max(1, int(float(box.width) * scale)), max(1, int(float(box.height) * scale)))
        return Surface(Image.new("RGB", size, self.color))


@pytest.fixture()
def settings() -> Settings:
    return Settings(fallback_delay=0.0)


@pytest.fixture()
def fake_raster() -> FakeRaster:
    return FakeRaster()


@pytest.fixture()
def pdf_factory() -> Callable[..., InputFile]:
    def _create(name: str = "sample.pdf", pages: int = 1, **kwargs) -> InputFile:
        return InputFile(name=name, data=build_pdf(pages, **kwargs), mime_type="application/pdf")

    return _create


@pytest.fixture()
def sample_pdf(pdf_factory) -> InputFile:
    return pdf_factory("sample.pdf", pages=5, title="Sample")


@pytest.fixture()
def png_file() -> InputFile:
    return InputFile(name="photo.png", data=image_bytes(), mime_type="image/png")


@pytest.fixture()
def fixed_random() -> Callable[[int], bytes]:
    return lambda length: bytes(range(length))
