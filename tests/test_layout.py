from __future__ import annotations

import pytest
from reportlab.pdfbase.pdfmetrics import stringWidth

from pdfsuite.core.document import PAGE_SIZES, PdfDocumentHandle, TextRun
from pdfsuite.core.exceptions import ValidationError
from pdfsuite.core.layout import fit_image, page_dimensions, wrap_line, wrap_text_to_pages


def test_wrap_line_respects_width() -> None:
    text = "the quick brown fox jumps over the lazy dog " * 4
    lines = wrap_line(text.strip(), "Helvetica", 12, 120)

    assert len(lines) > 1
    assert all(stringWidth(line, "Helvetica", 12) <= 120 for line in lines)
    assert " ".join(lines) == text.strip()


def test_wrap_line_breaks_long_words() -> None:
    lines = wrap_line("x" * 200, "Helvetica", 12, 60)
    assert "".join(lines) == "x" * 200
    assert all(stringWidth(line, "Helvetica", 12) <= 60 for line in lines)


def test_wrap_text_to_pages_adds_pages_as_needed() -> None:
    document = PdfDocumentHandle.create()
    text = "\n".join(f"Line {number}" for number in range(120))
    added = wrap_text_to_pages(document, text, font_size=12)

    assert added == document.page_count
    assert added >= 2
    runs = [run for page in document.pages() for run in page.primitives if isinstance(run, TextRun)]
    assert [run.text for run in runs] == [f"Line {number}" for number in range(120)]
    assert all(run.y >= 50 for run in runs)


def test_wrap_text_to_pages_handles_empty_text() -> None:
    document = PdfDocumentHandle.create()
    assert wrap_text_to_pages(document, "") == 1
    assert document.page(0).primitives == ()


def test_wrap_text_to_pages_rejects_bad_font_size() -> None:
    with pytest.raises(ValidationError):
        wrap_text_to_pages(PdfDocumentHandle.create(), "text", font_size=0)


def test_page_dimensions() -> None:
    width, height = PAGE_SIZES["a4"]
    assert page_dimensions("a4") == (width, height)
    assert page_dimensions("a4", "landscape") == (height, width)
    assert page_dimensions("fit", image_size=(320, 200)) == (320.0, 200.0)
    with pytest.raises(ValidationError):
        page_dimensions("poster")


def test_fit_image_never_upscales() -> None:
    placement = fit_image(100, 50, 600, 800, margin=20)
    assert (placement.width, placement.height) == (100, 50)
    assert placement.x == pytest.approx(250)
    assert placement.y == pytest.approx(375)


def test_fit_image_shrinks_into_margins() -> None:
    placement = fit_image(2000, 1000, 600, 800, margin=50)
    assert placement.width == pytest.approx(500)
    assert placement.height == pytest.approx(250)
    assert placement.x == pytest.approx(50)


def test_fit_image_rejects_empty_images() -> None:
    with pytest.raises(ValidationError):
        fit_image(0, 10, 100, 100)
