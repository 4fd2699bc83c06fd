from __future__ import annotations

import base64

import pytest

from pdfsuite.core.annotations import (
    HighlightAnnotation,
    ImageAnnotation,
    TextAnnotation,
    annotation_from_dict,
    flatten_annotations,
)
from pdfsuite.core.document import Ellipse, Line, PdfDocumentHandle, RasterImage, Rectangle, TextRun
from pdfsuite.core.exceptions import ValidationError

from conftest import build_pdf, image_bytes, page_texts


def _document(pages: int = 1) -> PdfDocumentHandle:
    return PdfDocumentHandle.load(build_pdf(pages, size=(300, 400)))


def test_text_annotation_defaults() -> None:
    annotation = annotation_from_dict({"type": "text", "page": 1, "x": 10, "y": 20, "text": "Hi"})
    assert isinstance(annotation, TextAnnotation)
    assert annotation.font_size == 16
    assert annotation.color == "#000000"


def test_highlight_defaults() -> None:
    annotation = annotation_from_dict({"type": "highlight", "x": 1, "y": 2, "width": 3, "height": 4})
    assert isinstance(annotation, HighlightAnnotation)
    assert annotation.color == "#ffff00"
    assert annotation.opacity == pytest.approx(0.3)


def test_image_annotation_accepts_data_url() -> None:
    png = image_bytes((8, 8))
    url = "data:image/png;base64," + base64.b64encode(png).decode("ascii")
    annotation = annotation_from_dict({"type": "image", "x": 0, "y": 0, "width": 8, "height": 8, "imageData": url})
    assert isinstance(annotation, ImageAnnotation)
    assert annotation.data == png


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "sticker"},
        {"type": "image", "imageData": "%%%"},
        {"type": "rectangle", "width": "wide"},
    ],
)
def test_invalid_annotations_are_rejected(raw) -> None:
    with pytest.raises(ValidationError):
        annotation_from_dict(raw)


def test_flatten_flips_y_axis() -> None:
    document = _document()
    annotations = [
        annotation_from_dict(raw)
        for raw in (
            {"type": "text", "page": 1, "x": 10, "y": 30, "text": "Note"},
            {"type": "rectangle", "page": 1, "x": 10, "y": 30, "width": 50, "height": 20},
            {"type": "circle", "page": 1, "x": 100, "y": 100, "width": 40, "height": 20},
            {"type": "line", "page": 1, "x": 0, "y": 0, "x2": 100, "y2": 50},
        )
    ]

    assert flatten_annotations(document, annotations) == 4
    text, rect, ellipse, line = document.page(0).primitives
    assert isinstance(text, TextRun) and text.y == 370
    assert isinstance(rect, Rectangle) and rect.y == 350
    assert isinstance(ellipse, Ellipse) and (ellipse.cx, ellipse.cy) == (120, 290)
    assert isinstance(line, Line) and (line.y1, line.y2) == (400, 350)


def test_flatten_skips_missing_pages() -> None:
    document = _document(2)
    annotations = [
        annotation_from_dict({"type": "text", "page": 2, "x": 5, "y": 5, "text": "second"}),
        annotation_from_dict({"type": "text", "page": 7, "x": 5, "y": 5, "text": "nowhere"}),
    ]

    assert flatten_annotations(document, annotations) == 1
    assert "second" in page_texts(document.save())[1]


def test_flatten_highlight_and_image() -> None:
    document = _document()
    png = base64.b64encode(image_bytes((10, 10))).decode("ascii")
    annotations = [
        annotation_from_dict({"type": "highlight", "page": 1, "x": 0, "y": 0, "width": 100, "height": 10}),
        annotation_from_dict({"type": "image", "page": 1, "x": 20, "y": 40, "width": 30, "height": 30, "imageData": png}),
    ]
    flatten_annotations(document, annotations)

    highlight, image = document.page(0).primitives
    assert isinstance(highlight, Rectangle)
    assert highlight.border_color is None
    assert highlight.fill_color == (1.0, 1.0, 0.0)
    assert isinstance(image, RasterImage) and image.y == 330


def test_image_without_size_uses_natural_height_for_placement() -> None:
    document = _document()
    png = base64.b64encode(image_bytes((10, 16))).decode("ascii")
    annotation = annotation_from_dict({"type": "image", "page": 1, "x": 20, "y": 40, "imageData": png})

    flatten_annotations(document, [annotation])

    [image] = document.page(0).primitives
    assert (image.width, image.height) == (10, 16)
    assert image.y == 400 - 40 - 16
