from __future__ import annotations

from io import BytesIO
from zipfile import ZipFile

import pytest
from openpyxl import load_workbook
from pptx import Presentation

from pdfsuite.core.container import EMU_PER_POINT, PackagePart, SlideImage, build_package, build_pptx, build_xlsx

from conftest import image_bytes


def test_build_package_writes_content_types_first() -> None:
    data = build_package([PackagePart("word/document.xml", "<doc/>", "application/xml")])
    with ZipFile(BytesIO(data)) as archive:
        names = archive.namelist()
        assert names[0] == "[Content_Types].xml"
        assert b'PartName="/word/document.xml"' in archive.read("[Content_Types].xml")
        assert archive.read("word/document.xml") == b"<doc/>"


def test_build_package_rejects_duplicate_parts() -> None:
    with pytest.raises(ValueError):
        build_package([PackagePart("a.xml", "<a/>"), PackagePart("a.xml", "<b/>")])


def test_build_package_is_reproducible() -> None:
    parts = [PackagePart("a.xml", "<a/>", "application/xml")]
    assert build_package(parts) == build_package(parts)


def test_build_xlsx_round_trips_through_openpyxl() -> None:
    rows = [["Page", "Text"], [1, "first page"], [2, "bad\x01char"]]
    workbook = load_workbook(BytesIO(build_xlsx(rows, sheet_name="Pages")))
    sheet = workbook["Pages"]

    assert sheet["A1"].value == "Page"
    assert sheet["B2"].value == "first page"
    assert sheet["A3"].value == 2
    assert sheet["B3"].value == "badchar"


def test_build_pptx_has_one_slide_per_image() -> None:
    png = image_bytes((60, 80))
    slides = [SlideImage(png, 300, 400), SlideImage(png, 300, 400)]
    data = build_pptx(slides)

    presentation = Presentation(BytesIO(data))
    assert len(presentation.slides) == 2
    assert presentation.slide_width == 300 * EMU_PER_POINT
    assert presentation.slide_height == 400 * EMU_PER_POINT
    with ZipFile(BytesIO(data)) as archive:
        assert archive.read("ppt/media/image2.png") == png


def test_build_pptx_fits_pages_of_another_shape() -> None:
    png = image_bytes((60, 80))
    data = build_pptx([SlideImage(png, 300, 400), SlideImage(png, 400, 300)])

    presentation = Presentation(BytesIO(data))
    portrait, landscape = (slide.shapes[0] for slide in presentation.slides)
    assert (portrait.left, portrait.top, portrait.width, portrait.height) == (0, 0, 300 * EMU_PER_POINT, 400 * EMU_PER_POINT)
    assert landscape.width == 300 * EMU_PER_POINT
    assert landscape.height == 225 * EMU_PER_POINT
    assert (landscape.left, landscape.top) == (0, (400 - 225) * EMU_PER_POINT // 2)


def test_build_pptx_requires_slides() -> None:
    with pytest.raises(ValueError):
        build_pptx([])
