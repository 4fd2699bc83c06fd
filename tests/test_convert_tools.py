from __future__ import annotations

import csv
import io
import json
from xml.etree.ElementTree import fromstring

import pytest
from docx import Document
from openpyxl import Workbook, load_workbook
from PIL import Image
from pptx import Presentation
from pptx.util import Inches

from pdfsuite import dispatch
from pdfsuite.core.exceptions import RenderError, UnsupportedFormatError, ValidationError
from pdfsuite.core.types import InputFile

from conftest import image_bytes, page_texts, read_pdf

SVG = b'<svg xmlns="http://www.w3.org/2000/svg" width="120" height="60"><rect width="120" height="60" fill="red"/></svg>'


def _office_bytes(save) -> bytes:
    buffer = io.BytesIO()
    save(buffer)
    return buffer.getvalue()


# -- to PDF -----------------------------------------------------------------


def test_images_become_one_page_each(png_file, settings) -> None:
    jpeg = InputFile("scan.jpg", image_bytes((300, 100), fmt="JPEG"), "image/jpeg")

    [result] = dispatch("jpg-to-pdf", [png_file, jpeg], {"pageSize": "fit"}, settings=settings)

    reader = read_pdf(result.data)
    assert result.name == "images_converted.pdf"
    assert [(float(page.mediabox.width), float(page.mediabox.height)) for page in reader.pages] == [(40, 20), (300, 100)]


def test_images_on_landscape_a4(png_file, settings) -> None:
    [result] = dispatch("png-to-pdf", [png_file], {"orientation": "landscape"}, settings=settings)
    page = read_pdf(result.data).pages[0]
    assert float(page.mediabox.width) > float(page.mediabox.height)
    assert len(page.images) == 1


def test_undecodable_images_are_skipped(png_file, settings) -> None:
    broken = InputFile("broken.png", b"not really a png", "image/png")
    [result] = dispatch("png-to-pdf", [broken, png_file], settings=settings)
    assert len(read_pdf(result.data).pages) == 1


def test_all_images_broken_fails(settings) -> None:
    broken = InputFile("broken.webp", b"\x00\x00", "image/webp")
    with pytest.raises(RenderError):
        dispatch("webp-to-pdf", [broken], settings=settings)


def test_tiff_and_bmp_images_are_converted(settings) -> None:
    tiff = InputFile("page.tiff", image_bytes((50, 50), fmt="TIFF"), "image/tiff")
    bmp = InputFile("page.bmp", image_bytes((50, 50), fmt="BMP"), "image/bmp")
    [result] = dispatch("tiff-to-pdf", [tiff, bmp], settings=settings)
    assert len(read_pdf(result.data).pages) == 2


def test_svg_is_rasterised(settings) -> None:
    svg = InputFile("logo.svg", SVG, "image/svg+xml")
    [result] = dispatch("svg-to-pdf", [svg], {"pageSize": "fit"}, settings=settings)

    page = read_pdf(result.data).pages[0]
    assert (float(page.mediabox.width), float(page.mediabox.height)) == (120, 60)
    assert len(page.images) == 1


def test_text_to_pdf_wraps_lines(settings) -> None:
    text = InputFile("notes.txt", "First line\nSecond line".encode("utf-8"), "text/plain")
    [result] = dispatch("txt-to-pdf", [text], settings=settings)

    assert result.name == "notes_converted.pdf"
    content = page_texts(result.data)[0]
    assert "First line" in content and "Second line" in content


def test_markdown_is_rendered_to_plain_text(settings) -> None:
    source = InputFile("readme.md", b"# Title\n\nSome *emphasis* here.\n\n- item one\n", "text/markdown")
    [result] = dispatch("markdown-to-pdf", [source], settings=settings)

    content = page_texts(result.data)[0]
    assert "Title" in content
    assert "emphasis" in content and "item one" in content
    assert "*" not in content and "#" not in content


def test_html_drops_scripts(settings) -> None:
    source = InputFile(
        "page.html",
        b"<html><head><script>alert(1)</script></head><body><h1>Hello</h1><p>World</p></body></html>",
        "text/html",
    )
    [result] = dispatch("html-to-pdf", [source], settings=settings)

    content = page_texts(result.data)[0]
    assert "Hello" in content and "World" in content
    assert "alert" not in content


def test_word_document(settings) -> None:
    document = Document()
    document.add_paragraph("Quarterly report")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Revenue"
    table.rows[0].cells[1].text = "42"
    source = InputFile("report.docx", _office_bytes(document.save))

    [result] = dispatch("word-to-pdf", [source], settings=settings)

    content = page_texts(result.data)[0]
    assert "Quarterly report" in content
    assert "Revenue" in content and "42" in content


def test_empty_word_document_is_rejected(settings) -> None:
    source = InputFile("empty.docx", _office_bytes(Document().save))
    with pytest.raises(ValidationError):
        dispatch("word-to-pdf", [source], settings=settings)


def test_excel_workbook(settings) -> None:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Budget"
    sheet.append(["Item", "Cost"])
    sheet.append(["Coffee", 12])
    source = InputFile("budget.xlsx", _office_bytes(workbook.save))

    [result] = dispatch("excel-to-pdf", [source], settings=settings)

    content = page_texts(result.data)[0]
    assert "[Budget]" in content
    assert "Coffee" in content and "12" in content


def test_powerpoint_slides(settings) -> None:
    presentation = Presentation()
    slide = presentation.slides.add_slide(presentation.slide_layouts[6])
    box = slide.shapes.add_textbox(Inches(1), Inches(1), Inches(4), Inches(1))
    box.text_frame.text = "Roadmap"
    source = InputFile("deck.pptx", _office_bytes(presentation.save))

    [result] = dispatch("powerpoint-to-pdf", [source], settings=settings)

    content = page_texts(result.data)[0]
    assert "Slide 1" in content and "Roadmap" in content


@pytest.mark.parametrize("name", ["old.doc", "old.xls", "old.ppt"])
def test_legacy_office_formats_are_rejected(name, settings) -> None:
    with pytest.raises(UnsupportedFormatError, match="Legacy formats"):
        dispatch("word-to-pdf", [InputFile(name, b"\xd0\xcf\x11\xe0")], settings=settings)


def test_qr_code_page(settings) -> None:
    [result] = dispatch("qr-to-pdf", [], {"qrText": "https://example.com", "qrSize": 200}, settings=settings)

    page = read_pdf(result.data).pages[0]
    assert result.name == "qrcode.pdf"
    assert len(page.images) == 1
    assert "https://example.com" in page.extract_text()


def test_qr_code_caption_is_truncated(settings) -> None:
    text = "x" * 80
    [result] = dispatch("qr-to-pdf", [], {"qrText": text}, settings=settings)
    content = page_texts(result.data)[0]
    assert "x" * 50 + "..." in content
    assert "x" * 51 not in content


def test_qr_code_without_text_fails(settings) -> None:
    with pytest.raises(ValidationError):
        dispatch("qr-to-pdf", [], settings=settings)


# -- from PDF ---------------------------------------------------------------


def test_pdf_to_jpg_renders_every_page(sample_pdf, fake_raster, settings) -> None:
    results = dispatch("pdf-to-jpg", [sample_pdf], {"quality": "low"}, settings=settings, raster=fake_raster)

    assert [result.name for result in results] == [f"sample_page_{n}.jpg" for n in range(1, 6)]
    assert all(result.type == "image/jpeg" for result in results)
    assert fake_raster.calls == [(index, 2.0) for index in range(5)]
    with Image.open(io.BytesIO(results[0].data)) as image:
        assert image.size == (400, 400)


def test_pdf_to_png_specific_pages(sample_pdf, fake_raster, settings) -> None:
    results = dispatch(
        "pdf-to-png",
        [sample_pdf],
        {"pageRange": "specific", "pages": "2,5"},
        settings=settings,
        raster=fake_raster,
    )
    assert [result.name for result in results] == ["sample_page_2.png", "sample_page_5.png"]
    assert results[0].data.startswith(b"\x89PNG")


def test_pdf_to_tiff_requires_existing_pages(sample_pdf, fake_raster, settings) -> None:
    with pytest.raises(ValidationError):
        dispatch(
            "pdf-to-tiff",
            [sample_pdf],
            {"pageRange": "specific", "pages": "9"},
            settings=settings,
            raster=fake_raster,
        )


def test_pdf_to_long_image_stacks_pages(sample_pdf, fake_raster, settings) -> None:
    [result] = dispatch("pdf-to-long-img", [sample_pdf], settings=settings, raster=fake_raster)

    assert result.name == "sample_long.png"
    with Image.open(io.BytesIO(result.data)) as image:
        assert image.size == (300, 1500)


def test_pdf_to_text(sample_pdf, settings) -> None:
    [result] = dispatch("pdf-to-text", [sample_pdf], settings=settings)

    text = result.data.decode("utf-8")
    assert result.name == "sample.txt"
    assert text.startswith("--- Page 1 ---\nPage 1")
    assert "--- Page 5 ---\nPage 5" in text


def test_pdf_to_html_escapes_text(pdf_factory, settings) -> None:
    source = pdf_factory("markup.pdf", texts=["<b>bold</b> & more"], title="Doc & Co")
    [result] = dispatch("pdf-to-html", [source], settings=settings)

    markup = result.data.decode("utf-8")
    assert "<title>Doc &amp; Co</title>" in markup
    assert "&lt;b&gt;bold&lt;/b&gt; &amp; more" in markup


def test_pdf_to_json(sample_pdf, settings) -> None:
    [result] = dispatch("convert-pdf-json", [sample_pdf], settings=settings)

    payload = json.loads(result.data)
    assert payload["pageCount"] == 5
    assert payload["metadata"]["Title"] == "Sample"
    assert payload["pages"][2]["text"].strip() == "Page 3"
    assert payload["pages"][0]["width"] == 200


def test_pdf_to_csv(sample_pdf, settings) -> None:
    [result] = dispatch("pdf-to-csv", [sample_pdf], settings=settings)

    rows = list(csv.reader(io.StringIO(result.data.decode("utf-8"))))
    assert rows[0] == ["page", "line", "text"]
    assert rows[1:] == [[str(n), "1", f"Page {n}"] for n in range(1, 6)]


def test_pdf_to_xml(sample_pdf, settings) -> None:
    [result] = dispatch("convert-pdf-xml", [sample_pdf], settings=settings)

    root = fromstring(result.data)
    assert root.get("pages") == "5"
    assert [page.find("line").text for page in root.findall("page")] == [f"Page {n}" for n in range(1, 6)]


def test_pdf_to_powerpoint(sample_pdf, fake_raster, settings) -> None:
    [result] = dispatch("pdf-to-powerpoint", [sample_pdf], settings=settings, raster=fake_raster)

    presentation = Presentation(io.BytesIO(result.data))
    assert result.name == "sample.pptx"
    assert len(presentation.slides) == 5
    assert presentation.slide_width == 200 * 12700


def test_pdf_to_excel(sample_pdf, settings) -> None:
    [result] = dispatch("pdf-to-excel", [sample_pdf], settings=settings)

    sheet = load_workbook(io.BytesIO(result.data))["Pages"]
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0] == ("Page", "Text")
    assert rows[1] == (1, "Page 1")
    assert len(rows) == 6
