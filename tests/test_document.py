from __future__ import annotations

from io import BytesIO
from datetime import datetime
import warnings

import pytest
from pypdf import PdfReader, PdfWriter

from pdfsuite.core.document import (
    HandleState,
    PdfDocumentHandle,
    Rectangle,
    RepairMode,
    TextRun,
    is_encrypted,
    open_reader,
    resolve_page_size,
    sanitize_glyphs,
)
from pdfsuite.core.exceptions import (
    CorruptError,
    DocumentStateError,
    PasswordError,
    RenderError,
    ValidationError,
)

from conftest import break_pages, build_pdf, image_bytes, page_texts, read_pdf


def test_created_handle_saves_blank_pages() -> None:
    document = PdfDocumentHandle.create()
    assert document.state is HandleState.CREATED

    document.add_page("letter")
    document.add_page((100, 50))
    data = document.save()

    reader = read_pdf(data)
    assert len(reader.pages) == 2
    assert float(reader.pages[0].mediabox.width) == pytest.approx(612)
    assert float(reader.pages[1].mediabox.height) == pytest.approx(50)


def test_load_rejects_garbage() -> None:
    with pytest.raises(CorruptError):
        PdfDocumentHandle.load(b"definitely not a pdf", name="junk.pdf")


def test_load_encrypted_requires_password() -> None:
    data = build_pdf(2, password="hunter22")
    assert is_encrypted(data)

    with pytest.raises(PasswordError):
        PdfDocumentHandle.load(data)
    with pytest.raises(PasswordError):
        PdfDocumentHandle.load(data, "wrong-password")

    document = PdfDocumentHandle.load(data, "hunter22")
    assert document.page_count == 2
    assert document.state is HandleState.LOADED


def test_open_reader_decrypts() -> None:
    reader = open_reader(build_pdf(1, password="secret1"), "secret1")
    assert "Page 1" in reader.pages[0].extract_text()


def test_handle_is_terminal_after_save() -> None:
    document = PdfDocumentHandle.load(build_pdf(1))
    document.save()

    assert document.state is HandleState.SAVED
    with pytest.raises(DocumentStateError):
        document.add_page()
    with pytest.raises(DocumentStateError):
        document.save()


def test_copy_pages_allows_repeats() -> None:
    source = PdfDocumentHandle.load(build_pdf(3))
    target = PdfDocumentHandle.create()
    target.copy_pages(source, [2, 0, 2])

    assert page_texts(target.save()) == ["Page 3", "Page 1", "Page 3"]


def test_page_index_is_checked() -> None:
    document = PdfDocumentHandle.load(build_pdf(2))
    with pytest.raises(ValidationError):
        document.page(2)
    with pytest.raises(ValidationError):
        document.remove_page(-1)


def test_insert_and_remove_pages() -> None:
    document = PdfDocumentHandle.load(build_pdf(2))
    document.insert_page(1, (200, 200))
    assert document.page_count == 3
    document.remove_page(0)

    assert page_texts(document.save()) == ["", "Page 2"]


def test_reorder_keeps_metadata() -> None:
    document = PdfDocumentHandle.load(build_pdf(3, title="Ordered"))
    document.reorder([2, 1, 0])
    data = document.save()

    assert page_texts(data) == ["Page 3", "Page 2", "Page 1"]
    assert read_pdf(data).metadata.title == "Ordered"


def test_rotation_accumulates_modulo_360() -> None:
    document = PdfDocumentHandle.load(build_pdf(1))
    assert document.rotate(0, 270) == 270
    assert document.rotate(0, 180) == 90
    assert document.rotate(0, -90) == 0

    with pytest.raises(ValidationError):
        document.set_rotation(0, 45)


def test_crop_box_round_trip() -> None:
    document = PdfDocumentHandle.load(build_pdf(1))
    document.set_crop_box(0, 10, 20, 100, 50)
    assert document.page(0).crop_box == (10, 20, 100, 50)

    with pytest.raises(ValidationError):
        document.set_crop_box(0, 0, 0, 0, 10)


def test_scale_page_changes_size() -> None:
    document = PdfDocumentHandle.load(build_pdf(1, size=(100, 200)))
    document.scale_page(0, 2, 0.5)
    assert document.page(0).size == pytest.approx((200, 100))


def test_drawn_text_is_recorded_and_painted() -> None:
    document = PdfDocumentHandle.create()
    page = document.add_page((300, 300))
    font = document.embed_font("Helvetica-Bold")
    document.draw_text(page.index, "Stamped", x=20, y=150, size=14, font=font)
    document.draw_rectangle(page.index, 10, 10, 50, 20, fill_color=(1.0, 0.0, 0.0))

    primitives = document.page(0).primitives
    assert isinstance(primitives[0], TextRun)
    assert isinstance(primitives[1], Rectangle)
    assert document.state is HandleState.MUTATING
    assert "Stamped" in page_texts(document.save())[0]


def test_draw_text_replaces_unencodable_glyphs() -> None:
    document = PdfDocumentHandle.create()
    document.add_page()
    run = document.draw_text(0, "Grüße ☃", x=10, y=10)
    assert run.text == "Grüße ?"
    assert sanitize_glyphs("plain") == "plain"


def test_embed_font_only_accepts_standard_fonts() -> None:
    document = PdfDocumentHandle.create()
    assert document.embed_font("Times-Roman").name == "Times-Roman"
    with pytest.raises(ValidationError):
        document.embed_font("Comic Sans")


def test_embed_image_converts_other_formats_to_png() -> None:
    document = PdfDocumentHandle.create()
    png = document.embed_image(image_bytes((30, 10)))
    tiff = document.embed_image(image_bytes((12, 8), fmt="TIFF"))

    assert (png.format, png.width, png.height) == ("PNG", 30, 10)
    assert tiff.format == "PNG"
    assert tiff.data.startswith(b"\x89PNG")
    with pytest.raises(RenderError):
        document.embed_image(b"not an image")


def test_drawn_image_lands_on_page() -> None:
    document = PdfDocumentHandle.create()
    document.add_page((200, 200))
    image = document.embed_image(image_bytes((20, 20), fmt="JPEG"))
    document.draw_image(0, image, x=10, y=10, width=40, height=40)

    reader = read_pdf(document.save())
    assert len(reader.pages[0].images) == 1


def test_set_and_clear_metadata() -> None:
    document = PdfDocumentHandle.load(build_pdf(2, title="Old"))
    document.set_metadata(
        title="New title",
        author="Ada",
        keywords=["pdf", "tools"],
        modification_date=datetime(2024, 5, 1, 12, 0, 0),
    )
    assert document.metadata["/Title"] == "New title"
    assert document.metadata["/Keywords"] == "pdf, tools"
    assert document.metadata["/ModDate"].startswith("D:20240501120000")

    document.clear_metadata()
    data = document.save()
    info = read_pdf(data).metadata
    assert info.title is None
    assert info.author is None
    assert info.producer == "pdfsuite"
    assert len(read_pdf(data).pages) == 2


def test_strip_active_content_removes_javascript() -> None:
    writer = PdfWriter(clone_from=PdfReader(BytesIO(build_pdf(1))))
    writer.add_js("app.alert('hi');")
    buffer = BytesIO()
    writer.write(buffer)

    document = PdfDocumentHandle.load(buffer.getvalue())
    removed = document.strip_active_content()

    assert "/JavaScript" in removed
    names = read_pdf(document.save()).trailer["/Root"].get("/Names")
    assert names is None or "/JavaScript" not in names.get_object()


def test_save_with_password_encrypts() -> None:
    document = PdfDocumentHandle.load(build_pdf(1))
    data = document.save(user_password="Secret99")

    assert is_encrypted(data)
    reader = open_reader(data, "Secret99")
    assert len(reader.pages) == 1


def test_compact_save_uses_current_pypdf_api() -> None:
    document = PdfDocumentHandle.load(build_pdf(2))
    with warnings.catch_warnings():
        warnings.filterwarnings("error", message=".*deprecated.*", category=DeprecationWarning)
        data = document.save(compact=True)
    assert page_texts(data) == ["Page 1", "Page 2"]


def test_load_with_repair_mode_copies_readable_pages() -> None:
    document = PdfDocumentHandle.load(build_pdf(3), repair=RepairMode.REMOVE)
    assert document.page_count == 3
    assert page_texts(document.save()) == ["Page 1", "Page 2", "Page 3"]


def test_repair_substitutes_placeholder_for_broken_page() -> None:
    document = PdfDocumentHandle.load(break_pages(build_pdf(3), [1]), repair=RepairMode.PLACEHOLDER)

    assert document.page_count == 3
    assert page_texts(document.save()) == ["Page 1", "Page 2 could not be recovered", "Page 3"]


def test_repair_can_drop_broken_pages() -> None:
    document = PdfDocumentHandle.load(break_pages(build_pdf(3), [0, 2]), repair=RepairMode.REMOVE)
    assert page_texts(document.save()) == ["Page 2"]


def test_repair_fails_when_every_page_is_broken() -> None:
    with pytest.raises(CorruptError, match="No pages could be recovered"):
        PdfDocumentHandle.load(break_pages(build_pdf(2), [0, 1]), repair=RepairMode.REMOVE)


def test_resolve_page_size() -> None:
    assert resolve_page_size("A4") == pytest.approx((595.2756, 841.8898), rel=1e-4)
    assert resolve_page_size((10, 20)) == (10, 20)
    with pytest.raises(ValidationError):
        resolve_page_size("tabloid")
