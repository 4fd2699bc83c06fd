"""Page-oriented PDF document model used by every pdfsuite tool.

:class:`PdfDocumentHandle` wraps a :class:`pypdf.PdfWriter`. Structural edits
(copy, insert, remove, rotate, crop) go straight to the writer; drawing calls
only record primitives per page. Pending primitives are painted in call order
onto a reportlab overlay which is merged on top of the page when the handle
is flushed, snapshotted or saved.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from io import BytesIO
from typing import Iterable, Mapping, Sequence, Union

from PIL import Image, UnidentifiedImageError
from pypdf import PasswordType, PdfReader, PdfWriter, Transformation
from pypdf.errors import PdfReadError
from pypdf.generic import NameObject, NumberObject, RectangleObject
from reportlab.lib.pagesizes import A3, A4, A5, LEGAL, LETTER
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as rl_canvas

from .exceptions import CorruptError, DocumentStateError, PasswordError, RenderError, ValidationError
from .utils import get_logger

LOGGER = get_logger("pdfsuite.document")

PAGE_SIZES: dict[str, tuple[float, float]] = {
    "a3": A3,
    "a4": A4,
    "a5": A5,
    "letter": LETTER,
    "legal": LEGAL,
}

STANDARD_FONTS = frozenset(pdfmetrics.standardFonts)

Color = tuple[float, float, float]


class HandleState(str, Enum):
    CREATED = "created"
    LOADED = "loaded"
    MUTATING = "mutating"
    SAVED = "saved"


class RepairMode(str, Enum):
    """How :meth:`PdfDocumentHandle.load` treats pages that cannot be copied."""

    PLACEHOLDER = "placeholder"
    REMOVE = "remove"


@dataclass(frozen=True)
class FontRef:
    name: str


@dataclass(frozen=True)
class ImageRef:
    data: bytes
    width: int
    height: int
    format: str


@dataclass(frozen=True)
class TextRun:
    text: str
    x: float
    y: float
    size: float
    font: FontRef
    color: Color = (0.0, 0.0, 0.0)
    opacity: float = 1.0
    rotation: float = 0.0
    align: str = "left"
    invisible: bool = False


@dataclass(frozen=True)
class Rectangle:
    x: float
    y: float
    width: float
    height: float
    fill_color: Color | None = None
    border_color: Color | None = (0.0, 0.0, 0.0)
    border_width: float = 1.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: Color = (0.0, 0.0, 0.0)
    thickness: float = 1.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Ellipse:
    cx: float
    cy: float
    rx: float
    ry: float
    fill_color: Color | None = None
    border_color: Color | None = (0.0, 0.0, 0.0)
    border_width: float = 1.0
    opacity: float = 1.0


@dataclass(frozen=True)
class RasterImage:
    image: ImageRef
    x: float
    y: float
    width: float
    height: float
    opacity: float = 1.0
    rotation: float = 0.0


Primitive = Union[TextRun, Rectangle, Line, Ellipse, RasterImage]


@dataclass
class _PageRecord:
    drawn: list[Primitive] = field(default_factory=list)
    pending: list[Primitive] = field(default_factory=list)


class PageView:
    """Read-only view of one page of a :class:`PdfDocumentHandle`."""

    def __init__(self, handle: "PdfDocumentHandle", index: int) -> None:
        self._handle = handle
        self.index = index

    @property
    def _page(self):
        return self._handle._writer.pages[self.index]

    @property
    def width(self) -> float:
        return float(self._page.mediabox.width)

    @property
    def height(self) -> float:
        return float(self._page.mediabox.height)

    @property
    def size(self) -> tuple[float, float]:
        return self.width, self.height

    @property
    def rotation(self) -> int:
        return int(self._page.rotation) % 360

    @property
    def crop_box(self) -> tuple[float, float, float, float]:
        box = self._page.cropbox
        return float(box.left), float(box.bottom), float(box.width), float(box.height)

    @property
    def primitives(self) -> tuple[Primitive, ...]:
        return tuple(self._handle._records[self.index].drawn)

    def extract_text(self) -> str:
        return self._page.extract_text() or ""

    def __repr__(self) -> str:
        return f"PageView(index={self.index}, size={self.size}, rotation={self.rotation})"


def sanitize_glyphs(text: str, encoding: str = "cp1252") -> str:
    """Replace characters the standard fonts cannot encode with ``?``."""

    try:
        text.encode(encoding)
        return text
    except UnicodeEncodeError:
        return "".join(ch if _encodable(ch, encoding) else "?" for ch in text)


def _encodable(char: str, encoding: str) -> bool:
    try:
        char.encode(encoding)
        return True
    except UnicodeEncodeError:
        return False


def pdf_date(value: datetime | None = None) -> str:
    moment = value or datetime.now(timezone.utc)
    return moment.strftime("D:%Y%m%d%H%M%S") + "Z"


class PdfDocumentHandle:
    """Mutable page tree with a terminal :meth:`save`."""

    def __init__(self, writer: PdfWriter, state: HandleState) -> None:
        self._writer = writer
        self._state = state
        self._records: list[_PageRecord] = [_PageRecord() for _ in range(len(writer.pages))]
        self._snapshot_cache: bytes | None = None

    # -- construction --------------------------------------------------

    @classmethod
    def create(cls) -> "PdfDocumentHandle":
        return cls(PdfWriter(), HandleState.CREATED)

    @classmethod
    def load(
        cls,
        data: bytes,
        password: str | None = None,
        *,
        repair: RepairMode | str | None = None,
        name: str = "document",
    ) -> "PdfDocumentHandle":
        """Decode ``data`` into a new handle.

        Raises:
            PasswordError: Encrypted input with a missing or wrong password.
            CorruptError: Input is not a readable PDF and no repair mode was
                requested, or nothing could be recovered.
        """

        reader = open_reader(data, password, name=name)
        if repair is None:
            try:
                writer = PdfWriter(clone_from=reader)
            except Exception as exc:
                raise CorruptError(f"Unable to read PDF structure of {name}: {exc}") from exc
            LOGGER.debug("Loaded %s with %d page(s)", name, len(writer.pages))
            return cls(writer, HandleState.LOADED)
        return cls._load_repaired(reader, RepairMode(repair), name)

    @classmethod
    def _load_repaired(cls, reader: PdfReader, mode: RepairMode, name: str) -> "PdfDocumentHandle":
        try:
            total = len(reader.pages)
        except Exception as exc:
            raise CorruptError(f"No page tree could be recovered from {name}") from exc

        handle = cls(PdfWriter(), HandleState.LOADED)
        font = handle.embed_font("Helvetica")
        for index in range(total):
            try:
                page = reader.pages[index]
                # pypdf parses pages lazily
                page.mediabox
                page.get_contents()
                handle._writer.add_page(page)
                handle._records.append(_PageRecord())
            except Exception as exc:
                LOGGER.warning("Page %d of %s could not be copied: %s", index + 1, name, exc)
                if mode is RepairMode.REMOVE:
                    continue
                handle.add_page()
                handle.draw_text(
                    handle.page_count - 1,
                    f"Page {index + 1} could not be recovered",
                    x=50,
                    y=PAGE_SIZES["a4"][1] / 2,
                    size=14,
                    font=font,
                    color=(0.6, 0.0, 0.0),
                )
        if handle.page_count == 0:
            raise CorruptError(f"No pages could be recovered from {name}")
        handle._state = HandleState.LOADED
        return handle

    # -- state ---------------------------------------------------------

    @property
    def state(self) -> HandleState:
        return self._state

    def _ensure_mutable(self) -> None:
        if self._state is HandleState.SAVED:
            raise DocumentStateError()

    def _touch(self) -> None:
        self._ensure_mutable()
        self._state = HandleState.MUTATING
        self._snapshot_cache = None

    # -- inspection ----------------------------------------------------

    @property
    def page_count(self) -> int:
        return len(self._writer.pages)

    def page(self, index: int) -> PageView:
        self._check_index(index)
        return PageView(self, index)

    def pages(self) -> list[PageView]:
        return [PageView(self, index) for index in range(self.page_count)]

    @property
    def metadata(self) -> dict[str, str]:
        info = self._writer.metadata or {}
        return {str(key): str(value) for key, value in info.items() if value is not None}

    def _check_index(self, index: int, *, allow_end: bool = False) -> None:
        upper = self.page_count if allow_end else self.page_count - 1
        if not 0 <= index <= upper:
            raise ValidationError(f"Page index {index} is out of range for a {self.page_count}-page document")

    # -- page tree -----------------------------------------------------

    def copy_pages(self, source: "PdfDocumentHandle", indices: Sequence[int]) -> list[PageView]:
        """Append copies of ``source`` pages in the order given by ``indices``.

        Indices may repeat; every copy is a distinct page in this handle.
        """

        self._touch()
        for index in indices:
            source._check_index(index)
        snapshot = source.snapshot()
        readers: list[PdfReader] = []
        seen: Counter[int] = Counter()
        copied: list[PageView] = []
        for index in indices:
            generation = seen[index]
            seen[index] += 1
            while len(readers) <= generation:
                readers.append(PdfReader(BytesIO(snapshot)))
            self._writer.add_page(readers[generation].pages[index])
            self._records.append(_PageRecord())
            copied.append(PageView(self, self.page_count - 1))
        LOGGER.debug("Copied %d page(s)", len(copied))
        return copied

    def add_page(self, size: tuple[float, float] | str = "a4") -> PageView:
        return self.insert_page(self.page_count, size)

    def insert_page(self, index: int, size: tuple[float, float] | str = "a4") -> PageView:
        self._touch()
        self._check_index(index, allow_end=True)
        width, height = resolve_page_size(size)
        if index == self.page_count:
            self._writer.add_blank_page(width=width, height=height)
        else:
            self._writer.insert_blank_page(width=width, height=height, index=index)
        self._records.insert(index, _PageRecord())
        return PageView(self, index)

    def remove_page(self, index: int) -> None:
        self._touch()
        self._check_index(index)
        del self._writer.pages[index]
        del self._records[index]

    def reorder(self, indices: Sequence[int]) -> None:
        """Rebuild the page tree as ``indices`` (zero-based, repeats allowed)."""

        self._rebuild(indices, keep_metadata=True)

    def _rebuild(self, indices: Sequence[int], *, keep_metadata: bool) -> None:
        for index in indices:
            self._check_index(index)
        source = PdfDocumentHandle.load(self.snapshot())
        metadata = self.metadata if keep_metadata else {}
        rebuilt = PdfDocumentHandle.create()
        rebuilt.copy_pages(source, indices)
        if metadata:
            rebuilt._writer.add_metadata(metadata)
        self._touch()
        drawn = [list(self._records[index].drawn) for index in indices]
        self._writer = rebuilt._writer
        self._records = [_PageRecord(drawn=history) for history in drawn]

    def set_rotation(self, index: int, degrees: int) -> None:
        if degrees % 90 != 0:
            raise ValidationError(f"Rotation must be a multiple of 90 degrees, got {degrees}")
        self._touch()
        self._check_index(index)
        page = self._writer.pages[index]
        page[NameObject("/Rotate")] = NumberObject(degrees % 360)

    def rotate(self, index: int, delta: int) -> int:
        """Add ``delta`` degrees to the page rotation and return the new value."""

        current = self.page(index).rotation
        new_value = (current + int(delta)) % 360
        self.set_rotation(index, new_value)
        return new_value

    def set_crop_box(self, index: int, x: float, y: float, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValidationError("Crop box must have a positive width and height")
        self._touch()
        self._check_index(index)
        self._writer.pages[index].cropbox = RectangleObject([x, y, x + width, y + height])

    def set_media_box(self, index: int, x: float, y: float, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValidationError("Media box must have a positive width and height")
        self._touch()
        self._check_index(index)
        page = self._writer.pages[index]
        page.mediabox = RectangleObject([x, y, x + width, y + height])
        page.cropbox = RectangleObject([x, y, x + width, y + height])

    def scale_page(self, index: int, sx: float, sy: float) -> None:
        """Scale page content and boxes by ``sx`` / ``sy``."""

        if sx <= 0 or sy <= 0:
            raise ValidationError("Scale factors must be positive")
        self._touch()
        self._check_index(index)
        self._flush_page(index)
        self._writer.pages[index].scale(sx, sy)

    def place_page(
        self,
        index: int,
        source: "PdfDocumentHandle",
        source_index: int,
        *,
        scale: float = 1.0,
        x: float = 0.0,
        y: float = 0.0,
        over: bool = True,
    ) -> None:
        """Paint page ``source_index`` of ``source`` onto page ``index``."""

        self._touch()
        self._check_index(index)
        source._check_index(source_index)
        self._flush_page(index)
        reader = PdfReader(BytesIO(source.snapshot()))
        transformation = Transformation().scale(scale, scale).translate(x, y)
        self._writer.pages[index].merge_transformed_page(reader.pages[source_index], transformation, over=over)

    def remove_annotations(self) -> None:
        self._touch()
        self._writer.remove_annotations(subtypes=None)
        # pypdf leaves an empty /Annots array behind
        for page in self._writer.pages:
            page.pop(NameObject("/Annots"), None)

    def strip_active_content(self) -> list[str]:
        """Remove JavaScript, open actions, embedded files and page actions.

        Returns the catalog entries that were removed.
        """

        self._touch()
        removed: list[str] = []
        root = self._writer.root_object
        for key in ("/OpenAction", "/AA"):
            if key in root:
                del root[key]
                removed.append(key)
        names = root.get("/Names")
        if names is not None:
            names = names.get_object()
            for key in ("/JavaScript", "/EmbeddedFiles"):
                if key in names:
                    del names[key]
                    removed.append(key)
        for page in self._writer.pages:
            if "/AA" in page:
                del page["/AA"]
                removed.append("/Page/AA")
        return removed

    # -- resources -----------------------------------------------------

    def embed_font(self, name: str = "Helvetica") -> FontRef:
        if name not in STANDARD_FONTS:
            raise ValidationError(f"Unsupported font {name!r}; use one of {sorted(STANDARD_FONTS)}")
        return FontRef(name)

    def embed_image(self, data: bytes, fmt: str | None = None) -> ImageRef:
        """Register an image; formats other than PNG/JPEG are converted to PNG."""

        self._ensure_mutable()
        try:
            with Image.open(BytesIO(data)) as image:
                image.load()
                detected = (fmt or image.format or "").upper()
                width, height = image.size
                if detected in {"JPEG", "JPG"} and image.mode in {"RGB", "L", "CMYK"}:
                    return ImageRef(bytes(data), width, height, "JPEG")
                if detected == "PNG":
                    return ImageRef(bytes(data), width, height, "PNG")
                converted = image.convert("RGBA" if "A" in image.getbands() else "RGB")
                buffer = BytesIO()
                converted.save(buffer, format="PNG")
                return ImageRef(buffer.getvalue(), width, height, "PNG")
        except (UnidentifiedImageError, OSError) as exc:
            raise RenderError(f"Unsupported or damaged image: {exc}") from exc

    # -- drawing -------------------------------------------------------

    def _record(self, index: int, primitive: Primitive) -> Primitive:
        self._touch()
        self._check_index(index)
        record = self._records[index]
        record.drawn.append(primitive)
        record.pending.append(primitive)
        return primitive

    def draw_text(
        self,
        index: int,
        text: str,
        *,
        x: float,
        y: float,
        size: float = 12,
        font: FontRef | None = None,
        color: Color = (0.0, 0.0, 0.0),
        opacity: float = 1.0,
        rotation: float = 0.0,
        align: str = "left",
        invisible: bool = False,
    ) -> TextRun:
        run = TextRun(
            text=sanitize_glyphs(text),
            x=x,
            y=y,
            size=size,
            font=font or FontRef("Helvetica"),
            color=color,
            opacity=opacity,
            rotation=rotation,
            align=align,
            invisible=invisible,
        )
        return self._record(index, run)  # type: ignore[return-value]

    def draw_rectangle(self, index: int, x: float, y: float, width: float, height: float, **style) -> Rectangle:
        return self._record(index, Rectangle(x, y, width, height, **style))  # type: ignore[return-value]

    def draw_line(self, index: int, x1: float, y1: float, x2: float, y2: float, **style) -> Line:
        return self._record(index, Line(x1, y1, x2, y2, **style))  # type: ignore[return-value]

    def draw_ellipse(self, index: int, cx: float, cy: float, rx: float, ry: float, **style) -> Ellipse:
        return self._record(index, Ellipse(cx, cy, rx, ry, **style))  # type: ignore[return-value]

    def draw_image(
        self,
        index: int,
        image: ImageRef,
        *,
        x: float,
        y: float,
        width: float,
        height: float,
        opacity: float = 1.0,
        rotation: float = 0.0,
    ) -> RasterImage:
        primitive = RasterImage(image, x, y, width, height, opacity=opacity, rotation=rotation)
        return self._record(index, primitive)  # type: ignore[return-value]

    def flush(self) -> None:
        """Paint all pending primitives onto their pages."""

        self._ensure_mutable()
        for index in range(self.page_count):
            self._flush_page(index)

    def _flush_page(self, index: int) -> None:
        record = self._records[index]
        if not record.pending:
            return
        page = self._writer.pages[index]
        box = page.mediabox
        buffer = BytesIO()
        overlay = rl_canvas.Canvas(
            buffer,
            pagesize=(float(box.right), float(box.top)),
            pageCompression=1,
        )
        for primitive in record.pending:
            _paint(overlay, primitive)
        overlay.showPage()
        overlay.save()
        overlay_page = PdfReader(BytesIO(buffer.getvalue())).pages[0]
        page.merge_page(overlay_page)
        LOGGER.debug("Flushed %d primitive(s) onto page %d", len(record.pending), index + 1)
        record.pending.clear()
        self._snapshot_cache = None

    # -- metadata ------------------------------------------------------

    def set_metadata(
        self,
        *,
        title: str | None = None,
        author: str | None = None,
        subject: str | None = None,
        keywords: str | Iterable[str] | None = None,
        creator: str | None = None,
        producer: str | None = None,
        creation_date: datetime | None = None,
        modification_date: datetime | None = None,
    ) -> None:
        self._touch()
        if keywords is not None and not isinstance(keywords, str):
            keywords = ", ".join(keywords)
        values: Mapping[str, object | None] = {
            "/Title": title,
            "/Author": author,
            "/Subject": subject,
            "/Keywords": keywords,
            "/Creator": creator,
            "/Producer": producer,
            "/CreationDate": pdf_date(creation_date) if creation_date else None,
            "/ModDate": pdf_date(modification_date) if modification_date else None,
        }
        cleaned = {key: str(value) for key, value in values.items() if value is not None and str(value).strip()}
        if cleaned:
            self._writer.add_metadata(cleaned)

    def clear_metadata(self) -> None:
        """Drop the document information dictionary by rebuilding the page tree."""

        self._rebuild(list(range(self.page_count)), keep_metadata=False)
        self._writer.add_metadata({"/Producer": "pdfsuite"})

    def set_page_mode(self, mode: str) -> None:
        self._touch()
        self._writer.page_mode = f"/{mode.lstrip('/')}"

    def set_page_layout(self, layout: str) -> None:
        self._touch()
        self._writer.page_layout = f"/{layout.lstrip('/')}"

    def set_viewer_preferences(
        self,
        *,
        page_mode: str | None = None,
        page_layout: str | None = None,
        fit_window: bool = False,
        center_window: bool = False,
        hide_toolbar: bool = False,
        hide_menubar: bool = False,
    ) -> None:
        self._touch()
        if page_mode:
            self.set_page_mode(page_mode)
        if page_layout:
            self.set_page_layout(page_layout)
        preferences = self._writer.create_viewer_preferences()
        preferences.fit_window = fit_window
        preferences.center_window = center_window
        preferences.hide_toolbar = hide_toolbar
        preferences.hide_menubar = hide_menubar

    # -- serialisation -------------------------------------------------

    def compress_streams(self) -> None:
        """Deflate every page content stream."""

        self._ensure_mutable()
        self.flush()
        for page in self._writer.pages:
            page.compress_content_streams()
        self._snapshot_cache = None

    def recompress_images(self, quality: int) -> int:
        """Re-encode embedded raster images as JPEG; returns how many were replaced."""

        self._touch()
        replaced = 0
        for number, page in enumerate(self._writer.pages, start=1):
            for image in page.images:
                try:
                    image.replace(image.image.convert("RGB"), quality=quality)
                except (OSError, TypeError, ValueError, NotImplementedError) as exc:
                    LOGGER.warning("Leaving image %s on page %d unchanged: %s", image.name, number, exc)
                    continue
                replaced += 1
        return replaced

    def snapshot(self) -> bytes:
        """Serialise the current state without ending the handle's life."""

        self._ensure_mutable()
        self.flush()
        if self._snapshot_cache is None:
            buffer = BytesIO()
            self._writer.write(buffer)
            self._snapshot_cache = buffer.getvalue()
        return self._snapshot_cache

    def save(
        self,
        *,
        user_password: str | None = None,
        owner_password: str | None = None,
        compact: bool = True,
    ) -> bytes:
        """Serialise the document; the handle cannot be used afterwards."""

        self._ensure_mutable()
        self.flush()
        if compact:
            self._writer.compress_identical_objects()
        if user_password:
            self._writer.encrypt(
                user_password=user_password,
                owner_password=owner_password or user_password,
                algorithm="AES-256",
            )
        buffer = BytesIO()
        self._writer.write(buffer)
        self._state = HandleState.SAVED
        self._snapshot_cache = None
        data = buffer.getvalue()
        LOGGER.debug("Saved document with %d page(s), %d bytes", self.page_count, len(data))
        return data

    def __repr__(self) -> str:
        return f"PdfDocumentHandle(pages={self.page_count}, state={self._state.value})"


def open_reader(data: bytes, password: str | None = None, *, name: str = "document") -> PdfReader:
    """Open ``data`` with pypdf, decrypting it when needed."""

    try:
        reader = PdfReader(BytesIO(data))
    except PdfReadError as exc:
        raise CorruptError(f"{name} is not a valid PDF: {exc}") from exc
    except Exception as exc:  # pragma: no cover - pypdf exceptions vary
        raise CorruptError(f"Unable to read {name}: {exc}") from exc

    if reader.is_encrypted:
        candidates = [password] if password else [""]
        for candidate in candidates:
            try:
                status = reader.decrypt(candidate)
            except Exception as exc:  # pragma: no cover - decrypt errors vary
                raise PasswordError(f"Failed to decrypt {name}: {exc}") from exc
            if status != PasswordType.NOT_DECRYPTED:
                break
        else:
            if password:
                raise PasswordError(f"Incorrect password for {name}")
            raise PasswordError(f"{name} is password protected; a password is required")
    return reader


def is_encrypted(data: bytes) -> bool:
    try:
        return bool(PdfReader(BytesIO(data)).is_encrypted)
    except Exception as exc:
        raise CorruptError(f"Unable to read PDF: {exc}") from exc


def resolve_page_size(size: tuple[float, float] | str) -> tuple[float, float]:
    if isinstance(size, str):
        try:
            return PAGE_SIZES[size.lower()]
        except KeyError as exc:
            raise ValidationError(f"Unknown page size {size!r}") from exc
    width, height = size
    return float(width), float(height)


def _paint(canvas: rl_canvas.Canvas, primitive: Primitive) -> None:
    canvas.saveState()
    if isinstance(primitive, TextRun):
        canvas.setFillColorRGB(*primitive.color)
        canvas.setFillAlpha(primitive.opacity)
        canvas.translate(primitive.x, primitive.y)
        if primitive.rotation:
            canvas.rotate(primitive.rotation)
        width = pdfmetrics.stringWidth(primitive.text, primitive.font.name, primitive.size)
        offset = {"center": -width / 2, "right": -width}.get(primitive.align, 0.0)
        text = canvas.beginText(offset, 0)
        text.setFont(primitive.font.name, primitive.size)
        if primitive.invisible:
            text.setTextRenderMode(3)
        text.textOut(primitive.text)
        canvas.drawText(text)
    elif isinstance(primitive, Rectangle):
        _apply_style(canvas, primitive.fill_color, primitive.border_color, primitive.border_width, primitive.opacity)
        canvas.rect(
            primitive.x,
            primitive.y,
            primitive.width,
            primitive.height,
            stroke=int(primitive.border_color is not None),
            fill=int(primitive.fill_color is not None),
        )
    elif isinstance(primitive, Ellipse):
        _apply_style(canvas, primitive.fill_color, primitive.border_color, primitive.border_width, primitive.opacity)
        canvas.ellipse(
            primitive.cx - primitive.rx,
            primitive.cy - primitive.ry,
            primitive.cx + primitive.rx,
            primitive.cy + primitive.ry,
            stroke=int(primitive.border_color is not None),
            fill=int(primitive.fill_color is not None),
        )
    elif isinstance(primitive, Line):
        canvas.setStrokeColorRGB(*primitive.color)
        canvas.setStrokeAlpha(primitive.opacity)
        canvas.setLineWidth(primitive.thickness)
        canvas.line(primitive.x1, primitive.y1, primitive.x2, primitive.y2)
    elif isinstance(primitive, RasterImage):
        canvas.setFillAlpha(primitive.opacity)
        canvas.translate(primitive.x, primitive.y)
        if primitive.rotation:
            canvas.rotate(primitive.rotation)
        reader = ImageReader(BytesIO(primitive.image.data))
        canvas.drawImage(reader, 0, 0, primitive.width, primitive.height, mask="auto")
    else:  # pragma: no cover - closed union
        raise TypeError(f"Unknown primitive: {primitive!r}")
    canvas.restoreState()


def _apply_style(
    canvas: rl_canvas.Canvas,
    fill: Color | None,
    border: Color | None,
    border_width: float,
    opacity: float,
) -> None:
    if fill is not None:
        canvas.setFillColorRGB(*fill)
        canvas.setFillAlpha(opacity)
    if border is not None:
        canvas.setStrokeColorRGB(*border)
        canvas.setStrokeAlpha(opacity)
        canvas.setLineWidth(border_width)


__all__ = [
    "PdfDocumentHandle",
    "PageView",
    "HandleState",
    "RepairMode",
    "FontRef",
    "ImageRef",
    "TextRun",
    "Rectangle",
    "Line",
    "Ellipse",
    "RasterImage",
    "Primitive",
    "PAGE_SIZES",
    "STANDARD_FONTS",
    "sanitize_glyphs",
    "pdf_date",
    "open_reader",
    "is_encrypted",
    "resolve_page_size",
]
